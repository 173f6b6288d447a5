import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

GLOBAL_MAX_TAKE = int(os.getenv("ODATA_GLOBAL_MAX_TAKE", "1000"))
ENTITIES_PATH = Path(os.getenv("ODATA_ENTITIES_FILE", "config/entities.yaml"))
LOG_LEVEL = os.getenv("ODATA_LOG_LEVEL", "INFO").upper()
CORS_ALLOW_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()
]
