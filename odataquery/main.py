from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ALLOW_ORIGINS, LOG_LEVEL
from .query import InMemoryRepository, ODataQueryService, ReadOnlyRepository
from .registry import Registry
from .routes import router as odata_router

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("odataquery.main")


def create_app(
    registry: Optional[Registry] = None,
    repository: Optional[ReadOnlyRepository] = None,
) -> FastAPI:
    app = FastAPI(title="OData Query Service", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    app.state.registry = registry or Registry()
    app.state.query_service = ODataQueryService(repository or InMemoryRepository())
    app.include_router(odata_router)

    @app.on_event("startup")
    def _startup():
        reg: Registry = app.state.registry
        if reg.path.exists():
            reg.load_entities()
        else:
            log.warning("Entities file %s not found; serving registered entities only", reg.path)

    @app.get("/healthz")
    def health():
        return {"ok": True, "entities": app.state.registry.names()}

    @app.post("/reload")
    def reload_registry():
        try:
            return {"reloaded": app.state.registry.refresh_all()}
        except RuntimeError as e:
            raise HTTPException(status_code=500, detail=str(e))

    return app


app = create_app()
