#!/usr/bin/env python3
"""
Setup script to create .env file for the odataquery service.
Run this script and follow the prompts to configure your environment.
"""

from pathlib import Path

def create_env_file():
    """Interactive setup for .env file"""
    env_path = Path(".env")
    
    if env_path.exists():
        response = input(".env file already exists. Overwrite? (y/N): ")
        if response.lower() != 'y':
            print("Setup cancelled.")
            return
    
    print("=== OData Query Service Environment Setup ===\n")
    
    # Entities
    print("1. ENTITY REGISTRY")
    print("   (YAML or JSON file mapping entity names to record classes)")
    entities_file = input("   Entities file [config/entities.yaml]: ").strip() or "config/entities.yaml"
    
    # Paging
    print("\n2. PAGING")
    max_take = input("   Global max $top [1000]: ").strip() or "1000"
    if not max_take.isdigit() or int(max_take) < 1:
        print("   Invalid value, using 1000.")
        max_take = "1000"
    
    # CORS
    print("\n3. CORS CONFIGURATION")
    cors_origins = input("   Allowed Origins [http://localhost:3000]: ").strip() or "http://localhost:3000"
    
    # Logging
    print("\n4. LOGGING")
    log_level = (input("   Log level [INFO]: ").strip() or "INFO").upper()
    
    env_content = f"""# Entity registry
ODATA_ENTITIES_FILE={entities_file}

# Paging
ODATA_GLOBAL_MAX_TAKE={max_take}

# CORS
CORS_ALLOW_ORIGINS={cors_origins}

# Logging
ODATA_LOG_LEVEL={log_level}
"""
    
    # Write .env file
    with open(env_path, 'w') as f:
        f.write(env_content)
    
    print(f"\n✅ .env file created successfully!")
    print(f"📁 Location: {env_path.absolute()}")
    print("\n📋 Next steps:")
    print(f"   1. Copy config/entities.example.yaml to {entities_file} and list your entities")
    print("   2. Run the application: uvicorn odataquery.main:app")

if __name__ == "__main__":
    create_env_file()
