"""
Backend Configuration

Loads environment variables and provides configuration settings.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env.local first (for local development), then .env as fallback
env_local = Path(__file__).parent / '.env.local'
env_file = Path(__file__).parent / '.env'

if env_local.exists():
    load_dotenv(env_local)
elif env_file.exists():
    load_dotenv(env_file)

# MongoDB Config
MONGO_URL = os.getenv("MONGO_URL", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "ascension")
SNAPSHOT_COLLECTION = os.getenv("SNAPSHOT_COLLECTION", "engine_snapshots")
SNAPSHOT_KEY = os.getenv("SNAPSHOT_KEY", "default")

# Server Config
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
BACKEND_HOST = os.getenv("BACKEND_HOST", "0.0.0.0")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))
