# teamspace/config.py
# Environment-aware configuration for the Teamspace backend

import os
from typing import Literal


def get_env(key: str, default: str = "") -> str:
    """Read an environment variable, failing loudly when it is required and unset or blank."""
    value = os.environ.get(key, "").strip()
    if not value:
        if default:
            return default
        raise RuntimeError(f"Environment variable {key} is not set")
    return value


# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT configuration (a real secret is mandatory outside dev/staging)
SECRET_KEY = get_env("SECRET_KEY") if IS_PROD else os.environ.get("SECRET_KEY", "dev-secret-key")
ALGORITHM = "HS256"

# Token lifetime
ACCESS_TOKEN_MINUTES = int(os.environ.get("ACCESS_TOKEN_MINUTES", "1440"))

# Database configuration
# DATABASE_URL takes precedence (managed Postgres)
# Falls back to a SQLite file for local development
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip()
DATABASE_PATH = os.environ.get("DATABASE_PATH", "teamspace.db")

# API prefix for every router
BASE_PATH = os.environ.get("BASE_PATH", "/api")

# CORS origins (expand for staging/prod)
CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(o.strip() for o in extra_origins.split(",") if o.strip())

# Database type detection
IS_POSTGRES = DATABASE_URL.startswith(("postgres://", "postgresql://"))

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Database: {'PostgreSQL' if IS_POSTGRES else 'SQLite (local dev)'}")
print(f"[CONFIG] Access token: {ACCESS_TOKEN_MINUTES} minutes")
