import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")


def env_choice(name: str, default: str, choices: tuple) -> str:
    """Read a lower-cased setting that must be one of choices"""
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {', '.join(choices)}, got '{value}'")
    return value


# Database
# Postgres connection string, e.g. postgresql://postgres:[PASSWORD]@[HOST]:[PORT]/tasks
DATABASE_URL = os.getenv("DATABASE_URL")

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))

# Create missing tables at startup (handy for local development)
DB_CREATE_TABLES = os.getenv("DB_CREATE_TABLES", "false").lower() in ("1", "true", "yes")

# Authentication
# Shared-secret (HS256) verification takes precedence when JWT_SECRET is set,
# otherwise tokens are verified against the JWKS published at AUTH_JWKS_URL.
JWT_SECRET = os.getenv("JWT_SECRET")
AUTH_JWKS_URL = os.getenv("AUTH_JWKS_URL")
AUTH_JWT_ISSUER = os.getenv("AUTH_JWT_ISSUER")
AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE")

# Task workflow
# "pass" treats an unresolvable dependency id as satisfied, "block" as unsatisfied
MISSING_DEPENDENCY_POLICY = env_choice("MISSING_DEPENDENCY_POLICY", "pass", ("pass", "block"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]
