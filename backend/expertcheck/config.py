"""
Application configuration read from environment variables.

All settings are resolved once at import time. Defaults are suitable for
local development with SQLite; production deployments override them via
the environment.
"""

import os

# Database connection string.
# Fallback to SQLite for local development when PostgreSQL is not available.
# "sqlite://" gives an in-memory database (used by the test suite).
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./expert_test.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Bearer token signing
JWT_SECRET = os.getenv("JWT_SECRET", "expert-test-secret-2026")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "30"))

# "development" exposes internal error detail in 500 responses
APP_ENV = os.getenv("APP_ENV", "production").lower()
DIAGNOSTICS_ENABLED = APP_ENV == "development"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
