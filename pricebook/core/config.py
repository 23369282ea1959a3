# pricebook/core/config.py

import os
from dotenv import load_dotenv
from pricebook.utils.logger import get_logger

logger = get_logger(__name__)

load_dotenv()

# =====================================================
# APPLICATION
# =====================================================
APP_ENV = os.getenv("APP_ENV", "development")
if APP_ENV not in {"development", "staging", "production", "test"}:
    raise ValueError("APP_ENV must be development | staging | production | test")

IS_PRODUCTION = APP_ENV == "production"

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if APP_ENV == "development" else "INFO").upper()

APP_NAME = "Pricebook – Product & Price History API"
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
CORS_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()
]

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = os.getenv("DB_TYPE", "sqlite")
if DB_TYPE not in {"postgres", "sqlite"}:
    raise ValueError("DB_TYPE must be postgres | sqlite")

if DB_TYPE == "postgres":
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise ValueError("DATABASE_URL is required for Postgres")

else:
    if IS_PRODUCTION:
        raise ValueError("SQLite is NOT allowed in production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./pricebook.db")

# ---- Pool tuning ----
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 20))
DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", 30))
DB_ECHO_POOL = os.getenv("DB_ECHO_POOL", "false").lower() == "true"

# =====================================================
# JWT / AUTH
# =====================================================
JWT_ACCESS_SECRET_KEY = os.getenv("JWT_ACCESS_SECRET_KEY")
if not JWT_ACCESS_SECRET_KEY:
    raise ValueError("JWT_ACCESS_SECRET_KEY must be set")

JWT_ALGORITHM = "HS256"

ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
)

MIN_PASSWORD_LENGTH = 6

if IS_PRODUCTION and not CORS_ORIGINS:
    logger.warning("CORS_ORIGINS is empty in production; browser clients will be refused")

# =====================================================
# SEED ADMIN (pricebook.scripts.create_admin)
# =====================================================
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
