# pricebook/core/db.py

import ssl

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from pricebook.core.config import (
    DATABASE_URL,
    DB_TYPE,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_ECHO_POOL,
    IS_PRODUCTION,
)

Base = declarative_base()


# =====================================================
# SQLITE FK ENFORCEMENT
# =====================================================
def enable_sqlite_foreign_keys(dbapi_connection, _):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# =====================================================
# ENGINE
# =====================================================
def engine_options(db_type: str) -> dict:
    if db_type == "postgres":
        return {
            "connect_args": {
                "ssl": ssl.create_default_context(),
                # asyncpg behind a transaction pooler cannot reuse prepared statements
                "statement_cache_size": 0,
            },
            "pool_size": DB_POOL_SIZE,
            "max_overflow": DB_MAX_OVERFLOW,
            "pool_timeout": DB_POOL_TIMEOUT,
            "pool_pre_ping": True,
        }
    return {"connect_args": {"check_same_thread": False}}


def build_engine(url: str = DATABASE_URL, db_type: str = DB_TYPE, **overrides) -> AsyncEngine:
    """Engine for ``url``; SQLite connections get foreign keys switched on."""
    engine = create_async_engine(
        url,
        echo=False,
        echo_pool=DB_ECHO_POOL,
        **{**engine_options(db_type), **overrides},
    )
    if db_type == "sqlite":
        event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    return engine


engine = build_engine()

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)

# =====================================================
# SCHEMA
# =====================================================
import pricebook.models  # noqa


async def init_models(bind: AsyncEngine | None = None):
    if IS_PRODUCTION:
        raise RuntimeError("init_models() is forbidden in production")

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
