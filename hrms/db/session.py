"""
Async SQLAlchemy engine & session factory (asyncpg driver).
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from hrms.core.config import settings

logger = logging.getLogger(__name__)

engine_args: dict = {
    "echo": False,
    "pool_pre_ping": True,
}

if "postgresql" in settings.DATABASE_URL:
    engine_args.update(
        {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_CONNECT_TIMEOUT_SECONDS,
            "pool_recycle": 300,
            "connect_args": {"timeout": settings.DB_CONNECT_TIMEOUT_SECONDS},
        }
    )

engine = create_async_engine(
    settings.DATABASE_URL,
    **engine_args,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def check_database_connection(
    db_engine: AsyncEngine, timeout: float | None = None
) -> None:
    """Run ``SELECT 1`` once, bounded by *timeout* seconds.

    Raises ``RuntimeError`` when the database is unreachable so startup aborts.
    """
    timeout = settings.DB_CONNECT_TIMEOUT_SECONDS if timeout is None else timeout

    async def _probe() -> None:
        async with db_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    try:
        await asyncio.wait_for(_probe(), timeout=timeout)
    except Exception as exc:
        logger.error("Database connection probe failed: %s", exc)
        raise RuntimeError("Database is unreachable") from exc
    logger.info("Database connection established")
