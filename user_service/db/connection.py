"""
Engine and session factory for the user database.

DATABASE_URL selects the backend: SQLite via aiosqlite by default, any
other async SQLAlchemy URL (e.g. MySQL, PostgreSQL) in production.
"""
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from user_service.db.models import Base
from user_service.config import settings
import logging

logger = logging.getLogger(__name__)

# Set by init_db(), cleared by close_db()
engine: Optional[AsyncEngine] = None
async_session_maker: Optional[async_sessionmaker] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # Needed for ON DELETE CASCADE on addresses
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(database_url: str) -> AsyncEngine:
    if not database_url.startswith("sqlite"):
        return create_async_engine(database_url, pool_pre_ping=True, pool_recycle=3600)

    # One shared connection, so ":memory:" databases survive across sessions
    sqlite_engine = create_async_engine(
        database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return sqlite_engine


async def init_db(database_url: Optional[str] = None):
    """
    Create the engine and session factory, then create missing tables.

    Args:
        database_url: Overrides settings.database_url
    """
    global engine, async_session_maker

    database_url = database_url or settings.database_url
    logger.info(f"Connecting to {database_url.split('://')[0]} database")

    engine = _build_engine(database_url)
    async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("✅ User tables ready")


def get_session_maker() -> async_sessionmaker:
    if async_session_maker is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return async_session_maker


async def close_db():
    """Dispose of the engine; init_db() must run again before next use"""
    global engine, async_session_maker
    if engine is None:
        return
    await engine.dispose()
    engine = None
    async_session_maker = None
    logger.info("Database connection closed")
