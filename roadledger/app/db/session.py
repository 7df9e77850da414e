"""
Database session configuration.

Async SQLAlchemy engine and session factory. PostgreSQL (asyncpg) in
deployment; SQLite (aiosqlite) for local runs and tests, with foreign keys
switched on so ON DELETE rules behave the same on both.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from roadledger.app.core.config import settings


def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _engine_options() -> dict:
    # SQLite does not accept pool sizing arguments
    if is_sqlite(settings.database_url):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
    }


def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    **_engine_options(),
)
if is_sqlite(settings.database_url):
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Create declarative base for models
Base = declarative_base()


async def create_tables(bind=None) -> None:
    """Create every registered table that does not exist yet."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db():
    """
    FastAPI dependency for database sessions.

    Yields an async session; a request that fails before committing leaves
    nothing behind.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
