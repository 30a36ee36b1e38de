"""Database engine, session factory and schema bootstrap."""
import logging
from typing import AsyncGenerator

from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from booking_engine.core.config import settings

logger = logging.getLogger(__name__)

# Bump together with any change to the table definitions
SCHEMA_VERSION = 1

Base = declarative_base()


def _enable_sqlite_write_locks(engine: AsyncEngine) -> None:
    """Start every SQLite transaction with BEGIN IMMEDIATE.

    SQLite has no row locks, so SELECT ... FOR UPDATE compiles to a plain
    SELECT. Taking the database write lock at BEGIN makes a second booking
    transaction wait until the first one commits or rolls back.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url`` with the locking the booking guard needs."""
    engine = create_async_engine(url, echo=echo)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_write_locks(engine)
    return engine


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db(bind: AsyncEngine = None) -> int:
    """
    Create missing tables and record the schema version.

    Args:
        bind: Engine to initialise (defaults to the application engine)

    Returns:
        The schema version stored in the database
    """
    # Imported here so every model is registered on Base.metadata
    from booking_engine.models import SchemaMeta

    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_sessionmaker(bind)
    async with factory() as session:
        result = await session.execute(select(SchemaMeta).where(SchemaMeta.id == 1))
        meta = result.scalar_one_or_none()
        if meta is None:
            session.add(SchemaMeta(id=1, version=SCHEMA_VERSION))
            await session.commit()
            logger.info(f"Initialised schema at version {SCHEMA_VERSION}")
            return SCHEMA_VERSION
        if meta.version != SCHEMA_VERSION:
            logger.warning(
                f"Database schema version {meta.version} differs from code version {SCHEMA_VERSION}"
            )
        return meta.version
