from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from tasknotes.core.config import settings

logger = structlog.get_logger(__name__)

# SQLAlchemy Base class for models
Base = declarative_base()


def _is_file_database(url) -> bool:
    return bool(url.database) and url.database != ":memory:"


def _sqlite_on_connect(file_database: bool):
    def on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself so DDL joins the transaction too
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        # SQLite ignores ON DELETE CASCADE unless enabled on every connection
        cursor.execute("PRAGMA foreign_keys=ON")
        if file_database:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return on_connect


def _sqlite_on_begin(conn):
    conn.exec_driver_sql("BEGIN")


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """Create an async engine for the embedded store."""
    url = url or settings.DATABASE_URL
    new_engine = create_async_engine(
        url,
        echo=settings.ECHO_SQL if echo is None else echo,
        future=True,
    )
    if new_engine.dialect.name == "sqlite":
        sync_engine = new_engine.sync_engine
        event.listen(
            sync_engine, "connect", _sqlite_on_connect(_is_file_database(new_engine.url))
        )
        event.listen(sync_engine, "begin", _sqlite_on_begin)
    return new_engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# Default engine and session factory
engine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


async def init_db(bind: Optional[AsyncEngine] = None) -> int:
    """Check the connection and bring the schema up to date.

    Returns the schema version after migrations.
    """
    from tasknotes.services.schema import schema_manager

    bind = bind or engine
    try:
        async with bind.connect() as conn:
            await conn.execute(text("SELECT 1"))
        version = await schema_manager.initialize(bind)
        logger.info("Database initialized successfully", schema_version=version)
        return version
    except Exception as e:
        logger.error("Failed to initialize database", exc_info=e)
        raise


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield a session from the default factory."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.error("Database session error", exc_info=e)
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run the enclosed statements as one unit of work.

    Commits when the block exits normally; rolls back and re-raises on any
    exception, so a failure part-way through leaves nothing behind.
    """
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
