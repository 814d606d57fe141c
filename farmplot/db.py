import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from farmplot.create_postgres_engine import create_postgres_engine
from farmplot.create_sqlite_engine import create_sqlite_engine
from farmplot.load_secrets import database_url, host


def create_engine() -> AsyncEngine:
    """Pick the configured database: Postgres when configured, else local SQLite."""
    if database_url or host:
        logging.info("Using Postgres database")
        return create_postgres_engine()
    logging.info("No database configured, using local SQLite file")
    return create_sqlite_engine()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Centralized session factory to avoid creating it in router modules.
    return async_sessionmaker(
        autocommit=False,
        class_=AsyncSession,
        autoflush=True,
        expire_on_commit=False,
        bind=engine,
    )
