from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from farmplot.load_secrets import user, password, host, port, db_name, database_url


def postgres_url() -> str:
    if database_url:
        # Hosting platforms hand out plain postgres:// URLs.
        if database_url.startswith("postgres://"):
            return "postgresql+asyncpg://" + database_url[len("postgres://"):]
        if database_url.startswith("postgresql://"):
            return "postgresql+asyncpg://" + database_url[len("postgresql://"):]
        return database_url
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"


def create_postgres_engine() -> AsyncEngine:
    return create_async_engine(postgres_url(), pool_size=20, max_overflow=20)
