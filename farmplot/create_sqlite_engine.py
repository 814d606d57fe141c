import pathlib

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

default_path = pathlib.Path(__file__).parents[1] / "farmplot.sqlite3"


def create_sqlite_engine(file_path: pathlib.Path = default_path, **kwargs) -> AsyncEngine:
    """Local database used when no Postgres server is configured."""
    sqlite_url = f"sqlite+aiosqlite:///{file_path}"
    return create_async_engine(url=sqlite_url, echo=False, **kwargs)
