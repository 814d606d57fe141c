"""Pytest configuration and shared fixtures."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from farmplot.create_sqlite_engine import create_sqlite_engine
from farmplot.crud import create_table
from farmplot.db import create_session_factory
from farmplot.domain.clock import ManualClock
from farmplot.main import create_app
from farmplot.services.plot_db import PlotService

START = 1600000000


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture
def engine(tmp_path):
    # NullPool: every asyncio.run() gets its own connection and event loop.
    return create_sqlite_engine(tmp_path / "farm.sqlite3", poolclass=NullPool)


@pytest.fixture
def plot_service(engine, clock) -> PlotService:
    asyncio.run(create_table(engine))
    return PlotService(create_session_factory(engine), clock)


@pytest.fixture
def client(engine, clock):
    with TestClient(create_app(engine=engine, clock=clock)) as test_client:
        yield test_client
