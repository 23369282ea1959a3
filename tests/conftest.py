"""Shared test fixtures."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-secret-key")

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from pricebook.core.db import init_models
from pricebook.services.data.data_service import SqlAlchemyDataService
from tests.fakes import InMemoryDataService, StepClock, make_engine, make_user


@pytest.fixture
async def engine(tmp_path):
    engine = make_engine(tmp_path / "pricebook.db")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def data(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield SqlAlchemyDataService(session)


@pytest.fixture
def fake_data():
    return InMemoryDataService()


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
async def users(data):
    await make_user(data, "u1", full_name="Ursula One", can_add=True, can_edit=True, can_delete=True)
    await make_user(data, "u2", full_name="Uma Two", can_edit=True)
    return ("u1", "u2")
