"""Fixtures for HTTP tests: the real app, bound to the per-test database."""

from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from villa_api.config.settings import Settings
from villa_api.core.dependencies import get_db_session
from villa_api.main import create_app


@pytest.fixture
def test_settings() -> Settings:
    return Settings(ENV="testing", TESTING=True, LOG_FORMAT="text", DB_CREATE_ALL=False)


@pytest.fixture
def test_app(test_settings: Settings, session_factory) -> FastAPI:
    app = create_app(test_settings)

    async def _override_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_db_session
    return app


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    # lifespan is not run by ASGITransport; tables come from the async_engine fixture
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as ac:
        yield ac
