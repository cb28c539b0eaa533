"""
API test fixtures.

The app is built without entering its lifespan, so no database schema is
created and the catalog is not seeded. Tests replace the token resolution
step and the service getters through `app.dependency_overrides`; tenant
membership and permission checks run as in production.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from astar_backend.api.deps.dependencies import get_current_principal
from astar_backend.api.main import create_app
from astar_backend.boundary.db import get_async_db


@pytest.fixture
def mock_db():
    db = AsyncMock()
    # sqlite-like bind: tenant RLS setup is skipped
    db.get_bind = MagicMock()
    return db


@pytest.fixture
def app(mock_db):
    app = create_app()

    async def override_db():
        yield mock_db

    app.dependency_overrides[get_async_db] = override_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login(app):
    """Authenticate subsequent requests as the given principal."""

    def _login(principal):
        app.dependency_overrides[get_current_principal] = lambda: principal
        return principal

    return _login


@pytest.fixture
def override_service(app):
    """Replace a service getter with an AsyncMock and return the mock."""

    def _override(getter):
        service = AsyncMock()
        app.dependency_overrides[getter] = lambda: service
        return service

    return _override
