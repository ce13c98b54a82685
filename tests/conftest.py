from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.core.auth import roles
from app.core.auth.deps import get_current_user
from app.core.db.mongodb import init_models
from app.core.schemas.auth import Principal
from app.modules.production.container import ProductionServices
from tests.factories import make_principal


@pytest.fixture
async def database():
    client = AsyncMongoMockClient()
    db = client[f"production_test_{uuid4().hex}"]
    await init_models(db)
    yield db


@pytest.fixture
def services(database) -> ProductionServices:
    return ProductionServices(days_per_week=6, achievement_threshold=85.0)


@pytest.fixture
def app():
    from main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def login(app):
    """Switch the caller seen by the routes: login(make_principal(...))."""
    def _login(principal: Principal) -> Principal:
        app.dependency_overrides[get_current_user] = lambda: principal
        return principal

    _login(make_principal(roles.ADMIN, user_id="admin-1"))
    return _login


@pytest.fixture
async def client(app, database, login):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
