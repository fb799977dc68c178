import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.application.services import create_token
from drafts.infrastructure.broadcaster import InProcessBroadcaster
from drafts.infrastructure.store import DbDraftStore
from main import app
from notifications.infrastructure.notification_repository import DbNotificationRepository
from shared.dependencies import get_broadcaster, get_db
from shared.infrastructure.database import Base

import drafts.infrastructure.models  # noqa: F401
import notifications.infrastructure.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"


def _bearer(actor_id: str) -> dict:
    return {"Authorization": f"Bearer {create_token(actor_id)}"}


@pytest.fixture
def auth_headers():
    """Build bearer headers for an actor id."""
    return _bearer


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db(test_engine):
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db):
    return DbDraftStore(db)


@pytest.fixture
def notifier(db):
    return DbNotificationRepository(db)


@pytest.fixture
def broadcaster():
    return InProcessBroadcaster()


@pytest.fixture
def events(broadcaster):
    """Every event published for any draft, in publish order."""
    received = []
    original_publish = broadcaster.publish

    async def _record(event):
        received.append(event)
        await original_publish(event)

    broadcaster.publish = _record
    return received


@pytest.fixture(autouse=True)
async def override_dependencies(test_engine, broadcaster):
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_broadcaster] = lambda: broadcaster
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sync_client():
    """Blocking client for WebSocket sessions; HTTP calls share its event loop."""
    with TestClient(app) as tc:
        yield tc
