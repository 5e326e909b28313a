"""Service test fixtures - async DB, temp blob store, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for code paths that open sessions directly
    - Submission files land in the test's tmp_path, never the configured upload_dir

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Users seeded straight into the DB: the API never creates admins or buyers
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from marketplace.api.dependencies import get_blob_store
from marketplace.db.base import Base
from marketplace.infrastructure.blob_store import LocalBlobStore
from marketplace.infrastructure.database import get_db, DatabaseSessionManager
from marketplace.models.user import User
import marketplace.infrastructure.database as db_module
from marketplace.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "uploads")


@pytest.fixture
async def client(test_engine, test_session_factory, blob_store):
    """FastAPI test client with DB and blob store dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def users(test_db):
    """admin, buyer, other_buyer, solver, other_solver, third_solver."""
    rows = {
        "admin": User(name="Admin", email="admin@example.com", role="admin"),
        "buyer": User(name="Bea Buyer", email="bea@example.com", role="buyer"),
        "other_buyer": User(name="Oscar", email="oscar@example.com", role="buyer"),
        "solver": User(name="Sam Solver", email="sam@example.com"),
        "other_solver": User(name="Sue", email="sue@example.com"),
        "third_solver": User(name="Tom", email="tom@example.com"),
    }
    test_db.add_all(rows.values())
    await test_db.commit()
    return SimpleNamespace(**rows)


def auth(user) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def as_user():
    """Header builder: as_user(user) -> {"X-User-Id": ...}."""
    return auth


ZIP_BYTES = b"PK\x03\x04" + b"\x00" * 64


@pytest.fixture
def zip_upload():
    """Multipart `files` value for a small ZIP archive."""
    def _make(name="work.zip", data=ZIP_BYTES, content_type="application/zip"):
        return {"file": (name, data, content_type)}
    return _make
