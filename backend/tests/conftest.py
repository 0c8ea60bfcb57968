"""
Mushroom Hunter Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the test suite.
How:   Environment variables are set at the very top, BEFORE anything from
       `mushroom_hunter` is imported: settings and the engine are created
       at import time and must see the test configuration.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── db_engine:       fresh SQLite schema per test (create_all/drop_all)
    │   ├── db_session:  a real AsyncSession on that schema
    │   └── client:      httpx AsyncClient bound to the FastAPI app
    ├── admin_user / regular_user / other_user (+ *_headers)
    └── taxonomy:        division → class → order → family → genus chain
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

_TEST_DIR = tempfile.mkdtemp(prefix="mushroom_hunter_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret-for-the-suite-only-0123456789abcdef"
os.environ["BCRYPT_ROUNDS"] = "4"  # minimum cost keeps hashing fast
os.environ["LOG_LEVEL"] = "WARNING"

from types import SimpleNamespace  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from mushroom_hunter.database import Base, async_session_factory, engine  # noqa: E402
from mushroom_hunter.models import (  # noqa: E402
    ROLE_ADMIN,
    ROLE_USER,
    Division,
    Family,
    Genus,
    Order,
    TaxonClass,
    User,
)
from mushroom_hunter.security import create_access_token, hash_password  # noqa: E402

PASSWORD = "mycelium42"


# ══════════════════════════════════════════════════════════════════════════
# Mocked session (service unit tests)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock-backed AsyncSession stand-in.

    Usage:
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await service.get_item(mock_db_session, level, uuid4())
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


def scalar_result(value):
    """A mocked `Result` whose scalar accessors all return `value`."""
    result = MagicMock()
    result.scalar.return_value = value
    result.scalar_one_or_none.return_value = value
    result.first.return_value = value
    return result


# ══════════════════════════════════════════════════════════════════════════
# Real database (SQLite)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections are bound to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """httpx client talking to the app in-process (lifespan is not run)."""
    from mushroom_hunter.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_user(username: str, role: str = ROLE_USER, is_active: bool = True) -> User:
    async with async_session_factory() as session:
        user = User(
            email=f"{username}@example.com",
            username=username,
            password_hash=hash_password(PASSWORD),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def admin_user(db_engine):
    return await create_user("admin", role=ROLE_ADMIN)


@pytest_asyncio.fixture
async def regular_user(db_engine):
    return await create_user("hunter")


@pytest_asyncio.fixture
async def other_user(db_engine):
    return await create_user("forager")


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def user_headers(regular_user):
    return auth_headers(regular_user)


@pytest.fixture
def other_headers(other_user):
    return auth_headers(other_user)


@pytest_asyncio.fixture
async def taxonomy(db_engine):
    """
    One complete chain:
        Basidiomycota → Agaricomycetes → Agaricales → Amanitaceae → Amanita
    """
    async with async_session_factory() as session:
        division = Division(name="Basidiomycota", common_name="Ständerpilze")
        session.add(division)
        await session.flush()
        taxon_class = TaxonClass(name="Agaricomycetes", division_id=division.id)
        session.add(taxon_class)
        await session.flush()
        order = Order(name="Agaricales", class_id=taxon_class.id)
        session.add(order)
        await session.flush()
        family = Family(name="Amanitaceae", order_id=order.id)
        session.add(family)
        await session.flush()
        genus = Genus(name="Amanita", common_name="Wulstlinge", family_id=family.id)
        session.add(genus)
        await session.commit()

        return SimpleNamespace(
            division=division,
            taxon_class=taxon_class,
            order=order,
            family=family,
            genus=genus,
        )
