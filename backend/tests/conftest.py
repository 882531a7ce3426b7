"""
Pytest fixtures for test database, clients, and logged-in sessions.

Each test gets a fresh in-memory SQLite database created from the ORM
metadata and seeded with the 1000-sheet layout. Redis is disabled, so the
event list cache always misses unless a test installs a stand-in client
(see test_cache.py).
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from torb.main import app
from torb.db.base import Base
from torb.db.session import get_db
from torb.core.security import hash_password
from torb.models import Administrator, Event, Reservation, Sheet, User
from torb.services.sheets import iter_sheets

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables and sheets, yield session, then dispose the database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        session.add_all(
            Sheet(id=sheet.id, rank=sheet.rank, num=sheet.num, price=sheet.price)
            for sheet in iter_sheets()
        )
        await session.commit()
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def other_client(client: AsyncClient) -> AsyncGenerator[AsyncClient, None]:
    """A second browser with its own cookie jar."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _create_user(db_session: AsyncSession, nickname: str, login_name: str, password: str) -> User:
    user = User(nickname=nickname, login_name=login_name, pass_hash=hash_password(password))
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Sonic", "sonic", "sonicpass")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Tails", "tails", "tailspass")


@pytest_asyncio.fixture
async def test_admin(db_session: AsyncSession) -> Administrator:
    administrator = Administrator(
        nickname="Admin",
        login_name="admin",
        pass_hash=hash_password("adminpass"),
    )
    db_session.add(administrator)
    await db_session.commit()
    await db_session.refresh(administrator)
    return administrator


@pytest_asyncio.fixture
async def user_client(client: AsyncClient, test_user: User) -> AsyncClient:
    """`client` with test_user logged in."""
    response = await client.post("/api/actions/login", json={
        "login_name": "sonic",
        "password": "sonicpass",
    })
    assert response.status_code == 200
    return client


@pytest_asyncio.fixture
async def other_user_client(other_client: AsyncClient, other_user: User) -> AsyncClient:
    response = await other_client.post("/api/actions/login", json={
        "login_name": "tails",
        "password": "tailspass",
    })
    assert response.status_code == 200
    return other_client


@pytest_asyncio.fixture
async def admin_client(client: AsyncClient, test_admin: Administrator) -> AsyncClient:
    """`client` with test_admin logged in."""
    response = await client.post("/admin/api/actions/login", json={
        "login_name": "admin",
        "password": "adminpass",
    })
    assert response.status_code == 200
    return client


async def _create_event(db_session: AsyncSession, **kwargs) -> Event:
    event = Event(**kwargs)
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def public_event(db_session: AsyncSession) -> Event:
    return await _create_event(db_session, title="Public Show", public_fg=True, closed_fg=False, price=1000)


@pytest_asyncio.fixture
async def private_event(db_session: AsyncSession) -> Event:
    return await _create_event(db_session, title="Private Show", public_fg=False, closed_fg=False, price=2000)


@pytest_asyncio.fixture
async def closed_event(db_session: AsyncSession) -> Event:
    return await _create_event(db_session, title="Closed Show", public_fg=False, closed_fg=True, price=3000)


@pytest_asyncio.fixture
async def reserve_directly(db_session: AsyncSession):
    """Insert active reservations without going through the API."""

    async def _reserve(event: Event, user: User, sheet_ids) -> list[Reservation]:
        reservations = [
            Reservation(
                event_id=event.id,
                sheet_id=sheet_id,
                user_id=user.id,
                reserved_at=datetime.now(timezone.utc),
            )
            for sheet_id in sheet_ids
        ]
        db_session.add_all(reservations)
        await db_session.commit()
        return reservations

    return _reserve
