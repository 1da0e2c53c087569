"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; point them at throwaway values first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DEBUG", "false")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from chatline.db.session import get_db  # noqa: E402
from chatline.models import Base, UserRole  # noqa: E402
from chatline.schemas.user import ProfileDetails, UserCreate  # noqa: E402
from chatline.services.user_service import UserService  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite shared by every session of one test."""
    eng = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client bound to the app, with get_db served from the test engine."""
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def alice(db):
    return await UserService.create_user(
        db,
        UserCreate(
            user_id="u1",
            name="Alice",
            role=UserRole.user,
            profile_details=ProfileDetails(email="alice@example.com"),
        ),
    )


@pytest_asyncio.fixture
async def bob(db):
    return await UserService.create_user(
        db,
        UserCreate(
            user_id="u2",
            name="Bob",
            role=UserRole.user,
            profile_details=ProfileDetails(email="bob@example.org"),
        ),
    )


@pytest_asyncio.fixture
async def carol(db):
    return await UserService.create_user(
        db, UserCreate(user_id="u3", name="Carol", role=UserRole.admin)
    )
