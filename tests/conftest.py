"""Shared fixtures: in-memory database, sessions and an HTTP client"""

import os

os.environ.setdefault("ADMIN_PASSWORD", "test-password")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from typing import List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from thingometer.config import get_settings
from thingometer.db.crud import create_event
from thingometer.db.database import enable_sqlite_foreign_keys, get_db
from thingometer.main import app
from thingometer.models.database import Base, Entry, Event

ADMIN_PASSWORD = get_settings().admin_password
ADMIN_HEADERS = {"Authorization": f"Bearer {ADMIN_PASSWORD}"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def make_event(
    db: AsyncSession,
    name: str = "Holiday Parade",
    categories: Optional[List] = None,
    judges: Optional[List[str]] = None,
) -> Event:
    return await create_event(db, name=name, city="Springfield", categories=categories, judges=judges)


async def make_entry(
    db: AsyncSession,
    event_id: int,
    organization: str = "Rotary Club",
    position: Optional[int] = None,
    approved: bool = True,
) -> Entry:
    entry = Entry(event_id=event_id, organization=organization, position=position, approved=approved)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


async def positions_by_id(db: AsyncSession, event_id: int) -> dict:
    """Fresh read of entry id -> position, bypassing the identity map"""
    result = await db.execute(select(Entry.id, Entry.position).where(Entry.event_id == event_id))
    return dict(result.all())
