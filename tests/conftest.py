"""
Pytest fixtures for testing.

Provides:
- Async database session on in-memory SQLite
- Schema over the test models
- Seeded users and notes
- A RestrictionApplier with default settings
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from restrict_by_user import RestrictionApplier, RestrictSettings, Schema
from tests.models import Base, Note, Tag, User


# Test database URL (SQLite in-memory for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session, rolled back after each test."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def schema(db: AsyncSession) -> Schema:
    """Schema with monikers User, Notes and Tag."""
    schema = Schema(db, [User])
    schema.register(Note, "Notes")
    schema.register(Tag)
    return schema


@pytest.fixture
def applier() -> RestrictionApplier:
    """Applier with default settings (restricted classes are process-wide)."""
    return RestrictionApplier(RestrictSettings())


# ============ Seed Data ============


@pytest_asyncio.fixture
async def seed(db: AsyncSession) -> dict[str, User]:
    """
    Two users with notes, plus two tags.

    alice: 2 notes, bob: 1 note
    """
    alice = User(id=1, name="alice")
    bob = User(id=2, name="bob", is_admin=True)
    db.add_all([alice, bob])
    db.add_all([
        Note(id=1, user_id=1, title="alice first"),
        Note(id=2, user_id=1, title="alice second"),
        Note(id=3, user_id=2, title="bob only"),
        Tag(id=1, name="red"),
        Tag(id=2, name="blue"),
    ])
    await db.flush()
    return {"alice": alice, "bob": bob}


# ============ Plain User Objects ============


class PlainUser:
    """User object with no restriction hooks."""

    def __init__(self, id: int = 1):
        self.id = id


class RecordingUser(PlainUser):
    """Records the result set every Notes hook call receives."""

    def __init__(self, id: int = 1):
        super().__init__(id)
        self.received = []

    def restrict_Notes_resultset(self, unrestricted_rs):
        self.received.append(unrestricted_rs)
        return unrestricted_rs.search(user_id=self.id)
