"""Service test fixtures: async DB, repository, seeded data and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - Seed fixtures commit, so service reads see them through any session

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the conditional UPDATEs
      used for submission behave the same as on PostgreSQL
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from kitmap.db.base import Base
from kitmap.infrastructure.database import get_db, DatabaseSessionManager
from kitmap.infrastructure.repository import SqlKitMapRepository
from kitmap.models.assignment import Assignment as AssignmentModel
from kitmap.models.goal_map import GoalMap as GoalMapModel
from kitmap.models.user import User as UserModel
import kitmap.infrastructure.database as db_module
from kitmap.main import app

TEACHER_ID = "teacher-1"
STUDENT_ID = "student-1"

GOAL_NODES = [
    {"id": "c1", "type": "text", "position": {"x": 0, "y": 0}, "data": {"label": "Plants"}},
    {"id": "link1", "type": "connector", "position": {"x": 100, "y": 0}, "data": {"label": "need"}},
    {"id": "c2", "type": "text", "position": {"x": 200, "y": 0}, "data": {"label": "Light"}},
]
GOAL_EDGES = [
    {"id": "g1", "source": "c1", "target": "link1"},
    {"id": "g2", "source": "link1", "target": "c2"},
]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
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
def repo(test_db):
    return SqlKitMapRepository(test_db)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

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
async def seed_assignment(test_db):
    """A goal map with two edges and an assignment owned by TEACHER_ID."""
    test_db.add_all([
        UserModel(id=TEACHER_ID, name="Teacher"),
        UserModel(id=STUDENT_ID, name="Ana"),
        UserModel(id="student-2", name="Bea"),
        UserModel(id="student-3", name="Caio"),
    ])
    goal_map = GoalMapModel(
        id="gm-1", teacher_id=TEACHER_ID, title="Photosynthesis",
        nodes=GOAL_NODES, edges=GOAL_EDGES, direction="bi",
    )
    assignment = AssignmentModel(
        id="as-1", goal_map_id="gm-1", title="Photosynthesis, part 1",
        created_by=TEACHER_ID,
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )
    test_db.add_all([goal_map, assignment])
    await test_db.commit()
    return assignment


@pytest.fixture
async def seed_dangling_assignment(test_db):
    """An assignment whose goal map no longer exists."""
    assignment = AssignmentModel(
        id="as-orphan", goal_map_id="gm-deleted", title="Orphan",
        created_by=TEACHER_ID,
    )
    test_db.add(assignment)
    await test_db.commit()
    return assignment
