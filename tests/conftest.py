"""Shared fixtures: in-memory database, seeded project and workflow helpers."""
import json
from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from labelhub.core.config.settings import LabelhubConfig
from labelhub.core.models import DataItem, Project, User, UserRole, utcnow
from labelhub.core.services import AssignmentAllocator, LifecycleManager
from labelhub.core.storage.database import Database, init_db

CHECKLIST = json.dumps(
    [
        {"code": "TE-01", "name": "Wrong tag", "weight": 12},
        {"code": "LU-01", "name": "Loose bounding box", "weight": 3},
        {"code": "MI-01", "name": "Missed object", "weight": 5},
    ]
)


async def seed_project(
    session: AsyncSession,
    name: str = "Street scenes",
    items: int = 5,
    checklist: str | None = CHECKLIST,
) -> Project:
    """Create the standard users (once) and a project with ``items`` new data items."""
    if await session.get(User, "manager-1") is None:
        session.add_all(
            [
                User(id="manager-1", full_name="Manager", role=UserRole.MANAGER.value),
                User(id="annotator-1", full_name="Annotator One", role=UserRole.ANNOTATOR.value),
                User(id="annotator-2", full_name="Annotator Two", role=UserRole.ANNOTATOR.value),
                User(id="reviewer-1", full_name="Reviewer One", role=UserRole.REVIEWER.value),
                User(id="reviewer-2", full_name="Reviewer Two", role=UserRole.REVIEWER.value),
            ]
        )

    project = Project(
        name=name,
        description="Draw boxes around vehicles",
        price_per_label=1000.0,
        review_checklist=checklist,
        max_task_duration_hours=24,
        deadline=utcnow() + timedelta(days=30),
    )
    session.add(project)
    await session.flush()

    for i in range(items):
        session.add(DataItem(project_id=project.id, storage_url=f"s3://bucket/{name}/{i}.jpg"))

    await session.commit()
    return project


@pytest.fixture
def config():
    """Scoring configuration with the default weights."""
    return LabelhubConfig(db_path=":memory:", critical_error_weight=10, penalty_per_weight=10)


@pytest.fixture
async def db(config: LabelhubConfig):
    """Create test database."""
    db = init_db(config.get_database_url())
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
async def session(db: Database):
    """Create test session."""
    async with db.session() as session:
        yield session


@pytest.fixture
async def project(session: AsyncSession):
    """Project with five new data items and the standard checklist."""
    return await seed_project(session)


@pytest.fixture
def make_project(session: AsyncSession):
    """Create additional projects in the test session."""

    async def _make(name: str, items: int = 5, checklist: str | None = CHECKLIST) -> Project:
        return await seed_project(session, name=name, items=items, checklist=checklist)

    return _make


@pytest.fixture
def submit_items(session: AsyncSession):
    """Allocate ``count`` items of a project and submit each of them."""

    async def _submit(
        project: Project,
        count: int = 1,
        annotator_id: str = "annotator-1",
        reviewer_id: str = "reviewer-1",
        payload: str = '[{"label": "car", "box": [10, 20, 110, 220]}]',
    ):
        assignments = await AssignmentAllocator(session).allocate(
            project.id, annotator_id, reviewer_id, count
        )
        lifecycle = LifecycleManager(session)
        for assignment in assignments:
            await lifecycle.submit(annotator_id, assignment.id, payload)
        return assignments

    return _submit
