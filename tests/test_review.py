"""Tests for review decisions and the annotator statistics they drive."""
from datetime import timedelta
from statistics import mean

import pytest

from labelhub.core.config.settings import LabelhubConfig
from labelhub.core.exceptions import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    UnauthorizedError,
)
from labelhub.core.models import (
    Assignment,
    AssignmentStatus,
    DataItem,
    DataItemStatus,
    Project,
    ReviewVerdict,
    User,
    UserRole,
    utcnow,
)
from labelhub.core.services import AssignmentAllocator, BaseService, LifecycleManager, ReviewEngine
from labelhub.core.storage.database import Database
from labelhub.core.storage.repositories import (
    AnnotationRepository,
    AssignmentRepository,
    DataItemRepository,
    ReviewLogRepository,
    UserProjectStatRepository,
)


@pytest.fixture
def reviews(session, config):
    """Create review engine."""
    return ReviewEngine(session, config=config)


@pytest.fixture
def stats(session):
    """Create statistics repository."""
    return UserProjectStatRepository(session)


@pytest.mark.asyncio
async def test_approve(session, reviews, stats, project, submit_items):
    """Test approving a submitted assignment."""
    [assignment] = await submit_items(project)

    log = await reviews.review("reviewer-1", assignment.id, True, comment="Looks good")

    assert log.id is not None
    assert log.verdict == ReviewVerdict.APPROVED.value
    assert log.score_penalty == 0
    assert log.error_category is None
    assert log.comment == "Looks good"
    assert log.is_audited is False

    loaded = await AssignmentRepository(session).get(assignment.id)
    assert loaded.status == AssignmentStatus.COMPLETED.value

    item = await DataItemRepository(session).get(assignment.data_item_id)
    assert item.status == DataItemStatus.DONE.value

    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_approved == 1
    assert stat.total_rejected == 0
    assert stat.total_reviewed_tasks == 1
    assert stat.average_quality_score == 100.0
    assert stat.estimated_earnings == 1000.0
    assert stat.efficiency_score == 100.0


@pytest.mark.asyncio
async def test_reject_critical_error(session, reviews, stats, project, submit_items):
    """Test that a heavy checklist error zeroes the task score and counts as critical."""
    [assignment] = await submit_items(project)

    log = await reviews.review("reviewer-1", assignment.id, False, "TE-01", "Wrong tag on the car")

    assert log.verdict == ReviewVerdict.REJECTED.value
    assert log.error_category == "TE-01"
    assert log.score_penalty == 120

    loaded = await AssignmentRepository(session).get(assignment.id)
    assert loaded.status == AssignmentStatus.REJECTED.value

    item = await DataItemRepository(session).get(assignment.data_item_id)
    assert item.status == DataItemStatus.ASSIGNED.value

    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_rejected == 1
    assert stat.total_critical_errors == 1
    assert stat.average_quality_score == 0.0
    assert stat.total_reviewed_tasks == 1
    assert stat.estimated_earnings == 0.0


@pytest.mark.asyncio
async def test_reject_minor_error(reviews, stats, project, submit_items):
    """Test that a light checklist error is penalized but not critical."""
    [assignment] = await submit_items(project)

    log = await reviews.review("reviewer-1", assignment.id, False, "LU-01")

    assert log.score_penalty == 30
    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_critical_errors == 0
    assert stat.average_quality_score == 70.0


@pytest.mark.asyncio
async def test_reject_unknown_category(reviews, stats, project, submit_items):
    """Test that an error code outside the checklist carries no penalty."""
    [assignment] = await submit_items(project)

    log = await reviews.review("reviewer-1", assignment.id, False, "ZZ-99")

    assert log.score_penalty == 0
    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_rejected == 1
    assert stat.total_critical_errors == 0
    assert stat.average_quality_score == 100.0


@pytest.mark.asyncio
async def test_reject_with_malformed_checklist(session, reviews, stats, make_project, submit_items):
    """Test that a broken checklist does not block rejections."""
    broken = await make_project("Broken checklist", items=1, checklist="{not valid json")
    [assignment] = await submit_items(broken)

    log = await reviews.review("reviewer-1", assignment.id, False, "TE-01")

    assert log.score_penalty == 0
    stat = await stats.get_for("annotator-1", broken.id)
    assert stat.total_rejected == 1
    assert stat.average_quality_score == 100.0


@pytest.mark.asyncio
async def test_running_average_over_rejections(session, reviews, stats, project, submit_items):
    """Test that the quality average is the mean of all task scores."""
    [assignment] = await submit_items(project)
    lifecycle = LifecycleManager(session)

    for code in ("TE-01", "LU-01", None):
        await reviews.review("reviewer-1", assignment.id, False, code)
        await lifecycle.submit("annotator-1", assignment.id, "fixed")

    # Task scores 0, 70 and 100
    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_reviewed_tasks == 3
    assert stat.total_rejected == 3
    assert stat.average_quality_score == 56.67


@pytest.mark.asyncio
async def test_running_average_per_project(session, reviews, stats, project, make_project, submit_items):
    """Test that interleaved rejections across projects average per project."""
    other = await make_project("Receipts", items=1)
    [first] = await submit_items(project)
    [second] = await submit_items(other)
    lifecycle = LifecycleManager(session)

    await reviews.review("reviewer-1", first.id, False, "TE-01")
    await reviews.review("reviewer-1", second.id, False, "MI-01")
    await lifecycle.submit("annotator-1", first.id, "fixed")
    await lifecycle.submit("annotator-1", second.id, "fixed")
    await reviews.review("reviewer-1", first.id, False, "LU-01")
    await reviews.review("reviewer-1", second.id, False, "ZZ-99")

    # Checklist weights hit per project; ZZ-99 is not on the checklist
    expected = {project.id: [12, 3], other.id: [5, 0]}
    for project_id, weights in expected.items():
        stat = await stats.get_for("annotator-1", project_id)
        assert stat.total_reviewed_tasks == 2
        assert stat.total_rejected == 2
        assert stat.average_quality_score == round(mean(max(0, 100 - 10 * w) for w in weights), 2)

    assert (await stats.get_for("annotator-1", project.id)).average_quality_score == 35.0
    assert (await stats.get_for("annotator-1", other.id)).average_quality_score == 75.0


@pytest.mark.asyncio
async def test_efficiency_and_earnings(reviews, stats, project, submit_items):
    """Test efficiency and earnings after partial approval."""
    assignments = await submit_items(project, count=4)

    await reviews.review("reviewer-1", assignments[0].id, True)
    await reviews.review("reviewer-1", assignments[1].id, False, "MI-01")

    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_assigned == 4
    assert stat.total_approved == 1
    assert stat.efficiency_score == 25.0
    assert stat.estimated_earnings == 1000.0
    assert stat.average_quality_score == 75.0


@pytest.mark.asyncio
async def test_efficiency_untouched_without_assignments(session, reviews, stats, project):
    """Test that efficiency keeps its starting value when nothing was allocated."""
    item = (await DataItemRepository(session).list_unassigned(project.id, 1))[0]
    assignment = Assignment(
        project_id=project.id,
        data_item_id=item.id,
        annotator_id="annotator-1",
        reviewer_id="reviewer-1",
        status=AssignmentStatus.SUBMITTED.value,
    )
    session.add(assignment)
    await session.commit()

    await reviews.review("reviewer-1", assignment.id, True)

    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_assigned == 0
    assert stat.total_approved == 1
    assert stat.efficiency_score == 100.0


@pytest.mark.asyncio
async def test_review_counts_for_reviewer(reviews, stats, project, submit_items):
    """Test that the reviewer's own counter grows with each decision."""
    assignments = await submit_items(project, count=2)
    for assignment in assignments:
        await reviews.review("reviewer-1", assignment.id, True)

    reviewer_stat = await stats.get_for("reviewer-1", project.id)
    assert reviewer_stat.total_reviews_done == 2
    assert reviewer_stat.total_reviewed_tasks == 0


@pytest.mark.asyncio
async def test_review_not_submitted(session, reviews, stats, project):
    """Test that assignments still being worked on cannot be reviewed."""
    project_id = project.id
    [assignment] = await AssignmentAllocator(session).allocate(project_id, "annotator-1", "reviewer-1", 1)
    assignment_id = assignment.id

    with pytest.raises(InvalidOperationError):
        await reviews.review("reviewer-1", assignment_id, True)

    stat = await stats.get_for("annotator-1", project_id)
    assert stat.total_reviewed_tasks == 0
    assert await ReviewLogRepository(session).list_by_assignment(assignment_id) == []


@pytest.mark.asyncio
async def test_review_twice(session, reviews, stats, project, submit_items):
    """Test that a decided assignment cannot be reviewed again."""
    project_id = project.id
    [assignment] = await submit_items(project)
    assignment_id = assignment.id

    await reviews.review("reviewer-1", assignment_id, True)
    with pytest.raises(InvalidOperationError):
        await reviews.review("reviewer-1", assignment_id, False, "TE-01")

    stat = await stats.get_for("annotator-1", project_id)
    assert stat.total_approved == 1
    assert stat.total_rejected == 0


@pytest.mark.asyncio
async def test_review_by_wrong_reviewer(reviews, project, submit_items):
    """Test that only the assigned reviewer can decide."""
    [assignment] = await submit_items(project)

    with pytest.raises(UnauthorizedError):
        await reviews.review("reviewer-2", assignment.id, True)


@pytest.mark.asyncio
async def test_review_unknown_assignment(reviews, project):
    """Test reviewing an assignment that does not exist."""
    with pytest.raises(NotFoundError):
        await reviews.review("reviewer-1", 9999, True)


@pytest.mark.asyncio
async def test_reject_then_resubmit_then_approve(session, reviews, stats, project, submit_items):
    """Test the full rework loop of one assignment."""
    [assignment] = await submit_items(project)
    lifecycle = LifecycleManager(session)

    await reviews.review("reviewer-1", assignment.id, False, "LU-01", "Tighten the boxes")
    draft = await lifecycle.save_draft("annotator-1", assignment.id, '[{"label": "car", "tight": true}]')
    assert draft.status == AssignmentStatus.IN_PROGRESS.value

    resubmitted = await lifecycle.submit("annotator-1", assignment.id, '[{"label": "car", "final": true}]')
    assert resubmitted.status == AssignmentStatus.SUBMITTED.value

    annotations = await AnnotationRepository(session).list_by_assignment(assignment.id)
    assert [a.data_json for a in annotations] == ['[{"label": "car", "final": true}]']

    await reviews.review("reviewer-1", assignment.id, True)

    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_rejected == 1
    assert stat.total_approved == 1
    assert stat.total_reviewed_tasks == 2
    assert stat.average_quality_score == 85.0

    logs = await ReviewLogRepository(session).list_by_assignment(assignment.id)
    assert [log.verdict for log in logs] == ["approved", "rejected"]


@pytest.mark.asyncio
async def test_custom_scoring_weights(session, stats, project, submit_items):
    """Test that the critical threshold and penalty scale come from configuration."""
    config = LabelhubConfig(db_path=":memory:", critical_error_weight=3, penalty_per_weight=5)
    engine = ReviewEngine(session, config=config)
    [assignment] = await submit_items(project)

    log = await engine.review("reviewer-1", assignment.id, False, "LU-01")

    assert log.score_penalty == 15
    stat = await stats.get_for("annotator-1", project.id)
    assert stat.total_critical_errors == 1
    assert stat.average_quality_score == 85.0


async def _seed_race(database: Database, items: int = 1) -> tuple[int, list[int]]:
    async with database.session() as session:
        session.add_all(
            [
                User(id="annotator-1", full_name="Annotator", role=UserRole.ANNOTATOR.value),
                User(id="reviewer-1", full_name="Reviewer", role=UserRole.REVIEWER.value),
            ]
        )
        project = Project(name="Race", price_per_label=10.0, deadline=utcnow() + timedelta(days=1))
        session.add(project)
        await session.flush()
        session.add_all(
            [DataItem(project_id=project.id, storage_url=f"s3://bucket/race-{i}.jpg") for i in range(items)]
        )
        await session.commit()

        assignments = await AssignmentAllocator(session).allocate(project.id, "annotator-1", "reviewer-1", items)
        lifecycle = LifecycleManager(session)
        for assignment in assignments:
            await lifecycle.submit("annotator-1", assignment.id, "payload")
        return project.id, [a.id for a in assignments]


@pytest.mark.asyncio
async def test_concurrent_reviews_apply_once(tmp_path, config):
    """Test that only one of two racing reviews of the same assignment is applied."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    await database.create_tables()
    project_id, [assignment_id] = await _seed_race(database)

    try:
        async with database.session() as first, database.session() as second:
            # The second reviewer loaded the assignment before the first decision landed
            stale = await second.get(Assignment, assignment_id)
            assert stale.status == AssignmentStatus.SUBMITTED.value

            await ReviewEngine(first, config=config).review("reviewer-1", assignment_id, True)

            with pytest.raises(ConflictError):
                await ReviewEngine(second, config=config).review("reviewer-1", assignment_id, False, "TE-01")

        async with database.session() as check:
            stat = await UserProjectStatRepository(check).get_for("annotator-1", project_id)
            assert stat.total_reviewed_tasks == 1
            assert stat.total_approved == 1
            assert stat.total_rejected == 0

            logs = await ReviewLogRepository(check).list_by_assignment(assignment_id)
            assert len(logs) == 1

            loaded = await check.get(Assignment, assignment_id)
            assert loaded.status == AssignmentStatus.COMPLETED.value
    finally:
        await database.close()


@pytest.mark.asyncio
async def test_concurrent_reviews_of_different_assignments_both_count(tmp_path, config):
    """Test that two reviews racing on one annotator's stat row both land."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    await database.create_tables()
    project_id, assignment_ids = await _seed_race(database, items=2)

    try:
        async with database.session() as first, database.session() as second:
            # The second session already holds the annotator's stat row
            held = await UserProjectStatRepository(second).get_for("annotator-1", project_id)
            assert held.total_approved == 0

            await ReviewEngine(first, config=config).review("reviewer-1", assignment_ids[0], True)
            await ReviewEngine(second, config=config).review("reviewer-1", assignment_ids[1], True)

        async with database.session() as check:
            stats = UserProjectStatRepository(check)
            stat = await stats.get_for("annotator-1", project_id)
            assert stat.total_approved == 2
            assert stat.total_reviewed_tasks == 2
            assert stat.estimated_earnings == 20.0
            assert stat.efficiency_score == 100.0

            reviewer_stat = await stats.get_for("reviewer-1", project_id)
            assert reviewer_stat.total_reviews_done == 2
    finally:
        await database.close()


@pytest.mark.asyncio
async def test_stale_stat_write_conflicts(tmp_path, config):
    """Test that writing back a stat row read before a newer commit is refused."""
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    await database.create_tables()
    project_id, assignment_ids = await _seed_race(database, items=2)

    try:
        async with database.session() as first, database.session() as second:
            held = await UserProjectStatRepository(second).get_for("annotator-1", project_id)

            await ReviewEngine(first, config=config).review("reviewer-1", assignment_ids[0], True)

            with pytest.raises(ConflictError):
                async with BaseService(second).transaction():
                    held.total_approved += 1

        async with database.session() as check:
            stat = await UserProjectStatRepository(check).get_for("annotator-1", project_id)
            assert stat.total_approved == 1
            assert stat.total_reviewed_tasks == 1
    finally:
        await database.close()
