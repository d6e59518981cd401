"""Read-only views over assignments, review queues and statistics."""
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ..exceptions import NotFoundError
from ..models import (
    Annotation,
    Assignment,
    AssignmentStatus,
    Project,
    ReviewLog,
    as_naive_utc,
)
from ..schemas import (
    AnnotatorStatsResponse,
    AssignedProjectResponse,
    AssignmentResponse,
    ChecklistItem,
    ReviewTaskResponse,
    UserProjectStatResponse,
)
from ..scoring import Checklist, efficiency_score
from .base import BaseService

logger = logging.getLogger(__name__)

# Statuses that count as finished from the annotator's point of view
_DONE_STATUSES = {AssignmentStatus.SUBMITTED.value, AssignmentStatus.COMPLETED.value}


def effective_deadline(assigned_date: datetime, project: Project) -> datetime:
    """Earlier of the per-task time limit and the project deadline."""
    task_deadline = as_naive_utc(assigned_date) + timedelta(hours=project.max_task_duration_hours)
    return min(task_deadline, as_naive_utc(project.deadline))


def latest_annotation(annotations: Iterable[Annotation]) -> Optional[Annotation]:
    """Most recently written annotation; ties go to the highest id."""
    return max(annotations, key=lambda a: (a.created_at, a.id or 0), default=None)


def latest_review_log(logs: Iterable[ReviewLog]) -> Optional[ReviewLog]:
    """Most recent review log; ties go to the highest id."""
    return max(logs, key=lambda log: (log.created_at, log.id or 0), default=None)


def to_assignment_response(assignment: Assignment) -> AssignmentResponse:
    """Build the annotator's view of an assignment loaded with its details."""
    annotation = latest_annotation(assignment.annotations)

    rejection_reason = None
    if assignment.status == AssignmentStatus.REJECTED.value:
        log = latest_review_log(assignment.review_logs)
        rejection_reason = log.comment if log is not None else None

    return AssignmentResponse(
        id=assignment.id,
        project_id=assignment.project_id,
        data_item_id=assignment.data_item_id,
        data_item_url=assignment.data_item.storage_url,
        status=assignment.status,
        annotation_data=annotation.data_json if annotation is not None else None,
        assigned_date=assignment.assigned_date,
        submitted_at=assignment.submitted_at,
        deadline=effective_deadline(assignment.assigned_date, assignment.project),
        rejection_reason=rejection_reason,
    )


def aggregate_status(statuses: list[str]) -> str:
    """Roll assignment statuses up into one project status."""
    if all(status == AssignmentStatus.COMPLETED.value for status in statuses):
        return AssignmentStatus.COMPLETED.value
    if any(status != AssignmentStatus.ASSIGNED.value for status in statuses):
        return AssignmentStatus.IN_PROGRESS.value
    return AssignmentStatus.ASSIGNED.value


class ProjectionService(BaseService):
    """Derives annotator and reviewer views; never writes."""

    async def list_by_annotator(self, annotator_id: str) -> list[AssignedProjectResponse]:
        """Group an annotator's assignments into one card per project."""
        assignments = await self.assignments.list_by_annotator(annotator_id)

        grouped: dict[int, list[Assignment]] = {}
        for assignment in assignments:
            grouped.setdefault(assignment.project_id, []).append(assignment)

        cards = []
        for project_id, group in grouped.items():
            first = group[0]
            statuses = [a.status for a in group]
            cards.append(
                AssignedProjectResponse(
                    project_id=project_id,
                    project_name=first.project.name,
                    description=first.project.description,
                    thumbnail_url=first.data_item.storage_url,
                    assigned_date=min(a.assigned_date for a in group),
                    deadline=first.project.deadline,
                    total_items=len(group),
                    completed_items=sum(1 for s in statuses if s in _DONE_STATUSES),
                    status=aggregate_status(statuses),
                )
            )
        return cards

    async def list_by_project(self, project_id: int, annotator_id: str) -> list[AssignmentResponse]:
        """All of an annotator's assignments in one project, for next/previous navigation."""
        assignments = await self.assignments.list_by_annotator(annotator_id, project_id)
        return [to_assignment_response(a) for a in assignments]

    async def list_for_reviewer(
        self, project_id: int, reviewer_id: str, status: Optional[str] = None
    ) -> list[ReviewTaskResponse]:
        """The reviewer's queue in a project with the annotation payloads to judge."""
        project = await self.projects.get(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)

        assignments = await self.assignments.list_for_reviewer(project_id, reviewer_id, status)
        return [
            ReviewTaskResponse(
                assignment_id=a.id,
                data_item_id=a.data_item_id,
                storage_url=a.data_item.storage_url if a.data_item else "",
                project_name=project.name,
                status=a.status,
                deadline=project.deadline,
                submitted_at=a.submitted_at,
                existing_annotations=[an.data_json for an in a.annotations if an.data_json],
            )
            for a in assignments
        ]

    async def get_annotator_stats(self, user_id: str) -> AnnotatorStatsResponse:
        """Per-project statistics of a user plus totals across projects."""
        rows = await self.stats.list_by_user(user_id)
        projects = [UserProjectStatResponse.model_validate(row) for row in rows]

        total_assigned = sum(p.total_assigned for p in projects)
        total_approved = sum(p.total_approved for p in projects)
        efficiency = efficiency_score(total_approved, total_assigned)

        return AnnotatorStatsResponse(
            user_id=user_id,
            total_assigned=total_assigned,
            total_approved=total_approved,
            total_rejected=sum(p.total_rejected for p in projects),
            total_reviewed_tasks=sum(p.total_reviewed_tasks for p in projects),
            total_critical_errors=sum(p.total_critical_errors for p in projects),
            estimated_earnings=sum(p.estimated_earnings for p in projects),
            efficiency_score=efficiency if efficiency is not None else 100.0,
            projects=projects,
        )

    async def get_user_project_stat(self, user_id: str, project_id: int) -> UserProjectStatResponse:
        """Statistics row of one user in one project."""
        stat = await self.stats.get_for(user_id, project_id)
        if stat is None:
            raise NotFoundError("Statistics", f"user={user_id}, project={project_id}")
        return UserProjectStatResponse.model_validate(stat)

    async def get_error_categories(self, project_id: int) -> list[ChecklistItem]:
        """Checklist codes a reviewer can pick when rejecting work in a project."""
        project = await self.projects.get(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        checklist = Checklist.decode(project.review_checklist)
        return list(checklist.items.values())
