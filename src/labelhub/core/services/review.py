"""Review decisions: verdict, checklist penalty and annotator statistics."""
import logging
from typing import Optional

from ..config.settings import LabelhubConfig, get_config
from ..exceptions import InvalidOperationError, NotFoundError, UnauthorizedError
from ..models import (
    AssignmentStatus,
    DataItemStatus,
    Project,
    ReviewLog,
    ReviewVerdict,
    utcnow,
)
from ..scoring import (
    MAX_TASK_SCORE,
    Checklist,
    efficiency_score,
    penalty_score,
    running_average,
    task_score,
)
from .base import BaseService

logger = logging.getLogger(__name__)


class ReviewEngine(BaseService):
    """Applies a reviewer's verdict to a submitted assignment.

    Approval completes the assignment and marks its data item done.
    Rejection looks the error category up in the project checklist and
    turns its weight into a score penalty. Either way the annotator's
    running quality average absorbs exactly one new task score.
    """

    def __init__(self, session, config: Optional[LabelhubConfig] = None):
        super().__init__(session)
        self.config = config or get_config()

    def _checklist_weight(self, project: Project, error_category: Optional[str]) -> int:
        checklist = Checklist.decode(project.review_checklist)
        if checklist.lookup(error_category) is None:
            # No checklist, malformed checklist or unknown code: reject without penalty
            logger.debug(
                f"No checklist match for {error_category!r} in project {project.id} "
                f"(checklist valid: {checklist.is_valid})"
            )
        return checklist.weight_for(error_category)

    async def review(
        self,
        reviewer_id: str,
        assignment_id: int,
        is_approved: bool,
        error_category: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> ReviewLog:
        """Approve or reject a submitted assignment.

        Args:
            reviewer_id: Caller, must be the assignment's reviewer
            assignment_id: Assignment under review
            is_approved: Verdict
            error_category: Checklist code explaining a rejection
            comment: Feedback for the annotator

        Returns:
            The review log written for this decision

        Raises:
            NotFoundError: If the assignment or its project does not exist
            UnauthorizedError: If the caller is not the assignment's reviewer
            InvalidOperationError: If the assignment is not submitted
            ConflictError: If another review of the same assignment won the race
        """
        async with self.transaction():
            assignment = await self.assignments.get(assignment_id)
            if assignment is None:
                raise NotFoundError("Assignment", assignment_id)

            if assignment.reviewer_id != reviewer_id:
                raise UnauthorizedError("You are not assigned to review this task.")

            if assignment.current_status != AssignmentStatus.SUBMITTED:
                raise InvalidOperationError("This task is not ready for review.")

            project = await self.projects.get(assignment.project_id)
            if project is None:
                raise NotFoundError("Project", assignment.project_id)

            stat, _ = await self.stats.get_or_create(assignment.annotator_id, assignment.project_id)

            if is_approved:
                assignment.transition_to(AssignmentStatus.COMPLETED)
                stat.total_approved += 1
                stat.estimated_earnings = stat.total_approved * project.price_per_label

                data_item = await self.data_items.get(assignment.data_item_id)
                if data_item is not None:
                    data_item.status = DataItemStatus.DONE.value

                penalty = 0
                score = MAX_TASK_SCORE
            else:
                assignment.transition_to(AssignmentStatus.REJECTED)
                stat.total_rejected += 1

                weight = self._checklist_weight(project, error_category)
                if weight >= self.config.critical_error_weight:
                    stat.total_critical_errors += 1

                penalty = penalty_score(weight, self.config.penalty_per_weight)
                score = task_score(penalty)

            stat.average_quality_score = running_average(
                stat.average_quality_score, stat.total_reviewed_tasks, score
            )
            stat.total_reviewed_tasks += 1

            efficiency = efficiency_score(stat.total_approved, stat.total_assigned)
            if efficiency is not None:
                stat.efficiency_score = efficiency

            now = utcnow()
            stat.date = now

            reviewer_stat, _ = await self.stats.get_or_create(reviewer_id, assignment.project_id)
            reviewer_stat.total_reviews_done += 1
            reviewer_stat.date = now

            log = ReviewLog(
                assignment_id=assignment.id,
                reviewer_id=reviewer_id,
                verdict=(ReviewVerdict.APPROVED if is_approved else ReviewVerdict.REJECTED).value,
                comment=comment,
                error_category=None if is_approved else error_category,
                score_penalty=penalty,
                created_at=now,
                is_audited=False,
            )
            self.review_logs.add(log)

        logger.info(
            f"Assignment {assignment_id} {log.verdict} by {reviewer_id} "
            f"(penalty={penalty}, score={score})"
        )
        return log
