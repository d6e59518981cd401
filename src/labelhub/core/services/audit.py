"""Manager audits of review decisions and reviewer accuracy."""
import logging

from ..exceptions import InvalidOperationError, NotFoundError, UnauthorizedError
from ..models import AuditResult, ReviewLog, utcnow
from ..scoring import reviewer_quality_score
from .base import BaseService

logger = logging.getLogger(__name__)


class AuditEngine(BaseService):
    """Scores reviewers by whether managers agree with their verdicts."""

    async def audit(self, manager_id: str, review_log_id: int, is_correct_decision: bool) -> ReviewLog:
        """Record a manager's judgement of one review decision.

        A log can be audited once; the reviewer quality score is the plain
        ratio of agreed to audited decisions.

        Raises:
            NotFoundError: If the review log or its assignment does not exist
            InvalidOperationError: If the log was already audited
            UnauthorizedError: If the manager wrote the review being audited
        """
        async with self.transaction():
            log = await self.review_logs.get(review_log_id)
            if log is None:
                raise NotFoundError("Review log", review_log_id)

            if log.is_audited:
                raise InvalidOperationError("This review has already been audited.")

            assignment = await self.assignments.get(log.assignment_id)
            if assignment is None:
                raise NotFoundError("Assignment", log.assignment_id)

            if log.reviewer_id == manager_id:
                raise UnauthorizedError("Reviewers cannot audit their own decisions.")

            reviewer_stat, _ = await self.stats.get_or_create(log.reviewer_id, assignment.project_id)

            log.is_audited = True
            log.audit_result = (AuditResult.AGREE if is_correct_decision else AuditResult.DISAGREE).value

            reviewer_stat.total_audited_reviews += 1
            if is_correct_decision:
                reviewer_stat.total_correct_decisions += 1

            quality = reviewer_quality_score(
                reviewer_stat.total_correct_decisions, reviewer_stat.total_audited_reviews
            )
            if quality is not None:
                reviewer_stat.reviewer_quality_score = quality
            reviewer_stat.date = utcnow()

        logger.info(
            f"Review log {review_log_id} audited by {manager_id}: {log.audit_result}"
        )
        return log
