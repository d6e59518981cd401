"""Allocation of unassigned data items to an annotator/reviewer pair."""
import logging

from ..exceptions import InvalidOperationError, NotFoundError
from ..models import Assignment, AssignmentStatus, DataItemStatus, utcnow
from .base import BaseService

logger = logging.getLogger(__name__)


class AssignmentAllocator(BaseService):
    """Turns an allocation request into Assignment records."""

    async def allocate(
        self,
        project_id: int,
        annotator_id: str,
        reviewer_id: str,
        quantity: int,
    ) -> list[Assignment]:
        """Allocate exactly ``quantity`` new data items of a project.

        Items are claimed oldest first. The annotator's ``total_assigned``
        grows by ``quantity``; all writes commit together.

        Args:
            project_id: Project to allocate from
            annotator_id: Annotator receiving the work
            reviewer_id: Reviewer who will judge the work
            quantity: Number of data items to allocate

        Returns:
            The created assignments

        Raises:
            NotFoundError: If the reviewer, annotator or project does not exist
            InvalidOperationError: If fewer than ``quantity`` items are available
            ConflictError: If a concurrent allocation claimed the same items
        """
        async with self.transaction():
            reviewer = await self.users.get(reviewer_id)
            if reviewer is None:
                raise NotFoundError("Reviewer", reviewer_id)

            annotator = await self.users.get(annotator_id)
            if annotator is None:
                raise NotFoundError("Annotator", annotator_id)

            project = await self.projects.get(project_id)
            if project is None:
                raise NotFoundError("Project", project_id)

            if quantity < 1:
                raise InvalidOperationError("Quantity must be at least 1.")

            items = await self.data_items.list_unassigned(project_id, quantity)
            if len(items) < quantity:
                raise InvalidOperationError(
                    f"Not enough available data items: requested {quantity}, "
                    f"available {len(items)}."
                )

            now = utcnow()
            assignments = []
            for item in items:
                assignment = Assignment(
                    project_id=project_id,
                    data_item_id=item.id,
                    annotator_id=annotator_id,
                    reviewer_id=reviewer_id,
                    status=AssignmentStatus.ASSIGNED.value,
                    assigned_date=now,
                )
                item.status = DataItemStatus.ASSIGNED.value
                self.assignments.add(assignment)
                assignments.append(assignment)

            stat, _ = await self.stats.get_or_create(annotator_id, project_id)
            stat.total_assigned += len(items)
            stat.date = now

        logger.info(
            f"Allocated {len(assignments)} item(s) of project {project_id} "
            f"to annotator {annotator_id} (reviewer {reviewer_id})"
        )
        return assignments
