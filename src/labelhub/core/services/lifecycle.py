"""Annotator-driven lifecycle of an assignment: drafts, submission, navigation."""
import logging
from typing import Optional

from ..exceptions import InvalidOperationError, NotFoundError, UnauthorizedError
from ..models import Annotation, Assignment, AssignmentStatus, utcnow
from ..schemas import AssignmentResponse
from .base import BaseService
from .projections import latest_annotation, to_assignment_response

logger = logging.getLogger(__name__)

# Payloads that carry no annotation at all
EMPTY_PAYLOADS = frozenset({"", "[]"})

# Statuses a draft save moves to in_progress
_DRAFT_ENTRY_STATUSES = frozenset(
    {AssignmentStatus.NEW, AssignmentStatus.ASSIGNED, AssignmentStatus.REJECTED}
)


def is_empty_payload(data_json: Optional[str]) -> bool:
    return data_json is None or data_json.strip() in EMPTY_PAYLOADS


class LifecycleManager(BaseService):
    """State transitions driven by the annotator who owns an assignment."""

    async def _get_owned(self, assignment_id: int, user_id: str) -> Assignment:
        assignment = await self.assignments.get_with_details(assignment_id)
        if assignment is None:
            raise NotFoundError("Task", assignment_id)
        if assignment.annotator_id != user_id:
            raise UnauthorizedError("Unauthorized access to this task.")
        return assignment

    async def save_draft(
        self, user_id: str, assignment_id: int, data_json: Optional[str]
    ) -> Optional[Assignment]:
        """Overwrite the current draft of an assignment.

        Empty payloads are ignored and return None. The first real draft on
        a new, assigned or rejected assignment moves it to in_progress.

        Raises:
            NotFoundError: If the assignment does not exist
            UnauthorizedError: If the caller is not the annotator
            InvalidOperationError: If the assignment is completed
        """
        if is_empty_payload(data_json):
            logger.debug(f"Ignoring empty draft for assignment {assignment_id}")
            return None

        async with self.transaction():
            assignment = await self._get_owned(assignment_id, user_id)
            if assignment.current_status == AssignmentStatus.COMPLETED:
                raise InvalidOperationError("Cannot edit a completed task.")

            now = utcnow()
            current = latest_annotation(assignment.annotations)
            if current is not None:
                current.data_json = data_json
                current.created_at = now
            else:
                assignment.annotations.append(Annotation(data_json=data_json, created_at=now))

            if assignment.current_status in _DRAFT_ENTRY_STATUSES:
                assignment.transition_to(AssignmentStatus.IN_PROGRESS)

        logger.debug(f"Saved draft for assignment {assignment_id} ({assignment.status})")
        return assignment

    async def submit(self, user_id: str, assignment_id: int, data_json: Optional[str]) -> Assignment:
        """Submit an assignment for review.

        Every existing annotation row is discarded and replaced by a single
        row holding ``data_json``, the artifact the reviewer judges.

        Raises:
            NotFoundError: If the assignment does not exist
            UnauthorizedError: If the caller is not the annotator
            InvalidOperationError: If the assignment is completed
        """
        async with self.transaction():
            assignment = await self._get_owned(assignment_id, user_id)
            assignment.transition_to(AssignmentStatus.SUBMITTED)

            now = utcnow()
            assignment.annotations.clear()
            assignment.annotations.append(Annotation(data_json=data_json or "", created_at=now))
            assignment.submitted_at = now

        logger.info(f"Assignment {assignment_id} submitted by {user_id}")
        return assignment

    async def get_assignment_detail(self, assignment_id: int, user_id: str) -> AssignmentResponse:
        """The annotator's view of one assignment.

        Raises:
            NotFoundError: If the assignment does not exist
            UnauthorizedError: If the caller is not the annotator
        """
        assignment = await self._get_owned(assignment_id, user_id)
        return to_assignment_response(assignment)

    async def jump_to_data_item(
        self, project_id: int, data_item_id: int, user_id: str
    ) -> AssignmentResponse:
        """Open the caller's assignment for a given data item of a project."""
        target = await self.assignments.find_for_data_item(project_id, data_item_id, user_id)
        if target is None:
            raise NotFoundError("Assignment for data item", data_item_id)
        return await self.get_assignment_detail(target.id, user_id)
