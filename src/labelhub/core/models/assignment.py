"""Assignment model and its lifecycle state machine."""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..exceptions import InvalidOperationError
from ..storage.database import Base
from .base import utcnow


class AssignmentStatus(str, Enum):
    """Status of an assignment."""
    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS: dict[AssignmentStatus, frozenset[AssignmentStatus]] = {
    AssignmentStatus.NEW: frozenset(
        {AssignmentStatus.ASSIGNED, AssignmentStatus.IN_PROGRESS, AssignmentStatus.SUBMITTED}
    ),
    AssignmentStatus.ASSIGNED: frozenset(
        {AssignmentStatus.IN_PROGRESS, AssignmentStatus.SUBMITTED}
    ),
    AssignmentStatus.IN_PROGRESS: frozenset({AssignmentStatus.SUBMITTED}),
    AssignmentStatus.SUBMITTED: frozenset(
        {AssignmentStatus.SUBMITTED, AssignmentStatus.COMPLETED, AssignmentStatus.REJECTED}
    ),
    # Rejection ends the review, not the assignment
    AssignmentStatus.REJECTED: frozenset(
        {AssignmentStatus.IN_PROGRESS, AssignmentStatus.SUBMITTED}
    ),
    AssignmentStatus.COMPLETED: frozenset(),
}


def can_transition(current: AssignmentStatus, target: AssignmentStatus) -> bool:
    """Check whether ``current -> target`` is listed in the transition table."""
    return target in ALLOWED_TRANSITIONS[current]


class Assignment(Base):
    """One data item bound to one annotator and one reviewer in a project."""

    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    data_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("data_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    annotator_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reviewer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=AssignmentStatus.ASSIGNED.value, index=True
    )
    assigned_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    # Optimistic concurrency token; a stale UPDATE raises StaleDataError
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="assignments")
    data_item: Mapped["DataItem"] = relationship("DataItem")
    annotations: Mapped[list["Annotation"]] = relationship(
        "Annotation", back_populates="assignment", cascade="all, delete-orphan"
    )
    review_logs: Mapped[list["ReviewLog"]] = relationship(
        "ReviewLog", back_populates="assignment", cascade="all, delete-orphan"
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def current_status(self) -> AssignmentStatus:
        return AssignmentStatus(self.status)

    def transition_to(self, target: AssignmentStatus) -> None:
        """Move to ``target`` or raise InvalidOperationError if the move is not allowed."""
        current = self.current_status
        if not can_transition(current, target):
            raise InvalidOperationError(
                f"Assignment {self.id} cannot move from {current.value} to {target.value}"
            )
        self.status = target.value

    def __repr__(self) -> str:
        return f"<Assignment(id={self.id}, data_item_id={self.data_item_id}, status='{self.status}')>"
