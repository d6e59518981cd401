"""UserProjectStat model - running aggregates per (user, project)."""
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..storage.database import Base
from .base import utcnow


class UserProjectStat(Base):
    """Incrementally maintained statistics for one user in one project.

    Annotator counters are touched by allocation and review; reviewer
    counters by review and audit. Rows are never recomputed from history.
    """

    __tablename__ = "user_project_stats"
    __table_args__ = (
        UniqueConstraint("user_id", "project_id", name="uq_user_project_stat"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Annotator metrics
    total_assigned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_approved: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rejected: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    efficiency_score: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)
    estimated_earnings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    average_quality_score: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)
    total_reviewed_tasks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_critical_errors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Reviewer metrics
    reviewer_quality_score: Mapped[float] = mapped_column(Float, nullable=False, default=100.0)
    total_reviews_done: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_audited_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_correct_decisions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    # Counters are written back as absolute values; a stale row must not overwrite a newer one
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<UserProjectStat(user_id='{self.user_id}', project_id={self.project_id})>"

    @classmethod
    def fresh(cls, user_id: str, project_id: int, **overrides) -> "UserProjectStat":
        """Build a zeroed row with the starting scores set explicitly.

        Column defaults only apply at INSERT, so counters are populated here
        to be usable before the first flush.
        """
        values = dict(
            total_assigned=0,
            total_approved=0,
            total_rejected=0,
            efficiency_score=100.0,
            estimated_earnings=0.0,
            average_quality_score=100.0,
            total_reviewed_tasks=0,
            total_critical_errors=0,
            reviewer_quality_score=100.0,
            total_reviews_done=0,
            total_audited_reviews=0,
            total_correct_decisions=0,
            date=utcnow(),
        )
        values.update(overrides)
        return cls(user_id=user_id, project_id=project_id, **values)
