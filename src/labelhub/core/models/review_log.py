"""ReviewLog model - one immutable review verdict."""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..storage.database import Base
from .base import utcnow


class ReviewVerdict(str, Enum):
    """Verdict given by a reviewer."""
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditResult(str, Enum):
    """Manager's judgement of a review verdict."""
    AGREE = "agree"
    DISAGREE = "disagree"


class ReviewLog(Base):
    """Record of a single review decision.

    Only the audit fields change after creation, and only once.
    """

    __tablename__ = "review_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reviewer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    verdict: Mapped[str] = mapped_column(String(50), nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    score_penalty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    is_audited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    audit_result: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    assignment: Mapped["Assignment"] = relationship("Assignment", back_populates="review_logs")

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<ReviewLog(id={self.id}, assignment_id={self.assignment_id}, verdict='{self.verdict}')>"
