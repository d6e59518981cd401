"""Annotation model - the payload an annotator produces for an assignment."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..storage.database import Base
from .base import utcnow


class Annotation(Base):
    """Opaque annotation payload; ``created_at`` is the last write time."""

    __tablename__ = "annotations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("assignments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    data_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    # Relationships
    assignment: Mapped["Assignment"] = relationship("Assignment", back_populates="annotations")

    def __repr__(self) -> str:
        return f"<Annotation(id={self.id}, assignment_id={self.assignment_id})>"
