"""Project model - read-only configuration for the core."""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..storage.database import Base


class Project(Base):
    """A labeling project: pricing, checklist and deadlines."""

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price_per_label: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # JSON list of {"code", "name", "weight"} items
    review_checklist: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    max_task_duration_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    deadline: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    data_items: Mapped[list["DataItem"]] = relationship("DataItem", back_populates="project")
    assignments: Mapped[list["Assignment"]] = relationship("Assignment", back_populates="project")

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}')>"
