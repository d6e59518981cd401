"""DataItem model - a unit of raw content to be annotated."""
from enum import Enum

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..storage.database import Base


class DataItemStatus(str, Enum):
    """Availability of a data item."""
    NEW = "new"
    ASSIGNED = "assigned"
    DONE = "done"


class DataItem(Base):
    """Raw content owned by a project; the core only flips its status."""

    __tablename__ = "data_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    storage_url: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DataItemStatus.NEW.value, index=True
    )
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="data_items")

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<DataItem(id={self.id}, project_id={self.project_id}, status='{self.status}')>"
