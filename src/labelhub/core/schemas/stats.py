"""Statistics schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserProjectStatResponse(BaseModel):
    """Schema for one (user, project) statistics row."""
    user_id: str
    project_id: int
    total_assigned: int
    total_approved: int
    total_rejected: int
    efficiency_score: float
    estimated_earnings: float
    average_quality_score: float
    total_reviewed_tasks: int
    total_critical_errors: int
    reviewer_quality_score: float
    total_reviews_done: int
    total_audited_reviews: int
    total_correct_decisions: int
    date: datetime

    model_config = ConfigDict(from_attributes=True)


class AnnotatorStatsResponse(BaseModel):
    """Totals across all projects of a user plus the per-project rows."""
    user_id: str
    total_assigned: int
    total_approved: int
    total_rejected: int
    total_reviewed_tasks: int
    total_critical_errors: int
    estimated_earnings: float
    efficiency_score: float
    projects: list[UserProjectStatResponse]
