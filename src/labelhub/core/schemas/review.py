"""Review and audit schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewRequest(BaseModel):
    """Schema for a reviewer's verdict on a submitted assignment."""
    assignment_id: int = Field(..., description="Assignment under review")
    is_approved: bool = Field(..., description="Approve (true) or reject (false)")
    error_category: Optional[str] = Field(None, max_length=100, description="Checklist code on rejection")
    comment: Optional[str] = Field(None, description="Feedback shown to the annotator")


class AuditReviewRequest(BaseModel):
    """Schema for a manager's audit of a review decision."""
    review_log_id: int = Field(..., description="Review log being audited")
    is_correct_decision: bool = Field(..., description="Whether the manager agrees with the verdict")


class ReviewLogResponse(BaseModel):
    """Schema for a review log."""
    id: int
    assignment_id: int
    reviewer_id: str
    verdict: str
    comment: Optional[str]
    error_category: Optional[str]
    score_penalty: int
    created_at: datetime
    is_audited: bool
    audit_result: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class ReviewTaskResponse(BaseModel):
    """Reviewer-facing view of an assignment in the review queue."""
    assignment_id: int
    data_item_id: int
    storage_url: str
    project_name: str
    status: str
    deadline: datetime
    submitted_at: Optional[datetime] = None
    existing_annotations: list[str] = Field(default_factory=list)
