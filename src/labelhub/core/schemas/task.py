"""Task schemas - allocation, drafting, submission and annotator views."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Request schemas
class AssignTaskRequest(BaseModel):
    """Schema for allocating data items to an annotator."""
    project_id: int = Field(..., description="Project to allocate from")
    annotator_id: str = Field(..., min_length=1, description="Annotator receiving the work")
    reviewer_id: str = Field(..., min_length=1, description="Reviewer judging the work")
    quantity: int = Field(..., gt=0, description="Number of data items to allocate")


class SubmitAnnotationRequest(BaseModel):
    """Schema for saving a draft or submitting an annotation."""
    assignment_id: int = Field(..., description="Assignment the payload belongs to")
    data_json: str = Field(default="", description="Opaque serialized annotation payload")


# Response schemas
class AllocationResponse(BaseModel):
    """Result of an allocation call."""
    message: str
    project_id: int
    assignment_ids: list[int]


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str


class AssignmentResponse(BaseModel):
    """Annotator-facing view of one assignment."""
    id: int
    project_id: int
    data_item_id: int
    data_item_url: str
    status: str
    annotation_data: Optional[str] = None
    assigned_date: datetime
    submitted_at: Optional[datetime] = None
    deadline: datetime
    rejection_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AssignedProjectResponse(BaseModel):
    """An annotator's assignments in one project, rolled up into a card."""
    project_id: int
    project_name: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    assigned_date: datetime
    deadline: datetime
    total_items: int
    completed_items: int
    status: str
