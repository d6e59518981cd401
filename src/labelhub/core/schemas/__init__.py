"""Pydantic schemas for API validation and serialization."""
from .project import ChecklistItem
from .task import (
    AllocationResponse,
    AssignedProjectResponse,
    AssignmentResponse,
    AssignTaskRequest,
    MessageResponse,
    SubmitAnnotationRequest,
)
from .review import AuditReviewRequest, ReviewLogResponse, ReviewRequest, ReviewTaskResponse
from .stats import AnnotatorStatsResponse, UserProjectStatResponse

__all__ = [
    # Project schemas
    "ChecklistItem",
    # Task schemas
    "AssignTaskRequest",
    "SubmitAnnotationRequest",
    "AllocationResponse",
    "MessageResponse",
    "AssignmentResponse",
    "AssignedProjectResponse",
    # Review schemas
    "ReviewRequest",
    "AuditReviewRequest",
    "ReviewLogResponse",
    "ReviewTaskResponse",
    # Statistics schemas
    "UserProjectStatResponse",
    "AnnotatorStatsResponse",
]
