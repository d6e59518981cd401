"""Core data models for assignments, annotations, reviews and statistics."""
# Import all models to ensure relationships work correctly
from .user import User, UserRole
from .project import Project
from .data_item import DataItem, DataItemStatus
from .assignment import ALLOWED_TRANSITIONS, Assignment, AssignmentStatus, can_transition
from .annotation import Annotation
from .review_log import AuditResult, ReviewLog, ReviewVerdict
from .stat import UserProjectStat
from .base import as_naive_utc, utcnow

__all__ = [
    # User models
    "User",
    "UserRole",
    # Project models
    "Project",
    "DataItem",
    "DataItemStatus",
    # Assignment models
    "Assignment",
    "AssignmentStatus",
    "ALLOWED_TRANSITIONS",
    "can_transition",
    "Annotation",
    # Review models
    "ReviewLog",
    "ReviewVerdict",
    "AuditResult",
    # Statistics
    "UserProjectStat",
    # Helpers
    "utcnow",
    "as_naive_utc",
]
