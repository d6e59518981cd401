"""Request-scoped services implementing the assignment lifecycle and scoring."""
from .allocator import AssignmentAllocator
from .audit import AuditEngine
from .base import BaseService
from .lifecycle import LifecycleManager
from .projections import ProjectionService
from .review import ReviewEngine

__all__ = [
    "BaseService",
    "AssignmentAllocator",
    "LifecycleManager",
    "ReviewEngine",
    "AuditEngine",
    "ProjectionService",
]
