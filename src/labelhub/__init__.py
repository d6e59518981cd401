"""labelhub - assignment lifecycle, review and scoring for human annotation work.

Data items are handed to annotators as assignments, reviewers approve or
reject the submitted work against a weighted checklist, and managers audit
the reviewers. Per-user statistics are maintained incrementally.
"""
__version__ = "0.1.0"

from .core.config.settings import LabelhubConfig, get_config, init_config
from .core.exceptions import (
    ConflictError,
    InvalidOperationError,
    LabelhubError,
    NotFoundError,
    UnauthorizedError,
)
from .core.models import (
    Annotation,
    Assignment,
    AssignmentStatus,
    AuditResult,
    DataItem,
    DataItemStatus,
    Project,
    ReviewLog,
    ReviewVerdict,
    User,
    UserProjectStat,
    UserRole,
)
from .core.scoring import Checklist
from .core.services import (
    AssignmentAllocator,
    AuditEngine,
    LifecycleManager,
    ProjectionService,
    ReviewEngine,
)
from .core.storage.database import Database, get_db, init_db

from . import core

__all__ = [
    # Version
    "__version__",
    # Config
    "LabelhubConfig",
    "init_config",
    "get_config",
    # Database
    "Database",
    "init_db",
    "get_db",
    # Errors
    "LabelhubError",
    "NotFoundError",
    "UnauthorizedError",
    "InvalidOperationError",
    "ConflictError",
    # Models
    "User",
    "UserRole",
    "Project",
    "DataItem",
    "DataItemStatus",
    "Assignment",
    "AssignmentStatus",
    "Annotation",
    "ReviewLog",
    "ReviewVerdict",
    "AuditResult",
    "UserProjectStat",
    # Scoring
    "Checklist",
    # Services
    "AssignmentAllocator",
    "LifecycleManager",
    "ReviewEngine",
    "AuditEngine",
    "ProjectionService",
    # Core module
    "core",
]
