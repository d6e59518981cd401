"""Checklist lookup and scoring formulas."""
from .checklist import Checklist
from .metrics import (
    MAX_TASK_SCORE,
    efficiency_score,
    penalty_score,
    reviewer_quality_score,
    running_average,
    task_score,
)

__all__ = [
    "Checklist",
    "MAX_TASK_SCORE",
    "efficiency_score",
    "penalty_score",
    "reviewer_quality_score",
    "running_average",
    "task_score",
]
