"""API route modules."""
from . import reviews, stats, tasks

__all__ = [
    "tasks",
    "reviews",
    "stats",
]
