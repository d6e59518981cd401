"""Scoring formulas for annotator quality and reviewer accuracy."""
from typing import Optional

MAX_TASK_SCORE = 100.0


def penalty_score(weight: int, penalty_per_weight: int) -> int:
    """Penalty for a rejection with the given checklist weight."""
    return weight * penalty_per_weight


def task_score(penalty: int) -> float:
    """Score of one reviewed task, floored at zero."""
    return max(0.0, MAX_TASK_SCORE - penalty)


def running_average(old_average: float, old_count: int, score: float) -> float:
    """Fold one more score into a mean over ``old_count`` scores, rounded to 2 places.

    With ``old_count == 0`` the result is ``score`` regardless of ``old_average``.
    """
    total = old_average * old_count + score
    return round(total / (old_count + 1), 2)


def efficiency_score(total_approved: int, total_assigned: int) -> Optional[float]:
    """Approved/assigned ratio as a percentage; None when nothing was assigned."""
    if total_assigned <= 0:
        return None
    return total_approved / total_assigned * 100


def reviewer_quality_score(total_correct: int, total_audited: int) -> Optional[float]:
    """Share of audited decisions the manager agreed with, as a percentage."""
    if total_audited <= 0:
        return None
    return round(total_correct / total_audited * 100, 2)
