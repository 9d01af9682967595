"""Score arithmetic shared by the progression and quiz services."""

from __future__ import annotations

import math
from typing import Optional

INLINE_WEIGHT = 0.5
QUIZ_WEIGHT = 0.5


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``2.5 -> 3``)."""
    return int(math.floor(value + 0.5))


def percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(part / total * 100)


def combine_scores(quiz_score: int, inline_score: Optional[int]) -> int:
    if inline_score is None:
        return quiz_score
    return round_half_up(inline_score * INLINE_WEIGHT + quiz_score * QUIZ_WEIGHT)
