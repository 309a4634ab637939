"""Business rules for mastery observations — one threshold, one scale."""
from __future__ import annotations
import math
import numbers
from decimal import Decimal
from typing import Optional

from masterypath.core.config import MASTERY_THRESHOLD, SCORE_MAX, SCORE_MIN
from masterypath.domain.common.result import Result
from masterypath.domain.progress.models import ConceptProgress, ProgressState


def validate_score(score: object) -> Result[float]:
    """
    Scores are fractions in [SCORE_MIN, SCORE_MAX]. Any real number is accepted
    (int, float, Fraction, Decimal); bool, NaN and non-numbers are rejected.
    """
    if isinstance(score, bool) or not isinstance(score, (numbers.Real, Decimal)):
        return Result.fail("score must be a number")
    out_of_range = f"score must be within [{SCORE_MIN}, {SCORE_MAX}]"
    try:
        value = float(score)
    except OverflowError:
        return Result.fail(out_of_range)
    except ValueError:
        # Decimal('sNaN')
        return Result.fail("score must not be NaN")
    if math.isnan(value):
        return Result.fail("score must not be NaN")
    if not (SCORE_MIN <= value <= SCORE_MAX):
        return Result.fail(out_of_range)
    return Result.ok(value)


def reaches_mastery(score: float, threshold: float = MASTERY_THRESHOLD) -> bool:
    return score >= threshold


def state_of(record: Optional[ConceptProgress], unlocked: bool) -> ProgressState:
    """
    locked -> unlocked -> attempted -> mastered.
    MASTERED is terminal: it wins even if prerequisites were later re-scored.
    """
    if record is not None and record.mastered:
        return ProgressState.MASTERED
    if record is not None and record.attempts > 0:
        return ProgressState.ATTEMPTED
    if unlocked:
        return ProgressState.UNLOCKED
    return ProgressState.LOCKED
