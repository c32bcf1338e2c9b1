"""
Factor scoring.

Converts a single raw measurement into a 0-100 suitability score and a
qualitative status, given optimal and acceptable bounds. Two modes:

- Range mode: both bounds are (min, max) pairs (temperature).
- Threshold mode: both bounds are scalars (wind, precipitation, humidity,
  visibility). ``higher_is_better`` flips the direction for visibility.
"""

import math
from typing import Tuple, Union

from pydantic import BaseModel, Field

from outdoor_risk.schemas import FactorStatus

Bound = Union[float, Tuple[float, float]]

DANGEROUS_SCORE_CEILING = 25
ACCEPTABLE_SCORE_FLOOR = 50


class FactorScore(BaseModel):
    """Score and status for one factor, before an impact string is attached."""

    score: int = Field(..., ge=0, le=100)
    status: FactorStatus


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (0.5 -> 1, 70.5 -> 71)."""
    return int(math.floor(value + 0.5))


def score_factor(
    value: float,
    optimal: Bound,
    acceptable: Bound,
    higher_is_better: bool = False,
) -> FactorScore:
    """
    Score a measurement against its optimal and acceptable bounds.

    Args:
        value: The measured value
        optimal: (min, max) pair for range mode, scalar for threshold mode
        acceptable: Same shape as ``optimal``, on the tolerant side of it
        higher_is_better: Threshold mode only; True for visibility

    Returns:
        FactorScore with the rounded score and the status

    Raises:
        TypeError: If one bound is a range and the other a scalar
    """
    optimal_is_range = isinstance(optimal, (tuple, list))
    acceptable_is_range = isinstance(acceptable, (tuple, list))
    if optimal_is_range != acceptable_is_range:
        raise TypeError("optimal and acceptable bounds must both be ranges or both scalars")

    if optimal_is_range:
        raw, status = _score_range(value, tuple(optimal), tuple(acceptable))
    elif higher_is_better:
        raw, status = _score_higher_is_better(value, optimal, acceptable)
    else:
        raw, status = _score_lower_is_better(value, optimal, acceptable)

    return FactorScore(score=round_half_up(raw), status=status)


def _beyond_acceptable(score: float) -> Tuple[float, FactorStatus]:
    status = FactorStatus.POOR if score > DANGEROUS_SCORE_CEILING else FactorStatus.DANGEROUS
    return score, status


def _score_range(
    value: float,
    optimal: Tuple[float, float],
    acceptable: Tuple[float, float],
) -> Tuple[float, FactorStatus]:
    opt_min, opt_max = optimal
    acc_min, acc_max = acceptable

    if opt_min <= value <= opt_max:
        return 100.0, FactorStatus.OPTIMAL

    if acc_min <= value <= acc_max:
        distance = opt_min - value if value < opt_min else value - opt_max
        max_distance = max(opt_min - acc_min, acc_max - opt_max)
        score = max(ACCEPTABLE_SCORE_FLOOR, 100 - (distance / max_distance) * 50)
        return score, FactorStatus.ACCEPTABLE

    # Outside the acceptable band: 2 points lost per unit beyond its edge
    distance = acc_min - value if value < acc_min else value - acc_max
    return _beyond_acceptable(max(0.0, 50 - distance * 2))


def _score_lower_is_better(value: float, optimal: float, acceptable: float) -> Tuple[float, FactorStatus]:
    if value <= optimal:
        return 100.0, FactorStatus.OPTIMAL

    if value <= acceptable:
        score = 50 + ((acceptable - value) / (acceptable - optimal)) * 50
        return score, FactorStatus.ACCEPTABLE

    return _beyond_acceptable(max(0.0, 50 - ((value - acceptable) / acceptable) * 50))


def _score_higher_is_better(value: float, optimal: float, acceptable: float) -> Tuple[float, FactorStatus]:
    if value >= optimal:
        return 100.0, FactorStatus.OPTIMAL

    if value >= acceptable:
        score = 50 + ((value - acceptable) / (optimal - acceptable)) * 50
        return score, FactorStatus.ACCEPTABLE

    return _beyond_acceptable(max(0.0, (value / acceptable) * 50))


def format_number(value: float) -> str:
    """Render 15.0 as '15' and 4.5 as '4.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
