"""Rookie draft pick valuation."""

from __future__ import annotations

from datetime import date
from typing import Mapping

from dynastyval.models import PickRecord


PICK_BASE_VALUE = 1000.0
PICK_YEAR_DISCOUNT = 0.9

ROUND_MULTIPLIERS: Mapping[int, float] = {
    1: 1.0,
    2: 0.4,
    3: 0.15,
    4: 0.05,
}
# Rounds past the table keep shrinking by this factor per round.
LATE_ROUND_DECAY = 0.3


def round_multiplier(round_number: int) -> float:
    if round_number < 1:
        raise ValueError(f"pick round must be >= 1, got {round_number}")
    if round_number in ROUND_MULTIPLIERS:
        return ROUND_MULTIPLIERS[round_number]
    last_round = max(ROUND_MULTIPLIERS)
    return ROUND_MULTIPLIERS[last_round] * LATE_ROUND_DECAY ** (round_number - last_round)


def pick_value(
    year: int,
    round_number: int,
    baseline_value: float | None = None,
    *,
    current_year: int | None = None,
) -> float:
    """Discounted value of a pick; past and current-year picks are not discounted."""

    if current_year is None:
        current_year = date.today().year
    base = PICK_BASE_VALUE if baseline_value is None else float(baseline_value)
    years_out = max(0, year - current_year)
    return base * round_multiplier(round_number) * PICK_YEAR_DISCOUNT ** years_out


def value_pick(pick: PickRecord, *, current_year: int | None = None) -> float:
    return pick_value(pick.year, pick.round, pick.baseline_value, current_year=current_year)
