"""Fairness verdict for a two-sided trade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from dynastyval.models import round_half_up


FAIRNESS_PERCENT = 5.0

Verdict = Literal["FAIR", "FAVORS_A", "FAVORS_B"]


@dataclass(frozen=True)
class TradeEvaluation:
    total_a: float
    total_b: float
    difference: float
    percent_difference: float
    verdict: Verdict

    @property
    def display_total_a(self) -> int:
        return round_half_up(self.total_a)

    @property
    def display_total_b(self) -> int:
        return round_half_up(self.total_b)


def evaluate_trade(side_a: Iterable[float], side_b: Iterable[float]) -> TradeEvaluation:
    """Compare two bundles of unrounded asset values.

    Totals are summed before any rounding. A trade is FAIR when the gap is at
    most 5% of the larger side.
    """

    total_a = float(sum(side_a))
    total_b = float(sum(side_b))
    difference = abs(total_a - total_b)
    larger = max(total_a, total_b)
    percent = (difference / larger) * 100.0 if larger > 0 else 0.0

    verdict: Verdict
    if percent <= FAIRNESS_PERCENT:
        verdict = "FAIR"
    elif total_a > total_b:
        verdict = "FAVORS_A"
    else:
        verdict = "FAVORS_B"
    return TradeEvaluation(
        total_a=total_a,
        total_b=total_b,
        difference=difference,
        percent_difference=percent,
        verdict=verdict,
    )
