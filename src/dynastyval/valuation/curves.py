"""Age-curve and risk multiplier lookups."""

from __future__ import annotations

from typing import Mapping

from dynastyval.config.curves import RISK_MULTIPLIERS
from dynastyval.config.parameters import DEFAULT_PARAMETERS, AgeCurve
from dynastyval.models import PlayerStatus, Position


def age_multiplier(
    position: Position,
    age: int | float | None,
    curves: Mapping[Position, AgeCurve] | None = None,
) -> float:
    """Future-value multiplier for a player's age.

    Exact anchors return their multiplier, ages outside the anchor range clamp
    to the nearest boundary anchor, and ages in between are linearly
    interpolated. Unknown ages are neutral (1.0).
    """

    if age is None:
        return 1.0
    table = curves if curves is not None else DEFAULT_PARAMETERS.age_curves
    curve = table.get(position)
    if curve is None:
        return 1.0
    return curve.multiplier_at(age)


def risk_multiplier(status: PlayerStatus | str | None) -> float:
    """Multiplier for availability risk; unrecognized statuses are neutral."""

    if status is None:
        return 1.0
    if not isinstance(status, PlayerStatus):
        status = PlayerStatus.parse(str(status))
        if status is None:
            return 1.0
    return RISK_MULTIPLIERS.get(status, 1.0)
