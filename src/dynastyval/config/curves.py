"""Static age-curve and risk tables used by the valuation function."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from dynastyval.models.player import PlayerStatus, Position


@dataclass(frozen=True)
class AgeCurveTable:
    position: Position
    ages: Tuple[int, ...]
    multipliers: Tuple[float, ...]


def _table(position: Position, anchors: Mapping[int, float]) -> AgeCurveTable:
    ages = tuple(sorted(anchors))
    return AgeCurveTable(
        position=position,
        ages=ages,
        multipliers=tuple(anchors[age] for age in ages),
    )


_AGE_CURVES: Dict[Position, AgeCurveTable] = {
    # Quarterbacks hold value the longest.
    Position.QB: _table(
        Position.QB,
        {
            20: 0.7, 21: 0.8, 22: 0.9, 23: 0.95, 24: 1.0, 25: 1.0, 26: 1.0, 27: 1.0,
            28: 0.95, 29: 0.9, 30: 0.85, 31: 0.8, 32: 0.75, 33: 0.7, 34: 0.6, 35: 0.5,
        },
    ),
    # Running backs fall off sharply after 26.
    Position.RB: _table(
        Position.RB,
        {
            20: 0.6, 21: 0.7, 22: 0.8, 23: 0.9, 24: 0.95, 25: 1.0, 26: 0.9, 27: 0.7,
            28: 0.5, 29: 0.3, 30: 0.2, 31: 0.15, 32: 0.1, 33: 0.05, 34: 0.02, 35: 0.01,
        },
    ),
    Position.WR: _table(
        Position.WR,
        {
            20: 0.7, 21: 0.8, 22: 0.9, 23: 0.95, 24: 1.0, 25: 1.0, 26: 1.0, 27: 0.95,
            28: 0.9, 29: 0.8, 30: 0.7, 31: 0.6, 32: 0.5, 33: 0.4, 34: 0.3, 35: 0.2,
        },
    ),
    # Tight ends peak later and decline gradually.
    Position.TE: _table(
        Position.TE,
        {
            20: 0.6, 21: 0.7, 22: 0.8, 23: 0.85, 24: 0.9, 25: 0.95, 26: 1.0, 27: 1.0,
            28: 0.95, 29: 0.9, 30: 0.8, 31: 0.7, 32: 0.6, 33: 0.5, 34: 0.4, 35: 0.3,
        },
    ),
}


RISK_MULTIPLIERS: Mapping[PlayerStatus, float] = {
    PlayerStatus.ACTIVE: 1.0,
    PlayerStatus.QUESTIONABLE: 0.95,
    PlayerStatus.DOUBTFUL: 0.9,
    PlayerStatus.OUT: 0.85,
    PlayerStatus.IR: 0.8,
    PlayerStatus.SUSPENDED: 0.7,
    PlayerStatus.RETIRED: 0.0,
}


def get_age_curve(position: Position) -> AgeCurveTable:
    """Fetch the default age curve for a position, raising KeyError if missing."""

    if position not in _AGE_CURVES:
        raise KeyError(f"No age curve configured for position={position!r}")
    return _AGE_CURVES[position]


def iter_age_curves():
    """Return an iterator over all configured age curves."""

    return _AGE_CURVES.values()
