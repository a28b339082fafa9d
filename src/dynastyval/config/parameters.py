"""Tunable weight vector for the composite valuation."""

from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from dynastyval.models.player import Position

from .curves import iter_age_curves


class AgeCurve(BaseModel):
    """Breakpoint ages and their multipliers; interpolated between breakpoints."""

    breakpoints: Tuple[int, ...]
    multipliers: Tuple[float, ...]

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_shape(self) -> "AgeCurve":
        if not self.breakpoints:
            raise ValueError("age curve needs at least one breakpoint")
        if len(self.breakpoints) != len(self.multipliers):
            raise ValueError("age curve breakpoints and multipliers must have equal length")
        if any(later <= earlier for earlier, later in zip(self.breakpoints, self.breakpoints[1:])):
            raise ValueError("age curve breakpoints must be strictly increasing")
        if any(m < 0 for m in self.multipliers):
            raise ValueError("age curve multipliers must be non-negative")
        return self

    def multiplier_at(self, age: float) -> float:
        ages = self.breakpoints
        values = self.multipliers
        if age <= ages[0]:
            return values[0]
        if age >= ages[-1]:
            return values[-1]
        for index in range(len(ages) - 1):
            lower, upper = ages[index], ages[index + 1]
            if lower <= age <= upper:
                if age == lower:
                    return values[index]
                if age == upper:
                    return values[index + 1]
                ratio = (age - lower) / (upper - lower)
                return values[index] + (values[index + 1] - values[index]) * ratio
        return values[-1]  # pragma: no cover - loop always returns


def _default_age_curves() -> Dict[Position, AgeCurve]:
    return {
        table.position: AgeCurve(breakpoints=table.ages, multipliers=table.multipliers)
        for table in iter_age_curves()
    }


def _default_scoring_multipliers() -> Dict[str, float]:
    return {"PPR": 1.0, "Half": 0.85, "Standard": 0.70}


class CalibrationParameters(BaseModel):
    alpha: float = 0.6
    wm_now: float = 0.6
    wp_now: float = 0.4
    wm_future: float = 0.4
    wp_future: float = 0.6
    age_curves: Dict[Position, AgeCurve] = Field(default_factory=_default_age_curves)
    scoring_multipliers: Dict[str, float] = Field(default_factory=_default_scoring_multipliers)

    model_config = ConfigDict(frozen=True)

    def curve_for(self, position: Position) -> AgeCurve | None:
        return self.age_curves.get(position)

    def with_updates(self, **changes: float) -> "CalibrationParameters":
        return self.model_copy(update=changes)

    def weight_vector(self) -> dict[str, float]:
        return {
            "alpha": self.alpha,
            "wm_now": self.wm_now,
            "wp_now": self.wp_now,
            "wm_future": self.wm_future,
            "wp_future": self.wp_future,
        }


DEFAULT_PARAMETERS = CalibrationParameters()
