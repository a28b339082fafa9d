"""Canonical asset and valuation models shared across the valuation core."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Position(str, Enum):
    QB = "QB"
    RB = "RB"
    WR = "WR"
    TE = "TE"

    @classmethod
    def parse(cls, value: str | None) -> Optional["Position"]:
        if not value:
            return None
        token = value.strip().upper()
        token = _POSITION_ALIASES.get(token, token)
        try:
            return cls(token)
        except ValueError:
            return None


_POSITION_ALIASES = {
    "HB": "RB",
    "FB": "RB",
}


class PlayerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    QUESTIONABLE = "QUESTIONABLE"
    DOUBTFUL = "DOUBTFUL"
    OUT = "OUT"
    IR = "IR"
    SUSPENDED = "SUSPENDED"
    RETIRED = "RETIRED"

    @classmethod
    def parse(cls, value: str | None) -> Optional["PlayerStatus"]:
        """Return the matching status, or None when the text is unrecognized."""

        if not value:
            return None
        token = value.strip().upper().replace(" ", "_")
        if token in {"INJURED_RESERVE", "IR-R"}:
            token = "IR"
        try:
            return cls(token)
        except ValueError:
            return None


class PlayerRecord(BaseModel):
    """Normalized player inputs consumed by valuation, calibration and drift."""

    player_id: str = Field(..., min_length=1)
    name: str
    position: Position
    age: int | None = Field(default=None, ge=0)
    status: PlayerStatus | None = PlayerStatus.ACTIVE
    team: str | None = None
    market_value: float | None = None
    proj_now: float | None = None
    proj_future: float | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_trainable(self) -> bool:
        return (
            self.market_value is not None
            and self.proj_now is not None
            and self.proj_future is not None
        )


class PickRecord(BaseModel):
    """A future (or current-year) rookie draft pick."""

    pick_id: str = Field(..., min_length=1)
    year: int
    round: int = Field(..., ge=1)
    baseline_value: float | None = None

    model_config = ConfigDict(frozen=True)


class SettingsAdjustments(BaseModel):
    qb_multiplier: float
    te_multiplier: float
    scoring_factor: float
    vor_multiplier: float
    combined_multiplier: float

    model_config = ConfigDict(frozen=True)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""

    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


class Valuation(BaseModel):
    """Output of the composite valuation for one asset under one settings fingerprint.

    Scores are kept unrounded so callers can sum many assets before rounding;
    the ``display_*`` properties give the integer presentation values.
    """

    now_score: float
    future_score: float
    composite_value: float
    age_adjustment: float
    risk_adjustment: float
    alpha: float
    settings_adjustments: SettingsAdjustments | None = None
    fingerprint: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def display_now(self) -> int:
        return round_half_up(self.now_score)

    @property
    def display_future(self) -> int:
        return round_half_up(self.future_score)

    @property
    def display_composite(self) -> int:
        return round_half_up(self.composite_value)
