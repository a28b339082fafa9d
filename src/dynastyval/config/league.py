"""League settings and their canonical fingerprint."""

from __future__ import annotations

import hashlib
import json
import logging
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict


logger = logging.getLogger(__name__)

ScoringFormat = Literal["PPR", "Half", "Standard"]

SCORING_FORMATS: tuple[str, ...] = ("PPR", "Half", "Standard")

_STARTER_LIMITS: dict[str, tuple[int, int]] = {
    "QB": (0, 3),
    "RB": (0, 4),
    "WR": (0, 5),
    "TE": (0, 3),
    "FLEX": (0, 3),
    "SUPERFLEX": (0, 2),
}


class StarterCounts(BaseModel):
    """Starting lineup shape: dedicated slots per position plus flex slots."""

    QB: int = Field(default=1, ge=0, le=3)
    RB: int = Field(default=2, ge=0, le=4)
    WR: int = Field(default=2, ge=0, le=5)
    TE: int = Field(default=1, ge=0, le=3)
    FLEX: int = Field(default=1, ge=0, le=3)
    SUPERFLEX: int = Field(default=0, ge=0, le=2)

    model_config = ConfigDict(frozen=True)


class LeagueSettings(BaseModel):
    scoring: ScoringFormat = "PPR"
    superflex: bool = False
    te_premium: bool = False
    te_premium_multiplier: float = Field(default=1.5, ge=1.0, le=3.0)
    league_size: int = Field(default=12, ge=4, le=20)
    starters: StarterCounts = Field(default_factory=StarterCounts)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_partial(cls, data: Mapping[str, Any] | None) -> "LeagueSettings":
        """Build settings from loose user input.

        Missing keys take defaults, an unknown scoring format or an out of
        range league size / TE premium falls back to the default, and starter
        counts are clamped into their allowed range.
        """

        defaults = cls()
        raw = dict(data or {})

        scoring = raw.get("scoring", defaults.scoring)
        if scoring not in SCORING_FORMATS:
            logger.warning("Unknown scoring format %r; using %s", scoring, defaults.scoring)
            scoring = defaults.scoring

        te_multiplier = _coerce_float(raw.get("te_premium_multiplier"), defaults.te_premium_multiplier)
        if te_multiplier < 1.0 or te_multiplier > 3.0:
            te_multiplier = defaults.te_premium_multiplier

        league_size = _coerce_int(raw.get("league_size"), defaults.league_size)
        if league_size < 4 or league_size > 20:
            league_size = defaults.league_size

        raw_starters = raw.get("starters") or {}
        default_starters = defaults.starters.model_dump()
        starters: dict[str, int] = {}
        for slot, (low, high) in _STARTER_LIMITS.items():
            value = _coerce_int(raw_starters.get(slot), default_starters[slot])
            starters[slot] = max(low, min(high, value))

        return cls(
            scoring=scoring,
            superflex=_coerce_bool(raw.get("superflex"), defaults.superflex),
            te_premium=_coerce_bool(raw.get("te_premium"), defaults.te_premium),
            te_premium_multiplier=te_multiplier,
            league_size=league_size,
            starters=StarterCounts(**starters),
        )

    def normalized(self) -> dict[str, Any]:
        """Canonical dict used for fingerprinting."""

        return {
            "scoring": self.scoring,
            "superflex": self.superflex,
            "te_premium": self.te_premium,
            "te_premium_multiplier": round(self.te_premium_multiplier, 2),
            "league_size": self.league_size,
            "starters": self.starters.model_dump(),
        }


def _coerce_float(value: Any, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


_TRUE_STRINGS = {"true", "yes", "y", "1", "on"}
_FALSE_STRINGS = {"false", "no", "n", "0", "off", ""}


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return default
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return default


def _coerce_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def settings_fingerprint(settings: LeagueSettings) -> str:
    """Stable 16 character key for a settings object.

    Keys are sorted and floats rounded before hashing so semantically equal
    settings always produce the same fingerprint.
    """

    payload = json.dumps(settings.normalized(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def parse_settings(payload: Mapping[str, Any]) -> LeagueSettings:
    """Strictly validate a settings mapping, raising ValueError on bad input."""

    try:
        return LeagueSettings.model_validate(dict(payload))
    except ValidationError as exc:
        raise ValueError(f"Invalid league settings: {exc}") from exc


DEFAULT_SETTINGS = LeagueSettings()

# Valuations computed without league settings are stored under this key.
BASELINE_FINGERPRINT = "baseline"
