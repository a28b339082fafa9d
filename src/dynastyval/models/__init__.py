"""Asset and valuation models."""

from .player import (
    PickRecord,
    PlayerRecord,
    PlayerStatus,
    Position,
    SettingsAdjustments,
    Valuation,
    round_half_up,
)

__all__ = [
    "PickRecord",
    "PlayerRecord",
    "PlayerStatus",
    "Position",
    "SettingsAdjustments",
    "Valuation",
    "round_half_up",
]
