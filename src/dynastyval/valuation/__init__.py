"""Composite valuation of players and picks."""

from .composite import valuate, valuate_player
from .curves import age_multiplier, risk_multiplier
from .picks import pick_value, round_multiplier, value_pick
from .settings import compute_settings_adjustments, compute_vor_multipliers, replacement_ranks
from .trade import TradeEvaluation, evaluate_trade

__all__ = [
    "TradeEvaluation",
    "age_multiplier",
    "compute_settings_adjustments",
    "compute_vor_multipliers",
    "evaluate_trade",
    "pick_value",
    "replacement_ranks",
    "risk_multiplier",
    "round_multiplier",
    "valuate",
    "valuate_player",
    "value_pick",
]
