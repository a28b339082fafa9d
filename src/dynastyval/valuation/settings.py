"""League-settings multipliers: superflex, TE premium, scoring format and scarcity."""

from __future__ import annotations

from typing import Dict, Mapping

from dynastyval.config.league import LeagueSettings
from dynastyval.models import Position, SettingsAdjustments


SUPERFLEX_QB_MULTIPLIER = 1.3

SCORING_FACTORS: Mapping[str, float] = {
    "PPR": 1.0,
    "Half": 0.85,
    "Standard": 0.70,
}

VOR_MIN_MULTIPLIER = 0.9
VOR_MAX_MULTIPLIER = 1.15
VOR_MIN_RATIO = 0.5
VOR_MAX_RATIO = 2.0

# Replacement ranks for a 12-team, 1QB/2RB/2WR/1TE/1FLEX league.
BASE_REPLACEMENT_RANKS: Mapping[Position, float] = {
    Position.QB: 12,
    Position.RB: 24,
    Position.WR: 24,
    Position.TE: 12,
}

# Share of each flex slot credited to each eligible position; each row sums to 1.
FLEX_SHARES: Mapping[Position, float] = {
    Position.QB: 0.0,
    Position.RB: 0.4,
    Position.WR: 0.4,
    Position.TE: 0.2,
}
SUPERFLEX_SHARES: Mapping[Position, float] = {
    Position.QB: 0.5,
    Position.RB: 0.2,
    Position.WR: 0.2,
    Position.TE: 0.1,
}


def replacement_ranks(settings: LeagueSettings) -> Dict[Position, float]:
    starters = settings.starters
    dedicated = {
        Position.QB: starters.QB,
        Position.RB: starters.RB,
        Position.WR: starters.WR,
        Position.TE: starters.TE,
    }
    return {
        position: settings.league_size
        * (
            dedicated[position]
            + starters.FLEX * FLEX_SHARES[position]
            + starters.SUPERFLEX * SUPERFLEX_SHARES[position]
        )
        for position in Position
    }


def _scarcity_multiplier(base_rank: float, replacement_rank: float) -> float:
    if replacement_rank <= 0:
        # Nobody starts the position, so there is no scarcity premium.
        ratio = VOR_MIN_RATIO
    else:
        ratio = base_rank / replacement_rank
    ratio = max(VOR_MIN_RATIO, min(VOR_MAX_RATIO, ratio))
    span = VOR_MAX_RATIO - VOR_MIN_RATIO
    multiplier = VOR_MIN_MULTIPLIER + (ratio - VOR_MIN_RATIO) * (
        VOR_MAX_MULTIPLIER - VOR_MIN_MULTIPLIER
    ) / span
    return round(multiplier, 2)


def compute_vor_multipliers(settings: LeagueSettings) -> Dict[Position, float]:
    """Scarcity multiplier per position, bounded to [0.90, 1.15]."""

    ranks = replacement_ranks(settings)
    return {
        position: _scarcity_multiplier(BASE_REPLACEMENT_RANKS[position], ranks[position])
        for position in Position
    }


def compute_settings_adjustments(
    position: Position,
    settings: LeagueSettings,
    scoring_multipliers: Mapping[str, float] | None = None,
    vor_multipliers: Mapping[Position, float] | None = None,
) -> SettingsAdjustments:
    qb_multiplier = SUPERFLEX_QB_MULTIPLIER if position == Position.QB and settings.superflex else 1.0
    te_multiplier = (
        settings.te_premium_multiplier if position == Position.TE and settings.te_premium else 1.0
    )
    factors = scoring_multipliers if scoring_multipliers is not None else SCORING_FACTORS
    scoring_factor = factors.get(settings.scoring, SCORING_FACTORS[settings.scoring])
    if vor_multipliers is None:
        vor_multipliers = compute_vor_multipliers(settings)
    vor_multiplier = vor_multipliers[position]

    # Scoring factor is applied to projection components only, never folded in here.
    combined = round(qb_multiplier * te_multiplier * vor_multiplier, 3)
    return SettingsAdjustments(
        qb_multiplier=qb_multiplier,
        te_multiplier=te_multiplier,
        scoring_factor=scoring_factor,
        vor_multiplier=vor_multiplier,
        combined_multiplier=combined,
    )
