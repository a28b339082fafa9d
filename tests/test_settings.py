import pytest

from dynastyval.config import LeagueSettings, StarterCounts
from dynastyval.models import Position
from dynastyval.valuation import compute_settings_adjustments, compute_vor_multipliers, replacement_ranks


def test_default_replacement_ranks_include_flex_share():
    ranks = replacement_ranks(LeagueSettings())
    assert ranks[Position.QB] == pytest.approx(12)
    assert ranks[Position.RB] == pytest.approx(28.8)
    assert ranks[Position.TE] == pytest.approx(14.4)


def test_default_vor_multipliers():
    multipliers = compute_vor_multipliers(LeagueSettings())
    assert multipliers[Position.QB] == pytest.approx(0.98)
    assert multipliers[Position.RB] == pytest.approx(0.96)
    assert multipliers[Position.WR] == pytest.approx(0.96)


def test_vor_multipliers_stay_in_bounds():
    small = compute_vor_multipliers(LeagueSettings(league_size=4))
    deep = compute_vor_multipliers(
        LeagueSettings(league_size=20, starters=StarterCounts(QB=3, RB=4, WR=5, TE=3, FLEX=3, SUPERFLEX=2))
    )
    for multiplier in list(small.values()) + list(deep.values()):
        assert 0.9 <= multiplier <= 1.15
    assert small[Position.QB] == pytest.approx(1.15)


def test_position_with_no_starters_gets_minimum_scarcity():
    multipliers = compute_vor_multipliers(LeagueSettings(starters=StarterCounts(QB=0)))
    assert multipliers[Position.QB] == pytest.approx(0.9)


def test_superflex_boosts_only_quarterbacks():
    settings = LeagueSettings(superflex=True)
    assert compute_settings_adjustments(Position.QB, settings).qb_multiplier == pytest.approx(1.3)
    assert compute_settings_adjustments(Position.RB, settings).qb_multiplier == 1.0


def test_te_premium_uses_configured_multiplier():
    settings = LeagueSettings(te_premium=True, te_premium_multiplier=1.75)
    adjustments = compute_settings_adjustments(Position.TE, settings)
    assert adjustments.te_multiplier == pytest.approx(1.75)
    assert compute_settings_adjustments(Position.WR, settings).te_multiplier == 1.0


def test_scoring_factor_is_not_folded_into_combined_multiplier():
    adjustments = compute_settings_adjustments(Position.WR, LeagueSettings(scoring="Standard"))
    assert adjustments.scoring_factor == pytest.approx(0.70)
    assert adjustments.combined_multiplier == pytest.approx(adjustments.vor_multiplier)


def test_combined_multiplier_is_rounded_product():
    adjustments = compute_settings_adjustments(Position.QB, LeagueSettings(superflex=True))
    assert adjustments.combined_multiplier == pytest.approx(round(1.3 * adjustments.vor_multiplier, 3))


def test_calibrated_scoring_multipliers_override_defaults():
    adjustments = compute_settings_adjustments(
        Position.RB,
        LeagueSettings(scoring="Half"),
        scoring_multipliers={"PPR": 1.0, "Half": 0.9, "Standard": 0.75},
    )
    assert adjustments.scoring_factor == pytest.approx(0.9)
