"""Composite valuation: market value, projections, age, risk and league settings."""

from __future__ import annotations

from dynastyval.config.league import BASELINE_FINGERPRINT, LeagueSettings, settings_fingerprint
from dynastyval.config.parameters import DEFAULT_PARAMETERS, CalibrationParameters
from dynastyval.models import PlayerRecord, PlayerStatus, Position, Valuation

from .curves import age_multiplier, risk_multiplier
from .settings import compute_settings_adjustments


def _or_zero(value: float | None) -> float:
    return 0.0 if value is None else float(value)


def valuate(
    market_value: float | None,
    proj_now: float | None,
    proj_future: float | None,
    position: Position,
    age: int | float | None = None,
    status: PlayerStatus | str | None = PlayerStatus.ACTIVE,
    settings: LeagueSettings | None = None,
    parameters: CalibrationParameters | None = None,
) -> Valuation:
    """Score one player under the given (or default) calibration parameters.

    Missing market value or projections count as 0. The now score carries no
    age or risk adjustment since players do not age within a season. When
    ``settings`` is given the projection components are scaled by the
    scoring-format factor before the market component is added, and both
    scores are multiplied by the combined settings multiplier.

    All scores are returned unrounded; see ``Valuation.display_*``.
    """

    params = parameters or DEFAULT_PARAMETERS
    market = _or_zero(market_value)
    now_projection = _or_zero(proj_now)
    future_projection = _or_zero(proj_future)

    age_adjustment = age_multiplier(position, age, params.age_curves)
    risk_adjustment = risk_multiplier(status)

    now_score = params.wm_now * market + params.wp_now * now_projection
    future_base = params.wm_future * market + params.wp_future * future_projection
    future_score = future_base * age_adjustment * risk_adjustment

    adjustments = None
    if settings is not None:
        adjustments = compute_settings_adjustments(
            position,
            settings,
            scoring_multipliers=params.scoring_multipliers,
        )
        scoring = adjustments.scoring_factor
        lifecycle = age_adjustment * risk_adjustment
        now_score = params.wm_now * market + params.wp_now * now_projection * scoring
        future_score = (
            params.wm_future * market * lifecycle
            + params.wp_future * future_projection * lifecycle * scoring
        )
        now_score *= adjustments.combined_multiplier
        future_score *= adjustments.combined_multiplier

    composite = params.alpha * now_score + (1.0 - params.alpha) * future_score
    return Valuation(
        now_score=now_score,
        future_score=future_score,
        composite_value=composite,
        age_adjustment=age_adjustment,
        risk_adjustment=risk_adjustment,
        alpha=params.alpha,
        settings_adjustments=adjustments,
        fingerprint=settings_fingerprint(settings) if settings is not None else BASELINE_FINGERPRINT,
    )


def valuate_player(
    player: PlayerRecord,
    settings: LeagueSettings | None = None,
    parameters: CalibrationParameters | None = None,
) -> Valuation:
    return valuate(
        player.market_value,
        player.proj_now,
        player.proj_future,
        player.position,
        age=player.age,
        status=player.status,
        settings=settings,
        parameters=parameters,
    )
