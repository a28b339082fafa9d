from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field, model_validator

from dynastyval.models import PlayerStatus, Position, SettingsAdjustments


class ValuationRequest(BaseModel):
    """Either a stored ``player_id`` or inline inputs for an ad-hoc asset."""

    player_id: str | None = None
    position: Position | None = None
    market_value: float | None = None
    proj_now: float | None = None
    proj_future: float | None = None
    age: int | None = Field(default=None, ge=0)
    status: PlayerStatus | None = PlayerStatus.ACTIVE
    settings: Dict[str, Any] | None = None

    @model_validator(mode="after")
    def _require_player_or_position(self) -> "ValuationRequest":
        if self.player_id is None and self.position is None:
            raise ValueError("either player_id or position is required")
        return self


class ValuationResponse(BaseModel):
    player_id: str | None
    now_score: float
    future_score: float
    composite_value: float
    display_now: int
    display_future: int
    display_composite: int
    age_adjustment: float
    risk_adjustment: float
    alpha: float
    settings_adjustments: SettingsAdjustments | None = None
    fingerprint: str | None = None
    params_version: int


class PickValueRequest(BaseModel):
    year: int
    round: int = Field(..., ge=1)
    baseline_value: float | None = None
    current_year: int | None = None


class PickValueResponse(BaseModel):
    year: int
    round: int
    value: float
    display_value: int


class TradeAsset(BaseModel):
    player_id: str | None = None
    pick: PickValueRequest | None = None
    value: float | None = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "TradeAsset":
        provided = [item for item in (self.player_id, self.pick, self.value) if item is not None]
        if len(provided) != 1:
            raise ValueError("each asset needs exactly one of player_id, pick or value")
        return self


class TradeRequest(BaseModel):
    side_a: List[TradeAsset]
    side_b: List[TradeAsset]
    settings: Dict[str, Any] | None = None


class TradeResponse(BaseModel):
    total_a: float
    total_b: float
    display_total_a: int
    display_total_b: int
    difference: float
    percent_difference: float
    verdict: Literal["FAIR", "FAVORS_A", "FAVORS_B"]
