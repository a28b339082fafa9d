"""Pydantic models for API I/O."""

from .calibration import ActiveParametersResponse, CalibrationRunRequest, CalibrationRunResponse, RollbackRequest
from .drift import DriftAlertResponse, DriftCheckResponse, DriftMetricsResponse
from .players import PlayerImportRequest, PlayerImportResponse
from .valuation import (
    PickValueRequest,
    PickValueResponse,
    TradeAsset,
    TradeRequest,
    TradeResponse,
    ValuationRequest,
    ValuationResponse,
)

__all__ = [
    "ActiveParametersResponse",
    "CalibrationRunRequest",
    "CalibrationRunResponse",
    "DriftAlertResponse",
    "DriftCheckResponse",
    "DriftMetricsResponse",
    "PickValueRequest",
    "PickValueResponse",
    "PlayerImportRequest",
    "PlayerImportResponse",
    "RollbackRequest",
    "TradeAsset",
    "TradeRequest",
    "TradeResponse",
    "ValuationRequest",
    "ValuationResponse",
]
