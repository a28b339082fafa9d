from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel


class DriftMetricsResponse(BaseModel):
    metrics_id: str
    created_at: datetime
    overall_rho: float
    position_rhos: Dict[str, float]
    js_divergence: float
    mover_fraction: float
    top_movers: List[dict]
    params_version: int
    snapshot_id: str | None = None
    previous_snapshot_id: str | None = None


class DriftAlertResponse(BaseModel):
    alert_id: str
    metrics_id: str
    created_at: datetime
    alert_type: str
    severity: str
    metric: str
    value: float
    threshold: float
    position: str | None = None
    message: str
    resolved: bool
    resolved_at: datetime | None = None


class DriftCheckResponse(BaseModel):
    metrics: DriftMetricsResponse
    alerts: List[DriftAlertResponse]
