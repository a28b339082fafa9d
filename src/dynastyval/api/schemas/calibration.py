from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel


class CalibrationRunRequest(BaseModel):
    auto_promote: bool = False


class CalibrationRunResponse(BaseModel):
    run_id: str
    status: str
    parameters: dict
    metrics: dict | None = None
    rank_shifts: List[dict] = []
    error: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None


class ActiveParametersResponse(BaseModel):
    version: int
    source_run_id: str | None = None
    parameters: dict


class RollbackRequest(BaseModel):
    version: int
