"""Calibration of the valuation weights against market baselines."""

from .engine import (
    CalibrationCancelled,
    CalibrationEngine,
    CalibrationMetrics,
    FoldResult,
    InsufficientTrainingData,
    PositionRankShifts,
    RankShift,
    age_band,
)
from .guardrails import GuardrailViolation, guardrail_violations, validate_guardrails
from .registry import DEFAULT_VERSION, ActiveParameters, ParameterRegistry
from .stats import mape, rank, spearman, weighted_overall

__all__ = [
    "ActiveParameters",
    "CalibrationCancelled",
    "CalibrationEngine",
    "CalibrationMetrics",
    "DEFAULT_VERSION",
    "FoldResult",
    "GuardrailViolation",
    "InsufficientTrainingData",
    "ParameterRegistry",
    "PositionRankShifts",
    "RankShift",
    "age_band",
    "guardrail_violations",
    "mape",
    "rank",
    "spearman",
    "validate_guardrails",
    "weighted_overall",
]
