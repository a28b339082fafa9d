"""Drift monitoring of live valuations against market values."""

from .monitor import (
    DriftAlert,
    DriftMetrics,
    DriftMonitor,
    DriftReport,
    SnapshotEntry,
    TopMover,
    compute_drift,
    correlation_metrics,
    determine_cause,
    evaluate_alerts,
    identify_movers,
    jensen_shannon,
    js_divergence,
    position_distribution,
)

__all__ = [
    "DriftAlert",
    "DriftMetrics",
    "DriftMonitor",
    "DriftReport",
    "SnapshotEntry",
    "TopMover",
    "compute_drift",
    "correlation_metrics",
    "determine_cause",
    "evaluate_alerts",
    "identify_movers",
    "jensen_shannon",
    "js_divergence",
    "position_distribution",
]
