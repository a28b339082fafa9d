"""Drift monitoring: is the live valuation still tracking the market?"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

from scipy.spatial import distance

from dynastyval.calibration.registry import ParameterRegistry
from dynastyval.calibration.stats import spearman, weighted_overall
from dynastyval.config.env import env_int
from dynastyval.config.league import BASELINE_FINGERPRINT
from dynastyval.models import Position, Valuation
from dynastyval.persistence import DriftAlertRecord, DriftMetricsRecord, ValuationSnapshot, ValuationStore
from dynastyval.valuation import valuate_player


logger = logging.getLogger(__name__)

_PERIOD_ENV = "DYNASTYVAL_DRIFT_PERIOD_DAYS"
_PERIOD_DEFAULT_DAYS = 7

TOP_N = 100
MOVER_RANK_CHANGE = 10
CAUSE_MARGIN = 0.02

CORRELATION_WARNING = 0.80
CORRELATION_CRITICAL = 0.75
DIVERGENCE_WARNING = 0.10
DIVERGENCE_CRITICAL = 0.15
MOVERS_WARNING = 0.15
MOVERS_CRITICAL = 0.25

Cause = Literal["market", "projections", "config"]
Severity = Literal["warning", "critical"]


@dataclass(frozen=True)
class SnapshotEntry:
    player_id: str
    player_name: str
    position: str
    market_value: float
    proj_now: float | None
    proj_future: float | None
    composite_value: float


@dataclass(frozen=True)
class TopMover:
    player_id: str
    player_name: str
    position: str
    previous_rank: int
    current_rank: int
    rank_change: int
    cause: Cause


@dataclass(frozen=True)
class DriftMetrics:
    overall_rho: float
    position_rhos: Dict[str, float]
    js_divergence: float
    top_movers: List[TopMover] = field(default_factory=list)
    mover_fraction: float = 0.0
    tracked_count: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class DriftAlert:
    alert_type: Literal["correlation", "divergence", "movers"]
    severity: Severity
    metric: str
    value: float
    threshold: float
    message: str
    position: Optional[str] = None


@dataclass(frozen=True)
class DriftReport:
    metrics: DriftMetricsRecord
    alerts: List[DriftAlertRecord]
    snapshot_id: str
    previous_snapshot_id: Optional[str]


def correlation_metrics(entries: Sequence[SnapshotEntry]) -> Tuple[float, Dict[str, float]]:
    """Overall (player-weighted) and per-position Spearman rho of composite vs market."""

    groups: Dict[str, List[SnapshotEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.position].append(entry)

    position_rhos: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for position in sorted(groups):
        group = groups[position]
        position_rhos[position] = spearman(
            [entry.composite_value for entry in group],
            [entry.market_value for entry in group],
        )
        counts[position] = len(group)
    return weighted_overall(position_rhos, counts), position_rhos


def _top_valued(entries: Iterable[SnapshotEntry], top_n: int = TOP_N) -> List[SnapshotEntry]:
    return sorted(entries, key=lambda entry: (-entry.composite_value, entry.player_id))[:top_n]


def position_distribution(entries: Sequence[SnapshotEntry]) -> Dict[str, float]:
    distribution = {position.value: 0.0 for position in Position}
    if not entries:
        return distribution
    for entry in entries:
        if entry.position in distribution:
            distribution[entry.position] += 1
    total = len(entries)
    return {position: count / total for position, count in distribution.items()}


def jensen_shannon(p: Mapping[str, float], q: Mapping[str, float]) -> float:
    """Jensen-Shannon divergence in nats; 0.0 when either side is empty."""

    keys = sorted(set(p) | set(q))
    p_values = [p.get(key, 0.0) for key in keys]
    q_values = [q.get(key, 0.0) for key in keys]
    if not sum(p_values) or not sum(q_values):
        return 0.0
    return float(distance.jensenshannon(p_values, q_values)) ** 2


def js_divergence(current: Sequence[SnapshotEntry], previous: Sequence[SnapshotEntry]) -> float:
    """JS divergence of the positional mix of the top-valued players in each snapshot."""

    if not current or not previous:
        return 0.0
    return jensen_shannon(
        position_distribution(_top_valued(current)),
        position_distribution(_top_valued(previous)),
    )


def _position_ranks(entries: Sequence[SnapshotEntry]) -> Dict[str, int]:
    groups: Dict[str, List[SnapshotEntry]] = defaultdict(list)
    for entry in entries:
        groups[entry.position].append(entry)
    ranks: Dict[str, int] = {}
    for group in groups.values():
        for index, entry in enumerate(_top_valued(group, len(group))):
            ranks[entry.player_id] = index + 1
    return ranks


def _relative_change(current: float | None, previous: float | None) -> float:
    now_value = current or 0.0
    then_value = previous or 0.0
    return abs(now_value - then_value) / max(abs(then_value), 1.0)


def determine_cause(current: SnapshotEntry, previous: SnapshotEntry) -> Cause:
    """Attribute a rank move to whichever input changed proportionally more."""

    market_change = _relative_change(current.market_value, previous.market_value)
    projection_change = max(
        _relative_change(current.proj_now, previous.proj_now),
        _relative_change(current.proj_future, previous.proj_future),
    )
    if abs(market_change - projection_change) < CAUSE_MARGIN:
        return "config"
    return "market" if market_change > projection_change else "projections"


def identify_movers(
    current: Sequence[SnapshotEntry], previous: Sequence[SnapshotEntry]
) -> Tuple[List[TopMover], int]:
    """Return significant movers among the tracked top set, and the tracked set size."""

    previous_by_id = {entry.player_id: entry for entry in previous}
    common = [entry for entry in current if entry.player_id in previous_by_id]
    tracked = _top_valued(common)
    current_ranks = _position_ranks(current)
    previous_ranks = _position_ranks(previous)

    movers: List[TopMover] = []
    for entry in tracked:
        before = previous_by_id[entry.player_id]
        previous_rank = previous_ranks[entry.player_id]
        current_rank = current_ranks[entry.player_id]
        change = previous_rank - current_rank
        if abs(change) >= MOVER_RANK_CHANGE:
            movers.append(
                TopMover(
                    player_id=entry.player_id,
                    player_name=entry.player_name,
                    position=entry.position,
                    previous_rank=previous_rank,
                    current_rank=current_rank,
                    rank_change=change,
                    cause=determine_cause(entry, before),
                )
            )
    movers.sort(key=lambda mover: (-abs(mover.rank_change), mover.player_id))
    return movers, len(tracked)


def _correlation_alert(value: float, metric: str, label: str, position: Optional[str]) -> Optional[DriftAlert]:
    if value < CORRELATION_CRITICAL:
        severity: Severity = "critical"
        threshold = CORRELATION_CRITICAL
    elif value < CORRELATION_WARNING:
        severity = "warning"
        threshold = CORRELATION_WARNING
    else:
        return None
    return DriftAlert(
        alert_type="correlation",
        severity=severity,
        metric=metric,
        value=value,
        threshold=threshold,
        position=position,
        message=f"{label} correlation dropped to {value:.3f}, below {severity} threshold",
    )


def evaluate_alerts(metrics: DriftMetrics) -> List[DriftAlert]:
    """One alert per breached metric, at the most severe level breached."""

    alerts: List[DriftAlert] = []

    overall = _correlation_alert(metrics.overall_rho, "overall_rho", "Overall", None)
    if overall is not None:
        alerts.append(overall)
    for position, rho in sorted(metrics.position_rhos.items()):
        alert = _correlation_alert(rho, f"{position}_rho", position, position)
        if alert is not None:
            alerts.append(alert)

    divergence = metrics.js_divergence
    if divergence > DIVERGENCE_WARNING:
        critical = divergence > DIVERGENCE_CRITICAL
        severity: Severity = "critical" if critical else "warning"
        alerts.append(
            DriftAlert(
                alert_type="divergence",
                severity=severity,
                metric="js_divergence",
                value=divergence,
                threshold=DIVERGENCE_CRITICAL if critical else DIVERGENCE_WARNING,
                message=f"Distribution divergence increased to {divergence:.3f}, above {severity} threshold",
            )
        )

    fraction = metrics.mover_fraction
    if fraction > MOVERS_WARNING:
        critical = fraction > MOVERS_CRITICAL
        severity = "critical" if critical else "warning"
        alerts.append(
            DriftAlert(
                alert_type="movers",
                severity=severity,
                metric="mover_fraction",
                value=fraction,
                threshold=MOVERS_CRITICAL if critical else MOVERS_WARNING,
                message=(
                    f"{len(metrics.top_movers)} of {metrics.tracked_count} tracked players moved significantly "
                    f"({fraction * 100:.1f}%), above {severity} threshold"
                ),
            )
        )
    return alerts


def compute_drift(
    current: Sequence[SnapshotEntry],
    previous: Sequence[SnapshotEntry],
    *,
    timestamp: datetime | None = None,
) -> DriftMetrics:
    overall, by_position = correlation_metrics(current)
    movers, tracked = identify_movers(current, previous)
    return DriftMetrics(
        overall_rho=overall,
        position_rhos=by_position,
        js_divergence=js_divergence(current, previous),
        top_movers=movers,
        mover_fraction=(len(movers) / tracked) if tracked else 0.0,
        tracked_count=tracked,
        timestamp=timestamp or datetime.now(timezone.utc),
    )


class DriftMonitor:
    """Recomputes live valuations, compares them with history and records alerts.

    Alerts are only ever created here; resolving them is left to whoever
    reviews them (see ``ValuationStore.resolve_alert``).
    """

    def __init__(
        self,
        store: ValuationStore,
        registry: ParameterRegistry | None = None,
        *,
        period_days: int | None = None,
    ):
        self.store = store
        self.registry = registry or ParameterRegistry(store)
        days = period_days if period_days is not None else env_int(_PERIOD_ENV, _PERIOD_DEFAULT_DAYS, min_value=1)
        self.period = timedelta(days=days)

    def current_entries(self) -> Tuple[List[SnapshotEntry], List[Tuple[str, Valuation]], int]:
        active = self.registry.active()
        entries: List[SnapshotEntry] = []
        valuations: List[Tuple[str, Valuation]] = []
        for player in self.store.list_players():
            if player.market_value is None:
                continue
            valuation = valuate_player(player, parameters=active.parameters)
            valuations.append((player.player_id, valuation))
            entries.append(
                SnapshotEntry(
                    player_id=player.player_id,
                    player_name=player.name,
                    position=player.position.value,
                    market_value=float(player.market_value),
                    proj_now=player.proj_now,
                    proj_future=player.proj_future,
                    composite_value=valuation.composite_value,
                )
            )
        return entries, valuations, active.version

    def previous_snapshot(self, now: datetime) -> Optional[ValuationSnapshot]:
        previous = self.store.get_latest_snapshot(before=now - self.period)
        if previous is None:
            previous = self.store.get_latest_snapshot(before=now)
        return previous

    def check_drift(self, *, now: datetime | None = None) -> DriftReport:
        """Run one drift check; a failure leaves no snapshot, metrics or alerts behind."""

        now = now or datetime.now(timezone.utc)
        try:
            return self._check(now)
        except Exception:
            logger.exception("Drift check at %s failed", now.isoformat())
            raise

    def _check(self, now: datetime) -> DriftReport:
        previous_snapshot = self.previous_snapshot(now)
        entries, valuations, params_version = self.current_entries()
        previous_entries = (
            [SnapshotEntry(**entry) for entry in previous_snapshot.entries] if previous_snapshot else []
        )
        logger.info(
            "Drift check over %s players (previous snapshot: %s players)",
            len(entries),
            len(previous_entries),
        )

        metrics = compute_drift(entries, previous_entries, timestamp=now)
        alerts = evaluate_alerts(metrics)
        snapshot, record, alert_records = self.store.record_drift_check(
            entries=[asdict(entry) for entry in entries],
            params_version=params_version,
            metrics={
                "overall_rho": metrics.overall_rho,
                "position_rhos": metrics.position_rhos,
                "js_divergence": metrics.js_divergence,
                "mover_fraction": metrics.mover_fraction,
                "top_movers": [asdict(mover) for mover in metrics.top_movers],
            },
            alerts=[asdict(alert) for alert in alerts],
            previous_snapshot_id=previous_snapshot.snapshot_id if previous_snapshot else None,
            created_at=now,
        )
        self.store.upsert_valuations(valuations, fingerprint=BASELINE_FINGERPRINT, params_version=params_version)

        for alert in alerts:
            logger.warning("Drift alert (%s): %s", alert.severity, alert.message)
        logger.info(
            "Drift metrics: rho=%.3f js=%.3f movers=%.1f%% alerts=%s",
            metrics.overall_rho,
            metrics.js_divergence,
            metrics.mover_fraction * 100,
            len(alert_records),
        )
        return DriftReport(
            metrics=record,
            alerts=alert_records,
            snapshot_id=snapshot.snapshot_id,
            previous_snapshot_id=record.previous_snapshot_id,
        )
