"""Persistence layer for player inputs, valuations, calibration runs and drift history."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
from uuid import uuid4

from dynastyval.models import PlayerRecord, PlayerStatus, Position, Valuation


RUN_STATES = {"pending", "running", "completed", "failed", "cancelled"}
TERMINAL_RUN_STATES = {"completed", "failed", "cancelled"}

_RUN_TRANSITIONS = {
    "pending": {"running", "failed", "cancelled"},
    "running": {"completed", "failed", "cancelled"},
}


class RunStateError(ValueError):
    """Raised when a calibration run is moved through an illegal transition."""


@dataclass
class CalibrationRun:
    run_id: str
    status: str
    parameters: dict
    metrics: Optional[dict]
    rank_shifts: List[dict]
    error: Optional[str]
    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_RUN_STATES


@dataclass
class ParameterVersion:
    version: int
    created_at: datetime
    source_run_id: Optional[str]
    parameters: dict


@dataclass
class ValuationSnapshot:
    snapshot_id: str
    created_at: datetime
    params_version: int
    entries: List[dict]


@dataclass
class DriftMetricsRecord:
    metrics_id: str
    created_at: datetime
    overall_rho: float
    position_rhos: dict
    js_divergence: float
    mover_fraction: float
    top_movers: List[dict]
    params_version: int
    snapshot_id: Optional[str]
    previous_snapshot_id: Optional[str]


@dataclass
class DriftAlertRecord:
    alert_id: str
    metrics_id: str
    created_at: datetime
    alert_type: str
    severity: str
    metric: str
    value: float
    threshold: float
    position: Optional[str]
    message: str
    resolved: bool
    resolved_at: Optional[datetime]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class ValuationStore:
    """SQLite-backed store for the valuation core.

    Calibration runs, snapshots, drift metrics and alerts are append-only;
    only a run's status fields and an alert's resolution flag change after
    insert. The active parameter set is a single-row pointer into the
    immutable ``parameter_versions`` table.
    """

    def __init__(self, db_path: Path | str | None = None):
        self._use_uri = False
        env_db = os.getenv("DYNASTYVAL_DB_PATH")
        if db_path is not None:
            if isinstance(db_path, str) and db_path.startswith("file:"):
                self.db_path: Path | str = db_path
                self._use_uri = True
            else:
                self.db_path = Path(db_path)
        elif env_db:
            if env_db.startswith("file:"):
                self.db_path = env_db
                self._use_uri = True
            else:
                self.db_path = Path(env_db)
        else:
            self.db_path = Path.cwd() / "dynastyval.sqlite"
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "dynastyval-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "dynastyval.sqlite"
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS players (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                position TEXT NOT NULL,
                age INTEGER,
                status TEXT,
                team TEXT,
                market_value REAL,
                proj_now REAL,
                proj_future REAL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS valuations (
                player_id TEXT NOT NULL,
                fingerprint TEXT NOT NULL,
                params_version INTEGER NOT NULL,
                now_score REAL NOT NULL,
                future_score REAL NOT NULL,
                composite_value REAL NOT NULL,
                valuation_json TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (player_id, fingerprint)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS valuation_snapshots (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                params_version INTEGER NOT NULL,
                entries_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS parameter_versions (
                version INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                source_run_id TEXT,
                parameters_json TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS active_parameters (
                slot INTEGER PRIMARY KEY CHECK (slot = 1),
                version INTEGER NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS calibration_runs (
                id TEXT PRIMARY KEY,
                status TEXT NOT NULL,
                parameters_json TEXT NOT NULL,
                metrics_json TEXT,
                rank_shifts_json TEXT,
                error TEXT,
                created_at TEXT NOT NULL,
                started_at TEXT,
                completed_at TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS drift_metrics (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                overall_rho REAL NOT NULL,
                position_rhos_json TEXT NOT NULL,
                js_divergence REAL NOT NULL,
                mover_fraction REAL NOT NULL,
                top_movers_json TEXT NOT NULL,
                params_version INTEGER NOT NULL,
                snapshot_id TEXT,
                previous_snapshot_id TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS drift_alerts (
                id TEXT PRIMARY KEY,
                metrics_id TEXT NOT NULL,
                created_at TEXT NOT NULL,
                type TEXT NOT NULL,
                severity TEXT NOT NULL,
                metric TEXT NOT NULL,
                value REAL NOT NULL,
                threshold REAL NOT NULL,
                position TEXT,
                message TEXT NOT NULL,
                resolved INTEGER NOT NULL DEFAULT 0,
                resolved_at TEXT
            )
            """
        )
        conn.commit()

    # Players -----------------------------------------------------------------

    def upsert_players(self, players: Iterable[PlayerRecord]) -> int:
        now_iso = _now().isoformat()
        rows = [
            (
                player.player_id,
                player.name,
                player.position.value,
                player.age,
                player.status.value if player.status is not None else None,
                player.team,
                player.market_value,
                player.proj_now,
                player.proj_future,
                now_iso,
            )
            for player in players
        ]
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO players (
                    id, name, position, age, status, team,
                    market_value, proj_now, proj_future, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    position = excluded.position,
                    age = excluded.age,
                    status = excluded.status,
                    team = excluded.team,
                    market_value = excluded.market_value,
                    proj_now = excluded.proj_now,
                    proj_future = excluded.proj_future,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
            conn.commit()
        return len(rows)

    def get_player(self, player_id: str) -> Optional[PlayerRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM players WHERE id = ?", (player_id,)).fetchone()
        return self._row_to_player(row) if row is not None else None

    def list_players(self) -> List[PlayerRecord]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM players ORDER BY id").fetchall()
        return [self._row_to_player(row) for row in rows]

    def list_training_players(self) -> List[PlayerRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM players
                WHERE market_value IS NOT NULL
                  AND proj_now IS NOT NULL
                  AND proj_future IS NOT NULL
                ORDER BY id
                """
            ).fetchall()
        return [self._row_to_player(row) for row in rows]

    # Valuations --------------------------------------------------------------

    def upsert_valuations(
        self,
        valuations: Iterable[tuple[str, Valuation]],
        *,
        fingerprint: str,
        params_version: int,
    ) -> int:
        now_iso = _now().isoformat()
        rows = [
            (
                player_id,
                fingerprint,
                params_version,
                valuation.now_score,
                valuation.future_score,
                valuation.composite_value,
                valuation.model_dump_json(),
                now_iso,
            )
            for player_id, valuation in valuations
        ]
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO valuations (
                    player_id, fingerprint, params_version, now_score,
                    future_score, composite_value, valuation_json, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(player_id, fingerprint) DO UPDATE SET
                    params_version = excluded.params_version,
                    now_score = excluded.now_score,
                    future_score = excluded.future_score,
                    composite_value = excluded.composite_value,
                    valuation_json = excluded.valuation_json,
                    updated_at = excluded.updated_at
                """,
                rows,
            )
            conn.commit()
        return len(rows)

    def get_valuation(self, player_id: str, fingerprint: str) -> Optional[Valuation]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT valuation_json FROM valuations WHERE player_id = ? AND fingerprint = ?",
                (player_id, fingerprint),
            ).fetchone()
        if row is None:
            return None
        return Valuation.model_validate_json(row["valuation_json"])

    # Snapshots ---------------------------------------------------------------

    def _insert_snapshot(
        self,
        conn: sqlite3.Connection,
        entries: Iterable[dict],
        params_version: int,
        created_at: datetime,
    ) -> ValuationSnapshot:
        snapshot_id = uuid4().hex
        entries_list = list(entries)
        conn.execute(
            """
            INSERT INTO valuation_snapshots (id, created_at, params_version, entries_json)
            VALUES (?, ?, ?, ?)
            """,
            (snapshot_id, created_at.isoformat(), params_version, json.dumps(entries_list)),
        )
        return ValuationSnapshot(
            snapshot_id=snapshot_id,
            created_at=created_at,
            params_version=params_version,
            entries=entries_list,
        )

    def get_latest_snapshot(self, *, before: Optional[datetime] = None) -> Optional[ValuationSnapshot]:
        query = "SELECT * FROM valuation_snapshots"
        params: list[str] = []
        if before is not None:
            query += " WHERE julianday(created_at) <= julianday(?)"
            params.append(before.isoformat())
        query += " ORDER BY julianday(created_at) DESC, rowid DESC LIMIT 1"
        with self._connect() as conn:
            row = conn.execute(query, tuple(params)).fetchone()
        return self._row_to_snapshot(row) if row is not None else None

    # Parameter versions --------------------------------------------------------

    def activate_parameters(self, parameters: dict, *, source_run_id: Optional[str] = None) -> ParameterVersion:
        """Insert a new immutable parameter version and point the active slot at it."""

        now_iso = _now().isoformat()
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO parameter_versions (created_at, source_run_id, parameters_json)
                VALUES (?, ?, ?)
                """,
                (now_iso, source_run_id, json.dumps(parameters)),
            )
            version = int(cursor.lastrowid)
            self._point_active(conn, version, now_iso)
            conn.commit()
        created = self.get_parameter_version(version)
        if created is None:  # pragma: no cover
            raise KeyError(f"Parameter version {version} not found after insert")
        return created

    def set_active_version(self, version: int) -> ParameterVersion:
        target = self.get_parameter_version(version)
        if target is None:
            raise KeyError(f"Parameter version {version} not found")
        with self._connect() as conn:
            self._point_active(conn, version, _now().isoformat())
            conn.commit()
        return target

    def _point_active(self, conn: sqlite3.Connection, version: int, now_iso: str) -> None:
        conn.execute(
            """
            INSERT INTO active_parameters (slot, version, updated_at) VALUES (1, ?, ?)
            ON CONFLICT(slot) DO UPDATE SET version = excluded.version, updated_at = excluded.updated_at
            """,
            (version, now_iso),
        )

    def get_active_version(self) -> Optional[ParameterVersion]:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT pv.* FROM active_parameters ap
                JOIN parameter_versions pv ON pv.version = ap.version
                WHERE ap.slot = 1
                """
            ).fetchone()
        return self._row_to_version(row) if row is not None else None

    def get_parameter_version(self, version: int) -> Optional[ParameterVersion]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM parameter_versions WHERE version = ?", (version,)
            ).fetchone()
        return self._row_to_version(row) if row is not None else None

    def list_parameter_versions(self, limit: int = 50) -> List[ParameterVersion]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM parameter_versions ORDER BY version DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_version(row) for row in rows]

    # Calibration runs ------------------------------------------------------------

    def create_calibration_run(self, *, parameters: dict, run_id: Optional[str] = None) -> CalibrationRun:
        run_id = run_id or uuid4().hex
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO calibration_runs (id, status, parameters_json, created_at)
                VALUES (?, 'pending', ?, ?)
                """,
                (run_id, json.dumps(parameters), _now().isoformat()),
            )
            conn.commit()
        run = self.get_calibration_run(run_id)
        if run is None:  # pragma: no cover
            raise KeyError(f"Calibration run {run_id} not found after insert")
        return run

    def update_calibration_run(
        self,
        run_id: str,
        *,
        status: str,
        parameters: Optional[dict] = None,
        metrics: Optional[dict] = None,
        rank_shifts: Optional[List[dict]] = None,
        error: Optional[str] = None,
    ) -> CalibrationRun:
        if status not in RUN_STATES:
            raise RunStateError(f"Unknown run status {status!r}")
        existing = self.get_calibration_run(run_id)
        if existing is None:
            raise KeyError(f"Calibration run {run_id} not found")
        allowed = _RUN_TRANSITIONS.get(existing.status, set())
        if status not in allowed:
            raise RunStateError(
                f"Calibration run {run_id} cannot move from {existing.status} to {status}"
            )

        now_iso = _now().isoformat()
        started_at = existing.started_at.isoformat() if existing.started_at else None
        completed_at = None
        if status == "running":
            started_at = now_iso
        if status in TERMINAL_RUN_STATES:
            completed_at = now_iso
        updated_parameters = parameters if parameters is not None else existing.parameters
        updated_metrics = metrics if metrics is not None else existing.metrics
        updated_shifts = rank_shifts if rank_shifts is not None else existing.rank_shifts

        with self._connect() as conn:
            cursor = conn.execute(
                """
                UPDATE calibration_runs
                SET status = ?, parameters_json = ?, metrics_json = ?, rank_shifts_json = ?,
                    error = ?, started_at = ?, completed_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    status,
                    json.dumps(updated_parameters),
                    json.dumps(updated_metrics) if updated_metrics is not None else None,
                    json.dumps(updated_shifts),
                    error if error is not None else existing.error,
                    started_at,
                    completed_at,
                    run_id,
                    existing.status,
                ),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise RunStateError(f"Calibration run {run_id} changed state concurrently")
        updated = self.get_calibration_run(run_id)
        if updated is None:  # pragma: no cover
            raise KeyError(f"Calibration run {run_id} not found after update")
        return updated

    def get_calibration_run(self, run_id: str) -> Optional[CalibrationRun]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM calibration_runs WHERE id = ?", (run_id,)).fetchone()
        return self._row_to_run(row) if row is not None else None

    def list_calibration_runs(self, limit: int = 50) -> List[CalibrationRun]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM calibration_runs ORDER BY julianday(created_at) DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_run(row) for row in rows]

    # Drift ---------------------------------------------------------------------

    def _insert_drift_metrics(
        self,
        conn: sqlite3.Connection,
        *,
        overall_rho: float,
        position_rhos: dict,
        js_divergence: float,
        mover_fraction: float,
        top_movers: Iterable[dict],
        params_version: int,
        snapshot_id: Optional[str],
        previous_snapshot_id: Optional[str],
        created_at: datetime,
    ) -> DriftMetricsRecord:
        metrics_id = uuid4().hex
        movers = list(top_movers)
        conn.execute(
            """
            INSERT INTO drift_metrics (
                id, created_at, overall_rho, position_rhos_json, js_divergence,
                mover_fraction, top_movers_json, params_version, snapshot_id,
                previous_snapshot_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                metrics_id,
                created_at.isoformat(),
                overall_rho,
                json.dumps(position_rhos),
                js_divergence,
                mover_fraction,
                json.dumps(movers),
                params_version,
                snapshot_id,
                previous_snapshot_id,
            ),
        )
        return DriftMetricsRecord(
            metrics_id=metrics_id,
            created_at=created_at,
            overall_rho=overall_rho,
            position_rhos=dict(position_rhos),
            js_divergence=js_divergence,
            mover_fraction=mover_fraction,
            top_movers=movers,
            params_version=params_version,
            snapshot_id=snapshot_id,
            previous_snapshot_id=previous_snapshot_id,
        )

    def record_drift_check(
        self,
        *,
        entries: Iterable[dict],
        params_version: int,
        metrics: dict,
        alerts: Iterable[dict],
        previous_snapshot_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Tuple[ValuationSnapshot, DriftMetricsRecord, List[DriftAlertRecord]]:
        """Store a drift check's snapshot, metrics and alerts in one transaction.

        Nothing is written unless every row is; a failure rolls the whole check back.
        """

        created_at = created_at or _now()
        with self._connect() as conn:
            snapshot = self._insert_snapshot(conn, entries, params_version, created_at)
            record = self._insert_drift_metrics(
                conn,
                params_version=params_version,
                snapshot_id=snapshot.snapshot_id,
                previous_snapshot_id=previous_snapshot_id,
                created_at=created_at,
                **metrics,
            )
            alert_records = [
                self._insert_drift_alert(conn, metrics_id=record.metrics_id, created_at=created_at, **alert)
                for alert in alerts
            ]
            conn.commit()
        return snapshot, record, alert_records

    def list_drift_metrics(self, limit: int = 20) -> List[DriftMetricsRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM drift_metrics ORDER BY julianday(created_at) DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._row_to_metrics(row) for row in rows]

    def _insert_drift_alert(
        self,
        conn: sqlite3.Connection,
        *,
        metrics_id: str,
        alert_type: str,
        severity: str,
        metric: str,
        value: float,
        threshold: float,
        message: str,
        position: Optional[str],
        created_at: datetime,
    ) -> DriftAlertRecord:
        alert_id = uuid4().hex
        conn.execute(
            """
            INSERT INTO drift_alerts (
                id, metrics_id, created_at, type, severity, metric,
                value, threshold, position, message, resolved, resolved_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, NULL)
            """,
            (
                alert_id,
                metrics_id,
                created_at.isoformat(),
                alert_type,
                severity,
                metric,
                value,
                threshold,
                position,
                message,
            ),
        )
        return DriftAlertRecord(
            alert_id=alert_id,
            metrics_id=metrics_id,
            created_at=created_at,
            alert_type=alert_type,
            severity=severity,
            metric=metric,
            value=value,
            threshold=threshold,
            position=position,
            message=message,
            resolved=False,
            resolved_at=None,
        )

    def list_drift_alerts(self, *, unresolved_only: bool = False, limit: int = 100) -> List[DriftAlertRecord]:
        query = "SELECT * FROM drift_alerts"
        if unresolved_only:
            query += " WHERE resolved = 0"
        query += " ORDER BY julianday(created_at) DESC, rowid DESC LIMIT ?"
        with self._connect() as conn:
            rows = conn.execute(query, (limit,)).fetchall()
        return [self._row_to_alert(row) for row in rows]

    def resolve_alert(self, alert_id: str) -> DriftAlertRecord:
        """Mark an alert resolved; resolving twice keeps the first timestamp."""

        with self._connect() as conn:
            conn.execute(
                "UPDATE drift_alerts SET resolved = 1, resolved_at = ? WHERE id = ? AND resolved = 0",
                (_now().isoformat(), alert_id),
            )
            conn.commit()
            row = conn.execute("SELECT * FROM drift_alerts WHERE id = ?", (alert_id,)).fetchone()
        if row is None:
            raise KeyError(f"Alert {alert_id} not found")
        return self._row_to_alert(row)

    # Row mappers -----------------------------------------------------------------

    def _row_to_player(self, row: sqlite3.Row) -> PlayerRecord:
        status = PlayerStatus.parse(row["status"]) if row["status"] else None
        return PlayerRecord(
            player_id=row["id"],
            name=row["name"],
            position=Position(row["position"]),
            age=row["age"],
            status=status,
            team=row["team"],
            market_value=row["market_value"],
            proj_now=row["proj_now"],
            proj_future=row["proj_future"],
        )

    def _row_to_snapshot(self, row: sqlite3.Row) -> ValuationSnapshot:
        return ValuationSnapshot(
            snapshot_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            params_version=row["params_version"],
            entries=json.loads(row["entries_json"]),
        )

    def _row_to_version(self, row: sqlite3.Row) -> ParameterVersion:
        return ParameterVersion(
            version=row["version"],
            created_at=datetime.fromisoformat(row["created_at"]),
            source_run_id=row["source_run_id"],
            parameters=json.loads(row["parameters_json"]),
        )

    def _row_to_run(self, row: sqlite3.Row) -> CalibrationRun:
        return CalibrationRun(
            run_id=row["id"],
            status=row["status"],
            parameters=json.loads(row["parameters_json"]),
            metrics=json.loads(row["metrics_json"]) if row["metrics_json"] else None,
            rank_shifts=json.loads(row["rank_shifts_json"]) if row["rank_shifts_json"] else [],
            error=row["error"],
            created_at=datetime.fromisoformat(row["created_at"]),
            started_at=_parse_ts(row["started_at"]),
            completed_at=_parse_ts(row["completed_at"]),
        )

    def _row_to_metrics(self, row: sqlite3.Row) -> DriftMetricsRecord:
        return DriftMetricsRecord(
            metrics_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            overall_rho=row["overall_rho"],
            position_rhos=json.loads(row["position_rhos_json"]),
            js_divergence=row["js_divergence"],
            mover_fraction=row["mover_fraction"],
            top_movers=json.loads(row["top_movers_json"]),
            params_version=row["params_version"],
            snapshot_id=row["snapshot_id"],
            previous_snapshot_id=row["previous_snapshot_id"],
        )

    def _row_to_alert(self, row: sqlite3.Row) -> DriftAlertRecord:
        return DriftAlertRecord(
            alert_id=row["id"],
            metrics_id=row["metrics_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            alert_type=row["type"],
            severity=row["severity"],
            metric=row["metric"],
            value=row["value"],
            threshold=row["threshold"],
            position=row["position"],
            message=row["message"],
            resolved=bool(row["resolved"]),
            resolved_at=_parse_ts(row["resolved_at"]),
        )
