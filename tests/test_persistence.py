from datetime import datetime, timedelta, timezone

import pytest

from dynastyval.models import PlayerStatus, Position
from dynastyval.persistence import RunStateError, ValuationStore
from dynastyval.valuation import valuate_player


def test_store_uses_env_path(tmp_path, monkeypatch):
    target = tmp_path / "env.sqlite"
    monkeypatch.setenv("DYNASTYVAL_DB_PATH", str(target))
    ValuationStore()
    assert target.exists()


def test_players_round_trip(seeded_store, sample_players):
    players = seeded_store.list_players()
    assert len(players) == len(sample_players)

    stored = seeded_store.get_player(sample_players[4].player_id)
    assert stored == sample_players[4]
    assert stored.status == PlayerStatus.QUESTIONABLE
    assert seeded_store.get_player("missing") is None


def test_upsert_players_updates_in_place(seeded_store, sample_players):
    updated = sample_players[0].model_copy(update={"market_value": 1.0})
    seeded_store.upsert_players([updated])
    assert seeded_store.get_player(updated.player_id).market_value == 1.0
    assert len(seeded_store.list_players()) == len(sample_players)


def test_training_players_require_complete_inputs(store, sample_players):
    incomplete = sample_players[0].model_copy(update={"player_id": "x", "proj_future": None})
    store.upsert_players([sample_players[1], incomplete])
    assert [player.player_id for player in store.list_training_players()] == [sample_players[1].player_id]


def test_valuations_are_keyed_by_fingerprint(seeded_store, sample_players):
    player = sample_players[0]
    valuation = valuate_player(player)
    seeded_store.upsert_valuations([(player.player_id, valuation)], fingerprint="baseline", params_version=0)

    assert seeded_store.get_valuation(player.player_id, "baseline") == valuation
    assert seeded_store.get_valuation(player.player_id, "other") is None


_METRICS = {
    "overall_rho": 0.7,
    "position_rhos": {Position.QB.value: 0.7},
    "js_divergence": 0.0,
    "mover_fraction": 0.0,
    "top_movers": [],
}

_ALERT = {
    "alert_type": "correlation",
    "severity": "critical",
    "metric": "overall_rho",
    "value": 0.7,
    "threshold": 0.75,
    "message": "Overall correlation dropped",
    "position": None,
}


def test_latest_snapshot_respects_cutoff(store):
    start = datetime(2026, 9, 1, tzinfo=timezone.utc)
    first, _, _ = store.record_drift_check(
        entries=[{"player_id": "a"}], params_version=0, metrics=_METRICS, alerts=[], created_at=start
    )
    second, _, _ = store.record_drift_check(
        entries=[{"player_id": "b"}],
        params_version=0,
        metrics=_METRICS,
        alerts=[],
        previous_snapshot_id=first.snapshot_id,
        created_at=start + timedelta(days=8),
    )

    assert store.get_latest_snapshot().snapshot_id == second.snapshot_id
    assert store.get_latest_snapshot().entries == [{"player_id": "b"}]
    assert store.get_latest_snapshot(before=start + timedelta(days=1)).snapshot_id == first.snapshot_id
    assert store.get_latest_snapshot(before=start - timedelta(days=1)) is None
    assert store.list_drift_metrics()[0].previous_snapshot_id == first.snapshot_id


def test_drift_check_rolls_back_as_a_unit(store):
    with pytest.raises(TypeError):
        store.record_drift_check(
            entries=[{"player_id": "a"}],
            params_version=0,
            metrics=_METRICS,
            alerts=[_ALERT, {"alert_type": "movers"}],
        )
    assert store.get_latest_snapshot() is None
    assert store.list_drift_metrics() == []
    assert store.list_drift_alerts() == []


def test_parameter_versions_and_active_pointer(store):
    assert store.get_active_version() is None
    first = store.activate_parameters({"alpha": 0.5}, source_run_id="run-1")
    second = store.activate_parameters({"alpha": 0.55})

    assert second.version == first.version + 1
    assert store.get_active_version().version == second.version

    store.set_active_version(first.version)
    active = store.get_active_version()
    assert active.version == first.version
    assert active.parameters == {"alpha": 0.5}
    assert active.source_run_id == "run-1"
    assert len(store.list_parameter_versions()) == 2


def test_set_active_version_unknown_raises(store):
    with pytest.raises(KeyError):
        store.set_active_version(42)


def test_run_lifecycle_and_terminal_immutability(store):
    run = store.create_calibration_run(parameters={"alpha": 0.6})
    assert run.status == "pending"
    assert run.started_at is None

    running = store.update_calibration_run(run.run_id, status="running")
    assert running.started_at is not None

    completed = store.update_calibration_run(run.run_id, status="completed", metrics={"overall_rho": 0.9})
    assert completed.is_terminal
    assert completed.completed_at is not None
    assert completed.metrics == {"overall_rho": 0.9}

    with pytest.raises(RunStateError):
        store.update_calibration_run(run.run_id, status="running")
    with pytest.raises(RunStateError):
        store.update_calibration_run(run.run_id, status="failed", error="late")
    assert store.get_calibration_run(run.run_id).status == "completed"


def test_pending_run_cannot_complete_directly(store):
    run = store.create_calibration_run(parameters={})
    with pytest.raises(RunStateError):
        store.update_calibration_run(run.run_id, status="completed")


def test_update_unknown_run_raises(store):
    with pytest.raises(KeyError):
        store.update_calibration_run("missing", status="running")


def test_alerts_resolve_once(store):
    _, metrics, alerts = store.record_drift_check(
        entries=[], params_version=0, metrics=_METRICS, alerts=[_ALERT]
    )
    alert = alerts[0]
    assert alert.metrics_id == metrics.metrics_id
    assert [item.alert_id for item in store.list_drift_alerts(unresolved_only=True)] == [alert.alert_id]

    resolved = store.resolve_alert(alert.alert_id)
    again = store.resolve_alert(alert.alert_id)
    assert resolved.resolved
    assert again.resolved_at == resolved.resolved_at
    assert store.list_drift_alerts(unresolved_only=True) == []
    assert len(store.list_drift_alerts()) == 1


def test_resolve_unknown_alert_raises(store):
    with pytest.raises(KeyError):
        store.resolve_alert("missing")
