from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from dynastyval.api import create_app
from dynastyval.calibration import ParameterRegistry
from dynastyval.config import DEFAULT_PARAMETERS


@pytest.fixture
async def client(store):
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _players_payload(sample_players) -> dict:
    return {"players": [player.model_dump(mode="json") for player in sample_players]}


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_preview_inline_valuation(client):
    resp = await client.post(
        "/valuations/preview",
        json={"position": "RB", "market_value": 1000, "proj_now": 800, "proj_future": 600, "age": 25},
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["display_composite"] == 856
    assert payload["composite_value"] == pytest.approx(856)
    assert payload["fingerprint"] == "baseline"
    assert payload["params_version"] == 0


async def test_preview_with_settings_uses_fingerprint(client):
    body = {"position": "QB", "market_value": 5000, "proj_now": 300, "proj_future": 280, "age": 27}
    plain = (await client.post("/valuations/preview", json={**body, "settings": {}})).json()
    superflex = (await client.post("/valuations/preview", json={**body, "settings": {"superflex": True}})).json()

    assert superflex["composite_value"] > plain["composite_value"]
    assert superflex["fingerprint"] != plain["fingerprint"]
    assert superflex["settings_adjustments"]["qb_multiplier"] == pytest.approx(1.3)


async def test_preview_unknown_player_is_404(client):
    resp = await client.post("/valuations/preview", json={"player_id": "missing"})
    assert resp.status_code == 404


async def test_preview_requires_player_or_position(client):
    resp = await client.post("/valuations/preview", json={"market_value": 10})
    assert resp.status_code == 422


async def test_pick_value(client):
    resp = await client.post("/picks/value", json={"year": date.today().year, "round": 1})
    assert resp.status_code == 200
    assert resp.json()["display_value"] == 1000

    resp = await client.post("/picks/value", json={"year": 2030, "round": 0})
    assert resp.status_code == 422


async def test_trade_evaluation_mixes_players_picks_and_values(client, sample_players):
    await client.post("/players", json=_players_payload(sample_players[:2]))
    resp = await client.post(
        "/trades/evaluate",
        json={
            "side_a": [{"player_id": sample_players[0].player_id}],
            "side_b": [{"pick": {"year": 2026, "round": 1, "current_year": 2026}}, {"value": 250}],
        },
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["total_b"] == pytest.approx(1250)
    assert payload["verdict"] == "FAVORS_A"


async def test_trade_asset_needs_one_source(client):
    resp = await client.post("/trades/evaluate", json={"side_a": [{}], "side_b": []})
    assert resp.status_code == 422


async def test_calibration_promotion_and_rollback_flow(client, sample_players):
    resp = await client.post("/players", json=_players_payload(sample_players))
    assert resp.json() == {"imported": len(sample_players)}

    resp = await client.post("/calibration/runs", json={})
    assert resp.status_code == 200
    run = resp.json()
    assert run["status"] == "completed"

    listed = (await client.get("/calibration/runs")).json()
    assert [item["run_id"] for item in listed] == [run["run_id"]]
    assert (await client.get(f"/calibration/runs/{run['run_id']}")).json()["status"] == "completed"

    cancel = await client.post(f"/calibration/runs/{run['run_id']}/cancel")
    assert cancel.json()["status"] == "completed"

    assert (await client.get("/config/active")).json()["version"] == 0
    promoted = await client.post(f"/calibration/runs/{run['run_id']}/promote")
    assert promoted.status_code == 200
    assert promoted.json()["version"] == 1
    assert promoted.json()["source_run_id"] == run["run_id"]

    second = await client.post(f"/calibration/runs/{run['run_id']}/promote")
    assert second.json()["version"] == 2

    rollback = await client.post("/config/rollback", json={"version": 1})
    assert rollback.status_code == 200
    assert (await client.get("/config/active")).json()["version"] == 1

    missing = await client.post("/config/rollback", json={"version": 99})
    assert missing.status_code == 404


async def test_failed_run_cannot_be_promoted(client):
    run = (await client.post("/calibration/runs", json={})).json()
    assert run["status"] == "failed"

    resp = await client.post(f"/calibration/runs/{run['run_id']}/promote")
    assert resp.status_code == 400
    assert (await client.post("/calibration/runs/missing/promote")).status_code == 404
    assert (await client.get("/calibration/runs/missing")).status_code == 404


async def test_cancel_orphaned_pending_run(client):
    store = client.app.state.store
    run = store.create_calibration_run(parameters={})

    resp = await client.post(f"/calibration/runs/{run.run_id}/cancel")
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"


async def test_drift_check_and_alert_resolution(client):
    players = [
        {
            "player_id": f"wr{i:02d}",
            "name": f"Receiver {i}",
            "position": "WR",
            "age": 25,
            "market_value": 10 + i,
            "proj_now": 10000 - i * 500,
            "proj_future": 10000 - i * 500,
        }
        for i in range(10)
    ]
    await client.post("/players", json={"players": players})

    resp = await client.post("/drift/check")
    assert resp.status_code == 200
    report = resp.json()
    assert report["metrics"]["overall_rho"] == pytest.approx(-1.0)
    assert report["alerts"]

    assert len((await client.get("/drift/metrics")).json()) == 1
    alert_id = report["alerts"][0]["alert_id"]
    resolved = await client.post(f"/drift/alerts/{alert_id}/resolve")
    assert resolved.json()["resolved"] is True

    open_alerts = (await client.get("/drift/alerts", params={"unresolved_only": True})).json()
    assert alert_id not in {alert["alert_id"] for alert in open_alerts}
    assert (await client.post("/drift/alerts/missing/resolve")).status_code == 404


async def test_preview_picks_up_promotion_from_another_process(client, store):
    await client.get("/config/active")
    ParameterRegistry(store).promote(DEFAULT_PARAMETERS.with_updates(alpha=0.5))

    resp = await client.post(
        "/valuations/preview",
        json={"position": "RB", "market_value": 1000, "proj_now": 800, "proj_future": 600, "age": 25},
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["params_version"] == 1
    assert payload["composite_value"] == pytest.approx(0.5 * 920 + 0.5 * 760)
