"""REST API for valuation previews and calibration/drift administration."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict
from datetime import date
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from dynastyval.api.schemas import (
    ActiveParametersResponse,
    CalibrationRunRequest,
    CalibrationRunResponse,
    DriftAlertResponse,
    DriftCheckResponse,
    DriftMetricsResponse,
    PickValueRequest,
    PickValueResponse,
    PlayerImportRequest,
    PlayerImportResponse,
    RollbackRequest,
    TradeAsset,
    TradeRequest,
    TradeResponse,
    ValuationRequest,
    ValuationResponse,
)
from dynastyval.calibration import ActiveParameters, CalibrationEngine, ParameterRegistry
from dynastyval.config import LeagueSettings
from dynastyval.drift import DriftMonitor
from dynastyval.models import PlayerRecord, round_half_up
from dynastyval.persistence import CalibrationRun, RunStateError, ValuationStore
from dynastyval.valuation import evaluate_trade, pick_value, valuate, valuate_player


logger = logging.getLogger(__name__)


def _run_to_response(run: CalibrationRun) -> CalibrationRunResponse:
    return CalibrationRunResponse.model_validate(asdict(run))


def _active_to_response(active: ActiveParameters) -> ActiveParametersResponse:
    return ActiveParametersResponse(
        version=active.version,
        source_run_id=active.source_run_id,
        parameters=active.parameters.model_dump(mode="json"),
    )


def _settings_or_none(raw: dict[str, Any] | None) -> LeagueSettings | None:
    if raw is None:
        return None
    return LeagueSettings.from_partial(raw)


def create_app(store: ValuationStore | None = None) -> FastAPI:
    app = FastAPI(title="dynastyval")
    store = store or ValuationStore()
    registry = ParameterRegistry(store)
    app.state.store = store
    app.state.registry = registry
    app.state.cancel_events = {}
    cancel_lock = threading.Lock()

    def _player_or_404(player_id: str) -> PlayerRecord:
        player = store.get_player(player_id)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return player

    def _fetch_run_or_404(run_id: str) -> CalibrationRun:
        run = store.get_calibration_run(run_id)
        if run is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return run

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/valuations/preview", response_model=ValuationResponse)
    async def preview_valuation(request: ValuationRequest):
        active = registry.refresh()
        settings = _settings_or_none(request.settings)
        if request.player_id is not None:
            player = _player_or_404(request.player_id)
            valuation = valuate_player(player, settings=settings, parameters=active.parameters)
        else:
            valuation = valuate(
                request.market_value,
                request.proj_now,
                request.proj_future,
                request.position,
                age=request.age,
                status=request.status,
                settings=settings,
                parameters=active.parameters,
            )
        return ValuationResponse(
            player_id=request.player_id,
            display_now=valuation.display_now,
            display_future=valuation.display_future,
            display_composite=valuation.display_composite,
            params_version=active.version,
            **valuation.model_dump(),
        )

    @app.post("/picks/value", response_model=PickValueResponse)
    async def value_pick(request: PickValueRequest):
        value = pick_value(
            request.year,
            request.round,
            request.baseline_value,
            current_year=request.current_year,
        )
        return PickValueResponse(
            year=request.year,
            round=request.round,
            value=value,
            display_value=round_half_up(value),
        )

    @app.post("/trades/evaluate", response_model=TradeResponse)
    async def evaluate(request: TradeRequest):
        active = registry.refresh()
        settings = _settings_or_none(request.settings)
        current_year = date.today().year

        def asset_value(asset: TradeAsset) -> float:
            if asset.player_id is not None:
                player = _player_or_404(asset.player_id)
                return valuate_player(player, settings=settings, parameters=active.parameters).composite_value
            if asset.pick is not None:
                return pick_value(
                    asset.pick.year,
                    asset.pick.round,
                    asset.pick.baseline_value,
                    current_year=asset.pick.current_year or current_year,
                )
            return float(asset.value or 0.0)

        result = evaluate_trade(
            [asset_value(asset) for asset in request.side_a],
            [asset_value(asset) for asset in request.side_b],
        )
        return TradeResponse(
            display_total_a=result.display_total_a,
            display_total_b=result.display_total_b,
            **asdict(result),
        )

    @app.post("/players", response_model=PlayerImportResponse)
    async def import_players(request: PlayerImportRequest):
        return PlayerImportResponse(imported=store.upsert_players(request.players))

    @app.post("/calibration/runs", response_model=CalibrationRunResponse)
    def start_calibration(request: CalibrationRunRequest | None = None):
        request = request or CalibrationRunRequest()
        run_id = uuid4().hex
        event = threading.Event()
        with cancel_lock:
            app.state.cancel_events[run_id] = event
        registry.refresh()
        try:
            engine = CalibrationEngine(store, registry)
            run = engine.run_calibration(cancel_event=event, auto_promote=request.auto_promote, run_id=run_id)
        finally:
            with cancel_lock:
                app.state.cancel_events.pop(run_id, None)
        return _run_to_response(run)

    @app.get("/calibration/runs", response_model=list[CalibrationRunResponse])
    async def list_runs(limit: int = 50):
        return [_run_to_response(run) for run in store.list_calibration_runs(limit=limit)]

    @app.get("/calibration/runs/{run_id}", response_model=CalibrationRunResponse)
    async def get_run(run_id: str):
        return _run_to_response(_fetch_run_or_404(run_id))

    @app.post("/calibration/runs/{run_id}/cancel", response_model=CalibrationRunResponse)
    async def cancel_run(run_id: str):
        run = _fetch_run_or_404(run_id)
        if run.is_terminal:
            return _run_to_response(run)
        with cancel_lock:
            event = app.state.cancel_events.get(run_id)
        if event is not None:
            logger.info("Cancellation requested for calibration run %s", run_id)
            event.set()
            return _run_to_response(_fetch_run_or_404(run_id))
        # No live worker owns this run; close it out directly.
        try:
            run = store.update_calibration_run(run_id, status="cancelled", error="Cancelled with no active worker")
        except RunStateError:
            run = _fetch_run_or_404(run_id)
        return _run_to_response(run)

    @app.post("/calibration/runs/{run_id}/promote", response_model=ActiveParametersResponse)
    async def promote_run(run_id: str):
        try:
            active = registry.promote_run(run_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Run not found") from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _active_to_response(active)

    @app.get("/config/active", response_model=ActiveParametersResponse)
    async def active_config():
        return _active_to_response(registry.refresh())

    @app.post("/config/rollback", response_model=ActiveParametersResponse)
    async def rollback(request: RollbackRequest):
        try:
            active = registry.rollback(request.version)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Parameter version not found") from exc
        return _active_to_response(active)

    @app.post("/drift/check", response_model=DriftCheckResponse)
    def check_drift():
        registry.refresh()
        report = DriftMonitor(store, registry).check_drift()
        return DriftCheckResponse(
            metrics=DriftMetricsResponse.model_validate(asdict(report.metrics)),
            alerts=[DriftAlertResponse.model_validate(asdict(alert)) for alert in report.alerts],
        )

    @app.get("/drift/metrics", response_model=list[DriftMetricsResponse])
    async def drift_metrics(limit: int = 20):
        return [DriftMetricsResponse.model_validate(asdict(record)) for record in store.list_drift_metrics(limit=limit)]

    @app.get("/drift/alerts", response_model=list[DriftAlertResponse])
    async def drift_alerts(unresolved_only: bool = False, limit: int = 100):
        return [
            DriftAlertResponse.model_validate(asdict(alert))
            for alert in store.list_drift_alerts(unresolved_only=unresolved_only, limit=limit)
        ]

    @app.post("/drift/alerts/{alert_id}/resolve", response_model=DriftAlertResponse)
    async def resolve_alert(alert_id: str):
        try:
            alert = store.resolve_alert(alert_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Alert not found") from exc
        return DriftAlertResponse.model_validate(asdict(alert))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app

