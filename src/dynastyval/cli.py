"""Command-line interface for valuation, calibration and drift monitoring."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path

from dynastyval.calibration import CalibrationEngine, ParameterRegistry
from dynastyval.config import LeagueSettings, SettingsProfile
from dynastyval.drift import DriftMonitor
from dynastyval.ingest import DEFAULT_PLAYER_MAPPING, load_records_from_csv
from dynastyval.models import round_half_up
from dynastyval.persistence import ValuationStore
from dynastyval.valuation import pick_value, valuate_player


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dynasty fantasy football valuation core")
    parser.add_argument("--db", type=Path, default=None, help="SQLite store path (default: DYNASTYVAL_DB_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import-players", help="Load players from a CSV into the store")
    import_cmd.add_argument("csv", type=Path, help="Players CSV")
    import_cmd.add_argument(
        "--column",
        action="append",
        default=[],
        help="Mapping for CSV columns (e.g., name=First Name|Last Name)",
    )

    value_cmd = commands.add_parser("value", help="Value stored players")
    value_cmd.add_argument("player_ids", nargs="*", help="Player IDs (default: every stored player)")
    value_cmd.add_argument("--settings", type=Path, default=None, help="League settings profile JSON")
    value_cmd.add_argument("--limit", type=int, default=25, help="Maximum rows to print")

    pick_cmd = commands.add_parser("pick", help="Value a rookie draft pick")
    pick_cmd.add_argument("year", type=int)
    pick_cmd.add_argument("round", type=int)
    pick_cmd.add_argument("--baseline", type=float, default=None, help="Override the base pick value")

    calibrate_cmd = commands.add_parser("calibrate", help="Run a calibration against market values")
    calibrate_cmd.add_argument("--promote", action="store_true", help="Promote the result when it completes")
    calibrate_cmd.add_argument("--folds", type=int, default=None, help="Number of cross-validation folds")

    promote_cmd = commands.add_parser("promote", help="Promote a completed calibration run")
    promote_cmd.add_argument("run_id")

    rollback_cmd = commands.add_parser("rollback", help="Re-activate an earlier parameter version")
    rollback_cmd.add_argument("version", type=int)

    commands.add_parser("drift", help="Snapshot live valuations and check for drift")

    alerts_cmd = commands.add_parser("alerts", help="List drift alerts")
    alerts_cmd.add_argument("--unresolved", action="store_true", help="Only unresolved alerts")
    alerts_cmd.add_argument("--resolve", metavar="ALERT_ID", default=None, help="Resolve an alert and exit")

    serve_cmd = commands.add_parser("serve", help="Run the REST API")
    serve_cmd.add_argument("--host", default="127.0.0.1")
    serve_cmd.add_argument("--port", type=int, default=8000)
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _import_players(store: ValuationStore, args: argparse.Namespace) -> None:
    mapping = _parse_mapping(args.column) or None
    if mapping is not None:
        mapping = DEFAULT_PLAYER_MAPPING | mapping
    records, report = load_records_from_csv(args.csv, mapping=mapping)
    store.upsert_players(records)
    print(f"Imported {report.imported} of {report.total_rows} rows")
    if report.skipped_rows:
        print(f"Skipped: {', '.join(report.skipped_rows)}")
    if report.unknown_statuses:
        print(f"Unknown statuses (treated as neutral): {', '.join(report.unknown_statuses)}")


def _value_players(store: ValuationStore, args: argparse.Namespace) -> None:
    settings: LeagueSettings | None = None
    if args.settings:
        settings = SettingsProfile.load(args.settings).settings
    active = ParameterRegistry(store).active()
    if args.player_ids:
        players = []
        for player_id in args.player_ids:
            player = store.get_player(player_id)
            if player is None:
                raise SystemExit(f"player {player_id} not found")
            players.append(player)
    else:
        players = store.list_players()

    rows = []
    for player in players:
        valuation = valuate_player(player, settings=settings, parameters=active.parameters)
        rows.append((valuation.composite_value, player, valuation))
    rows.sort(key=lambda item: (-item[0], item[1].player_id))

    print(f"Parameter version {active.version}")
    for composite, player, valuation in rows[: args.limit]:
        print(
            f"{player.position.value:<3} {player.name:<28} now={valuation.display_now:>6} "
            f"future={valuation.display_future:>6} value={round_half_up(composite):>6}"
        )


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        import uvicorn

        from dynastyval.api import create_app

        uvicorn.run(create_app(ValuationStore(args.db)), host=args.host, port=args.port)
        return

    if args.command == "pick":
        value = pick_value(args.year, args.round, args.baseline)
        print(round_half_up(value))
        return

    store = ValuationStore(args.db)

    if args.command == "import-players":
        _import_players(store, args)
    elif args.command == "value":
        _value_players(store, args)
    elif args.command == "calibrate":
        engine = CalibrationEngine(store, folds=args.folds)
        run = engine.run_calibration(auto_promote=args.promote)
        _print_json(
            {
                "run_id": run.run_id,
                "status": run.status,
                "error": run.error,
                "metrics": {key: value for key, value in (run.metrics or {}).items() if key != "folds"},
            }
        )
        if run.status != "completed":
            raise SystemExit(1)
    elif args.command == "promote":
        registry = ParameterRegistry(store)
        try:
            active = registry.promote_run(args.run_id)
        except KeyError:
            raise SystemExit(f"run {args.run_id} not found") from None
        except ValueError as exc:
            raise SystemExit(str(exc)) from None
        print(f"Active parameter version {active.version}")
    elif args.command == "rollback":
        try:
            active = ParameterRegistry(store).rollback(args.version)
        except KeyError:
            raise SystemExit(f"parameter version {args.version} not found") from None
        print(f"Active parameter version {active.version}")
    elif args.command == "drift":
        report = DriftMonitor(store).check_drift()
        _print_json({"metrics": asdict(report.metrics), "alerts": [asdict(alert) for alert in report.alerts]})
    elif args.command == "alerts":
        if args.resolve:
            try:
                alert = store.resolve_alert(args.resolve)
            except KeyError:
                raise SystemExit(f"alert {args.resolve} not found") from None
            _print_json(asdict(alert))
            return
        _print_json([asdict(alert) for alert in store.list_drift_alerts(unresolved_only=args.unresolved)])


if __name__ == "__main__":  # pragma: no cover
    main()
