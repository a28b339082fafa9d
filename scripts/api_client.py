"""Lightweight REST client for the dynastyval admin API."""

from __future__ import annotations

import argparse
import json

import httpx


def _show(resp: httpx.Response, *, missing: str) -> None:
    if resp.status_code == 404:
        raise SystemExit(missing)
    resp.raise_for_status()
    print(json.dumps(resp.json(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the dynastyval REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--calibrate", action="store_true", help="Start a calibration run and wait for it")
    parser.add_argument("--auto-promote", action="store_true", help="Promote the calibration result if it completes")
    parser.add_argument("--list-runs", action="store_true", help="List recent calibration runs")
    parser.add_argument("--get-run", metavar="RUN_ID", help="Fetch a specific calibration run")
    parser.add_argument("--cancel-run", metavar="RUN_ID", help="Request cancellation of a run")
    parser.add_argument("--promote", metavar="RUN_ID", help="Promote a completed run")
    parser.add_argument("--rollback", metavar="VERSION", type=int, help="Re-activate a parameter version")
    parser.add_argument("--active", action="store_true", help="Show the active parameter set")
    parser.add_argument("--drift", action="store_true", help="Run a drift check")
    parser.add_argument("--alerts", action="store_true", help="List unresolved drift alerts")
    parser.add_argument("--resolve", metavar="ALERT_ID", help="Resolve a drift alert")
    parser.add_argument("--timeout", type=float, default=300.0, help="Request timeout in seconds")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        if args.calibrate:
            resp = client.post("/calibration/runs", json={"auto_promote": args.auto_promote})
            resp.raise_for_status()
            run = resp.json()
            print(f"Run {run['run_id']} finished as {run['status']}")
            if run.get("error"):
                print(f"Error: {run['error']}")
            if run.get("metrics"):
                summary = {key: value for key, value in run["metrics"].items() if key != "folds"}
                print(json.dumps(summary, indent=2))
        if args.list_runs:
            _show(client.get("/calibration/runs"), missing="no runs")
        if args.get_run:
            _show(client.get(f"/calibration/runs/{args.get_run}"), missing=f"run {args.get_run} not found")
        if args.cancel_run:
            _show(client.post(f"/calibration/runs/{args.cancel_run}/cancel"), missing=f"run {args.cancel_run} not found")
        if args.promote:
            _show(client.post(f"/calibration/runs/{args.promote}/promote"), missing=f"run {args.promote} not found")
        if args.rollback is not None:
            _show(
                client.post("/config/rollback", json={"version": args.rollback}),
                missing=f"version {args.rollback} not found",
            )
        if args.active:
            _show(client.get("/config/active"), missing="no active configuration")
        if args.drift:
            _show(client.post("/drift/check"), missing="drift endpoint unavailable")
        if args.alerts:
            _show(client.get("/drift/alerts", params={"unresolved_only": True}), missing="no alerts")
        if args.resolve:
            _show(client.post(f"/drift/alerts/{args.resolve}/resolve"), missing=f"alert {args.resolve} not found")


if __name__ == "__main__":
    main()
