"""Helpers to load player CSVs (market values, projections) into canonical records."""

from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from dynastyval.models import PlayerRecord, PlayerStatus, Position


logger = logging.getLogger(__name__)


class PlayerRow(BaseModel):
    raw_id: Optional[str] = None
    raw_name: str
    raw_position: Optional[str] = None
    raw_team: Optional[str] = None
    raw_age: Optional[str] = None
    raw_status: Optional[str] = None
    raw_market_value: Optional[str] = None
    raw_proj_now: Optional[str] = None
    raw_proj_future: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "PlayerRow":
        def extract(spec: Optional[str | Sequence[str]], *, default: Optional[str] = None) -> Optional[str]:
            if spec is None:
                return default
            if isinstance(spec, str):
                value = row.get(spec)
                return value.strip() if value is not None else default
            parts = [row.get(col, "").strip() for col in spec if row.get(col)]
            return " ".join(parts) if parts else default

        def parse_spec(key: str) -> Optional[str | Sequence[str]]:
            spec = mapping.get(key)
            if isinstance(spec, str) and "|" in spec:
                return tuple(part.strip() for part in spec.split("|"))
            return spec

        return cls(
            raw_id=extract(parse_spec("player_id")),
            raw_name=extract(parse_spec("name"), default="") or "",
            raw_position=extract(parse_spec("position")),
            raw_team=extract(parse_spec("team")),
            raw_age=extract(parse_spec("age")),
            raw_status=extract(parse_spec("status")),
            raw_market_value=extract(parse_spec("market_value")),
            raw_proj_now=extract(parse_spec("proj_now")),
            raw_proj_future=extract(parse_spec("proj_future")),
        )


DEFAULT_PLAYER_MAPPING = {
    "player_id": "player_id",
    "name": "name",
    "position": "position",
    "team": "team",
    "age": "age",
    "status": "status",
    "market_value": "market_value",
    "proj_now": "proj_now",
    "proj_future": "proj_future",
}


@dataclass(frozen=True)
class ImportReport:
    total_rows: int
    imported: int
    skipped_rows: List[str] = field(default_factory=list)
    unknown_statuses: List[str] = field(default_factory=list)


def load_player_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[PlayerRow]:
    mapping = mapping or DEFAULT_PLAYER_MAPPING
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        rows = [PlayerRow.from_mapping(row, mapping) for row in reader]
    return rows


def _parse_number(raw: Optional[str], label: str) -> float | None:
    if raw is None:
        return None
    text = re.sub(r"[,$\s]", "", raw)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"{label} '{raw}' is not numeric") from None


def _parse_age(raw: Optional[str]) -> int | None:
    value = _parse_number(raw, "age")
    if value is None:
        return None
    return max(0, int(value))


def _player_id(row: PlayerRow) -> str:
    if row.raw_id:
        return row.raw_id
    return re.sub(r"[^a-z0-9]+", "-", row.raw_name.lower()).strip("-")


def rows_to_records(rows: Sequence[PlayerRow]) -> Tuple[List[PlayerRecord], ImportReport]:
    records: List[PlayerRecord] = []
    skipped: List[str] = []
    unknown_statuses: List[str] = []
    for row in rows:
        label = row.raw_name or row.raw_id or "<blank>"
        position = Position.parse(row.raw_position)
        if position is None or not row.raw_name:
            logger.debug("Skipping %s: unsupported position %r", label, row.raw_position)
            skipped.append(label)
            continue

        status: PlayerStatus | None = PlayerStatus.ACTIVE
        if row.raw_status:
            status = PlayerStatus.parse(row.raw_status)
            if status is None:
                unknown_statuses.append(f"{label}: {row.raw_status}")

        try:
            record = PlayerRecord(
                player_id=_player_id(row),
                name=row.raw_name,
                position=position,
                age=_parse_age(row.raw_age),
                status=status,
                team=row.raw_team.upper() if row.raw_team else None,
                market_value=_parse_number(row.raw_market_value, "market_value"),
                proj_now=_parse_number(row.raw_proj_now, "proj_now"),
                proj_future=_parse_number(row.raw_proj_future, "proj_future"),
            )
        except ValueError as exc:
            logger.warning("Skipping %s: %s", label, exc)
            skipped.append(label)
            continue
        records.append(record)

    report = ImportReport(
        total_rows=len(rows),
        imported=len(records),
        skipped_rows=skipped,
        unknown_statuses=unknown_statuses,
    )
    return records, report


def load_records_from_csv(
    path: Path,
    *,
    mapping: Mapping[str, str] | None = None,
) -> Tuple[List[PlayerRecord], ImportReport]:
    return rows_to_records(load_player_csv(path, mapping=mapping))
