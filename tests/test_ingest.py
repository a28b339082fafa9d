from pathlib import Path

import pytest

from dynastyval.ingest import PlayerRow, load_player_csv, load_records_from_csv, rows_to_records
from dynastyval.models import PlayerStatus, Position


def _row(**kwargs):
    mapping = {
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
    return PlayerRow.from_mapping(kwargs, mapping)


def test_rows_to_records_parses_numbers_and_aliases():
    rows = [
        _row(player_id="1", name="Back", position="HB", team="kc", age="24", market_value="$5,400", proj_now="210.5", proj_future="190"),
    ]
    records, report = rows_to_records(rows)

    assert report.imported == 1
    record = records[0]
    assert record.position == Position.RB
    assert record.team == "KC"
    assert record.age == 24
    assert record.market_value == pytest.approx(5400)
    assert record.status == PlayerStatus.ACTIVE


def test_blank_numerics_become_none():
    records, _ = rows_to_records([_row(player_id="2", name="Rookie", position="WR", age="", market_value="", proj_now="", proj_future="")])
    record = records[0]
    assert record.age is None
    assert record.market_value is None
    assert not record.is_trainable


def test_unknown_positions_are_skipped_and_reported():
    records, report = rows_to_records([_row(player_id="3", name="Kicker", position="K"), _row(player_id="4", name="Passer", position="qb")])
    assert [record.player_id for record in records] == ["4"]
    assert report.skipped_rows == ["Kicker"]
    assert report.total_rows == 2


def test_unknown_status_is_kept_as_neutral():
    records, report = rows_to_records([_row(player_id="5", name="Maybe", position="TE", status="Probable")])
    assert records[0].status is None
    assert report.unknown_statuses == ["Maybe: Probable"]


def test_non_numeric_value_skips_row():
    records, report = rows_to_records([_row(player_id="6", name="Bad", position="RB", market_value="lots")])
    assert records == []
    assert report.skipped_rows == ["Bad"]


def test_load_csv_with_custom_mapping(tmp_path: Path):
    path = tmp_path / "players.csv"
    path.write_text(
        "Id,First,Last,Pos,Value,Now,Future\n"
        "a1,Joe,Passer,QB,7000,320,300\n"
        ",Sam,Catcher,WR,4000,250,240\n",
        encoding="utf-8",
    )
    mapping = {
        "player_id": "Id",
        "name": "First|Last",
        "position": "Pos",
        "market_value": "Value",
        "proj_now": "Now",
        "proj_future": "Future",
    }

    rows = load_player_csv(path, mapping=mapping)
    assert rows[0].raw_name == "Joe Passer"

    records, report = load_records_from_csv(path, mapping=mapping)
    assert report.imported == 2
    assert records[1].player_id == "sam-catcher"
    assert all(record.is_trainable for record in records)
