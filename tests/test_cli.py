from datetime import date

import pytest

from dynastyval.cli import main
from dynastyval.persistence import ValuationStore


def test_pick_command_prints_rounded_value(capsys):
    main(["pick", str(date.today().year), "2"])
    assert capsys.readouterr().out.strip() == "400"


def test_import_and_value_players(tmp_path, capsys):
    db = tmp_path / "cli.sqlite"
    csv_path = tmp_path / "players.csv"
    csv_path.write_text(
        "player_id,name,position,age,market_value,proj_now,proj_future\n"
        "rb1,Runner,RB,25,1000,800,600\n"
        "k1,Kicker,K,30,10,10,10\n",
        encoding="utf-8",
    )

    main(["--db", str(db), "import-players", str(csv_path)])
    out = capsys.readouterr().out
    assert "Imported 1 of 2 rows" in out
    assert "Kicker" in out

    main(["--db", str(db), "value", "rb1"])
    assert "value=   856" in capsys.readouterr().out


def test_value_unknown_player_exits(tmp_path):
    with pytest.raises(SystemExit):
        main(["--db", str(tmp_path / "cli.sqlite"), "value", "missing"])


def test_calibrate_without_players_exits_nonzero(tmp_path, capsys):
    db = tmp_path / "cli.sqlite"
    with pytest.raises(SystemExit) as excinfo:
        main(["--db", str(db), "calibrate", "--folds", "2"])
    assert excinfo.value.code == 1
    assert '"status": "failed"' in capsys.readouterr().out
    assert ValuationStore(db).list_calibration_runs()[0].status == "failed"


def test_rollback_unknown_version_exits(tmp_path):
    with pytest.raises(SystemExit):
        main(["--db", str(tmp_path / "cli.sqlite"), "rollback", "3"])
