import pytest

from dynastyval.models import PlayerRecord, PlayerStatus, Position
from dynastyval.persistence import ValuationStore


def _player(position: Position, index: int, offset: int) -> PlayerRecord:
    market = 9000.0 - index * 700.0 - offset * 150.0
    return PlayerRecord(
        player_id=f"{position.value.lower()}{index:02d}",
        name=f"{position.value} Player {index}",
        position=position,
        age=21 + (index * 2) % 13,
        status=PlayerStatus.QUESTIONABLE if index % 5 == 4 else PlayerStatus.ACTIVE,
        team="KC",
        market_value=market,
        proj_now=market * 0.8 + (index % 3) * 120.0,
        proj_future=market * 0.7 - (index % 4) * 90.0,
    )


@pytest.fixture
def sample_players() -> list[PlayerRecord]:
    return [
        _player(position, index, offset)
        for offset, position in enumerate(Position)
        for index in range(8)
    ]


@pytest.fixture
def store(tmp_path) -> ValuationStore:
    return ValuationStore(tmp_path / "dynastyval.sqlite")


@pytest.fixture
def seeded_store(store, sample_players) -> ValuationStore:
    store.upsert_players(sample_players)
    return store
