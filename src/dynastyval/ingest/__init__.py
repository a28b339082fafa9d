"""Input adapters that normalize raw player data."""

from .players import (
    DEFAULT_PLAYER_MAPPING,
    ImportReport,
    PlayerRow,
    load_player_csv,
    load_records_from_csv,
    rows_to_records,
)

__all__ = [
    "DEFAULT_PLAYER_MAPPING",
    "ImportReport",
    "PlayerRow",
    "load_player_csv",
    "load_records_from_csv",
    "rows_to_records",
]
