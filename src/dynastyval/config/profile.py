"""Persist and load league settings profiles."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from .league import LeagueSettings, parse_settings


@dataclass
class SettingsProfile:
    name: str
    settings: LeagueSettings

    @classmethod
    def load(cls, path: Path) -> "SettingsProfile":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            name=data.get("name", path.stem),
            settings=parse_settings(data.get("settings", {})),
        )

    def save(self, path: Path) -> None:
        payload = {
            "name": self.name,
            "settings": self.settings.model_dump(),
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
