from __future__ import annotations

from typing import List

from pydantic import BaseModel

from dynastyval.models import PlayerRecord


class PlayerImportRequest(BaseModel):
    players: List[PlayerRecord]


class PlayerImportResponse(BaseModel):
    imported: int
