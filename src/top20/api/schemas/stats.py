from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PositionCountResponse(BaseModel):
    position: int
    count: int


class PlayerStatsResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    player_name: str
    total_submissions: int
    position_breakdown: List[PositionCountResponse]
