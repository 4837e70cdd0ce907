from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel

from top20.models import Player


class SubmissionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel)

    players: List[Player] = Field(default_factory=list)
    submitted_by: StrictStr = ""


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    players: List[Player]
    submitted_by: str
    ip_address: str
    created_at: str
