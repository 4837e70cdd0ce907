"""Player entries embedded in a ranking submission."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, StrictInt, StrictStr, TypeAdapter
from pydantic.config import ConfigDict


class Player(BaseModel):
    """A named player at a one-based position inside a ranking."""

    position: StrictInt
    name: StrictStr

    model_config = ConfigDict(frozen=True)


PlayerList = TypeAdapter(List[Player])
