"""Position-frequency statistics across stored rankings."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from top20.models import Player


@dataclass
class PlayerStats:
    player_name: str
    total_submissions: int
    position_breakdown: List[Tuple[int, int]] = field(default_factory=list)


def _names_match(candidate: str, query: str) -> bool:
    # Simple per-character folding; multi-character folds such as "ß" -> "ss" do not match.
    if len(candidate.encode("utf-8")) != len(query.encode("utf-8")):
        return False
    return candidate.lower() == query.lower()


def find_position(players: Sequence[Player], name: str) -> Optional[int]:
    """Return the position of the first entry named ``name``, ignoring case."""
    for player in players:
        if _names_match(player.name, name):
            return player.position
    return None


def compute_player_stats(name: str, rankings: Iterable[Sequence[Player]]) -> Optional[PlayerStats]:
    """Count, per position, the rankings that place ``name``.

    A ranking contributes at most once, at the first matching entry in stored
    order. Returns ``None`` when no ranking mentions the player.
    """
    position_counts: Counter[int] = Counter()
    total = 0
    for players in rankings:
        position = find_position(players, name)
        if position is None:
            continue
        position_counts[position] += 1
        total += 1

    if total == 0:
        return None

    return PlayerStats(
        player_name=name,
        total_submissions=total,
        position_breakdown=sorted(position_counts.items()),
    )
