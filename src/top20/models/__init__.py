from .player import Player, PlayerList

__all__ = ["Player", "PlayerList"]
