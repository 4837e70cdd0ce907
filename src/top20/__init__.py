"""Top 20 player rankings service."""

__version__ = "0.1.0"
