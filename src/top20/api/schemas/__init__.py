"""Pydantic models for API I/O."""

from .errors import ErrorResponse, HealthResponse
from .stats import PlayerStatsResponse, PositionCountResponse
from .submission import SubmissionRequest, SubmissionResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PlayerStatsResponse",
    "PositionCountResponse",
    "SubmissionRequest",
    "SubmissionResponse",
]
