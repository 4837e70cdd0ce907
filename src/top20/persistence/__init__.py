"""Persistence layer for ranking submissions."""

from .connection import (
    DatabaseUnavailableError,
    build_engine,
    connect,
    wait_for_database,
)
from .store import DuplicateSubmissionError, SubmissionRecord, SubmissionStore

__all__ = [
    "DatabaseUnavailableError",
    "DuplicateSubmissionError",
    "SubmissionRecord",
    "SubmissionStore",
    "build_engine",
    "connect",
    "wait_for_database",
]
