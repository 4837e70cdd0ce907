"""SQL-backed store for ranking submissions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    cast,
    func,
    insert,
    select,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine, Row
from sqlalchemy.exc import IntegrityError

from top20.models import Player, PlayerList


logger = logging.getLogger("uvicorn.error")

metadata = MetaData()

submissions = Table(
    "submissions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("players", JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    Column("submitted_by", Text, nullable=False),
    Column("ip_address", Text, nullable=False, unique=True),
    Column("created_at", DateTime, server_default=func.now()),
    sqlite_autoincrement=True,
)


class DuplicateSubmissionError(Exception):
    """Raised when an address already owns a stored submission."""

    def __init__(self, ip_address: str):
        super().__init__(f"Address {ip_address} already submitted")
        self.ip_address = ip_address


@dataclass
class SubmissionRecord:
    submission_id: int
    players: List[Player]
    submitted_by: str
    ip_address: str
    created_at: datetime


class SubmissionStore:
    """Submissions table access over a pooled SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def ensure_schema(self) -> None:
        metadata.create_all(self.engine, checkfirst=True)

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def has_submission_from(self, ip_address: str) -> bool:
        query = select(submissions.c.id).where(submissions.c.ip_address == ip_address)
        with self.engine.connect() as conn:
            return conn.execute(query).first() is not None

    def add_submission(
        self,
        *,
        players: Sequence[Player],
        submitted_by: str,
        ip_address: str,
    ) -> int:
        payload = [player.model_dump() for player in players]
        stmt = insert(submissions).values(
            players=payload,
            submitted_by=submitted_by,
            ip_address=ip_address,
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
                return int(result.inserted_primary_key[0])
        except IntegrityError as exc:
            # Only the ip_address column carries a unique constraint.
            raise DuplicateSubmissionError(ip_address) from exc

    def list_submissions(self, submitted_by: Optional[str] = None) -> List[SubmissionRecord]:
        query = select(
            submissions.c.id,
            cast(submissions.c.players, Text).label("players_json"),
            submissions.c.submitted_by,
            submissions.c.ip_address,
            submissions.c.created_at,
        )
        if submitted_by:
            query = query.where(submissions.c.submitted_by == submitted_by)
        query = query.order_by(submissions.c.created_at.desc(), submissions.c.id.desc())

        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()

        records: List[SubmissionRecord] = []
        for row in rows:
            try:
                record = self._row_to_record(row, self._decode_players(row.players_json))
            except ValueError as exc:
                logger.warning("Skipping unreadable submission %s: %s", row.id, exc)
                continue
            records.append(record)
        return records

    def iter_player_lists(self) -> Iterator[List[Player]]:
        """Yield every stored ranking, newest first, skipping unreadable rows."""
        query = select(
            submissions.c.id,
            cast(submissions.c.players, Text).label("players_json"),
        ).order_by(submissions.c.created_at.desc(), submissions.c.id.desc())

        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()

        for row in rows:
            try:
                players = self._decode_players(row.players_json)
            except ValueError as exc:
                logger.warning("Skipping unreadable submission %s: %s", row.id, exc)
                continue
            yield players

    @staticmethod
    def _decode_players(raw: str | bytes | None) -> List[Player]:
        if raw is None:
            raise ValueError("players column is empty")
        return PlayerList.validate_python(json.loads(raw))

    @staticmethod
    def _row_to_record(row: Row, players: List[Player]) -> SubmissionRecord:
        created_at = row.created_at
        if not isinstance(created_at, datetime):
            raise ValueError(f"created_at is not a timestamp: {created_at!r}")
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return SubmissionRecord(
            submission_id=row.id,
            players=players,
            submitted_by=row.submitted_by,
            ip_address=row.ip_address,
            created_at=created_at,
        )
