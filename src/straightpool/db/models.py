"""
SQLModel models for StraightPool.

These rows are the durable form of players, matches and their score events.
Per-seat match counters are flattened into ``*1`` / ``*2`` columns; the store
maps them onto :class:`straightpool.engine.models.Match`.  Timestamps are
written as timezone-aware UTC; see :func:`as_utc` for the read side.
"""

from typing import Optional
from datetime import datetime, timezone
from sqlmodel import DateTime, Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Reattach UTC to a timestamp read back from a backend that drops it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Player(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    player1_id: int = Field(foreign_key="player.id")
    player2_id: int = Field(foreign_key="player.id")
    discipline: str
    target_score: int

    score1: int = 0
    score2: int = 0
    fouls1: int = 0
    fouls2: int = 0
    consecutive_fouls1: int = 0
    consecutive_fouls2: int = 0
    current_run1: int = 0
    current_run2: int = 0
    high_run1: int = 0
    high_run2: int = 0

    active_player_index: int = 0
    is_completed: bool = False
    winner_index: Optional[int] = None
    innings: int = 0
    turns_in_current_inning: int = 0

    week_label: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class ScoreEvent(SQLModel, table=True):
    id: str = Field(primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    position: int
    timestamp: datetime = Field(sa_type=DateTime(timezone=True))
    player_index: int
    delta: int
    label: str
