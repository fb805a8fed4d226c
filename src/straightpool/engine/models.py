"""
In-memory match model used by the turn engine.

A :class:`Match` owns its per-seat :class:`PlayerStats` and the ordered log
of :class:`ScoreEvent` records.  Persistence rows live in
:mod:`straightpool.db.models`; the store converts between the two.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from ..rules.events import EventKind


@dataclass(frozen=True)
class PlayerRef:
    """Identity and display name of a seated player."""
    id: int
    name: str


@dataclass(frozen=True)
class ScoreEvent:
    """One logged scoring action.  Immutable once created."""

    player_index: int
    delta: int
    kind: EventKind
    timestamp: datetime
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def label(self) -> str:
        return self.kind.value


@dataclass
class PlayerStats:
    score: int = 0
    fouls: int = 0
    consecutive_fouls: int = 0
    current_run: int = 0
    high_run: int = 0


@dataclass
class Match:
    players: Tuple[PlayerRef, PlayerRef]
    target_score: int
    discipline: str
    id: Optional[int] = None
    stats: Tuple[PlayerStats, PlayerStats] = field(
        default_factory=lambda: (PlayerStats(), PlayerStats())
    )
    active_player_index: int = 0
    is_completed: bool = False
    winner_index: Optional[int] = None
    innings: int = 0
    turns_in_current_inning: int = 0
    week_label: Optional[str] = None
    note: Optional[str] = None
    events: List[ScoreEvent] = field(default_factory=list)
    created_at: Optional[datetime] = None

    def events_for(self, player_index: int) -> List[ScoreEvent]:
        return [e for e in self.events if e.player_index == player_index]
