"""Request and response schemas for the StraightPool API."""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from ..config import DEFAULT_TARGET_SCORE
from ..engine.engine import MatchSnapshot
from ..engine.models import ScoreEvent
from ..rules.opening_break import BreakOutcome, BreakResult, OpeningBreakResolver, OpponentChoice
from ..rules.racks import RackStatus


class PlayerInput(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class PlayerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class PlayerOut(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None


class PlayerImportInput(BaseModel):
    """CSV text: header row, then ``id,name,phone,email`` rows."""
    csv: str


class PlayerImportOut(BaseModel):
    imported: int


class MatchInput(BaseModel):
    player_a_id: int
    player_b_id: int
    # digits typed into a form are accepted as well as integers
    target_score: Union[int, str] = DEFAULT_TARGET_SCORE
    discipline: str = "straight_pool"
    week_label: Optional[str] = None
    note: Optional[str] = None
    breaker_index: int = 0


class BreakInput(BaseModel):
    outcome: BreakOutcome


class ChoiceInput(BaseModel):
    choice: OpponentChoice


class FoulInput(BaseModel):
    deliberate: bool = False


class RackOut(BaseModel):
    rack: int
    made: int
    capacity: int
    remaining: int
    header_line: str
    detail_line: str

    @classmethod
    def from_status(cls, status: RackStatus) -> "RackOut":
        return cls(
            rack=status.rack,
            made=status.made,
            capacity=status.capacity,
            remaining=status.remaining,
            header_line=status.header_line,
            detail_line=status.detail_line,
        )


class OpeningBreakOut(BaseModel):
    breaker_index: int
    breaker_name: str
    incoming_name: str
    foul_count: int
    awaiting_choice: bool
    finished: bool
    result: Optional[BreakResult] = None

    @classmethod
    def from_resolver(
        cls, resolver: OpeningBreakResolver, result: Optional[BreakResult] = None
    ) -> "OpeningBreakOut":
        return cls(
            breaker_index=resolver.breaker_index,
            breaker_name=resolver.breaker_name,
            incoming_name=resolver.incoming_name,
            foul_count=resolver.state.foul_count,
            awaiting_choice=resolver.awaiting_choice,
            finished=resolver.finished,
            result=result,
        )


class MatchOut(BaseModel):
    id: Optional[int]
    discipline: str
    target_score: int
    players: List[str]
    scores: List[int]
    fouls: List[int]
    consecutive_fouls: List[int]
    current_runs: List[int]
    high_runs: List[int]
    active_player_index: int
    is_completed: bool
    winner_index: Optional[int] = None
    target_reached: bool
    innings: int
    turns_in_current_inning: int
    rack: Optional[RackOut] = None
    event_count: int
    unsaved: bool = False
    opening_break: Optional[OpeningBreakOut] = None

    @classmethod
    def from_snapshot(
        cls, snap: MatchSnapshot, opening_break: Optional[OpeningBreakOut] = None
    ) -> "MatchOut":
        return cls(
            id=snap.match_id,
            discipline=snap.discipline,
            target_score=snap.target_score,
            players=list(snap.player_names),
            scores=list(snap.scores),
            fouls=list(snap.fouls),
            consecutive_fouls=list(snap.consecutive_fouls),
            current_runs=list(snap.current_runs),
            high_runs=list(snap.high_runs),
            active_player_index=snap.active_player_index,
            is_completed=snap.is_completed,
            winner_index=snap.winner_index,
            target_reached=snap.target_reached,
            innings=snap.innings,
            turns_in_current_inning=snap.turns_in_current_inning,
            rack=RackOut.from_status(snap.rack) if snap.rack is not None else None,
            event_count=snap.event_count,
            unsaved=snap.unsaved,
            opening_break=opening_break,
        )


class EventOut(BaseModel):
    id: str
    timestamp: datetime
    player_index: int
    delta: int
    label: str

    @classmethod
    def from_event(cls, event: ScoreEvent) -> "EventOut":
        return cls(
            id=event.id,
            timestamp=event.timestamp,
            player_index=event.player_index,
            delta=event.delta,
            label=event.label,
        )


class MatchHighRunsOut(BaseModel):
    match_id: int
    players: List[str]
    high_runs: List[int]


class StatsOut(BaseModel):
    matches: int
    completed: int
    high_runs: List[MatchHighRunsOut]
