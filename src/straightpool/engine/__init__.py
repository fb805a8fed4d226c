"""Match engine: turn state machine, undo and setup."""

from .engine import MatchEngine, MatchSnapshot, winner_index
from .models import Match, PlayerRef, PlayerStats, ScoreEvent
from .setup import begin_opening_break, parse_target_score, start_match
from .undo import latest_event_index, revert_event

__all__ = [
    "MatchEngine",
    "MatchSnapshot",
    "winner_index",
    "Match",
    "PlayerRef",
    "PlayerStats",
    "ScoreEvent",
    "begin_opening_break",
    "parse_target_score",
    "start_match",
    "latest_event_index",
    "revert_event",
]
