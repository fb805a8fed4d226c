"""Game rules package for StraightPool."""

from .discipline import DISCIPLINES, GENERIC, STRAIGHT_POOL, Discipline, get_discipline
from .events import EventKind
from .fouls import FoulAssessment, assess_foul
from .opening_break import (
    BreakOutcome,
    BreakResult,
    GameState,
    OpeningBreakResolver,
    OpeningBreakState,
    OpponentChoice,
)
from .racks import RackStatus, rack_status

__all__ = [
    "DISCIPLINES",
    "GENERIC",
    "STRAIGHT_POOL",
    "Discipline",
    "get_discipline",
    "EventKind",
    "FoulAssessment",
    "assess_foul",
    "BreakOutcome",
    "BreakResult",
    "GameState",
    "OpeningBreakResolver",
    "OpeningBreakState",
    "OpponentChoice",
    "RackStatus",
    "rack_status",
]
