"""Closed set of score event kinds."""

from enum import Enum


class EventKind(str, Enum):
    """What a logged score event records. Values are the display labels."""

    BALL = "Ball"
    FOUL = "Foul"
    THREE_FOUL_PENALTY = "3-Foul Penalty"
    SAFETY = "Safety"
    END_TURN = "End Turn"
    RACK_END = "Rack End"
    BREAKING_FOUL = "Breaking Foul"


# Kinds whose event records the player who gave up the table.
TURN_ENDING_KINDS = frozenset({EventKind.SAFETY, EventKind.END_TURN})
