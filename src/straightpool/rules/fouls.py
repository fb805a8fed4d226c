"""
Consecutive-foul escalation.

A player's first and second fouls in a row cost one point each.  The third
in a row costs fifteen instead and clears the streak.  A deliberate foul
always costs one plus fifteen and clears the streak regardless of its length.
"""

from dataclasses import dataclass
from typing import Tuple

from .events import EventKind

FOUL_POINTS = 1
ESCALATION_POINTS = 15
ESCALATION_STREAK = 2  # fouls already in a row when the next one escalates


@dataclass(frozen=True)
class FoulAssessment:
    """Penalties to post, in order, and the streak length afterwards."""

    penalties: Tuple[Tuple[EventKind, int], ...]
    consecutive_after: int

    @property
    def total(self) -> int:
        return sum(delta for _, delta in self.penalties)


def assess_foul(consecutive: int, deliberate: bool = False) -> FoulAssessment:
    """Classify a foul given the player's streak *before* this foul."""
    if deliberate:
        return FoulAssessment(
            penalties=(
                (EventKind.FOUL, -FOUL_POINTS),
                (EventKind.THREE_FOUL_PENALTY, -ESCALATION_POINTS),
            ),
            consecutive_after=0,
        )

    if consecutive >= ESCALATION_STREAK:
        return FoulAssessment(
            penalties=((EventKind.THREE_FOUL_PENALTY, -ESCALATION_POINTS),),
            consecutive_after=0,
        )

    return FoulAssessment(
        penalties=((EventKind.FOUL, -FOUL_POINTS),),
        consecutive_after=consecutive + 1,
    )
