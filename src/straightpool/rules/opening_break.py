"""
Opening break resolution.

The breaker declares what happened on the break.  A legal break hands the
table to the incoming player; a called ball made on the break keeps the
breaker at the table.  A breaking foul costs the breaker two points and the
incoming player then either accepts the table or asks for a re-rack with the
same breaker.  The third breaking foul costs fifteen points and the incoming
player shoots with no further choice.

The resolver works on a transient :class:`GameState` which the turn engine
copies into the match once :attr:`OpeningBreakResolver.finished` is True.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from ..exceptions import OpeningBreakError

logger = logging.getLogger(__name__)

BREAK_FOUL_POINTS = 2
THIRD_BREAK_FOUL_POINTS = 15
THIRD_BREAK_FOUL = 3


class BreakOutcome(str, Enum):
    """What the operator declares after the break shot."""

    LEGAL_BREAK = "legal_break"
    LEGAL_CALLED_BALL = "legal_called_ball"
    BREAKING_FOUL = "breaking_foul"


class BreakResult(str, Enum):
    """How a declared outcome is scored."""

    LEGAL_BREAK = "legal_break"
    LEGAL_CALLED_BALL = "legal_called_ball"
    FOUL_MINUS_2 = "foul_minus_2"
    THIRD_FOUL_MINUS_15 = "third_foul_minus_15"


class OpponentChoice(str, Enum):
    ACCEPT_TABLE = "accept_table"
    RERACK = "rerack"


def _other(index: int) -> int:
    return 1 - index


@dataclass
class OpeningBreakState:
    """Fouls committed by the breaker during this opening break only."""

    breaker_index: int = 0
    foul_count: int = 0

    def record_foul(self) -> BreakResult:
        self.foul_count += 1
        if self.foul_count >= THIRD_BREAK_FOUL:
            return BreakResult.THIRD_FOUL_MINUS_15
        return BreakResult.FOUL_MINUS_2

    def reset(self) -> None:
        self.foul_count = 0


@dataclass
class GameState:
    """Scores and counters carried through the opening break, by seat."""

    player_ids: Tuple[int, int]
    player_names: Tuple[str, str]
    scores: List[int] = field(default_factory=lambda: [0, 0])
    fouls: List[int] = field(default_factory=lambda: [0, 0])
    consecutive_fouls: List[int] = field(default_factory=lambda: [0, 0])
    active_player_index: int = 0

    def apply_result(self, result: BreakResult, breaker_index: int) -> None:
        incoming = _other(breaker_index)

        if result == BreakResult.LEGAL_BREAK:
            self.active_player_index = incoming

        elif result == BreakResult.LEGAL_CALLED_BALL:
            self.active_player_index = breaker_index

        elif result == BreakResult.FOUL_MINUS_2:
            self.scores[breaker_index] -= BREAK_FOUL_POINTS
            self.fouls[breaker_index] += 1
            self.consecutive_fouls[breaker_index] += 1
            self.consecutive_fouls[incoming] = 0
            self.active_player_index = incoming

        elif result == BreakResult.THIRD_FOUL_MINUS_15:
            self.scores[breaker_index] -= THIRD_BREAK_FOUL_POINTS
            self.fouls[breaker_index] += 1
            # the escalation has fired, so the streak starts over
            self.consecutive_fouls[breaker_index] = 0
            self.consecutive_fouls[incoming] = 0
            self.active_player_index = incoming


class OpeningBreakResolver:
    """Short-lived state machine for one match's opening break."""

    def __init__(self, game: GameState, breaker_index: int = 0) -> None:
        if breaker_index not in (0, 1):
            raise OpeningBreakError(f"Invalid breaker index: {breaker_index}")
        self.game = game
        self.game.active_player_index = breaker_index
        self.state = OpeningBreakState(breaker_index=breaker_index)
        self.awaiting_choice = False
        self.finished = False
        # Score deltas charged to the breaker, in order.
        self.penalties: List[int] = []

    @property
    def breaker_index(self) -> int:
        return self.state.breaker_index

    @property
    def incoming_index(self) -> int:
        return _other(self.state.breaker_index)

    @property
    def breaker_name(self) -> str:
        return self.game.player_names[self.breaker_index]

    @property
    def incoming_name(self) -> str:
        return self.game.player_names[self.incoming_index]

    def declare(self, outcome: BreakOutcome) -> BreakResult:
        """Apply the declared break outcome and return its classification."""
        if self.finished:
            raise OpeningBreakError("Opening break is already resolved")
        if self.awaiting_choice:
            raise OpeningBreakError("Waiting for the incoming player's choice")

        outcome = BreakOutcome(outcome)
        if outcome == BreakOutcome.BREAKING_FOUL:
            result = self.state.record_foul()
        else:
            result = BreakResult(outcome.value)

        self.game.apply_result(result, self.breaker_index)

        if result == BreakResult.FOUL_MINUS_2:
            self.penalties.append(-BREAK_FOUL_POINTS)
            self.awaiting_choice = True
        elif result == BreakResult.THIRD_FOUL_MINUS_15:
            self.penalties.append(-THIRD_BREAK_FOUL_POINTS)
            self.finished = True
        else:
            self.state.reset()
            self.finished = True

        logger.debug("Break outcome %s classified as %s", outcome.value, result.value)
        return result

    def choose(self, choice: OpponentChoice) -> None:
        """Incoming player's decision after a two-point breaking foul."""
        if not self.awaiting_choice:
            raise OpeningBreakError("No breaking foul is awaiting a choice")

        choice = OpponentChoice(choice)
        self.awaiting_choice = False
        if choice == OpponentChoice.ACCEPT_TABLE:
            self.finished = True
        else:
            # Penalty stands; the foul count carries over to the re-rack.
            self.game.active_player_index = self.breaker_index

        logger.debug("Incoming player chose %s", choice.value)
