"""
Scoring disciplines.

Both the generic point match and 14.1 continuous ("straight pool") run on the
same turn engine.  A :class:`Discipline` selects the handful of policies that
differ between them.
"""

from dataclasses import dataclass
from typing import Dict

from ..exceptions import MatchSetupError


@dataclass(frozen=True)
class Discipline:
    """Rule switches consulted by the turn engine.

    Attributes:
        name: stable identifier stored with each match.
        pocket_completes_match: reaching the target with a pocketed ball
            completes the match automatically.  When False the operator has
            to finish the match by hand.
        foul_passes_turn: a foul hands the table to the opponent.
        tracks_innings: turn changes advance the half-inning counter.
        allows_safety: the Safety action is available.
        allows_rack_end: the manual Rack End marker is available.
    """

    name: str
    pocket_completes_match: bool
    foul_passes_turn: bool
    tracks_innings: bool
    allows_safety: bool
    allows_rack_end: bool


GENERIC = Discipline(
    name="generic",
    pocket_completes_match=False,
    foul_passes_turn=False,
    tracks_innings=False,
    allows_safety=False,
    allows_rack_end=True,
)

STRAIGHT_POOL = Discipline(
    name="straight_pool",
    pocket_completes_match=True,
    foul_passes_turn=True,
    tracks_innings=True,
    allows_safety=True,
    allows_rack_end=False,
)

DISCIPLINES: Dict[str, Discipline] = {d.name: d for d in (GENERIC, STRAIGHT_POOL)}


def get_discipline(name: str) -> Discipline:
    try:
        return DISCIPLINES[name]
    except KeyError:
        raise MatchSetupError(f"Unsupported discipline: {name}") from None
