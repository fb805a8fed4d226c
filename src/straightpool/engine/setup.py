"""Match setup: precondition checks and the opening-break hand-off."""

import logging
from typing import Optional, Sequence, Union

from ..config import DEFAULT_TARGET_SCORE
from ..exceptions import MatchSetupError
from ..rules.discipline import STRAIGHT_POOL, get_discipline
from ..rules.opening_break import GameState, OpeningBreakResolver
from .models import Match, PlayerRef

logger = logging.getLogger(__name__)


def parse_target_score(value: Union[int, str, None]) -> int:
    """Accept a positive integer, or its digits as typed into a form."""
    if isinstance(value, bool):
        raise MatchSetupError("Target score must be a whole number")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise MatchSetupError(f"Target score must be a whole number, got {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise MatchSetupError("Target score must be a whole number")
    if value <= 0:
        raise MatchSetupError("Target score must be greater than zero")
    return value


def start_match(
    players: Sequence[PlayerRef],
    player_a_id: int,
    player_b_id: int,
    target_score: Union[int, str, None] = DEFAULT_TARGET_SCORE,
    discipline: str = STRAIGHT_POOL.name,
    week_label: Optional[str] = None,
    note: Optional[str] = None,
) -> Match:
    """Build a new match after checking the operator's setup choices."""
    try:
        if len(players) < 2:
            raise MatchSetupError(
                "Need at least two players. Ask your admin to import the player list."
            )
        if player_a_id == player_b_id:
            raise MatchSetupError("Choose two different players")

        by_id = {p.id: p for p in players}
        for pid in (player_a_id, player_b_id):
            if pid not in by_id:
                raise MatchSetupError(f"Unknown player id: {pid}")

        target = parse_target_score(target_score)
        get_discipline(discipline)
    except MatchSetupError as exc:
        logger.info("Match setup rejected: %s", exc)
        raise

    return Match(
        players=(by_id[player_a_id], by_id[player_b_id]),
        target_score=target,
        discipline=discipline,
        week_label=week_label,
        note=note,
    )


def begin_opening_break(match: Match, breaker_index: int = 0) -> OpeningBreakResolver:
    game = GameState(
        player_ids=(match.players[0].id, match.players[1].id),
        player_names=(match.players[0].name, match.players[1].name),
    )
    resolver = OpeningBreakResolver(game, breaker_index=breaker_index)
    match.active_player_index = breaker_index
    return resolver
