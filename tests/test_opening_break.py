"""Opening break resolution and its hand-off to the match."""

import pytest

from conftest import ALICE, BOB, assert_scores_match_log, make_clock, make_match
from straightpool.engine.engine import MatchEngine
from straightpool.engine.setup import begin_opening_break
from straightpool.exceptions import OpeningBreakError
from straightpool.rules.events import EventKind
from straightpool.rules.opening_break import (
    BreakOutcome,
    BreakResult,
    GameState,
    OpeningBreakResolver,
    OpeningBreakState,
    OpponentChoice,
)


def new_resolver(breaker_index: int = 0) -> OpeningBreakResolver:
    game = GameState(player_ids=(ALICE.id, BOB.id), player_names=(ALICE.name, BOB.name))
    return OpeningBreakResolver(game, breaker_index=breaker_index)


def test_record_foul_classification() -> None:
    state = OpeningBreakState()
    assert state.record_foul() == BreakResult.FOUL_MINUS_2
    assert state.record_foul() == BreakResult.FOUL_MINUS_2
    assert state.record_foul() == BreakResult.THIRD_FOUL_MINUS_15


def test_legal_break_hands_table_to_incoming_player() -> None:
    resolver = new_resolver(breaker_index=0)

    result = resolver.declare(BreakOutcome.LEGAL_BREAK)

    assert result == BreakResult.LEGAL_BREAK
    assert resolver.finished
    assert resolver.game.active_player_index == 1
    assert resolver.game.scores == [0, 0]


def test_called_ball_keeps_breaker_at_table() -> None:
    resolver = new_resolver(breaker_index=1)

    resolver.declare(BreakOutcome.LEGAL_CALLED_BALL)

    assert resolver.finished
    assert resolver.game.active_player_index == 1
    assert resolver.game.scores == [0, 0]


def test_breaking_foul_then_accept_table() -> None:
    resolver = new_resolver(breaker_index=0)

    result = resolver.declare(BreakOutcome.BREAKING_FOUL)
    assert result == BreakResult.FOUL_MINUS_2
    assert resolver.awaiting_choice
    assert not resolver.finished

    resolver.choose(OpponentChoice.ACCEPT_TABLE)

    assert resolver.finished
    assert resolver.game.scores == [-2, 0]
    assert resolver.game.active_player_index == 1


def test_rerack_keeps_penalty_and_returns_breaker() -> None:
    resolver = new_resolver(breaker_index=0)
    resolver.declare(BreakOutcome.BREAKING_FOUL)

    resolver.choose(OpponentChoice.RERACK)

    assert not resolver.finished
    assert resolver.game.active_player_index == 0
    assert resolver.game.scores == [-2, 0]
    assert resolver.state.foul_count == 1


def test_three_breaking_fouls_escalate() -> None:
    resolver = new_resolver(breaker_index=0)
    changes = []

    for _ in range(2):
        before = resolver.game.scores[0]
        resolver.declare(BreakOutcome.BREAKING_FOUL)
        changes.append(resolver.game.scores[0] - before)
        resolver.choose(OpponentChoice.RERACK)

    before = resolver.game.scores[0]
    result = resolver.declare(BreakOutcome.BREAKING_FOUL)
    changes.append(resolver.game.scores[0] - before)

    assert result == BreakResult.THIRD_FOUL_MINUS_15
    assert changes == [-2, -2, -15]
    assert resolver.finished
    assert not resolver.awaiting_choice
    assert resolver.game.active_player_index == 1
    assert resolver.penalties == [-2, -2, -15]


def test_out_of_sequence_commands_raise() -> None:
    resolver = new_resolver()
    with pytest.raises(OpeningBreakError):
        resolver.choose(OpponentChoice.ACCEPT_TABLE)

    resolver.declare(BreakOutcome.BREAKING_FOUL)
    with pytest.raises(OpeningBreakError):
        resolver.declare(BreakOutcome.LEGAL_BREAK)

    resolver.choose(OpponentChoice.ACCEPT_TABLE)
    with pytest.raises(OpeningBreakError):
        resolver.declare(BreakOutcome.LEGAL_BREAK)


def test_apply_opening_break_logs_breaking_fouls() -> None:
    match = make_match()
    resolver = begin_opening_break(match, breaker_index=0)
    resolver.declare(BreakOutcome.BREAKING_FOUL)
    resolver.choose(OpponentChoice.ACCEPT_TABLE)
    engine = MatchEngine(match, clock=make_clock())

    snap = engine.apply_opening_break(resolver)

    assert snap.scores == (-2, 0)
    assert snap.fouls == (1, 0)
    assert snap.consecutive_fouls == (1, 0)
    assert snap.active_player_index == 1
    assert [e.kind for e in match.events] == [EventKind.BREAKING_FOUL]
    assert_scores_match_log(engine)


def test_apply_opening_break_requires_matching_players() -> None:
    match = make_match()
    game = GameState(player_ids=(BOB.id, ALICE.id), player_names=(BOB.name, ALICE.name))
    resolver = OpeningBreakResolver(game)
    resolver.declare(BreakOutcome.LEGAL_BREAK)

    with pytest.raises(OpeningBreakError):
        MatchEngine(match).apply_opening_break(resolver)


def test_apply_unfinished_break_raises() -> None:
    match = make_match()
    resolver = begin_opening_break(match)

    with pytest.raises(OpeningBreakError):
        MatchEngine(match).apply_opening_break(resolver)


def test_undo_breaking_foul() -> None:
    match = make_match()
    resolver = begin_opening_break(match)
    resolver.declare(BreakOutcome.BREAKING_FOUL)
    resolver.choose(OpponentChoice.ACCEPT_TABLE)
    engine = MatchEngine(match, clock=make_clock())
    engine.apply_opening_break(resolver)

    snap = engine.undo()

    assert snap.scores == (0, 0)
    assert snap.fouls == (0, 0)
    assert snap.consecutive_fouls == (0, 0)
    assert snap.event_count == 0
