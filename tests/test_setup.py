"""Match setup preconditions."""

import pytest

from conftest import ALICE, BOB
from straightpool.engine.models import PlayerRef
from straightpool.engine.setup import begin_opening_break, parse_target_score, start_match
from straightpool.exceptions import MatchSetupError, OpeningBreakError

CAROL = PlayerRef(id=3, name="Carol")


def test_start_match_seats_players() -> None:
    match = start_match([ALICE, BOB, CAROL], CAROL.id, ALICE.id, target_score=100, week_label="Week 3")

    assert match.players == (CAROL, ALICE)
    assert match.target_score == 100
    assert match.week_label == "Week 3"
    assert match.discipline == "straight_pool"


def test_default_target_is_125() -> None:
    assert start_match([ALICE, BOB], ALICE.id, BOB.id).target_score == 125


def test_needs_two_players() -> None:
    with pytest.raises(MatchSetupError, match="at least two players"):
        start_match([ALICE], ALICE.id, BOB.id)


@pytest.mark.parametrize("a, b", [(1, 1), (1, 99)])
def test_rejects_bad_seats(a, b) -> None:
    with pytest.raises(MatchSetupError):
        start_match([ALICE, BOB], a, b)


@pytest.mark.parametrize("value", [0, -5, "abc", "", "12.5", None, True])
def test_rejects_bad_target(value) -> None:
    with pytest.raises(MatchSetupError):
        parse_target_score(value)


def test_accepts_digit_strings() -> None:
    assert parse_target_score(" 150 ") == 150


def test_rejects_unknown_discipline() -> None:
    with pytest.raises(MatchSetupError):
        start_match([ALICE, BOB], ALICE.id, BOB.id, discipline="eight_ball")


def test_breaker_starts_at_table() -> None:
    match = start_match([ALICE, BOB], ALICE.id, BOB.id)

    resolver = begin_opening_break(match, breaker_index=1)

    assert match.active_player_index == 1
    assert resolver.breaker_name == "Bob"
    assert resolver.incoming_name == "Alice"


def test_invalid_breaker_rejected() -> None:
    match = start_match([ALICE, BOB], ALICE.id, BOB.id)

    with pytest.raises(OpeningBreakError):
        begin_opening_break(match, breaker_index=2)
    assert match.active_player_index == 0
