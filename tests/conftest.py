"""Shared fixtures for the StraightPool tests."""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from straightpool.api import main as api_main
from straightpool.db.store import MatchStore
from straightpool.engine.engine import MatchEngine
from straightpool.engine.models import Match, PlayerRef

ALICE = PlayerRef(id=1, name="Alice")
BOB = PlayerRef(id=2, name="Bob")


def make_clock(start: datetime = datetime(2025, 1, 1, 19, 0, 0, tzinfo=timezone.utc)):
    """A clock that ticks one second per call."""
    ticks = count()
    return lambda: start + timedelta(seconds=next(ticks))


def make_match(discipline: str = "straight_pool", target_score: int = 125) -> Match:
    return Match(players=(ALICE, BOB), target_score=target_score, discipline=discipline)


def make_engine(discipline: str = "straight_pool", target_score: int = 125, store=None) -> MatchEngine:
    return MatchEngine(make_match(discipline, target_score), store=store, clock=make_clock())


def assert_scores_match_log(engine: MatchEngine) -> None:
    for i in (0, 1):
        logged = sum(e.delta for e in engine.match.events_for(i))
        assert engine.match.stats[i].score == logged


@pytest.fixture
def store() -> MatchStore:
    return MatchStore.from_url("sqlite://")


@pytest.fixture
def client(store: MatchStore):
    api_main.app.dependency_overrides[api_main.get_store] = lambda: store
    api_main._breaks.clear()
    yield TestClient(api_main.app)
    api_main.app.dependency_overrides.clear()
    api_main._breaks.clear()
