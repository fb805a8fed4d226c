"""Durable store, player import and league stats."""

import pytest

from conftest import make_clock, make_match
from straightpool.db.players import import_players_csv, league_stats
from straightpool.engine.engine import MatchEngine
from straightpool.engine.setup import start_match
from straightpool.exceptions import MatchNotFound, PersistenceError, PlayerInUse, PlayerNotFound

PLAYERS_CSV = """id,name,phone,email
1,Alice,555-0100,alice@example.com
2,Bob,,
3,Alice,555-0100,dup@example.com
4
5,Carol,555-0102,
"""


def seeded_engine(store, discipline="straight_pool", target_score=125) -> MatchEngine:
    a = store.add_player("Alice")
    b = store.add_player("Bob")
    match = start_match(store.player_refs(), a.id, b.id, target_score=target_score, discipline=discipline)
    store.save(match)
    return MatchEngine(match, store=store, clock=make_clock())


# ---------------------------------------------------------
# Players
# ---------------------------------------------------------

def test_player_crud(store) -> None:
    p = store.add_player("Dana", phone="555-0199")

    assert store.get_player(p.id).phone == "555-0199"
    assert store.update_player(p.id, email="dana@example.com").email == "dana@example.com"

    store.delete_player(p.id)
    with pytest.raises(PlayerNotFound):
        store.get_player(p.id)


def test_players_listed_by_name(store) -> None:
    store.add_player("Zed")
    store.add_player("Amy")

    assert [p.name for p in store.list_players()] == ["Amy", "Zed"]


def test_update_rejects_unknown_fields(store) -> None:
    p = store.add_player("Dana")
    with pytest.raises(ValueError):
        store.update_player(p.id, score=10)


def test_seated_player_cannot_be_deleted(store) -> None:
    engine = seeded_engine(store)
    with pytest.raises(PlayerInUse):
        store.delete_player(engine.match.players[0].id)


def test_csv_import(store) -> None:
    imported = import_players_csv(store, PLAYERS_CSV)

    players = {p.name: p for p in store.list_players()}
    assert imported == 3
    assert sorted(players) == ["Alice", "Bob", "Carol"]
    assert players["Alice"].email == "alice@example.com"
    assert players["Bob"].phone is None
    assert players["Carol"].email is None


def test_csv_import_skipped_when_players_exist(store) -> None:
    store.add_player("Existing")

    assert import_players_csv(store, PLAYERS_CSV) == 0
    assert len(store.list_players()) == 1


def test_csv_import_is_all_or_nothing(store) -> None:
    with store.engine.begin() as conn:
        conn.exec_driver_sql(
            "CREATE TRIGGER reject_bob BEFORE INSERT ON player WHEN NEW.name = 'Bob' "
            "BEGIN SELECT RAISE(ABORT, 'rejected'); END"
        )

    with pytest.raises(PersistenceError):
        import_players_csv(store, PLAYERS_CSV)
    assert store.list_players() == []

    with store.engine.begin() as conn:
        conn.exec_driver_sql("DROP TRIGGER reject_bob")

    assert import_players_csv(store, PLAYERS_CSV) == 3


# ---------------------------------------------------------
# Matches
# ---------------------------------------------------------

def test_commands_persist_match_and_events(store) -> None:
    engine = seeded_engine(store)
    engine.pocket_ball()
    engine.pocket_ball()
    engine.foul(deliberate=True)

    loaded = store.load(engine.match.id)

    assert loaded.stats[0].score == -14
    assert loaded.stats[0].high_run == 2
    assert loaded.active_player_index == 1
    assert loaded.turns_in_current_inning == 1
    assert [e.delta for e in loaded.events] == [1, 1, -1, -15]
    assert [e.id for e in loaded.events] == [e.id for e in engine.match.events]


def test_event_timestamps_round_trip_as_utc(store) -> None:
    engine = seeded_engine(store)
    engine.pocket_ball()
    engine.end_turn()

    loaded = store.load(engine.match.id)

    assert [e.timestamp for e in loaded.events] == [e.timestamp for e in engine.match.events]
    assert all(e.timestamp.tzinfo is not None for e in loaded.events)
    assert loaded.created_at.tzinfo is not None

    # a reloaded match keeps stamping after its stored events
    again = MatchEngine(loaded, store=store)
    again.pocket_ball()
    assert again.match.events[-1].timestamp >= loaded.events[-1].timestamp


def test_undo_removes_persisted_event(store) -> None:
    engine = seeded_engine(store)
    engine.pocket_ball()
    engine.end_turn()
    engine.undo()

    loaded = store.load(engine.match.id)

    assert len(loaded.events) == 1
    assert loaded.active_player_index == 0


def test_reloaded_engine_continues(store) -> None:
    engine = seeded_engine(store, target_score=2)
    engine.pocket_ball()

    again = MatchEngine(store.load(engine.match.id), store=store)
    snap = again.pocket_ball()

    assert snap.is_completed
    assert store.load(engine.match.id).winner_index == 0


def test_list_and_delete_matches(store) -> None:
    engine = seeded_engine(store)
    engine.pocket_ball()
    match_id = engine.match.id

    assert [m.id for m in store.list_matches()] == [match_id]

    store.delete_match(match_id)
    assert store.list_matches() == []
    with pytest.raises(MatchNotFound):
        store.load(match_id)


def test_league_stats(store) -> None:
    engine = seeded_engine(store, target_score=3)
    for _ in range(3):
        engine.pocket_ball()

    stats = league_stats(store)

    assert stats.matches == 1
    assert stats.completed == 1
    assert stats.high_runs[0].high_runs == (3, 0)
    assert stats.high_runs[0].player_names == ("Alice", "Bob")


# ---------------------------------------------------------
# Durability failures
# ---------------------------------------------------------

class FlakyStore:
    def __init__(self) -> None:
        self.fail = True
        self.saved = 0

    def save(self, match):
        if self.fail:
            raise PersistenceError("disk full")
        self.saved += 1
        return match


def test_failed_save_keeps_in_memory_state() -> None:
    flaky = FlakyStore()
    engine = MatchEngine(make_match(), store=flaky, clock=make_clock())

    snap = engine.pocket_ball()

    assert snap.scores == (1, 0)
    assert snap.unsaved
    assert engine.unsaved

    flaky.fail = False
    assert engine.retry_save()
    assert not engine.unsaved
    assert flaky.saved == 1
