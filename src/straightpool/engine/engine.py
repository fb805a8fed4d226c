"""
Core turn engine for StraightPool.

:class:`MatchEngine` owns one :class:`~straightpool.engine.models.Match` and
is the only thing that mutates it.  Each command applies the rules of the
match's discipline, appends to the event log, asks the injected store to
persist the result and returns a fresh :class:`MatchSnapshot`.

Commands against a completed match are silently ignored.  So are a finish
before either player has reached the target and an undo with an empty log.  Persistence is optimistic: a failed save is logged and
flagged through :attr:`MatchEngine.unsaved` but never rolls back the
in-memory change.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Tuple

from ..exceptions import OpeningBreakError, PersistenceError
from ..rules.discipline import Discipline, get_discipline
from ..rules.events import EventKind
from ..rules.fouls import assess_foul
from ..rules.opening_break import GameState, OpeningBreakResolver
from ..rules.racks import RackStatus, rack_status
from .models import Match, ScoreEvent
from .undo import latest_event_index, revert_event

logger = logging.getLogger(__name__)


class MatchSaver(Protocol):
    def save(self, match: Match) -> Match:
        ...


@dataclass(frozen=True)
class MatchSnapshot:
    """Read-only view of a match after a command."""

    match_id: Optional[int]
    discipline: str
    target_score: int
    player_names: Tuple[str, str]
    scores: Tuple[int, int]
    fouls: Tuple[int, int]
    consecutive_fouls: Tuple[int, int]
    current_runs: Tuple[int, int]
    high_runs: Tuple[int, int]
    active_player_index: int
    is_completed: bool
    winner_index: Optional[int]
    target_reached: bool
    innings: int
    turns_in_current_inning: int
    rack: Optional[RackStatus]
    event_count: int
    unsaved: bool


def winner_index(match: Match) -> int:
    """Seat at or over the target, seat 0 first when both are.

    Only meaningful once :attr:`MatchEngine.target_reached` is True.
    """
    return 0 if match.stats[0].score >= match.target_score else 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MatchEngine:
    """Applies operator actions to a single match."""

    def __init__(
        self,
        match: Match,
        store: Optional[MatchSaver] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.match = match
        self.discipline: Discipline = get_discipline(match.discipline)
        self.store = store
        self._clock = clock
        self.unsaved = False

    # ---------------------------------------------------------
    # Queries
    # ---------------------------------------------------------

    @property
    def target_reached(self) -> bool:
        return any(s.score >= self.match.target_score for s in self.match.stats)

    def rack(self) -> Optional[RackStatus]:
        if not self.discipline.tracks_innings:
            return None
        return rack_status(self.match.events)

    def events(self) -> list:
        """Chronological copy of the event log."""
        evs = self.match.events
        order = sorted(range(len(evs)), key=lambda i: (evs[i].timestamp, i))
        return [evs[i] for i in order]

    def snapshot(self) -> MatchSnapshot:
        m = self.match
        s0, s1 = m.stats
        return MatchSnapshot(
            match_id=m.id,
            discipline=m.discipline,
            target_score=m.target_score,
            player_names=(m.players[0].name, m.players[1].name),
            scores=(s0.score, s1.score),
            fouls=(s0.fouls, s1.fouls),
            consecutive_fouls=(s0.consecutive_fouls, s1.consecutive_fouls),
            current_runs=(s0.current_run, s1.current_run),
            high_runs=(s0.high_run, s1.high_run),
            active_player_index=m.active_player_index,
            is_completed=m.is_completed,
            winner_index=m.winner_index,
            target_reached=self.target_reached,
            innings=m.innings,
            turns_in_current_inning=m.turns_in_current_inning,
            rack=self.rack(),
            event_count=len(m.events),
            unsaved=self.unsaved,
        )

    # ---------------------------------------------------------
    # Commands
    # ---------------------------------------------------------

    def pocket_ball(self) -> MatchSnapshot:
        if self._ignored("pocket_ball"):
            return self.snapshot()

        i = self.match.active_player_index
        stats = self.match.stats[i]
        stats.score += 1
        stats.current_run += 1
        stats.high_run = max(stats.high_run, stats.current_run)
        stats.consecutive_fouls = 0
        self._log(i, EventKind.BALL, 1)

        if self.discipline.pocket_completes_match and stats.score >= self.match.target_score:
            self._complete()

        return self._commit()

    def foul(self, deliberate: bool = False) -> MatchSnapshot:
        if self._ignored("foul"):
            return self.snapshot()

        i = self.match.active_player_index
        stats = self.match.stats[i]
        assessment = assess_foul(stats.consecutive_fouls, deliberate=deliberate)

        stats.fouls += 1
        stats.current_run = 0
        stats.score += assessment.total
        stats.consecutive_fouls = assessment.consecutive_after
        now = self._now()
        self.match.events.extend(
            ScoreEvent(player_index=i, delta=delta, kind=kind, timestamp=now)
            for kind, delta in assessment.penalties
        )

        if self.discipline.foul_passes_turn:
            self._pass_turn()

        return self._commit()

    def safety(self) -> MatchSnapshot:
        if self._ignored("safety"):
            return self.snapshot()
        if not self.discipline.allows_safety:
            logger.debug("Safety not available in %s matches", self.discipline.name)
            return self.snapshot()

        i = self.match.active_player_index
        self.match.stats[i].current_run = 0
        self._log(i, EventKind.SAFETY, 0)
        self._pass_turn()
        return self._commit()

    def end_turn(self) -> MatchSnapshot:
        if self._ignored("end_turn"):
            return self.snapshot()

        i = self.match.active_player_index
        self.match.stats[i].current_run = 0
        self._log(i, EventKind.END_TURN, 0)
        self._pass_turn()
        return self._commit()

    def rack_end(self) -> MatchSnapshot:
        if self._ignored("rack_end"):
            return self.snapshot()
        if not self.discipline.allows_rack_end:
            logger.debug("Rack End marker not available in %s matches", self.discipline.name)
            return self.snapshot()

        self._log(self.match.active_player_index, EventKind.RACK_END, 0)
        return self._commit()

    def finish_match(self) -> MatchSnapshot:
        if self._ignored("finish_match"):
            return self.snapshot()
        if not self.target_reached:
            logger.debug("finish_match ignored: neither player has reached %d", self.match.target_score)
            return self.snapshot()
        self._complete()
        return self._commit()

    def undo(self) -> MatchSnapshot:
        idx = latest_event_index(self.match.events)
        if idx is None:
            logger.debug("Undo ignored: event log is empty")
            return self.snapshot()

        event = self.match.events[idx]
        revert_event(self.match, event)
        del self.match.events[idx]
        logger.debug("Undid %s for seat %d", event.label, event.player_index)
        return self._commit()

    def apply_opening_break(self, resolver: OpeningBreakResolver) -> MatchSnapshot:
        """Copy a resolved opening break into the match."""
        if not resolver.finished:
            raise OpeningBreakError("Opening break is not resolved yet")
        if self.match.events or self.match.is_completed:
            raise OpeningBreakError("Match is already under way")

        game: GameState = resolver.game
        seat_ids = (self.match.players[0].id, self.match.players[1].id)
        if tuple(game.player_ids) != seat_ids:
            raise OpeningBreakError(
                f"Opening break players {game.player_ids} do not match seats {seat_ids}"
            )

        for i, stats in enumerate(self.match.stats):
            stats.score = game.scores[i]
            stats.fouls = game.fouls[i]
            stats.consecutive_fouls = game.consecutive_fouls[i]
        self.match.active_player_index = game.active_player_index

        for delta in resolver.penalties:
            self._log(resolver.breaker_index, EventKind.BREAKING_FOUL, delta)

        logger.info(
            "Opening break resolved for match %s: %d breaking foul(s), %s to shoot",
            self.match.id,
            len(resolver.penalties),
            self.match.players[game.active_player_index].name,
        )
        return self._commit()

    def retry_save(self) -> bool:
        """Re-attempt a failed save.  Returns True once the match is durable."""
        self._save()
        return not self.unsaved

    # ---------------------------------------------------------
    # Internals
    # ---------------------------------------------------------

    def _ignored(self, command: str) -> bool:
        if self.match.is_completed:
            logger.debug("%s ignored: match %s is completed", command, self.match.id)
            return True
        return False

    def _now(self) -> datetime:
        now = self._clock()
        if self.match.events:
            newest = max(e.timestamp for e in self.match.events)
            if now < newest:
                return newest
        return now

    def _log(self, player_index: int, kind: EventKind, delta: int) -> None:
        self.match.events.append(
            ScoreEvent(player_index=player_index, delta=delta, kind=kind, timestamp=self._now())
        )

    def _complete(self) -> None:
        self.match.is_completed = True
        self.match.winner_index = winner_index(self.match)
        logger.info(
            "Match %s completed, winner %s",
            self.match.id,
            self.match.players[self.match.winner_index].name,
        )

    def _pass_turn(self) -> None:
        m = self.match
        m.active_player_index = 1 - m.active_player_index
        if not self.discipline.tracks_innings:
            return
        if m.turns_in_current_inning == 0:
            m.turns_in_current_inning = 1
        else:
            m.turns_in_current_inning = 0
            m.innings += 1

    def _commit(self) -> MatchSnapshot:
        self._save()
        return self.snapshot()

    def _save(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.match)
        except PersistenceError:
            logger.exception("Failed to save match %s; keeping unsaved state", self.match.id)
            self.unsaved = True
        else:
            self.unsaved = False
