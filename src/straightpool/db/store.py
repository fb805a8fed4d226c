"""
Durable store for players and matches.

:class:`MatchStore` wraps a SQLAlchemy engine and converts between SQLModel
rows and the engine's in-memory :class:`~straightpool.engine.models.Match`.
A match and its event log are written in one session commit so the counters
and the events become durable together or not at all.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, or_, select

from ..engine import models as domain
from ..exceptions import MatchNotFound, PersistenceError, PlayerInUse, PlayerNotFound
from ..rules.events import EventKind
from .models import Match, Player, ScoreEvent, as_utc

logger = logging.getLogger(__name__)

_PLAYER_FIELDS = ("name", "phone", "email")


def make_engine(database_url: str) -> Engine:
    kwargs: dict = {"echo": False}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory SQLite must reuse the same connection to persist schema/data.
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


class MatchStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        SQLModel.metadata.create_all(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "MatchStore":
        return cls(make_engine(database_url))

    @contextmanager
    def session(self) -> Iterator[Session]:
        try:
            with Session(self.engine, expire_on_commit=False) as session:
                yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Database error: {exc}", cause=exc) from exc

    # ---------------------------------------------------------
    # Players
    # ---------------------------------------------------------

    def add_player(
        self, name: str, phone: Optional[str] = None, email: Optional[str] = None
    ) -> Player:
        with self.session() as s:
            player = Player(name=name, phone=phone, email=email)
            s.add(player)
            s.commit()
            s.refresh(player)
            return player

    def add_players(
        self, rows: Iterable[Tuple[str, Optional[str], Optional[str]]]
    ) -> List[Player]:
        """Insert ``(name, phone, email)`` rows in a single commit."""
        with self.session() as s:
            players = [Player(name=name, phone=phone, email=email) for name, phone, email in rows]
            s.add_all(players)
            s.commit()
            for player in players:
                s.refresh(player)
            return players

    def get_player(self, player_id: int) -> Player:
        with self.session() as s:
            player = s.get(Player, player_id)
            if player is None:
                raise PlayerNotFound(player_id)
            return player

    def list_players(self) -> List[Player]:
        with self.session() as s:
            return list(s.exec(select(Player).order_by(Player.name)))

    def player_refs(self) -> List[domain.PlayerRef]:
        return [domain.PlayerRef(id=p.id, name=p.name) for p in self.list_players()]

    def update_player(self, player_id: int, **fields) -> Player:
        unknown = set(fields) - set(_PLAYER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown player field(s): {sorted(unknown)}")
        with self.session() as s:
            player = s.get(Player, player_id)
            if player is None:
                raise PlayerNotFound(player_id)
            for key, value in fields.items():
                setattr(player, key, value)
            s.add(player)
            s.commit()
            s.refresh(player)
            return player

    def delete_player(self, player_id: int) -> None:
        with self.session() as s:
            player = s.get(Player, player_id)
            if player is None:
                raise PlayerNotFound(player_id)
            seated = s.exec(
                select(Match.id).where(
                    or_(Match.player1_id == player_id, Match.player2_id == player_id)
                )
            ).first()
            if seated is not None:
                raise PlayerInUse(player_id, seated)
            s.delete(player)
            s.commit()

    # ---------------------------------------------------------
    # Matches
    # ---------------------------------------------------------

    def save(self, match: domain.Match) -> domain.Match:
        """Persist the match row and its event log in one transaction."""
        with self.session() as s:
            row = s.get(Match, match.id) if match.id is not None else None
            if row is None:
                row = Match(
                    player1_id=match.players[0].id,
                    player2_id=match.players[1].id,
                    discipline=match.discipline,
                    target_score=match.target_score,
                )
            _copy_to_row(match, row)
            s.add(row)
            s.flush()

            stored = {
                e.id: e for e in s.exec(select(ScoreEvent).where(ScoreEvent.match_id == row.id))
            }
            live = set()
            for position, event in enumerate(match.events):
                live.add(event.id)
                existing = stored.get(event.id)
                if existing is None:
                    s.add(
                        ScoreEvent(
                            id=event.id,
                            match_id=row.id,
                            position=position,
                            timestamp=event.timestamp,
                            player_index=event.player_index,
                            delta=event.delta,
                            label=event.label,
                        )
                    )
                elif existing.position != position:
                    existing.position = position
                    s.add(existing)
            for event_id, existing in stored.items():
                if event_id not in live:
                    s.delete(existing)

            s.commit()
            match.id = row.id
            match.created_at = as_utc(row.created_at)
        logger.debug("Saved match %s with %d events", match.id, len(match.events))
        return match

    def load(self, match_id: int) -> domain.Match:
        with self.session() as s:
            row = s.get(Match, match_id)
            if row is None:
                raise MatchNotFound(match_id)
            events = s.exec(
                select(ScoreEvent)
                .where(ScoreEvent.match_id == match_id)
                .order_by(ScoreEvent.timestamp, ScoreEvent.position)
            ).all()
            return self._to_domain(s, row, events)

    def list_matches(self) -> List[domain.Match]:
        """All matches, newest first."""
        with self.session() as s:
            rows = s.exec(select(Match).order_by(Match.created_at.desc(), Match.id.desc())).all()
            result = []
            for row in rows:
                events = s.exec(
                    select(ScoreEvent)
                    .where(ScoreEvent.match_id == row.id)
                    .order_by(ScoreEvent.timestamp, ScoreEvent.position)
                ).all()
                result.append(self._to_domain(s, row, events))
            return result

    def delete_match(self, match_id: int) -> None:
        with self.session() as s:
            row = s.get(Match, match_id)
            if row is None:
                raise MatchNotFound(match_id)
            for event in s.exec(select(ScoreEvent).where(ScoreEvent.match_id == match_id)).all():
                s.delete(event)
            s.delete(row)
            s.commit()

    @staticmethod
    def _to_domain(s: Session, row: Match, events) -> domain.Match:
        players = []
        for pid in (row.player1_id, row.player2_id):
            player = s.get(Player, pid)
            if player is None:
                raise PlayerNotFound(pid)
            players.append(domain.PlayerRef(id=player.id, name=player.name))

        return domain.Match(
            id=row.id,
            players=(players[0], players[1]),
            target_score=row.target_score,
            discipline=row.discipline,
            stats=(
                domain.PlayerStats(
                    score=row.score1,
                    fouls=row.fouls1,
                    consecutive_fouls=row.consecutive_fouls1,
                    current_run=row.current_run1,
                    high_run=row.high_run1,
                ),
                domain.PlayerStats(
                    score=row.score2,
                    fouls=row.fouls2,
                    consecutive_fouls=row.consecutive_fouls2,
                    current_run=row.current_run2,
                    high_run=row.high_run2,
                ),
            ),
            active_player_index=row.active_player_index,
            is_completed=row.is_completed,
            winner_index=row.winner_index,
            innings=row.innings,
            turns_in_current_inning=row.turns_in_current_inning,
            week_label=row.week_label,
            note=row.note,
            events=[
                domain.ScoreEvent(
                    id=e.id,
                    player_index=e.player_index,
                    delta=e.delta,
                    kind=EventKind(e.label),
                    timestamp=as_utc(e.timestamp),
                )
                for e in events
            ],
            created_at=as_utc(row.created_at),
        )


def _copy_to_row(match: domain.Match, row: Match) -> None:
    s1, s2 = match.stats
    row.score1, row.score2 = s1.score, s2.score
    row.fouls1, row.fouls2 = s1.fouls, s2.fouls
    row.consecutive_fouls1, row.consecutive_fouls2 = s1.consecutive_fouls, s2.consecutive_fouls
    row.current_run1, row.current_run2 = s1.current_run, s2.current_run
    row.high_run1, row.high_run2 = s1.high_run, s2.high_run
    row.active_player_index = match.active_player_index
    row.is_completed = match.is_completed
    row.winner_index = match.winner_index
    row.innings = match.innings
    row.turns_in_current_inning = match.turns_in_current_inning
    row.week_label = match.week_label
    row.note = match.note
