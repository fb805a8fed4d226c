"""
FastAPI application entry point for StraightPool.

This module exposes HTTP endpoints for managing players, setting up matches,
resolving the opening break and scoring a match turn by turn.

To run the server:

    uvicorn straightpool.api.main:app --reload

or ``python -m straightpool``.  You can then access the automatic
documentation at http://localhost:8000/docs
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import load_config
from ..db.players import import_players_csv, league_stats
from ..db.store import MatchStore
from ..engine.engine import MatchEngine, MatchSnapshot
from ..engine.setup import begin_opening_break, start_match
from ..exceptions import (
    MatchNotFound,
    MatchSetupError,
    OpeningBreakError,
    PersistenceError,
    PlayerInUse,
    PlayerNotFound,
    StraightPoolError,
)
from ..rules.opening_break import OpeningBreakResolver
from .schemas import (
    BreakInput,
    ChoiceInput,
    EventOut,
    FoulInput,
    MatchHighRunsOut,
    MatchInput,
    MatchOut,
    OpeningBreakOut,
    PlayerImportInput,
    PlayerImportOut,
    PlayerInput,
    PlayerOut,
    PlayerUpdate,
    RackOut,
    StatsOut,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="StraightPool API", version="0.1.0")

_store: Optional[MatchStore] = None
# Opening breaks in progress, by match id.  Discarded once applied.
_breaks: Dict[int, OpeningBreakResolver] = {}

_STATUS_CODES = {
    MatchSetupError: 400,
    OpeningBreakError: 409,
    PlayerNotFound: 404,
    PlayerInUse: 409,
    MatchNotFound: 404,
    PersistenceError: 503,
}


def get_store() -> MatchStore:
    """Return the store, created from configuration on first use."""
    global _store
    if _store is None:
        settings = load_config()
        _store = MatchStore.from_url(settings.database_url)
    return _store


@app.exception_handler(StraightPoolError)
async def straightpool_error_handler(request: Request, exc: StraightPoolError) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), 400)
    if status_code >= 500:
        logger.error("Request %s failed: %s", request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def _player_out(player) -> PlayerOut:
    return PlayerOut(id=player.id, name=player.name, phone=player.phone, email=player.email)


def _scoring_engine(match_id: int, store: MatchStore) -> MatchEngine:
    if match_id in _breaks:
        raise OpeningBreakError("Resolve the opening break before scoring")
    return MatchEngine(store.load(match_id), store=store)


def _with_break_state(snap: MatchSnapshot, resolver: OpeningBreakResolver) -> MatchSnapshot:
    # the match row is untouched until the break is applied
    game = resolver.game
    return replace(
        snap,
        scores=tuple(game.scores),
        fouls=tuple(game.fouls),
        consecutive_fouls=tuple(game.consecutive_fouls),
        active_player_index=game.active_player_index,
    )


def _pending_break(match_id: int) -> OpeningBreakResolver:
    resolver = _breaks.get(match_id)
    if resolver is None:
        raise OpeningBreakError(f"Match {match_id} has no opening break in progress")
    return resolver


@app.get("/health", tags=["System"])
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}


# ---------------------------------------------------------
# Players
# ---------------------------------------------------------

@app.get("/players", tags=["Players"])
def list_players(store: MatchStore = Depends(get_store)) -> List[PlayerOut]:
    return [_player_out(p) for p in store.list_players()]


@app.post("/players", tags=["Players"], status_code=201)
def create_player(data: PlayerInput, store: MatchStore = Depends(get_store)) -> PlayerOut:
    return _player_out(store.add_player(name=data.name, phone=data.phone, email=data.email))


@app.post("/players/import", tags=["Players"])
def import_players(data: PlayerImportInput, store: MatchStore = Depends(get_store)) -> PlayerImportOut:
    return PlayerImportOut(imported=import_players_csv(store, data.csv))


@app.get("/players/{player_id}", tags=["Players"])
def get_player(player_id: int, store: MatchStore = Depends(get_store)) -> PlayerOut:
    return _player_out(store.get_player(player_id))


@app.put("/players/{player_id}", tags=["Players"])
def update_player(
    player_id: int, data: PlayerUpdate, store: MatchStore = Depends(get_store)
) -> PlayerOut:
    fields = data.model_dump(exclude_unset=True)
    return _player_out(store.update_player(player_id, **fields))


@app.delete("/players/{player_id}", tags=["Players"], status_code=204)
def delete_player(player_id: int, store: MatchStore = Depends(get_store)) -> None:
    store.delete_player(player_id)


# ---------------------------------------------------------
# Matches
# ---------------------------------------------------------

@app.get("/matches", tags=["Matches"])
def list_matches(store: MatchStore = Depends(get_store)) -> List[MatchOut]:
    return [MatchOut.from_snapshot(MatchEngine(m).snapshot()) for m in store.list_matches()]


@app.post("/matches", tags=["Matches"], status_code=201)
def create_match(data: MatchInput, store: MatchStore = Depends(get_store)) -> MatchOut:
    """
    Sets up a match and opens its opening break.  Scoring commands are
    refused until the break has been resolved.
    """
    match = start_match(
        store.player_refs(),
        data.player_a_id,
        data.player_b_id,
        target_score=data.target_score,
        discipline=data.discipline,
        week_label=data.week_label,
        note=data.note,
    )
    resolver = begin_opening_break(match, breaker_index=data.breaker_index)
    store.save(match)
    _breaks[match.id] = resolver
    logger.info("Match %s created: %s vs %s", match.id, match.players[0].name, match.players[1].name)
    return MatchOut.from_snapshot(
        MatchEngine(match).snapshot(), OpeningBreakOut.from_resolver(resolver)
    )


@app.get("/matches/{match_id}", tags=["Matches"])
def get_match(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    snap = MatchEngine(store.load(match_id)).snapshot()
    resolver = _breaks.get(match_id)
    if resolver is None:
        return MatchOut.from_snapshot(snap)
    return MatchOut.from_snapshot(
        _with_break_state(snap, resolver), OpeningBreakOut.from_resolver(resolver)
    )


@app.delete("/matches/{match_id}", tags=["Matches"], status_code=204)
def delete_match(match_id: int, store: MatchStore = Depends(get_store)) -> None:
    store.delete_match(match_id)
    _breaks.pop(match_id, None)


@app.get("/matches/{match_id}/events", tags=["Matches"])
def list_events(match_id: int, store: MatchStore = Depends(get_store)) -> List[EventOut]:
    engine = MatchEngine(store.load(match_id))
    return [EventOut.from_event(e) for e in engine.events()]


@app.get("/matches/{match_id}/rack", tags=["Matches"])
def get_rack(match_id: int, store: MatchStore = Depends(get_store)) -> RackOut:
    engine = MatchEngine(store.load(match_id))
    rack = engine.rack()
    if rack is None:
        raise MatchSetupError(f"Match {match_id} does not track racks")
    return RackOut.from_status(rack)


# ---------------------------------------------------------
# Opening break
# ---------------------------------------------------------

@app.post("/matches/{match_id}/break", tags=["Opening break"])
def declare_break(match_id: int, data: BreakInput, store: MatchStore = Depends(get_store)) -> MatchOut:
    resolver = _pending_break(match_id)
    result = resolver.declare(data.outcome)
    return _after_break_step(match_id, resolver, store, result)


@app.post("/matches/{match_id}/break/choice", tags=["Opening break"])
def opponent_choice(match_id: int, data: ChoiceInput, store: MatchStore = Depends(get_store)) -> MatchOut:
    resolver = _pending_break(match_id)
    resolver.choose(data.choice)
    return _after_break_step(match_id, resolver, store)


def _after_break_step(match_id, resolver, store, result=None) -> MatchOut:
    engine = MatchEngine(store.load(match_id), store=store)
    break_out = OpeningBreakOut.from_resolver(resolver, result)
    if not resolver.finished:
        return MatchOut.from_snapshot(_with_break_state(engine.snapshot(), resolver), break_out)

    snap = engine.apply_opening_break(resolver)
    _breaks.pop(match_id, None)
    return MatchOut.from_snapshot(snap, break_out)


# ---------------------------------------------------------
# Scoring
# ---------------------------------------------------------

@app.post("/matches/{match_id}/pocket", tags=["Scoring"])
def pocket_ball(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).pocket_ball())


@app.post("/matches/{match_id}/foul", tags=["Scoring"])
def foul(match_id: int, data: FoulInput, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).foul(deliberate=data.deliberate))


@app.post("/matches/{match_id}/safety", tags=["Scoring"])
def safety(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).safety())


@app.post("/matches/{match_id}/end-turn", tags=["Scoring"])
def end_turn(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).end_turn())


@app.post("/matches/{match_id}/rack-end", tags=["Scoring"])
def rack_end(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).rack_end())


@app.post("/matches/{match_id}/finish", tags=["Scoring"])
def finish_match(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).finish_match())


@app.post("/matches/{match_id}/undo", tags=["Scoring"])
def undo(match_id: int, store: MatchStore = Depends(get_store)) -> MatchOut:
    return MatchOut.from_snapshot(_scoring_engine(match_id, store).undo())


@app.get("/stats", tags=["Stats"])
def get_stats(store: MatchStore = Depends(get_store)) -> StatsOut:
    stats = league_stats(store)
    return StatsOut(
        matches=stats.matches,
        completed=stats.completed,
        high_runs=[
            MatchHighRunsOut(
                match_id=h.match_id, players=list(h.player_names), high_runs=list(h.high_runs)
            )
            for h in stats.high_runs
        ],
    )
