"""
Player directory helpers: one-shot CSV seeding and league totals.

The CSV layout is a header row followed by ``id,name,phone,email`` rows.  The
leading ordinal id is ignored; the database assigns its own.
"""

import csv
import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .store import MatchStore

logger = logging.getLogger(__name__)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def import_players_csv(store: MatchStore, text: str) -> int:
    """Seed players from CSV text when the directory is empty.

    Returns the number of players added.
    """
    existing = store.list_players()
    if existing:
        logger.info("Player import skipped: %d players already present", len(existing))
        return 0

    rows = list(csv.reader(io.StringIO(text)))
    if len(rows) <= 1:
        return 0

    seen = set()
    batch = []
    for cols in rows[1:]:
        cols = [c.strip() for c in cols]
        if len(cols) < 2 or not cols[1]:
            continue

        name = cols[1]
        phone = _blank_to_none(cols[2]) if len(cols) > 2 else None
        email = _blank_to_none(cols[3]) if len(cols) > 3 else None

        if (name, phone) in seen:
            continue
        seen.add((name, phone))

        batch.append((name, phone, email))

    # one commit: every row lands or none does
    store.add_players(batch)
    logger.info("Imported %d players from CSV", len(batch))
    return len(batch)


@dataclass(frozen=True)
class MatchHighRuns:
    match_id: int
    player_names: Tuple[str, str]
    high_runs: Tuple[int, int]


@dataclass(frozen=True)
class LeagueStats:
    matches: int
    completed: int
    high_runs: List[MatchHighRuns]


def league_stats(store: MatchStore) -> LeagueStats:
    matches = store.list_matches()
    return LeagueStats(
        matches=len(matches),
        completed=sum(1 for m in matches if m.is_completed),
        high_runs=[
            MatchHighRuns(
                match_id=m.id,
                player_names=(m.players[0].name, m.players[1].name),
                high_runs=(m.stats[0].high_run, m.stats[1].high_run),
            )
            for m in matches
        ],
    )
