"""Database models and utilities for StraightPool."""

from .models import Match, Player, ScoreEvent
from .players import LeagueStats, import_players_csv, league_stats
from .store import MatchStore, make_engine

__all__ = [
    "Player",
    "Match",
    "ScoreEvent",
    "MatchStore",
    "make_engine",
    "LeagueStats",
    "import_players_csv",
    "league_stats",
]
