"""
Single-step undo.

Only the most recent event can be reverted.  Each kind is reversed by giving
back its score delta and then restoring the counters it touched.  Some
effects are deliberately not restored: a high run, once set, stays, and a
penalty event leaves foul counters alone because the paired ``Foul`` event
carries them.
"""

from typing import Optional, Sequence

from ..rules.events import EventKind, TURN_ENDING_KINDS
from .models import Match, ScoreEvent


def latest_event_index(events: Sequence[ScoreEvent]) -> Optional[int]:
    """Index of the newest event by timestamp, later log position on ties."""
    if not events:
        return None
    return max(range(len(events)), key=lambda i: (events[i].timestamp, i))


def revert_event(match: Match, event: ScoreEvent) -> None:
    stats = match.stats[event.player_index]
    stats.score -= event.delta

    if event.kind == EventKind.BALL:
        stats.current_run = max(0, stats.current_run - 1)

    elif event.kind in (EventKind.FOUL, EventKind.BREAKING_FOUL):
        stats.fouls = max(0, stats.fouls - 1)
        stats.consecutive_fouls = max(0, stats.consecutive_fouls - 1)

    elif event.kind in TURN_ENDING_KINDS:
        # Put the player who gave up the table back at it.
        match.active_player_index = event.player_index

    # THREE_FOUL_PENALTY and RACK_END: nothing beyond the score.

    match.is_completed = False
    match.winner_index = None
