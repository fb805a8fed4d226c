"""Error types raised by the StraightPool engine, store and API."""

from typing import Optional


class StraightPoolError(Exception):
    """Base class for domain-specific exceptions."""


class MatchSetupError(StraightPoolError):
    """A match could not be created from the operator's setup choices."""


class OpeningBreakError(StraightPoolError):
    """An opening-break command was issued out of sequence."""


class PersistenceError(StraightPoolError):
    """The durable store failed to write or read a record."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class PlayerNotFound(StraightPoolError):
    def __init__(self, player_id: int) -> None:
        super().__init__(f"player '{player_id}' not found")
        self.player_id = player_id


class MatchNotFound(StraightPoolError):
    def __init__(self, match_id: int) -> None:
        super().__init__(f"match '{match_id}' not found")
        self.match_id = match_id


class PlayerInUse(StraightPoolError):
    """A player cannot be removed while a match still seats them."""

    def __init__(self, player_id: int, match_id: int) -> None:
        super().__init__(f"player '{player_id}' is seated in match '{match_id}'")
        self.player_id = player_id
        self.match_id = match_id
