"""
Custom exceptions shared by all layers.

Two families:
* GameError: the proposal itself cannot be played. Fatal to the request, the proposer gets notified.
* RepositoryError: something went wrong talking to the Store or the Log.
"""


class GameError(Exception):
    """Base class of all errors that reject a proposal."""


class ParseError(GameError):
    """The proposal descriptor could not be parsed into a command."""


class StateLoadError(GameError):
    """The stored game encoding is unreadable / corrupt."""


class IllegalMoveError(GameError):
    """The rules engine refused the move."""


class ConcurrencyConflictError(GameError):
    """Another writer committed first: our version token went stale."""


class TurnConflictError(GameError):
    """The proposer also made the previous move of this game."""


class RepositoryError(Exception):
    """Base class of persistence errors."""


class StaleVersionError(RepositoryError):
    """Compare-and-swap failed: supplied version does not match the stored version."""


class RecordNotFoundError(RepositoryError):
    """Nothing is stored at the requested path / id."""


class LogUnavailableError(RepositoryError):
    """Listing the proposal log failed. Not fatal: play continues without history."""
