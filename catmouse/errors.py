from __future__ import annotations


class GameError(ValueError):
    """Base class for errors raised by the game state layer."""


class ValidationError(GameError):
    """Malformed or out-of-range input (HTTP 400)."""


class ConflictError(GameError):
    """Request conflicts with current state (HTTP 409)."""


class NotFoundError(GameError):
    """Unknown entity id (HTTP 404)."""


class NotEnoughPlayersError(ConflictError):
    pass


class SpinInProgressError(ConflictError):
    pass
