"""Domain exceptions raised by the engine and mapped to HTTP statuses by main.py."""


class GameError(Exception):
    """Base class for every error the engine reports to a caller."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(GameError):
    """A game, player, actor or world does not exist."""

    status_code = 404

    def __init__(self, kind: str, entity_id: int | str | None = None) -> None:
        if entity_id is None:
            message = f"{kind} not found"
        else:
            message = f"{kind} with id {entity_id} not found"
        super().__init__(message)
        self.kind = kind
        self.entity_id = entity_id


class ValidationError(GameError, ValueError):
    """Malformed order payload or a request that contradicts game state."""

    status_code = 400


class ConflictError(GameError):
    """Game full, already started, or a duplicate submission."""

    status_code = 409


class UnauthorizedError(GameError):
    """The requester may not perform this action."""

    status_code = 403

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
