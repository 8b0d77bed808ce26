"""Errors raised by the nutrition services."""


class NotFoundError(LookupError):
    """Entity does not exist or belongs to another user."""

    def __init__(self, entity: str) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity


class InvalidInputError(ValueError):
    """Input rejected before any mutation was staged."""

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class StaleWriteError(RuntimeError):
    """A guarded write found the row changed since it was read."""
