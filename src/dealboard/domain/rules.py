from __future__ import annotations

from datetime import date


class ValidationError(ValueError):
    pass


class BoardError(RuntimeError):
    pass


class NotFoundError(BoardError, LookupError):
    pass


class EmptyDatasetError(BoardError):
    pass


class ReentrantMutationError(BoardError):
    pass


class ListenerError(BoardError):
    """A change listener failed after the registry change was applied."""

    def __init__(self, message: str, state) -> None:
        super().__init__(message)
        self.state = state


def require(value: str | None, field: str) -> None:
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{field} is required.")


def validate_range(value: int | None, field: str, low: int, high: int | None = None) -> None:
    if value is None or isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer.")
    if value < low or (high is not None and value > high):
        if high is None:
            raise ValidationError(f"{field} must be >= {low}.")
        raise ValidationError(f"{field} must be between {low} and {high}.")


def parse_date(value: str | date | None, field: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError(f"{field} must be YYYY-MM-DD.") from exc
