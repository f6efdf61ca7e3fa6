"""Exception types shared by the fetch, retry and cache layers."""

from typing import Any, Callable


class WeatherCardsError(Exception):
    """Base class for weathercards errors."""


class TransientFailure(WeatherCardsError):
    """Network or API error; safe to retry."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ValidationFailure(WeatherCardsError):
    """Response shape rejected by a validation predicate; retried like a transient error."""


class PersistenceFailure(WeatherCardsError):
    """Key/value store read or write error. Never escapes the cache."""


def validate_data(data: Any, condition: Callable[[Any], Any], message: str) -> None:
    """
    Raise ValidationFailure unless condition(data) is truthy.

    Args:
        data: Decoded response payload
        condition: Predicate applied to the payload
        message: Error message used when the predicate rejects the data

    Raises:
        ValidationFailure: If the predicate fails or raises on malformed data
    """
    try:
        ok = condition(data)
    except (KeyError, IndexError, TypeError, AttributeError):
        ok = False
    if not ok:
        raise ValidationFailure(message)
