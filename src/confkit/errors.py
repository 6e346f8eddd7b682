"""Exception hierarchy for confkit."""

from typing import Any


class ConfkitError(Exception):
    """Base class for all confkit errors."""


class ConstructionError(ConfkitError):
    """Raised when a Field or Schema constructor receives malformed input."""


class FallbackResolutionError(ConstructionError):
    """Raised by a strict schema when a fallback path cannot be routed."""


class ValidationError(ConfkitError, ValueError):
    """
    Raised when a field violates a base rule or a type validator.

    Parameters
    ----------
    message : str
        The fully formatted message (``Field '<name>' errors: ...``).
    field_name : str, optional
        Name of the offending field, if known.
    value : Any, optional
        The value that was being validated.
    errors : list[str], optional
        One entry per violated rule, in evaluation order.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        value: Any = None,
        errors: list[str] | None = None,
    ):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.errors = list(errors or [])


class ReadOnlyFieldError(ValidationError):
    """Raised when writing to a field flagged READONLY."""


class UnknownTypeError(ConfkitError, KeyError):
    """Raised when looking up a type id that is not registered."""

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the plain message instead
        return str(self.args[0]) if self.args else ""


class DuplicateTypeError(ConfkitError, ValueError):
    """Raised when registering a type id that already exists."""
