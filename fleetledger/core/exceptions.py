"""
Error taxonomy for the settlement engine.

None of these are retried: the same input always fails the same way, so the
caller has to fix the contract, the input or re-fetch the record first.
"""

from typing import Optional


class EngineError(Exception):
    """Base class for all settlement engine errors."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ValidationError(EngineError, ValueError):
    """Bad, missing or negative numeric input."""


class ConfigurationError(EngineError):
    """A pay contract lacks the rate its own pay mode requires."""


class InvalidStateError(EngineError):
    """Attempt to transition a record that is already terminal."""


class NotFoundError(EngineError, LookupError):
    """Referenced load or dispute does not exist."""
