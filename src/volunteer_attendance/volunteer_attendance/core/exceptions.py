from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or refers to an unknown person."""


class UnknownPerson(ValidationError):
    """No volunteer with the given id in the directory."""


class StateConflict(DomainError):
    """The request is valid but current presence state makes it a no-op."""

    reason = "state_conflict"

    def __init__(self, message: str, *, record: Optional[Any] = None):
        super().__init__(message)
        self.record = record


class AlreadyCheckedIn(StateConflict):
    """An open facility record already exists for the person."""

    reason = "already_checked_in"


class NotEligibleForCheckout(StateConflict):
    """No open facility record and no session attendance today."""

    reason = "not_eligible_for_checkout"


class TransientIOError(DomainError):
    """The attendance store was unreachable or timed out. Safe to retry."""


class DataIntegrityWarning(UserWarning):
    """More than one open facility record was found for a person.

    Never raised: the most recent record wins and this is only logged.
    """
