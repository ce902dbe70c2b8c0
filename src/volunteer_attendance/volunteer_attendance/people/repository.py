from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Person, ScheduledSession


class PersonDirectory(Protocol):
    """Read-only view of volunteers and their schedules.

    Note (DIP): attendance services depend on this interface, not on a concrete DB.
    """

    def get_person(self, person_id: str) -> Optional[Person]:
        raise NotImplementedError

    def scheduled_sessions(self, person_id: str) -> Sequence[ScheduledSession]:
        raise NotImplementedError

    def list_names(self) -> dict[str, str]:
        """person_id -> display name, used by reports."""

        raise NotImplementedError
