from __future__ import annotations

from typing import Optional, Protocol

from .model import SessionSlot


class SessionCatalog(Protocol):
    def resolve(self, session_id: str) -> Optional[SessionSlot]:
        raise NotImplementedError
