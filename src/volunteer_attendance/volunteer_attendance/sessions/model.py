from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional, Union


@dataclass(frozen=True)
class SessionSlot:
    """Calendar slot a scheduled session points at."""

    session_id: str
    date: Optional[str]
    start_time: Union[str, time, None]
    end_time: Union[str, time, None]
    label: Optional[str] = None
