from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional, Protocol, Union
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_FACILITY_TIMEZONE

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*([AaPp][Mm])?\s*$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current facility-local time."""
    return datetime.now(tz or ZoneInfo(DEFAULT_FACILITY_TIMEZONE))


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


@dataclass(frozen=True)
class SystemClock:
    tz: tzinfo = field(default_factory=lambda: ZoneInfo(DEFAULT_FACILITY_TIMEZONE))

    def now(self) -> datetime:
        return now_local(self.tz)


@dataclass
class FixedClock:
    """Clock pinned to one instant; advance it explicitly."""

    current: datetime

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


def to_local(value: datetime, tz: tzinfo) -> datetime:
    """Express an instant in facility-local time.

    Naive datetimes are taken as already facility-local.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_date_str(value: datetime, tz: tzinfo) -> str:
    return to_local(value, tz).strftime("%Y-%m-%d")


def _as_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc) if value.tzinfo is not None else value


def shift_elapsed(value: datetime, delta: timedelta) -> datetime:
    """Move an instant by real elapsed time, not wall-clock time.

    Same-zone aware arithmetic in Python keeps the wall clock, which is off by
    the DST jump on transition days. Naive values use plain arithmetic.
    """
    if value.tzinfo is None:
        return value + delta
    return (_as_utc(value) + delta).astimezone(value.tzinfo)


def elapsed_between(start: datetime, end: datetime) -> timedelta:
    return _as_utc(end) - _as_utc(start)


def parse_session_time(value: Union[str, time, None]) -> Optional[time]:
    """Parse a session clock time.

    Accepts "14:00", "14:00:00", "2:00 PM", "12 AM" or a datetime.time.
    Returns None for empty input and raises ValueError for anything malformed.
    """

    if value is None:
        return None
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid session time: {value!r}")
    if not value.strip():
        return None

    m = _TIME_RE.match(value)
    if not m:
        raise ValueError(f"Invalid session time: {value!r}")

    hours = int(m.group(1))
    minutes = int(m.group(2) or 0)
    seconds = int(m.group(3) or 0)
    meridiem = (m.group(4) or "").upper()

    if meridiem:
        if not 1 <= hours <= 12:
            raise ValueError(f"Invalid session time: {value!r}")
        if meridiem == "PM" and hours != 12:
            hours += 12
        elif meridiem == "AM" and hours == 12:
            hours = 0

    return time(hour=hours, minute=minutes, second=seconds)


def combine_local(day: Union[str, date], clock_time: time, tz: tzinfo) -> datetime:
    if isinstance(day, str):
        day = parse_iso_date(day)
    return datetime.combine(day, clock_time, tzinfo=tz)


def normalize_instant(value: Any, *, assume_tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Normalize the store's many time representations into an aware datetime.

    Handles datetime (naive values are read in ``assume_tz``), ISO-8601 strings
    and epoch milliseconds. Used at the repository boundary only.
    """

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=assume_tz)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(float(value) / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=assume_tz)

    raise TypeError(f"Unsupported instant value type: {type(value)!r}")


def to_storage(value: Optional[datetime]) -> Optional[datetime]:
    """Naive UTC datetime for DATETIME(6) columns."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
