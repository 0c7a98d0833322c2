from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

DATE_RANGE_KEYWORDS = ("today", "tomorrow", "this_week", "next_week")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateRange:
    """Half-open interval [start, end) of timezone-aware instants."""

    start: datetime
    end: datetime

    @property
    def is_empty(self) -> bool:
        return self.end <= self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def as_local(value: datetime) -> datetime:
    """Attach the local timezone to naive datetimes; aware ones pass through."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


def normalize_keyword(value: str) -> str:
    """'This Week', 'this-week' and 'this_week' all become 'this_week'."""
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


def local_midnight(day: date) -> datetime:
    # the offset is looked up for that date, so DST changes land on the right day
    return datetime.combine(day, time()).astimezone()


def _sunday_offset(day: date) -> int:
    # date.weekday() is Monday=0; weeks here start on Sunday
    return (day.weekday() + 1) % 7


def resolve_date_range(keyword: str, now: Optional[datetime] = None) -> DateRange:
    """
    Resolve a relative keyword (or a literal YYYY-MM-DD date) against ``now``.

    Unknown keywords give an empty range, which matches nothing. The result
    is recomputed on every call so it always reflects the current day.
    """
    # always read ``now`` on the local wall clock, whatever zone it came in
    now = now.astimezone() if now is not None else datetime.now().astimezone()
    today = now.date()
    raw = (keyword or "").strip()

    if _ISO_DATE.match(raw):
        try:
            day = date.fromisoformat(raw)
        except ValueError:
            return DateRange(now, now)
        return _days(day, 1)

    key = normalize_keyword(raw)

    if key == "today":
        return _days(today, 1)

    if key == "tomorrow":
        return _days(today + timedelta(days=1), 1)

    if key == "this_week":
        return _days(today - timedelta(days=_sunday_offset(today)), 7)

    if key == "next_week":
        return _days(today + timedelta(days=7 - _sunday_offset(today)), 7)

    return DateRange(now, now)


def _days(first: date, count: int) -> DateRange:
    return DateRange(local_midnight(first), local_midnight(first + timedelta(days=count)))
