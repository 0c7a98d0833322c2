from __future__ import annotations

from typing import Iterable, Optional

from scheduling.date_range import DateRange, as_local
from task_calendar.models import Event

# local start-hour windows, [from, to)
TIME_RANGES = {
    "morning": (5, 12),
    "afternoon": (12, 17),
    "evening": (17, 24),
}


def overlaps(event: Event, date_range: DateRange) -> bool:
    if date_range.is_empty:
        return False
    start = as_local(event.start)
    end = as_local(event.end) if event.end is not None else start
    return end >= date_range.start and start < date_range.end


def matches_query(event: Event, query: str) -> bool:
    needle = query.lower()
    if needle in event.title.lower():
        return True
    return bool(event.description) and needle in event.description.lower()


def in_time_range(event: Event, time_range: str) -> bool:
    window = TIME_RANGES.get(time_range.strip().lower())
    if window is None:
        # unrecognized windows do not narrow the result
        return True
    hour = event.start.astimezone().hour
    return window[0] <= hour < window[1]


def filter_events(
    events: Iterable[Event],
    date_range: Optional[DateRange] = None,
    query: Optional[str] = None,
    time_range: Optional[str] = None,
) -> list[Event]:
    """Keep events overlapping ``date_range`` whose title or description
    contains ``query``. Input order is preserved."""
    out = []
    for event in events:
        if date_range is not None and not overlaps(event, date_range):
            continue
        if query and not matches_query(event, query):
            continue
        if time_range and not in_time_range(event, time_range):
            continue
        out.append(event)
    return out
