from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil import parser as date_parser

from llm.schemas import CreateTaskParameters
from scheduling.date_range import as_local
from task_calendar.models import EventCreate

DEFAULT_TITLE = "New Task"

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


class EventMappingError(ValueError):
    """Classified parameters cannot be turned into an event."""


def _on_local_day(day: date, clock: time) -> datetime:
    # offset for that calendar date, not the one in force at ``now``
    return datetime.combine(day, clock).astimezone()


def _base_date(value: Optional[str], now: datetime) -> datetime:
    if not value:
        return now

    m = _ISO_DATE.match(value.strip())
    if m:
        # a bare date keeps the current time of day, not midnight
        try:
            day = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError as e:
            raise EventMappingError(f"Invalid date: {value}") from e
        return _on_local_day(day, now.time().replace(microsecond=0))

    try:
        parsed = date_parser.parse(
            value, default=now.replace(tzinfo=None, microsecond=0)
        )
    except (ValueError, OverflowError) as e:
        raise EventMappingError(f"Invalid date: {value}") from e
    return as_local(parsed)


def _apply_time(start: datetime, value: str) -> datetime:
    m = _CLOCK_TIME.match(value.strip())
    if not m:
        raise EventMappingError(f"Invalid time: {value}")
    try:
        clock = time(int(m.group(1)), int(m.group(2)))
    except ValueError as e:
        raise EventMappingError(f"Invalid time: {value}") from e
    return _on_local_day(start.date(), clock)


def build_event_request(
    parameters: CreateTaskParameters,
    original_input: str,
    now: Optional[datetime] = None,
) -> EventCreate:
    """Turn CREATE_TASK parameters into an event creation request."""
    now = now.astimezone() if now is not None else datetime.now().astimezone()

    title = (parameters.title or "").strip() or DEFAULT_TITLE

    start = _base_date(parameters.date, now)
    if parameters.time:
        start = _apply_time(start, parameters.time)

    end = None
    if parameters.duration:
        end = start + timedelta(minutes=parameters.duration)

    description = (
        parameters.description
        or f'Created via natural language: "{original_input}"'
    )

    return EventCreate(title=title, start=start, end=end, description=description)


def describe_created(request: EventCreate) -> str:
    start = request.start
    return (
        f'Successfully created "{request.title}" for '
        f'{start.strftime("%Y-%m-%d")} at {start.strftime("%H:%M")}.'
    )
