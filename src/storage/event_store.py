"""
Event persistence for the task calendar.

Every store operation takes an explicit AccessPolicy describing who is
asking. The policy, not the store, decides which events are visible and
which may be changed.
"""

from __future__ import annotations

import logging
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from scheduling.date_range import as_local, resolve_date_range
from task_calendar.models import Event, EventCreate, EventUpdate

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20


class EventNotFoundError(LookupError):
    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class EventAccessDeniedError(PermissionError):
    def __init__(self, event_id: str, action: str):
        super().__init__(f"Not authorized to {action} this event")
        self.event_id = event_id
        self.action = action


class AccessMode(str, Enum):
    OWNED = "owned"
    UNRESTRICTED = "unrestricted"


@dataclass(frozen=True)
class AccessPolicy:
    """
    OWNED: an authenticated caller sees and changes only events it created.
    UNRESTRICTED: an anonymous caller sees every event and may change any of them.
    """

    mode: AccessMode
    user_id: Optional[str] = None

    @classmethod
    def for_user(cls, user_id: Optional[str]) -> "AccessPolicy":
        if user_id:
            return cls(AccessMode.OWNED, user_id)
        return cls(AccessMode.UNRESTRICTED)

    @property
    def owner(self) -> Optional[str]:
        """Creator recorded on new events."""
        return self.user_id if self.mode is AccessMode.OWNED else None

    def can_view(self, event: Event) -> bool:
        if self.mode is AccessMode.UNRESTRICTED:
            return True
        return event.created_by == self.user_id

    def can_modify(self, event: Event) -> bool:
        return self.can_view(event)

    def check_modify(self, event: Event, action: str) -> None:
        if not self.can_modify(event):
            logger.warning(
                f"User {self.user_id} denied {action} on event {event.id}"
            )
            raise EventAccessDeniedError(event.id, action)


def search_score(title: str, text: str) -> int:
    """Crude relevance: whole-phrase hit first, then number of matching words."""
    lowered = title.lower()
    needle = text.lower().strip()
    words = [w for w in re.split(r"\W+", needle) if w]
    hits = sum(1 for w in words if w in lowered)
    if not hits:
        return 0
    return hits + (len(words) + 1 if needle in lowered else 0)


class EventStore(ABC):
    """Async event store interface consumed by the API and the command pipeline."""

    @abstractmethod
    async def list_events(
        self,
        policy: AccessPolicy,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
    ) -> list[Event]:
        """Visible events in creation order, optionally limited to those
        overlapping the inclusive [range_start, range_end] window."""

    @abstractmethod
    async def get_event(self, event_id: str) -> Optional[Event]:
        ...

    @abstractmethod
    async def create_event(self, request: EventCreate, policy: AccessPolicy) -> str:
        ...

    @abstractmethod
    async def update_event(
        self, event_id: str, patch: EventUpdate, policy: AccessPolicy
    ) -> str:
        ...

    @abstractmethod
    async def delete_event(self, event_id: str, policy: AccessPolicy) -> str:
        ...

    @abstractmethod
    async def search_by_title(
        self, text: str, policy: AccessPolicy, limit: int = SEARCH_LIMIT
    ) -> list[Event]:
        ...

    async def events_in_range(
        self, keyword: str, policy: AccessPolicy, now: Optional[datetime] = None
    ) -> list[Event]:
        """Visible events whose start falls inside the resolved keyword range."""
        date_range = resolve_date_range(keyword, now)
        if date_range.is_empty:
            return []
        events = await self.list_events(policy)
        return [e for e in events if date_range.contains(as_local(e.start))]


def _in_window(
    event: Event, range_start: Optional[datetime], range_end: Optional[datetime]
) -> bool:
    start = as_local(event.start)
    end = as_local(event.end) if event.end is not None else start
    if range_start is not None and end < as_local(range_start):
        return False
    if range_end is not None and start > as_local(range_end):
        return False
    return True


class InMemoryEventStore(EventStore):
    """Process-local store. Dicts keep insertion order, which is creation order."""

    def __init__(self):
        self._events: dict[str, Event] = {}

    async def list_events(
        self,
        policy: AccessPolicy,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
    ) -> list[Event]:
        return [
            e
            for e in self._events.values()
            if policy.can_view(e) and _in_window(e, range_start, range_end)
        ]

    async def get_event(self, event_id: str) -> Optional[Event]:
        return self._events.get(event_id)

    async def create_event(self, request: EventCreate, policy: AccessPolicy) -> str:
        event = Event(
            id=uuid.uuid4().hex,
            title=request.title,
            start=request.start,
            end=request.end,
            description=request.description,
            created_by=policy.owner,
            created_at=datetime.now(timezone.utc),
        )
        self._events[event.id] = event
        logger.info(f"Created event {event.id} ({event.title!r})")
        return event.id

    async def _get_for_change(
        self, event_id: str, policy: AccessPolicy, action: str
    ) -> Event:
        event = self._events.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        policy.check_modify(event, action)
        return event

    async def update_event(
        self, event_id: str, patch: EventUpdate, policy: AccessPolicy
    ) -> str:
        event = await self._get_for_change(event_id, policy, "update")
        changes = patch.changes()
        if changes:
            self._events[event_id] = event.model_copy(update=changes)
        logger.info(f"Updated event {event_id} fields={sorted(changes)}")
        return event_id

    async def delete_event(self, event_id: str, policy: AccessPolicy) -> str:
        await self._get_for_change(event_id, policy, "delete")
        del self._events[event_id]
        logger.info(f"Deleted event {event_id}")
        return event_id

    async def search_by_title(
        self, text: str, policy: AccessPolicy, limit: int = SEARCH_LIMIT
    ) -> list[Event]:
        if not text.strip():
            return []
        scored = []
        for event in self._events.values():
            if not policy.can_view(event):
                continue
            score = search_score(event.title, text)
            if score:
                scored.append((score, event))
        # sorted() is stable, so ties keep creation order
        scored = sorted(scored, key=lambda pair: pair[0], reverse=True)
        return [event for _, event in scored[:limit]]
