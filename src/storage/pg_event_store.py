"""
PostgreSQL-backed event store (EVENT_STORE=postgres).

Creation order is kept with a BIGSERIAL ``seq`` column. Update and delete
lock the row first, so the ownership check and the change happen in one
transaction.
"""

import logging
import re
import uuid
from datetime import datetime
from typing import Optional

from scheduling.date_range import as_local
from storage import db
from storage.event_store import (
    SEARCH_LIMIT,
    AccessMode,
    AccessPolicy,
    EventNotFoundError,
    EventStore,
    search_score,
)
from task_calendar.models import Event, EventCreate, EventUpdate

logger = logging.getLogger(__name__)

_COLUMNS = {
    "title": "title",
    "start": "start_at",
    "end": "end_at",
    "description": "description",
}

_SELECT = (
    "SELECT id, title, start_at, end_at, description, created_by, created_at "
    "FROM events"
)


def _event_from_record(record) -> Event:
    return Event(
        id=str(record["id"]),
        title=record["title"],
        start=record["start_at"],
        end=record["end_at"],
        description=record["description"],
        created_by=record["created_by"],
        created_at=record["created_at"],
    )


def _parse_id(event_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(event_id)
    except ValueError:
        return None


def _visibility_clause(policy: AccessPolicy, args: list) -> str:
    if policy.mode is AccessMode.UNRESTRICTED:
        return "TRUE"
    args.append(policy.user_id)
    return f"created_by = ${len(args)}"


class PostgresEventStore(EventStore):

    async def list_events(
        self,
        policy: AccessPolicy,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
    ) -> list[Event]:
        args: list = []
        clauses = [_visibility_clause(policy, args)]
        if range_start is not None:
            args.append(as_local(range_start))
            clauses.append(f"COALESCE(end_at, start_at) >= ${len(args)}")
        if range_end is not None:
            args.append(as_local(range_end))
            clauses.append(f"start_at <= ${len(args)}")

        query = f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY seq"
        records = await db.fetch(query, *args)
        return [_event_from_record(r) for r in records]

    async def get_event(self, event_id: str) -> Optional[Event]:
        key = _parse_id(event_id)
        if key is None:
            return None
        record = await db.fetchrow(f"{_SELECT} WHERE id = $1", key)
        return _event_from_record(record) if record else None

    async def create_event(self, request: EventCreate, policy: AccessPolicy) -> str:
        query = """
            INSERT INTO events (title, start_at, end_at, description, created_by)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id
        """
        event_id = await db.fetchval(
            query,
            request.title,
            as_local(request.start),
            as_local(request.end) if request.end is not None else None,
            request.description,
            policy.owner,
        )
        logger.info(f"Created event {event_id} ({request.title!r})")
        return str(event_id)

    async def _lock_for_change(self, conn, event_id: str, policy: AccessPolicy, action: str):
        key = _parse_id(event_id)
        record = None
        if key is not None:
            record = await conn.fetchrow(f"{_SELECT} WHERE id = $1 FOR UPDATE", key)
        if record is None:
            raise EventNotFoundError(event_id)
        policy.check_modify(_event_from_record(record), action)
        return key

    async def update_event(
        self, event_id: str, patch: EventUpdate, policy: AccessPolicy
    ) -> str:
        changes = patch.changes()
        async with db.get_connection() as conn:
            async with conn.transaction():
                key = await self._lock_for_change(conn, event_id, policy, "update")
                if changes:
                    args: list = [key]
                    assignments = []
                    for field, value in changes.items():
                        if isinstance(value, datetime):
                            value = as_local(value)
                        args.append(value)
                        assignments.append(f"{_COLUMNS[field]} = ${len(args)}")
                    await conn.execute(
                        f"UPDATE events SET {', '.join(assignments)} WHERE id = $1",
                        *args,
                    )
        logger.info(f"Updated event {event_id} fields={sorted(changes)}")
        return event_id

    async def delete_event(self, event_id: str, policy: AccessPolicy) -> str:
        async with db.get_connection() as conn:
            async with conn.transaction():
                key = await self._lock_for_change(conn, event_id, policy, "delete")
                await conn.execute("DELETE FROM events WHERE id = $1", key)
        logger.info(f"Deleted event {event_id}")
        return event_id

    async def search_by_title(
        self, text: str, policy: AccessPolicy, limit: int = SEARCH_LIMIT
    ) -> list[Event]:
        words = [w for w in re.split(r"\W+", text.lower()) if w]
        if not words:
            return []

        args: list = [[f"%{w}%" for w in words]]
        visibility = _visibility_clause(policy, args)
        query = (
            f"{_SELECT} WHERE title ILIKE ANY($1::text[]) AND {visibility} "
            "ORDER BY seq"
        )
        records = await db.fetch(query, *args)

        scored = [(search_score(r["title"], text), _event_from_record(r)) for r in records]
        scored = sorted(scored, key=lambda pair: pair[0], reverse=True)
        return [event for _, event in scored[:limit]]
