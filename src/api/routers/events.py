import logging
import time
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_access_policy, get_event_store
from api.metrics import EVENTS_CREATED_TOTAL, REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from scheduling.date_range import resolve_date_range
from storage.event_store import (
    AccessPolicy,
    EventAccessDeniedError,
    EventNotFoundError,
    EventStore,
)
from task_calendar.models import Event, EventCreate, EventUpdate

router = APIRouter(prefix="/events", tags=["events"])
logger = logging.getLogger(__name__)


def _observe(endpoint: str, status: str, started: float) -> None:
    try:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status=status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - started)
    except Exception:
        pass


@router.get("", response_model=List[Event])
async def list_events(
    range_start: Optional[datetime] = None,
    range_end: Optional[datetime] = None,
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> List[Event]:
    """All visible events, optionally limited to an inclusive time window."""
    return await store.list_events(policy, range_start=range_start, range_end=range_end)


@router.get("/search", response_model=List[Event])
async def search_events(
    q: str = Query("", description="Text to look for in event titles"),
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> List[Event]:
    return await store.search_by_title(q, policy)


@router.get("/range/{keyword}")
async def events_in_range(
    keyword: str,
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> dict:
    """Events starting today, tomorrow, this_week, next_week or on a YYYY-MM-DD date."""
    date_range = resolve_date_range(keyword)
    events = await store.events_in_range(keyword, policy)
    return {
        "keyword": keyword,
        "range": {"start": date_range.start.isoformat(), "end": date_range.end.isoformat()},
        "events": [e.model_dump(mode="json") for e in events],
    }


@router.post("", status_code=201)
async def create_event(
    payload: EventCreate,
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> dict:
    started = time.time()
    try:
        event_id = await store.create_event(payload, policy)
    except Exception as e:
        logger.error(f"Error creating event: {e}")
        _observe("/events", "failed", started)
        raise HTTPException(status_code=500, detail="Failed to create event")

    _observe("/events", "created", started)
    try:
        EVENTS_CREATED_TOTAL.labels(source="direct").inc()
    except Exception:
        pass
    return {"id": event_id}


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    payload: EventUpdate,
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> dict:
    try:
        await store.update_event(event_id, payload, policy)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EventAccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"id": event_id}


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> dict:
    try:
        await store.delete_event(event_id, policy)
    except EventNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EventAccessDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"id": event_id}
