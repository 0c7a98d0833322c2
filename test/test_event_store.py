import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from storage.event_store import (
    AccessMode,
    AccessPolicy,
    EventAccessDeniedError,
    EventNotFoundError,
    InMemoryEventStore,
)
from task_calendar.models import EventCreate, EventUpdate

UTC = timezone.utc
ANON = AccessPolicy.for_user(None)
ALICE = AccessPolicy.for_user("alice")
BOB = AccessPolicy.for_user("bob")


def run(coro):
    return asyncio.run(coro)


def _request(title="Standup", start=datetime(2024, 3, 15, 9, 0, tzinfo=UTC), **kw):
    return EventCreate(title=title, start=start, **kw)


def test_policy_modes():
    assert ANON.mode is AccessMode.UNRESTRICTED
    assert ALICE.mode is AccessMode.OWNED
    assert ALICE.owner == "alice"
    assert ANON.owner is None


def test_create_then_list_round_trip():
    store = InMemoryEventStore()
    req = _request(
        title="Review",
        end=datetime(2024, 3, 15, 10, 0, tzinfo=UTC),
        description="quarterly numbers",
    )
    event_id = run(store.create_event(req, ALICE))

    [event] = run(store.list_events(ALICE))
    assert event.id == event_id
    assert (event.title, event.start, event.end, event.description) == (
        req.title, req.start, req.end, req.description,
    )
    assert event.created_by == "alice"
    assert event.created_at is not None


def test_owned_listing_hides_other_users():
    store = InMemoryEventStore()
    run(store.create_event(_request("Alice's"), ALICE))
    run(store.create_event(_request("Bob's"), BOB))
    run(store.create_event(_request("Anonymous"), ANON))

    assert [e.title for e in run(store.list_events(ALICE))] == ["Alice's"]
    assert len(run(store.list_events(ANON))) == 3


def test_list_with_window():
    store = InMemoryEventStore()
    run(store.create_event(_request("early", datetime(2024, 3, 14, 9, 0, tzinfo=UTC)), ANON))
    run(store.create_event(_request("late", datetime(2024, 3, 16, 9, 0, tzinfo=UTC)), ANON))

    events = run(store.list_events(
        ANON,
        range_start=datetime(2024, 3, 15, tzinfo=UTC),
        range_end=datetime(2024, 3, 17, tzinfo=UTC),
    ))
    assert [e.title for e in events] == ["late"]


def test_update_applies_only_given_fields():
    store = InMemoryEventStore()
    event_id = run(store.create_event(_request(description="keep me"), ALICE))
    new_start = datetime(2024, 3, 15, 11, 0, tzinfo=UTC)

    assert run(store.update_event(event_id, EventUpdate(start=new_start), ALICE)) == event_id

    event = run(store.get_event(event_id))
    assert event.start == new_start
    assert event.title == "Standup"
    assert event.description == "keep me"


def test_update_unknown_event():
    store = InMemoryEventStore()
    with pytest.raises(EventNotFoundError):
        run(store.update_event("missing", EventUpdate(title="x"), ANON))


def test_other_user_cannot_update_or_delete():
    store = InMemoryEventStore()
    event_id = run(store.create_event(_request(), ALICE))

    with pytest.raises(EventAccessDeniedError):
        run(store.update_event(event_id, EventUpdate(title="hijacked"), BOB))
    with pytest.raises(EventAccessDeniedError):
        run(store.delete_event(event_id, BOB))

    assert run(store.get_event(event_id)).title == "Standup"


def test_signed_in_user_cannot_touch_anonymous_events():
    store = InMemoryEventStore()
    event_id = run(store.create_event(_request(), ANON))
    with pytest.raises(EventAccessDeniedError):
        run(store.delete_event(event_id, ALICE))


def test_anonymous_caller_may_change_any_event():
    store = InMemoryEventStore()
    event_id = run(store.create_event(_request(), ALICE))
    assert run(store.delete_event(event_id, ANON)) == event_id
    assert run(store.get_event(event_id)) is None


def test_delete_unknown_event():
    with pytest.raises(EventNotFoundError):
        run(InMemoryEventStore().delete_event("missing", ANON))


def test_search_by_title():
    store = InMemoryEventStore()
    run(store.create_event(_request("Team meeting"), ANON))
    run(store.create_event(_request("Dentist"), ANON))
    run(store.create_event(_request("Weekly team meeting notes"), ANON))
    run(store.create_event(_request("Team lunch"), ANON))

    titles = [e.title for e in run(store.search_by_title("team meeting", ANON))]
    assert titles == ["Team meeting", "Weekly team meeting notes", "Team lunch"]
    assert run(store.search_by_title("   ", ANON)) == []


def test_search_limit_and_visibility():
    store = InMemoryEventStore()
    for i in range(25):
        run(store.create_event(_request(f"Meeting {i}"), ALICE))
    run(store.create_event(_request("Meeting bob"), BOB))

    results = run(store.search_by_title("meeting", ALICE))
    assert len(results) == 20
    assert all(e.created_by == "alice" for e in results)


def test_events_in_range_uses_start():
    store = InMemoryEventStore()
    now = datetime(2024, 3, 15, 10, 0, tzinfo=UTC)
    run(store.create_event(_request("today", now - timedelta(hours=2)), ANON))
    run(store.create_event(
        _request("spans into today", now - timedelta(days=1), end=now), ANON
    ))
    run(store.create_event(_request("tomorrow", now + timedelta(days=1)), ANON))

    assert [e.title for e in run(store.events_in_range("today", ANON, now=now))] == ["today"]
    assert [e.title for e in run(store.events_in_range("tomorrow", ANON, now=now))] == ["tomorrow"]
    assert run(store.events_in_range("fortnight", ANON, now=now)) == []
