from typing import Optional

from fastapi import Header

from api import state
from api.backend import BackendAPI
from api.session import SessionContext
from storage.event_store import AccessPolicy, EventStore

DEFAULT_SESSION_ID = "default"

backend = BackendAPI()


def get_event_store() -> EventStore:
    return state.event_store


def get_access_policy(
    x_user_id: Optional[str] = Header(default=None),
) -> AccessPolicy:
    """Caller identity comes from the auth proxy in front of the API."""
    return AccessPolicy.for_user(x_user_id.strip() if x_user_id else None)


def get_session(
    x_session_id: Optional[str] = Header(default=None),
) -> SessionContext:
    return state.sessions.get(x_session_id or DEFAULT_SESSION_ID)


def get_backend() -> BackendAPI:
    return backend
