from api.session import SessionRegistry
from storage.event_store import EventStore, InMemoryEventStore

# Replaced at startup when EVENT_STORE=postgres
event_store: EventStore = InMemoryEventStore()

sessions = SessionRegistry()

# True once the asyncpg pool backs the event store
database_enabled = False
