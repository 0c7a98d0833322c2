import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Literal, Optional

from pydantic import BaseModel, Field

from api.session import SessionContext
from classification.intent_classifier import IntentClassifier
from extraction.event_mapper import build_event_request, describe_created
from llm.schemas import ClassifiedIntent, Intent
from scheduling.date_range import resolve_date_range
from scheduling.event_filter import filter_events
from storage.event_store import AccessPolicy, EventStore
from task_calendar.models import Event

logger = logging.getLogger(__name__)

CREATE_FAILED_RESPONSE = "Sorry, I couldn't create that task. Please try again."
UPDATE_RESPONSE = (
    "Task updating is not yet implemented. Please create a new task or search for existing ones."
)
DELETE_RESPONSE = (
    "Task deletion is not yet implemented. Please use the calendar interface to manage tasks."
)
UNKNOWN_RESPONSE = (
    "I'm not sure what you want to do. Try asking me to create a task or search for existing ones."
)


class CommandResult(BaseModel):
    status: Literal["ok", "failed"] = "ok"
    intent: Intent
    confidence: float
    parameters: dict = Field(default_factory=dict)
    response: str
    event: Optional[Event] = None
    events: List[Event] = Field(default_factory=list)


class BackendAPI:
    """Central orchestration of a natural-language command: classify, then act."""

    def __init__(
        self,
        classifier: Optional[IntentClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.classifier = classifier or IntentClassifier()
        self.clock = clock or (lambda: datetime.now().astimezone())

    async def classify(self, text: str) -> ClassifiedIntent:
        # providers use blocking httpx clients
        return await asyncio.to_thread(self.classifier.classify, text)

    async def submit_command(
        self,
        text: str,
        session: SessionContext,
        store: EventStore,
        policy: AccessPolicy,
    ) -> CommandResult:
        """Process one submission for ``session``.

        Raises SessionBusyError if the session already has one in flight.
        """
        with session.in_flight():
            classified = await self.classify(text)

            if classified.intent is Intent.CREATE_TASK:
                result = await self._create(classified, text, store, policy)
            elif classified.intent is Intent.QUERY_TASKS:
                result = await self._query(classified, store, policy)
            elif classified.intent is Intent.UPDATE_TASK:
                result = self._reply(classified, UPDATE_RESPONSE)
            elif classified.intent is Intent.DELETE_TASK:
                result = self._reply(classified, DELETE_RESPONSE)
            else:
                result = self._reply(classified, classified.response or UNKNOWN_RESPONSE)

            session.record(text, result.response)
            return result

    def _reply(self, classified: ClassifiedIntent, response: str, **extra) -> CommandResult:
        return CommandResult(
            intent=classified.intent,
            confidence=classified.confidence,
            parameters=classified.parameters_dump(),
            response=response,
            **extra,
        )

    async def _create(
        self,
        classified: ClassifiedIntent,
        text: str,
        store: EventStore,
        policy: AccessPolicy,
    ) -> CommandResult:
        try:
            request = build_event_request(classified.parameters, text, now=self.clock())
            event_id = await store.create_event(request, policy)
            event = await store.get_event(event_id)
        except Exception as e:
            # no retry; the user resubmits
            logger.error(f"Failed to create task from {text!r}: {e}")
            return self._reply(classified, CREATE_FAILED_RESPONSE, status="failed")

        return self._reply(classified, describe_created(request), event=event)

    async def _query(
        self,
        classified: ClassifiedIntent,
        store: EventStore,
        policy: AccessPolicy,
    ) -> CommandResult:
        params = classified.parameters
        date_range = None
        if params.date_range:
            date_range = resolve_date_range(params.date_range, self.clock())

        events = await store.list_events(policy)
        matches = filter_events(
            events,
            date_range=date_range,
            query=params.query,
            time_range=params.time_range,
        )
        logger.info(f"Query matched {len(matches)} of {len(events)} events")

        response = classified.response or (
            f"Found {len(matches)} matching task(s)."
        )
        return self._reply(classified, response, events=matches)
