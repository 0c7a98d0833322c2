import logging
import time

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.backend import BackendAPI, CommandResult
from api.dependencies import get_access_policy, get_backend, get_event_store, get_session
from api.metrics import (
    EVENTS_CREATED_TOTAL,
    INTENTS_TOTAL,
    REQUESTS_TOTAL,
    REQUEST_LATENCY_SECONDS,
)
from api.session import SessionBusyError, SessionContext
from llm.schemas import ClassifiedIntent
from storage.event_store import AccessPolicy, EventStore

router = APIRouter(prefix="/nlp", tags=["nlp"])
logger = logging.getLogger(__name__)


class CommandIn(BaseModel):
    text: str = Field(..., min_length=1)


def _clean(text: str) -> str:
    text = text.strip()
    if not text:
        raise HTTPException(status_code=422, detail="text must not be blank")
    return text


@router.post("/classify")
async def classify(
    payload: CommandIn,
    backend: BackendAPI = Depends(get_backend),
) -> dict:
    result: ClassifiedIntent = await backend.classify(_clean(payload.text))
    try:
        INTENTS_TOTAL.labels(intent=result.intent.value).inc()
    except Exception:
        pass
    return {
        "intent": result.intent.value,
        "confidence": result.confidence,
        "parameters": result.parameters_dump(),
        "response": result.response,
    }


@router.post("/commands", response_model=CommandResult)
async def submit_command(
    payload: CommandIn,
    backend: BackendAPI = Depends(get_backend),
    session: SessionContext = Depends(get_session),
    store: EventStore = Depends(get_event_store),
    policy: AccessPolicy = Depends(get_access_policy),
) -> CommandResult:
    started = time.time()
    text = _clean(payload.text)
    logger.info(f"Received command: {text[:50]}...")

    try:
        result = await backend.submit_command(text, session, store, policy)
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    # Prometheus counters (best-effort)
    try:
        INTENTS_TOTAL.labels(intent=result.intent.value).inc()
        REQUESTS_TOTAL.labels(endpoint="/nlp/commands", status=result.status).inc()
        REQUEST_LATENCY_SECONDS.labels(endpoint="/nlp/commands").observe(
            time.time() - started
        )
        if result.event is not None:
            EVENTS_CREATED_TOTAL.labels(source="nlp").inc()
    except Exception:
        pass

    return result


@router.get("/history")
async def get_history(session: SessionContext = Depends(get_session)) -> dict:
    return session.to_dict()


@router.delete("/history")
async def clear_history(session: SessionContext = Depends(get_session)) -> dict:
    session.clear()
    return {"status": "cleared"}
