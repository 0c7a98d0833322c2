import logging
import os

from fastapi import FastAPI

from api import state
from api.routers import events, nlp, ops
from storage import db

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

EVENT_STORE = os.getenv("EVENT_STORE", "memory").strip().lower()

app = FastAPI(title="Task Calendar")
app.include_router(events.router)
app.include_router(nlp.router)
app.include_router(ops.router)


@app.on_event("startup")
async def startup() -> None:
    if EVENT_STORE == "postgres":
        from storage.pg_event_store import PostgresEventStore

        await db.init_db_pool()
        await db.init_schema()
        state.event_store = PostgresEventStore()
        state.database_enabled = True
        logger.info("Using PostgreSQL event store")
    else:
        logger.info("Using in-memory event store")


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.database_enabled:
        await db.close_db_pool()
        state.database_enabled = False
