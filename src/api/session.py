from __future__ import annotations

import os
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, Dict, Iterator, List

CONVERSATION_HISTORY_SIZE = int(os.getenv("CONVERSATION_HISTORY_SIZE", "5"))


class SessionBusyError(RuntimeError):
    """A command for this session is still being processed."""


@dataclass(frozen=True)
class ConversationEntry:
    user: str
    assistant: str
    timestamp: datetime


class ConversationHistory:
    """Most recent exchanges, oldest evicted first once full."""

    def __init__(self, maxlen: int = CONVERSATION_HISTORY_SIZE):
        self._entries: Deque[ConversationEntry] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._entries.maxlen

    def append(self, entry: ConversationEntry) -> None:
        self._entries.append(entry)

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class SessionContext:
    session_id: str
    history: ConversationHistory = field(default_factory=ConversationHistory)
    last_response: str = ""
    busy: bool = False

    def record(self, user: str, assistant: str) -> ConversationEntry:
        entry = ConversationEntry(
            user=user,
            assistant=assistant,
            timestamp=datetime.now(timezone.utc),
        )
        self.history.append(entry)
        self.last_response = assistant
        return entry

    @contextmanager
    def in_flight(self):
        """Single-flight guard: a second submission is refused, not queued."""
        if self.busy:
            raise SessionBusyError(
                f"Session {self.session_id} is already processing a request"
            )
        self.busy = True
        try:
            yield self
        finally:
            self.busy = False

    def clear(self) -> None:
        self.history.clear()
        self.last_response = ""

    def to_dict(self) -> dict:
        entries: List[dict] = [
            {
                "user": e.user,
                "assistant": e.assistant,
                "timestamp": e.timestamp.isoformat(),
            }
            for e in self.history
        ]
        return {"history": entries, "last_response": self.last_response}


class SessionRegistry:
    def __init__(self):
        self._sessions: Dict[str, SessionContext] = {}

    def get(self, session_id: str) -> SessionContext:
        if session_id not in self._sessions:
            self._sessions[session_id] = SessionContext(session_id=session_id)
        return self._sessions[session_id]

    def clear(self) -> None:
        self._sessions.clear()
