from __future__ import annotations
import json
import re
from datetime import date, timedelta
from typing import Optional
from llm.providers.base import LLMProvider

class MockProvider(LLMProvider):
    """
    Offline provider for local development. Returns classification JSON
    based on simple keyword matching of the user text.
    """

    def generate(
        self,
        *,
        system: str,
        user: str,
        temperature: float = 0.1,
        model: Optional[str] = None,
    ) -> str:
        lower_user = user.lower()
        today = date.today()

        date_range = None
        day = today
        for keyword in ("next week", "this week", "tomorrow", "today"):
            if keyword in lower_user:
                date_range = keyword
                if keyword == "tomorrow":
                    day = today + timedelta(days=1)
                break

        if "reschedule" not in lower_user and any(
            w in lower_user for w in ("create", "add", "schedule")
        ):
            params = {"title": user, "date": day.isoformat()}
            m = re.search(r"\bat (\d{1,2})(?::(\d{2}))?\s*(am|pm)?", lower_user)
            if m:
                hour = int(m.group(1)) % 12 if m.group(3) else int(m.group(1))
                if m.group(3) == "pm":
                    hour += 12
                params["time"] = f"{hour:02d}:{m.group(2) or '00'}"
            return json.dumps({
                "intent": "CREATE_TASK",
                "confidence": 0.8,
                "parameters": params,
                "response": "Creating your task.",
            })

        if any(w in lower_user for w in ("show", "find", "list", "what", "search")):
            params = {"dateRange": date_range} if date_range else {"query": user}
            return json.dumps({
                "intent": "QUERY_TASKS",
                "confidence": 0.8,
                "parameters": params,
                "response": "Here are your tasks.",
            })

        if any(w in lower_user for w in ("delete", "remove", "cancel")):
            return json.dumps({
                "intent": "DELETE_TASK",
                "confidence": 0.7,
                "parameters": {"query": user},
                "response": "Which task should I remove?",
            })

        if any(w in lower_user for w in ("move", "change", "update", "reschedule")):
            return json.dumps({
                "intent": "UPDATE_TASK",
                "confidence": 0.7,
                "parameters": {"query": user},
                "response": "Which task should I change?",
            })

        # Default fallback
        return json.dumps({
            "intent": "UNKNOWN",
            "confidence": 0.0,
            "parameters": {},
            "response": "I'm not sure what you want to do.",
        })
