from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError

from llm.llm_client import LLMClient
from llm.prompts import INTENT_SYSTEM_PROMPT
from llm.schemas import (
    ClassifiedIntent,
    CreateTaskParameters,
    Intent,
    QueryTasksParameters,
    UnknownParameters,
)

logger = logging.getLogger(__name__)

NLP_TEMPERATURE = float(os.getenv("NLP_TEMPERATURE", "0.1"))

CREATE_KEYWORDS = ("create", "add", "schedule")
QUERY_KEYWORDS = ("find", "show", "search", "list", "what", "when", "do i have")

REPHRASE_RESPONSE = (
    "I'm not sure what you want to do. Could you please rephrase your request?"
)
HELP_RESPONSE = (
    "I'm not sure what you want to do. Try saying something like "
    "'Create a meeting tomorrow at 2pm' or 'Show me my tasks for today'."
)


class ClassificationParseError(ValueError):
    """The model answered, but not with a usable classification."""


def _local_now() -> datetime:
    return datetime.now().astimezone()


def parse_classification(content: str) -> ClassifiedIntent:
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ClassificationParseError(f"completion is not JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ClassificationParseError("completion is not a JSON object")

    try:
        return ClassifiedIntent.model_validate(payload)
    except ValidationError as e:
        raise ClassificationParseError(f"completion has the wrong shape: {e}") from e


def fallback_classify(text: str, today: str) -> ClassifiedIntent:
    """Keyword matching used when the language model cannot be reached.

    ``today`` is an ISO date. A create request always lands on today, even
    if the text says otherwise; the raw text becomes the title.
    """
    lowered = text.lower()

    if any(word in lowered for word in CREATE_KEYWORDS):
        return ClassifiedIntent(
            intent=Intent.CREATE_TASK,
            confidence=0.5,
            parameters=CreateTaskParameters(title=text, date=today),
            response="I'll help you create a task. Please provide more details if needed.",
        )

    if any(word in lowered for word in QUERY_KEYWORDS):
        return ClassifiedIntent(
            intent=Intent.QUERY_TASKS,
            confidence=0.5,
            parameters=QueryTasksParameters(query=text),
            response="Let me search for your tasks.",
        )

    return ClassifiedIntent(
        intent=Intent.UNKNOWN,
        confidence=0.0,
        parameters=UnknownParameters(),
        response=HELP_RESPONSE,
    )


class IntentClassifier:

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        temperature: float = NLP_TEMPERATURE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.llm = llm_client or LLMClient()
        self.temperature = temperature
        self.clock = clock or _local_now

    def classify(self, text: str) -> ClassifiedIntent:
        """Classify free text. Always returns a result, never raises."""
        try:
            content = self.llm.complete(
                INTENT_SYSTEM_PROMPT, text, temperature=self.temperature
            )
            if not content.strip():
                raise RuntimeError("No response from AI")
        except Exception as e:
            logger.warning(f"NLP processing error, using keyword fallback: {e}")
            return fallback_classify(text, self.clock().date().isoformat())

        try:
            result = parse_classification(content.strip())
        except ClassificationParseError as e:
            logger.warning(f"Discarding unusable classification: {e}")
            return ClassifiedIntent(
                intent=Intent.UNKNOWN,
                confidence=0.0,
                parameters=UnknownParameters(),
                response=REPHRASE_RESPONSE,
            )

        logger.info(
            f"Classified input as {result.intent.value} "
            f"(confidence {result.confidence:.2f})"
        )
        return result
