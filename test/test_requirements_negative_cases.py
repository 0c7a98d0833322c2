from datetime import datetime

import pytest
from pydantic import ValidationError

from llm.schemas import ClassifiedIntent, CreateTaskParameters
from task_calendar.models import EventCreate, EventUpdate

def test_event_empty_title():
    with pytest.raises(ValidationError):
        EventCreate(title="", start=datetime(2024, 1, 1))

def test_event_blank_title():
    with pytest.raises(ValidationError):
        EventCreate(title="   ", start=datetime(2024, 1, 1))

def test_negative_duration():
    with pytest.raises(ValidationError):
        CreateTaskParameters(duration=-5)

def test_confidence_out_of_range():
    with pytest.raises(ValidationError):
        ClassifiedIntent(intent="UNKNOWN", confidence=1.5)

def test_unknown_intent_name():
    with pytest.raises(ValidationError):
        ClassifiedIntent(intent="RENAME_TASK", confidence=0.5)

def test_event_update_blank_title():
    with pytest.raises(ValidationError):
        EventUpdate(title="   ")
