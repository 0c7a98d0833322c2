import pytest

from classification.intent_classifier import (
    REPHRASE_RESPONSE,
    ClassificationParseError,
    IntentClassifier,
    parse_classification,
)
from llm.llm_client import LLMClient
from llm.schemas import DeleteTaskParameters, Intent


@pytest.mark.parametrize(
    "content",
    [
        "INVALID OUTPUT",
        "[1, 2, 3]",
        '{"intent": "CREATE_TASK"}',
        '{"intent": "MAKE_COFFEE", "confidence": 0.9, "parameters": {}, "response": ""}',
        '{"intent": "QUERY_TASKS", "confidence": 7, "parameters": {}, "response": ""}',
        '{"intent": "CREATE_TASK", "confidence": 0.9, "parameters": "tomorrow", "response": ""}',
        '{"intent": "CREATE_TASK", "confidence": 0.9, "parameters": {"duration": "an hour"}, "response": ""}',
    ],
)
def test_malformed_completions_become_unknown(content, fake_provider_factory, fixed_clock):
    classifier = IntentClassifier(
        llm_client=LLMClient(provider=fake_provider_factory(content)), clock=fixed_clock
    )
    result = classifier.classify("create something")
    assert result.intent is Intent.UNKNOWN
    assert result.confidence == 0.0
    assert result.response == REPHRASE_RESPONSE


def test_parse_classification_raises_on_garbage():
    with pytest.raises(ClassificationParseError):
        parse_classification("{not json")


def test_missing_parameters_get_empty_variant():
    result = parse_classification('{"intent": "DELETE_TASK", "confidence": 0.7, "response": "ok"}')
    assert result.intent is Intent.DELETE_TASK
    assert result.parameters_dump() == {}
    assert isinstance(result.parameters, DeleteTaskParameters)


def test_duration_string_is_coerced():
    result = parse_classification(
        '{"intent": "CREATE_TASK", "confidence": 0.7, "parameters": {"duration": "45"}, "response": ""}'
    )
    assert result.parameters.duration == 45


def test_classifier_never_raises_on_unexpected_provider_error(failing_provider_factory, fixed_clock):
    classifier = IntentClassifier(
        llm_client=LLMClient(provider=failing_provider_factory(KeyError("choices"))),
        clock=fixed_clock,
    )
    result = classifier.classify("what is on today")
    assert result.intent is Intent.QUERY_TASKS
