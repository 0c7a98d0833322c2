import time
from datetime import datetime, timezone

import pytest

FIXED_NOW = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = []

    def generate(self, *, system: str, user: str, temperature: float = 0.1, model=None) -> str:
        self.calls.append({"system": system, "user": user, "temperature": temperature})
        return self._response_text


class FailingProvider:
    def __init__(self, error: Exception):
        self._error = error

    def generate(self, *, system: str, user: str, temperature: float = 0.1, model=None) -> str:
        raise self._error


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def failing_provider_factory():
    def _make(error: Exception = None):
        return FailingProvider(error or ConnectionError("network unreachable"))
    return _make


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


def _set_zone(monkeypatch, name: str) -> None:
    monkeypatch.setenv("TZ", name)
    time.tzset()


@pytest.fixture(autouse=True)
def utc_local_zone(monkeypatch):
    """Run every test with the process local time zone set to UTC."""
    if not hasattr(time, "tzset"):
        yield
        return
    _set_zone(monkeypatch, "UTC")
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def new_york_zone(monkeypatch):
    """Switch the process local time zone to one with daylight saving."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")
    _set_zone(monkeypatch, "America/New_York")
    if not time.daylight:
        pytest.skip("America/New_York zone data is not installed")
