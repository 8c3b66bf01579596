# tests/conftest.py
from collections.abc import Iterator

import pytest
import respx

from pioclient import EngineClient, EventClient

EVENT_URL = "http://localhost:7070"
ENGINE_URL = "http://localhost:8000"
ACCESS_KEY = "K"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's PIO_* variables out of the tests."""
    for name in (
        "PIO_ACCESS_KEY",
        "PIO_EVENT_URL",
        "PIO_EVENT_TIMEOUT",
        "PIO_EVENT_MAX_CONNECTIONS",
        "PIO_ENGINE_URL",
        "PIO_ENGINE_TIMEOUT",
        "PIO_ENGINE_MAX_CONNECTIONS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def event_router() -> Iterator[respx.MockRouter]:
    """respx router intercepting every call to the event server."""
    with respx.mock(base_url=EVENT_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def engine_router() -> Iterator[respx.MockRouter]:
    """respx router intercepting every call to the engine server."""
    with respx.mock(base_url=ENGINE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def event_client() -> Iterator[EventClient]:
    with EventClient(ACCESS_KEY, base_url=EVENT_URL, timeout=5.0) as client:
        yield client


@pytest.fixture
def engine_client() -> Iterator[EngineClient]:
    with EngineClient(ACCESS_KEY, base_url=ENGINE_URL, timeout=5.0) as client:
        yield client
