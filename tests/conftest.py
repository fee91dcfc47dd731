"""Pytest configuration and fixtures."""
import json
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["LLM_PROVIDER"] = "mock"
os.environ["DEBUG"] = "false"

from transcript_relay.main import app
from transcript_relay.adapters import MockLLMAdapter
from transcript_relay.services import RelaySession


class RecordingSink:
    """Collects the frames a session sends; can simulate a broken transport."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.frames: list[str] = []
        self.fail_on = fail_on
        self.attempts = 0
        self.close_code: int | None = None

    async def send_text(self, data: str) -> None:
        self.attempts += 1
        if self.fail_on is not None and self.attempts >= self.fail_on:
            raise RuntimeError("socket closed")
        self.frames.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code

    @property
    def events(self) -> list[dict]:
        return [json.loads(frame) for frame in self.frames]


@pytest.fixture
def sink():
    """Create a recording sink."""
    return RecordingSink()


@pytest.fixture
def mock_llm():
    """Create a mock LLM adapter streaming "Four" then "."."""
    return MockLLMAdapter(deltas=["Four", "."])


@pytest.fixture
def session(sink, mock_llm):
    """Create a relay session over the recording sink."""
    return RelaySession(sink=sink, llm_adapter=mock_llm, connection_id="test-conn")


@pytest.fixture
def use_llm():
    """Swap the application's LLM adapter for the duration of a test."""
    previous = app.state.llm_adapter

    def _use(adapter):
        app.state.llm_adapter = adapter
        return adapter

    yield _use
    app.state.llm_adapter = previous


@pytest_asyncio.fixture
async def async_client():
    """Create async test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
