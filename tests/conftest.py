"""
Shared fixtures for the generation pipeline tests.

Only the provider backends and the usage sink are faked; everything else
runs the real code.
"""
import threading

import pytest
from fastapi.testclient import TestClient

from edutext.gemini_client import BackendOutput
from edutext.main import create_app
from edutext.orchestrator import ContentOrchestrator
from edutext.providers import ProviderAdapter, ProviderClients
from edutext.usage import UsageLogger


class FakeBackend:
    """Records prompts and returns a canned reply."""
    def __init__(self, text='{"title": "Fake", "questions": []}', usage=42, error=None):
        self.text = text
        self.usage = usage
        self.error = error
        self.prompts = []
        self.closed = False

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return BackendOutput(text=self.text, usage=self.usage)

    async def aclose(self):
        self.closed = True


class MemorySink:
    def __init__(self, fail=False):
        self.records = []
        self.fail = fail
        self._lock = threading.Lock()

    def write(self, record):
        if self.fail:
            raise RuntimeError("sink is down")
        with self._lock:
            self.records.append(record)


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def mock_orchestrator(sink):
    """Orchestrator with no live backends: every provider gets the offline mock."""
    return ContentOrchestrator(ProviderAdapter(ProviderClients()), UsageLogger(sink))


@pytest.fixture
def client(mock_orchestrator):
    app = create_app(orchestrator=mock_orchestrator)
    with TestClient(app) as c:
        yield c
