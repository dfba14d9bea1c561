"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from codevision.config import Settings  # noqa: E402
from codevision.providers import RawModelReply  # noqa: E402


class FakeClient:
    """Provider client returning a canned reply and recording its calls."""

    def __init__(self, reply: RawModelReply):
        self.reply = reply
        self.calls = []

    async def complete(self, prompt, config):
        self.calls.append((prompt, config))
        return self.reply


@pytest.fixture
def full_settings():
    return Settings(groq_api_key="gsk-test", gemini_api_key="gm-test")


@pytest.fixture
def empty_settings():
    return Settings(groq_api_key=None, gemini_api_key=None)


@pytest.fixture
def fake_client_factory():
    """Build a client factory that always hands out the same FakeClient."""

    def make(reply: RawModelReply):
        client = FakeClient(reply)
        return client, (lambda config: client)

    return make
