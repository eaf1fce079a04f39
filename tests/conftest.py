import asyncio
import json
import os
from dataclasses import replace

import pytest

# Settings are read from the environment on first use
os.environ.setdefault("GROQ_API_KEY", "test-key")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("ENABLE_AUDIT_LOGGING", "true")

from omanx.core.config import get_settings  # noqa: E402
from omanx.llm.client import Completion  # noqa: E402


SAMPLE_SECTIONS = {
    "opt": {
        "summary": "Optional Practical Training lets F-1 students work after graduation.",
        "bullets": ["Apply within 60 days of program end", "Ask your DSO for a new I-20"],
        "links": ["https://www.uscis.gov/opt"],
    },
    "embassy": "Embassy of Oman, Washington DC",
}


class FakeProvider:
    """
    Scripted stand-in for LLMClient.

    Records every call. `stream_error` is raised after the scripted deltas
    have been yielded.
    """

    def __init__(self, text="Answer.", usage=None, deltas=("Hel", "lo"),
                 error=None, stream_error=None):
        self.text = text
        self.usage = usage if usage is not None else {"total_tokens": 12}
        self.deltas = list(deltas)
        self.error = error
        self.stream_error = stream_error
        self.calls = []
        self.stream_closed = False
        self.stream_finished = False

    async def create(self, model, system_text, user_text):
        self.calls.append({"kind": "create", "model": model,
                           "system": system_text, "user": user_text})
        if self.error is not None:
            raise self.error
        return Completion(text=self.text, usage=self.usage)

    async def stream(self, model, system_text, user_text):
        self.calls.append({"kind": "stream", "model": model,
                           "system": system_text, "user": user_text})
        try:
            if self.error is not None:
                raise self.error
            for delta in self.deltas:
                await asyncio.sleep(0)
                yield delta
            if self.stream_error is not None:
                raise self.stream_error
            self.stream_finished = True
        finally:
            self.stream_closed = True


class ExplodingProvider(FakeProvider):
    """Provider whose failure is not an UpstreamError."""

    async def create(self, model, system_text, user_text):
        raise RuntimeError("socket closed")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def knowledge_file(tmp_path):
    path = tmp_path / "knowledge.json"
    path.write_text(json.dumps(SAMPLE_SECTIONS), encoding="utf-8")
    return path


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        defaults = {
            "app_env": "test",
            "log_to_file": False,
            "knowledge_path": str(tmp_path / "knowledge.json"),
            "knowledge_reload_seconds": 3600.0,
        }
        defaults.update(overrides)
        return replace(get_settings(), **defaults)

    return _make
