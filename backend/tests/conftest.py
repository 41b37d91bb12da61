"""Shared test configuration, fixtures and pytest markers."""

import os

# Must be set before config/main are imported by any test module
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ["GEMINI_API_KEY"] = ""

import pytest

from services.review_orchestrator import ReviewOrchestrator
from services.rubric_registry import load_registry
from services.store import InMemoryStore


class FakeLLM:
    """Async stand-in for llm_client.complete that records its prompts."""

    def __init__(self, reply="Score: Robust (3/5)\n\nSummary: Policy exists.\n\nSuggestions:\n- None"):
        self.reply = reply
        self.calls: list[tuple[str, str | None]] = []

    async def __call__(self, prompt: str, system_prompt: str | None = None) -> str:
        self.calls.append((prompt, system_prompt))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "ocr: needs a local tesseract binary"
    )


@pytest.fixture
def registry():
    return load_registry()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def orchestrator(store, registry, fake_llm):
    return ReviewOrchestrator(store=store, registry=registry, llm=fake_llm)


@pytest.fixture
def make_llm():
    return FakeLLM
