from collections.abc import Callable

import pytest

from gemini_studio.config import Settings
from tests.helpers import StubLLM


@pytest.fixture
def make_llm() -> Callable[..., StubLLM]:
    """Build a StubLLM from canned responses: make_llm(init_payload(), turn_payload())."""
    return lambda *responses: StubLLM(list(responses))


@pytest.fixture
def settings() -> Settings:
    return Settings(model="test-model", thinking_budget=2048)


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    """Every test runs with a known credential unless it removes it."""
    monkeypatch.setenv("API_KEY", "test-key")
    return "test-key"
