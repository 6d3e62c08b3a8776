"""Shared fixtures."""

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from openai.types.chat import ChatCompletion

from cozinha.clients.openai import OpenAIClient
from cozinha.config import Settings
from cozinha.services.llm import LLMGateway


def make_completion(content: str | None, with_choice: bool = True) -> ChatCompletion:
    """Build a provider response the way the SDK would parse it."""
    data: dict[str, Any] = {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-3.5-turbo-0125",
        "choices": [],
        "usage": {"prompt_tokens": 120, "completion_tokens": 30, "total_tokens": 150},
    }
    if with_choice:
        data["choices"] = [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ]
    return ChatCompletion.model_validate(data)


class FakeClock:
    """Manually advanced stand-in for time.time."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    """Freeze wall-clock time; the rate limit storage reads time.time."""
    clock = FakeClock()
    monkeypatch.setattr("time.time", clock)
    return clock


@pytest.fixture
def sdk():
    """Stand-in for AsyncOpenAI with a controllable completions endpoint."""
    sdk = Mock()
    sdk.chat.completions.create = AsyncMock(return_value=make_completion("Feijoada is a black bean stew."))
    return sdk


@pytest.fixture
def openai_client(sdk):
    client = OpenAIClient(api_key="sk-test", client=sdk)
    client.tokenizer = Mock()
    client.tokenizer.encode.return_value = ["token"] * 10
    return client


@pytest.fixture
def real_gateway(openai_client):
    """Gateway in real mode talking to the mocked SDK."""
    return LLMGateway(api_key="sk-test", client=openai_client)


@pytest.fixture
def mock_gateway():
    """Gateway in offline mock mode."""
    return LLMGateway(api_key=None)


@pytest.fixture
def settings():
    return Settings(_env_file=None, openai_api_key=None, rate_limit_max=100, rate_limit_window_ms=60_000)
