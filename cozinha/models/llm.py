"""LLM gateway data models (provider-agnostic)."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel


class CompletionMessage(BaseModel):
    """A message in the payload sent to the completion endpoint."""

    role: Literal["system", "user", "assistant"]
    content: str


@dataclass
class CompletionUsage:
    """Token usage reported by the provider."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class CompletionSuccess:
    """The provider (or the offline mock) produced a reply."""

    reply: str
    model: str
    mocked: bool = False
    filtered: bool = False
    usage: CompletionUsage | None = None

    ok: Literal[True] = True


@dataclass
class CompletionFailure:
    """The provider call failed.

    ``reason`` is for logs only and must never reach an API caller.
    """

    reason: str

    ok: Literal[False] = False


CompletionResult = CompletionSuccess | CompletionFailure
