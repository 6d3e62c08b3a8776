"""State definitions for the chat request graph."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class RequestStage(StrEnum):
    """Where a request is in the pipeline. The last four are terminal."""

    RECEIVED = "received"
    ADMITTED = "admitted"
    VALID = "valid"
    SANITIZED = "sanitized"
    RATE_LIMITED = "rate_limited"
    INVALID = "invalid"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STAGES = frozenset(
    {RequestStage.RATE_LIMITED, RequestStage.INVALID, RequestStage.COMPLETED, RequestStage.FAILED}
)


class ChatState(BaseModel):
    """State carried through every node of the request graph.

    Nothing here outlives the request.
    """

    identity: str
    payload: Any = None
    stage: RequestStage = RequestStage.RECEIVED

    # Set once admitted / validated
    rate_limit_remaining: int | None = None
    rate_limit_reset_after: float | None = None
    message: str | None = None
    filtered: bool = False

    # Terminal data
    reply: str | None = None
    errors: list[str] = Field(default_factory=list)
