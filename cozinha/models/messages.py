"""Chat transcript models owned by the client-side conversation."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """A single bubble in the transcript. Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    sender: Literal["user", "bot"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
