"""Request, response and error body models for the chat API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictStr

MAX_MESSAGE_LENGTH = 2000


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    model_config = ConfigDict(extra="forbid")

    message: StrictStr = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)


class ChatResponse(BaseModel):
    """Response model for the chat endpoint."""

    reply: str


class ErrorResponse(BaseModel):
    """Body returned with every non-2xx response."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(alias="statusCode")
    message: str | list[str]
    error: str | None = None


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str
