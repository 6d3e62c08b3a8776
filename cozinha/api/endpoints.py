"""API endpoints for the chat service."""

import math
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request, Response, status

from cozinha import __version__
from cozinha.models.chat import ChatResponse, ErrorResponse, HealthResponse
from cozinha.services.chat import ChatOrchestrator
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _orchestrator_dependency(request: Request) -> ChatOrchestrator:
    """Retrieve the shared orchestrator from app state."""
    return request.app.state.orchestrator


def client_identity(request: Request) -> str:
    """Caller identity for rate limiting: the peer address."""
    return request.client.host if request.client else "unknown"


@router.post(
    "/chat",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    tags=["Chat"],
    responses={
        400: {"model": ErrorResponse, "description": "Malformed message"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "AI service unavailable"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {"message": {"type": "string", "minLength": 1, "maxLength": 2000}},
                        "required": ["message"],
                        "additionalProperties": False,
                    }
                }
            },
        }
    },
)
async def chat(
    request: Request,
    response: Response,
    orchestrator: ChatOrchestrator = Depends(_orchestrator_dependency),
) -> ChatResponse:
    """Answer a question about Brazilian cuisine.

    The body is read raw so the rate limit is charged before the payload is
    parsed or validated.
    """
    identity = client_identity(request)
    body = await request.body()

    outcome = await orchestrator.handle(identity, body)

    response.headers["X-RateLimit-Limit"] = str(outcome.limit)
    response.headers["X-RateLimit-Remaining"] = str(outcome.remaining)
    response.headers["X-RateLimit-Reset"] = str(math.ceil(outcome.reset_after))

    return outcome.response


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
