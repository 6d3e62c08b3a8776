"""Main FastAPI application."""

import math
from http import HTTPStatus

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cozinha import __version__
from cozinha.api.endpoints import router
from cozinha.config import Settings, get_settings
from cozinha.exceptions import ChatError, RateLimitedError
from cozinha.models.chat import ErrorResponse
from cozinha.services.chat import ChatOrchestrator
from cozinha.services.llm import LLMGateway
from cozinha.services.rate_limiter import FixedWindowRateLimiter
from cozinha.utils.logging import LogConfig, get_logger, setup_logging

logger = get_logger(__name__)


def error_response(
    status_code: int,
    message: str | list[str],
    error: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the error body shared by every non-2xx response."""
    body = ErrorResponse(
        status_code=status_code,
        message=message,
        error=error or HTTPStatus(status_code).phrase,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True), headers=headers)


async def handle_chat_error(request: Request, exc: ChatError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(max(1, math.ceil(exc.retry_after)))}
    return error_response(exc.status_code, exc.detail, exc.error, headers)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else HTTPStatus(exc.status_code).phrase
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, [str(error.get("msg", "Invalid request")) for error in exc.errors()])


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, "Internal server error")


def create_app(
    settings: Settings | None = None,
    gateway: LLMGateway | None = None,
    limiter: FixedWindowRateLimiter | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration (read from the environment when omitted)
        gateway: LLM gateway (built from settings when omitted)
        limiter: Rate limiter (built from settings when omitted)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(LogConfig(level=settings.log_level))

    limiter = limiter or FixedWindowRateLimiter(
        max_requests=settings.rate_limit_max,
        window_ms=settings.rate_limit_window_ms,
    )
    gateway = gateway or LLMGateway.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Ask questions about Brazilian cuisine. Each message is answered independently by an LLM "
            "constrained to a Brazilian food expert persona."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        tags_metadata=[
            {"name": "Chat", "description": "Single-turn question and answer exchange."},
            {"name": "Health", "description": "Service health monitoring and status checks."},
        ],
    )

    app.state.settings = settings
    app.state.orchestrator = ChatOrchestrator(limiter=limiter, gateway=gateway)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )

    app.add_exception_handler(ChatError, handle_chat_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(router)

    logger.info(
        f"App created: rate limit {settings.rate_limit_max}/{settings.rate_limit_window_ms}ms, "
        f"LLM {'mock mode' if gateway.mock_mode else settings.openai_model}"
    )
    return app


app = create_app()


def serve() -> None:
    """Start the uvicorn server using environment configuration."""
    settings = get_settings()
    uvicorn.run("cozinha.main:app", host=settings.host, port=settings.port, reload=False, log_level="info")


if __name__ == "__main__":
    serve()
