"""HTTP client for the chat API."""

import os

import httpx

from cozinha.models.chat import ChatResponse
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"


class ChatApiError(Exception):
    """The server answered with a structured error body.

    Attributes:
        status_code: HTTP status reported by the server
        message: Server-provided message (list messages are joined)
        error_type: Short error label from the body, if any
    """

    def __init__(self, status_code: int, message: str, error_type: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_type = error_type


def _error_from_response(response: httpx.Response) -> ChatApiError:
    try:
        data = response.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        return ChatApiError(response.status_code, "An unexpected error occurred", "Error")

    message = data.get("message") or ""
    if isinstance(message, list):
        message = "; ".join(str(item) for item in message)

    return ChatApiError(
        status_code=data.get("statusCode") or response.status_code,
        message=str(message),
        error_type=data.get("error"),
    )


class ChatApiClient:
    """Sends one user message per request to ``POST /chat``.

    No timeout is applied: a hung server leaves the call pending.
    """

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None):
        """Initialize the API client.

        Args:
            base_url: Server root (defaults to CHAT_API_URL, then localhost:3000)
            client: Pre-built HTTP client, mainly for tests
        """
        self.base_url = (base_url or os.getenv("CHAT_API_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=None)

    async def send_message(self, message: str) -> ChatResponse:
        """Send ``message`` and return the server's reply.

        Raises:
            ChatApiError: The server responded with a non-2xx status
            httpx.HTTPError: The server could not be reached
        """
        response = await self.client.post(
            f"{self.base_url}/chat",
            json={"message": message},
            headers={"Content-Type": "application/json"},
        )

        if not response.is_success:
            error = _error_from_response(response)
            logger.debug(f"Chat API error {error.status_code}: {error.message}")
            raise error

        return ChatResponse.model_validate(response.json())

    async def health(self) -> bool:
        """True if the server's health check answers 200."""
        try:
            response = await self.client.get(f"{self.base_url}/health")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def aclose(self) -> None:
        await self.client.aclose()
