"""Error taxonomy shared by the request pipeline and the HTTP boundary."""

SERVICE_UNAVAILABLE_MESSAGE = "AI service temporarily unavailable. Please try again."


class ChatError(Exception):
    """Base class for failures that are rendered as a structured error body.

    Attributes:
        status_code: HTTP status the boundary responds with
        error: Short status label placed in the ``error`` field of the body
        messages: One or more user-safe reasons
    """

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, message: str | list[str]):
        self.messages = [message] if isinstance(message, str) else list(message)
        super().__init__("; ".join(self.messages))

    @property
    def detail(self) -> str | list[str]:
        """Body ``message`` field: a single string or the list of reasons."""
        return self.messages[0] if len(self.messages) == 1 else self.messages


class ValidationError(ChatError):
    """Inbound payload has the wrong shape, type or length."""

    status_code = 400
    error = "Bad Request"

    @property
    def detail(self) -> list[str]:
        return self.messages


class RateLimitedError(ChatError):
    """Caller exhausted its request budget for the current window."""

    status_code = 429
    error = "Too Many Requests"

    def __init__(self, retry_after: float, message: str = "Too Many Requests"):
        super().__init__(message)
        self.retry_after = retry_after


class ServiceUnavailableError(ChatError):
    """The LLM provider could not produce a completion."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str = SERVICE_UNAVAILABLE_MESSAGE):
        super().__init__(message)
