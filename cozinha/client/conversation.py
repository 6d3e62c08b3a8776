"""Client-side conversation state machine.

Idle -> Sending -> (success | failure) -> Idle. The user's message is
appended the moment it is submitted, before the network call starts, and
stays in the transcript whatever the outcome. Only one exchange may be in
flight; submitting while Sending does nothing.
"""

import asyncio
import uuid
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from cuid2 import cuid_wrapper

from cozinha.client.api import ChatApiError
from cozinha.models.chat import ChatResponse
from cozinha.models.messages import Message
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)

RATE_LIMIT_ERROR = "Rate limit exceeded. Please wait a moment before sending another message."
GENERIC_ERROR = "An error occurred. Please try again."
NETWORK_ERROR = "Network error. Please check your connection and try again."

_cuid = cuid_wrapper()


def generate_message_id() -> str:
    """Return a fresh message id, from the OS CSPRNG when it is available."""
    # uuid4 reads os.urandom, which raises NotImplementedError on platforms
    # without an OS randomness source
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        logger.debug("uuid4 unavailable, falling back to cuid")
        return _cuid()


def describe_error(error: BaseException) -> str:
    """Map a failed exchange to the text shown in the error banner."""
    if isinstance(error, ChatApiError):
        if error.status_code == 429:
            return RATE_LIMIT_ERROR
        if error.status_code == 400:
            return error.message
        return error.message or GENERIC_ERROR
    return NETWORK_ERROR


class ChatTransport(Protocol):
    async def send_message(self, message: str) -> ChatResponse: ...


class ConversationStatus(StrEnum):
    IDLE = "idle"
    SENDING = "sending"


class Conversation:
    """Owns the transcript, the awaiting-reply flag and the last error."""

    def __init__(self, api: ChatTransport, id_factory: Callable[[], str] = generate_message_id):
        """Initialize an empty conversation.

        Args:
            api: Anything with an async ``send_message(text) -> ChatResponse``
            id_factory: Message id generator
        """
        self.api = api
        self.id_factory = id_factory

        self.messages: list[Message] = []
        self.is_awaiting_reply = False
        self.last_error: str | None = None
        self.input_buffer = ""

        self._current_attempt: asyncio.Task[None] | None = None
        self._listeners: list[Callable[["Conversation"], None]] = []

    @property
    def status(self) -> ConversationStatus:
        return ConversationStatus.SENDING if self.is_awaiting_reply else ConversationStatus.IDLE

    def subscribe(self, listener: Callable[["Conversation"], None]) -> None:
        """Call ``listener`` after every state change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def submit(self, text: str | None = None) -> asyncio.Task[None] | None:
        """Start an exchange with ``text`` (or the input buffer).

        Must be called from a running event loop. The user message is
        appended before this returns; the returned task settles the exchange.

        Returns:
            The in-flight task, or None if nothing was sent
        """
        content = (self.input_buffer if text is None else text).strip()
        if not content or self.status is ConversationStatus.SENDING:
            return None

        # Raises outside a running loop, before any state is touched
        loop = asyncio.get_running_loop()

        self.last_error = None
        self.messages.append(Message(id=self.id_factory(), content=content, sender="user"))
        self.is_awaiting_reply = True
        self.input_buffer = ""

        self._current_attempt = loop.create_task(self._exchange(content))
        self._notify()
        return self._current_attempt

    async def send_message(self, text: str | None = None) -> bool:
        """Submit and wait for the exchange to settle.

        Returns:
            True if a message was sent, False if the submit was a no-op
        """
        attempt = self.submit(text)
        if attempt is None:
            return False
        await attempt
        return True

    async def _exchange(self, content: str) -> None:
        try:
            response = await self.api.send_message(content)
        except Exception as e:
            logger.warning(f"Chat exchange failed: {e!r}")
            self.last_error = describe_error(e)
        else:
            self.messages.append(Message(id=self.id_factory(), content=response.reply, sender="bot"))
        finally:
            self.is_awaiting_reply = False
            self._current_attempt = None
            self._notify()
