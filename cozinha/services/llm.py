"""LLM gateway: persona-constrained single-turn completions."""

from cozinha.clients.openai import OpenAIClient, OpenAIConfig
from cozinha.config import Settings, get_settings
from cozinha.exceptions import ServiceUnavailableError
from cozinha.models.llm import CompletionFailure, CompletionMessage, CompletionResult, CompletionSuccess
from cozinha.services.prompts import SYSTEM_PROMPT
from cozinha.services.sanitizer import PromptSanitizer
from cozinha.utils.logging import get_logger, preview

logger = get_logger(__name__)

MOCK_API_KEY = "test-key"
MOCK_PREFIX = "[Mock Response]"
FALLBACK_REPLY = "I apologize, but I could not generate a response."


def is_mock_key(api_key: str | None) -> bool:
    """True when the key cannot reach the real provider and mock replies are used."""
    return not api_key or api_key == MOCK_API_KEY


class LLMGateway:
    """Wraps the completion provider behind a success/failure result.

    Every user message is sanitized, paired with the fixed persona, and sent
    as a stateless two-turn request. Without a usable API key the gateway
    answers offline with a deterministic echo.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-3.5-turbo",
        client: OpenAIClient | None = None,
        sanitizer: PromptSanitizer | None = None,
    ):
        """Initialize the gateway.

        Args:
            api_key: Provider API key; missing, empty or "test-key" selects mock mode
            model: Provider model identifier
            client: Provider client (built from api_key and model when omitted)
            sanitizer: Prompt injection filter
        """
        self.model = model or "gpt-3.5-turbo"
        self.sanitizer = sanitizer or PromptSanitizer()
        self.mock_mode = client is None and is_mock_key(api_key)

        if api_key == MOCK_API_KEY:
            logger.warning("API key is the 'test-key' sentinel, LLM gateway is running in mock mode")

        self.client: OpenAIClient | None = None
        if client is not None:
            self.client = client
        elif not self.mock_mode:
            self.client = OpenAIClient(api_key=api_key, config=OpenAIConfig(model=self.model))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LLMGateway":
        settings = settings or get_settings()
        return cls(api_key=settings.openai_api_key, model=settings.openai_model)

    def build_messages(self, content: str) -> list[CompletionMessage]:
        """Build the two-turn payload: persona first, then the user's text."""
        return [
            CompletionMessage(role="system", content=SYSTEM_PROMPT),
            CompletionMessage(role="user", content=content),
        ]

    async def complete(self, user_message: str) -> CompletionResult:
        """Produce a reply for ``user_message`` without raising on provider failure.

        Args:
            user_message: Validated user text

        Returns:
            CompletionSuccess with a non-empty reply, or CompletionFailure
        """
        content = self.sanitizer.sanitize(user_message)
        return await self.complete_sanitized(content, filtered=content != user_message)

    async def complete_sanitized(self, content: str, filtered: bool = False) -> CompletionResult:
        """Like :meth:`complete`, for text that has already been through the sanitizer.

        Args:
            content: Sanitized user text
            filtered: Whether the sanitizer replaced the original text
        """
        if self.mock_mode:
            logger.info(f"Mock mode reply for: {preview(content)}")
            return CompletionSuccess(reply=f"{MOCK_PREFIX} {content}", model=self.model, mocked=True, filtered=filtered)

        try:
            response = await self.client.create_completion(self.build_messages(content))
        except Exception as e:
            logger.error(f"OpenAI API error: {e}", exc_info=True)
            return CompletionFailure(reason=str(e) or type(e).__name__)

        reply = response.content
        if not reply:
            logger.warning(f"Provider returned empty content (finish reason: {response.finish_reason})")
            reply = FALLBACK_REPLY

        logger.info(f"Completion received from {response.model}, {response.usage.total_tokens} tokens")
        return CompletionSuccess(reply=reply, model=response.model, filtered=filtered, usage=response.usage)

    async def generate_response(self, user_message: str) -> str:
        """Return the assistant's reply to ``user_message``.

        Raises:
            ServiceUnavailableError: If the provider call failed
        """
        result = await self.complete(user_message)
        if isinstance(result, CompletionFailure):
            raise ServiceUnavailableError()
        return result.reply

