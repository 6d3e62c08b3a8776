"""OpenAI chat completions client."""

import logging
from dataclasses import dataclass
from typing import Any

import tiktoken
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from cozinha.models.llm import CompletionMessage, CompletionUsage
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class OpenAIConfig:
    """Configuration for the OpenAI client."""

    model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    max_tokens: int = 1000

    # A failed call is surfaced immediately; the SDK retries twice by default
    max_retries: int = 0


@dataclass
class OpenAIResponse:
    """Structured response from the completions endpoint."""

    content: str | None
    finish_reason: str | None
    usage: CompletionUsage
    model: str


class OpenAIClient:
    """Low-level client for the chat completions endpoint."""

    api_key: str
    client: AsyncOpenAI
    config: OpenAIConfig
    tokenizer: tiktoken.Encoding | None = None

    def __init__(self, api_key: str, config: OpenAIConfig | None = None, client: AsyncOpenAI | None = None):
        """Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            config: Client configuration
            client: Pre-built SDK client, mainly for tests
        """
        if not api_key:
            raise ValueError("An OpenAI API key is required")

        self.api_key = api_key
        self.config = config or OpenAIConfig()
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=self.config.max_retries)
        self._tokenizer_loaded = False

    async def create_completion(self, messages: list[CompletionMessage], **kwargs: Any) -> OpenAIResponse:
        """Request a single chat completion.

        Args:
            messages: Ordered chat messages, system turn first
            **kwargs: Overrides for model, temperature or max_tokens

        Returns:
            Structured response holding the first choice

        Raises:
            openai.OpenAIError: On any transport, auth, quota or server failure
        """
        request_params = {
            "model": kwargs.get("model", self.config.model),
            "temperature": kwargs.get("temperature", self.config.temperature),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "messages": [message.model_dump() for message in messages],
        }

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Making OpenAI API call with model: {request_params['model']}, "
                f"estimated prompt tokens: {self.estimate_tokens(messages)}"
            )
        completion: ChatCompletion = await self.client.chat.completions.create(**request_params)

        usage = CompletionUsage()
        if completion.usage:
            usage = CompletionUsage(
                input_tokens=completion.usage.prompt_tokens,
                output_tokens=completion.usage.completion_tokens,
                total_tokens=completion.usage.total_tokens,
            )

        content = None
        finish_reason = None
        if completion.choices:
            choice = completion.choices[0]
            content = choice.message.content if choice.message else None
            finish_reason = choice.finish_reason

        logger.debug(f"Response received - Finish reason: {finish_reason}, Total tokens: {usage.total_tokens}")

        return OpenAIResponse(
            content=content,
            finish_reason=finish_reason,
            usage=usage,
            model=completion.model or request_params["model"],
        )

    def _get_tokenizer(self) -> tiktoken.Encoding | None:
        # Loaded lazily: fetching the encoding may hit the network the first time
        if self.tokenizer is None and not self._tokenizer_loaded:
            self._tokenizer_loaded = True
            try:
                self.tokenizer = tiktoken.encoding_for_model(self.config.model)
            except Exception:
                self.tokenizer = None
        return self.tokenizer

    def estimate_tokens(self, messages: list[CompletionMessage]) -> int:
        """Estimate prompt token count.

        Args:
            messages: Messages to be sent

        Returns:
            Estimated token count
        """
        text_content = "".join(message.content for message in messages)
        tokenizer = self._get_tokenizer()

        try:
            return len(tokenizer.encode(text_content)) if tokenizer else len(text_content) // 4
        except Exception:
            # Fallback: roughly 4 characters per token
            return len(text_content) // 4
