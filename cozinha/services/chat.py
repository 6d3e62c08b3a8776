"""Chat orchestrator: runs one request through the chat graph."""

from dataclasses import dataclass
from typing import Any

from cozinha.exceptions import RateLimitedError, ServiceUnavailableError, ValidationError
from cozinha.graphs.chat import create_chat_graph
from cozinha.graphs.state import TERMINAL_STAGES, ChatState, RequestStage
from cozinha.models.chat import ChatResponse
from cozinha.services.llm import LLMGateway
from cozinha.services.rate_limiter import FixedWindowRateLimiter
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ChatOutcome:
    """A completed exchange plus the caller's rate limit status."""

    response: ChatResponse
    limit: int
    remaining: int
    reset_after: float


class ChatOrchestrator:
    """Composes rate limiting, validation and the LLM gateway for one exchange.

    Keeps no per-request state between calls; the limiter's window store is
    the only thing shared across requests.
    """

    def __init__(self, limiter: FixedWindowRateLimiter, gateway: LLMGateway):
        self.limiter = limiter
        self.gateway = gateway
        self.graph = create_chat_graph(limiter, gateway)

    async def run(self, identity: str, payload: Any) -> ChatState:
        """Run the graph and return its terminal state."""
        initial_state = ChatState(identity=identity, payload=payload)
        result = await self.graph.ainvoke(initial_state.model_dump())
        final_state = ChatState.model_validate(result)

        if final_state.stage not in TERMINAL_STAGES:
            raise RuntimeError(f"Chat graph stopped in non-terminal stage {final_state.stage}")
        return final_state

    async def handle(self, identity: str, payload: Any) -> ChatOutcome:
        """Process one chat request.

        Args:
            identity: Caller identity used for rate limiting
            payload: Raw request body

        Returns:
            The reply and rate limit status

        Raises:
            RateLimitedError: Caller is over budget
            ValidationError: Payload is malformed
            ServiceUnavailableError: The LLM provider failed
        """
        state = await self.run(identity, payload)
        logger.info(f"Request from {identity} finished as {state.stage}")

        match state.stage:
            case RequestStage.RATE_LIMITED:
                raise RateLimitedError(retry_after=state.rate_limit_reset_after or 0.0)
            case RequestStage.INVALID:
                raise ValidationError(state.errors)
            case RequestStage.FAILED:
                raise ServiceUnavailableError()

        return ChatOutcome(
            response=ChatResponse(reply=state.reply or ""),
            limit=self.limiter.max_requests,
            remaining=state.rate_limit_remaining or 0,
            reset_after=state.rate_limit_reset_after or 0.0,
        )
