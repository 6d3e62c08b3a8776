"""Node implementations for the chat request graph.

Each factory closes over the collaborator it needs and returns an async
node. Nodes never raise for expected rejections; they record a terminal
stage and let the routing functions end the graph.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from cozinha.exceptions import RateLimitedError, ValidationError
from cozinha.graphs.state import ChatState, RequestStage
from cozinha.models.llm import CompletionFailure
from cozinha.services.llm import LLMGateway
from cozinha.services.rate_limiter import FixedWindowRateLimiter
from cozinha.services.validation import validate_chat_request
from cozinha.utils.logging import get_logger, preview

logger = get_logger(__name__)

Node = Callable[[ChatState], Awaitable[dict[str, Any]]]


def make_admit_node(limiter: FixedWindowRateLimiter) -> Node:
    async def admit_node(state: ChatState) -> dict[str, Any]:
        """Charge the caller's window before anything else runs."""
        try:
            decision = limiter.check(state.identity)
        except RateLimitedError as e:
            return {
                "stage": RequestStage.RATE_LIMITED,
                "rate_limit_remaining": 0,
                "rate_limit_reset_after": e.retry_after,
            }

        logger.debug(f"Admitted request from {state.identity}, {decision.remaining} left in window")
        return {
            "stage": RequestStage.ADMITTED,
            "rate_limit_remaining": decision.remaining,
            "rate_limit_reset_after": decision.reset_after,
        }

    return admit_node


async def validate_node(state: ChatState) -> dict[str, Any]:
    """Check the payload shape and length."""
    try:
        request = validate_chat_request(state.payload)
    except ValidationError as e:
        logger.warning(f"Invalid chat payload from {state.identity}: {e.messages}")
        return {"stage": RequestStage.INVALID, "errors": e.messages}

    return {"stage": RequestStage.VALID, "message": request.message}


def make_sanitize_node(gateway: LLMGateway) -> Node:
    async def sanitize_node(state: ChatState) -> dict[str, Any]:
        """Replace prompt-injection attempts before the text reaches the model."""
        original = state.message or ""
        content = gateway.sanitizer.sanitize(original)
        filtered = content != original
        if filtered:
            logger.warning(f"Message from {state.identity} will be sent as filtered")
        return {"stage": RequestStage.SANITIZED, "message": content, "filtered": filtered}

    return sanitize_node


def make_respond_node(gateway: LLMGateway) -> Node:
    async def respond_node(state: ChatState) -> dict[str, Any]:
        """Ask the LLM gateway for a reply to the already sanitized text."""
        logger.info(f"Generating reply for {state.identity}: {preview(state.message or '')}")
        result = await gateway.complete_sanitized(state.message or "", filtered=state.filtered)

        if isinstance(result, CompletionFailure):
            return {"stage": RequestStage.FAILED, "errors": [result.reason]}

        logger.info(f"Generated reply for {state.identity}: {preview(result.reply)}")
        return {"stage": RequestStage.COMPLETED, "reply": result.reply}

    return respond_node
