"""Chat request graph: admit, validate, sanitize, respond."""

from langgraph.graph import END, StateGraph

from cozinha.graphs.edges import route_admission, route_validation
from cozinha.graphs.nodes import make_admit_node, make_respond_node, make_sanitize_node, validate_node
from cozinha.graphs.state import ChatState
from cozinha.services.llm import LLMGateway
from cozinha.services.rate_limiter import FixedWindowRateLimiter
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)


def create_chat_graph(limiter: FixedWindowRateLimiter, gateway: LLMGateway):
    """Create the per-request chat graph.

    Flow:
    - admit: charge the caller's rate limit window, end if over budget
    - validate: check the payload, end if malformed
    - sanitize: flag prompt injection attempts
    - respond: call the LLM gateway

    Args:
        limiter: Admission control gate shared by all requests
        gateway: LLM gateway

    Returns:
        Compiled LangGraph workflow
    """
    workflow = StateGraph(ChatState)

    workflow.add_node("admit", make_admit_node(limiter))
    workflow.add_node("validate", validate_node)
    workflow.add_node("sanitize", make_sanitize_node(gateway))
    workflow.add_node("respond", make_respond_node(gateway))

    workflow.set_entry_point("admit")

    workflow.add_conditional_edges(
        "admit",
        route_admission,
        {
            "validate": "validate",
            "end": END,
        },
    )

    workflow.add_conditional_edges(
        "validate",
        route_validation,
        {
            "sanitize": "sanitize",
            "end": END,
        },
    )

    workflow.add_edge("sanitize", "respond")
    workflow.add_edge("respond", END)

    compiled = workflow.compile()

    logger.info("Chat graph created")
    return compiled
