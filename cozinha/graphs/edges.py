"""Routing between nodes of the chat request graph."""

from typing import Literal

from cozinha.graphs.state import ChatState, RequestStage


def route_admission(state: ChatState) -> Literal["validate", "end"]:
    """Throttled requests end here; the payload is never inspected."""
    if state.stage == RequestStage.ADMITTED:
        return "validate"
    return "end"


def route_validation(state: ChatState) -> Literal["sanitize", "end"]:
    if state.stage == RequestStage.VALID:
        return "sanitize"
    return "end"
