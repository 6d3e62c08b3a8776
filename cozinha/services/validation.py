"""Inbound chat payload validation."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails

from cozinha.exceptions import ValidationError
from cozinha.models.chat import MAX_MESSAGE_LENGTH, ChatRequest
from cozinha.utils.logging import get_logger

logger = get_logger(__name__)

EMPTY_MESSAGE = "Message cannot be empty"


def _describe(error: ErrorDetails) -> str:
    """Turn a pydantic error into a sentence a chat user can act on."""
    field = ".".join(str(part) for part in error["loc"]) or "body"
    error_type = error["type"]

    if error_type == "extra_forbidden":
        return f"property {field} should not exist"
    if error_type == "missing":
        return f"{field} is required"
    if error_type == "string_type":
        return f"{field} must be a string"
    if error_type == "string_too_short":
        return EMPTY_MESSAGE
    if error_type == "string_too_long":
        return f"{field} must be shorter than or equal to {MAX_MESSAGE_LENGTH} characters"
    if error_type == "json_invalid":
        return "Request body must be valid JSON"
    if error_type in ("model_type", "model_attributes_type", "dict_type"):
        return "Request body must be a JSON object"
    return error["msg"]


def validate_chat_request(payload: Any) -> ChatRequest:
    """Validate a raw chat payload.

    Args:
        payload: Raw request body (bytes or str holding JSON) or an already
            decoded object

    Returns:
        The validated request

    Raises:
        ValidationError: With one reason per problem found
    """
    try:
        if isinstance(payload, bytes | bytearray | str):
            # A request with no body is treated like an empty object
            return ChatRequest.model_validate_json(payload or b"{}")
        return ChatRequest.model_validate(payload)
    except PydanticValidationError as e:
        reasons = list(dict.fromkeys(_describe(error) for error in e.errors()))
        logger.debug(f"Rejected chat payload: {reasons}")
        raise ValidationError(reasons) from e
