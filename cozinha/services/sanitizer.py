"""Heuristic prompt-injection filter applied to user text before it reaches the model.

This is a small, fixed pattern list. It catches the most common "override
your instructions" phrasings and nothing more; it is not a security boundary.
"""

import re

from cozinha.utils.logging import get_logger

logger = get_logger(__name__)

FILTERED_MARKER = "[FILTERED]"

INJECTION_PATTERNS: dict[str, re.Pattern[str]] = {
    "ignore_previous": re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    "disregard_previous": re.compile(r"disregard\s+(?:\w+\s+){0,3}?previous", re.IGNORECASE),
    "you_are_now": re.compile(r"you\s+are\s+now", re.IGNORECASE),
    "system_prefix": re.compile(r"^\s*system\s*:", re.IGNORECASE | re.MULTILINE),
    "system_tag": re.compile(r"\[system\]", re.IGNORECASE),
}


class PromptSanitizer:
    """All-or-nothing filter: a flagged message is replaced wholesale."""

    def __init__(self, patterns: dict[str, re.Pattern[str]] | None = None):
        self.patterns = patterns if patterns is not None else INJECTION_PATTERNS

    def find_marker(self, text: str) -> str | None:
        """Return the name of the first matching pattern, if any."""
        for name, pattern in self.patterns.items():
            if pattern.search(text):
                return name
        return None

    def is_suspicious(self, text: str) -> bool:
        return self.find_marker(text) is not None

    def sanitize(self, text: str) -> str:
        """Return ``text`` unchanged, or the filtered marker if it looks like an injection."""
        marker = self.find_marker(text)
        if marker is None:
            return text

        logger.warning(f"Prompt injection pattern '{marker}' detected, replacing message with {FILTERED_MARKER}")
        return FILTERED_MARKER
