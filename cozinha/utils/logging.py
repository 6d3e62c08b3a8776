"""Process-wide logging setup for the server and the CLI."""

import logging
import os
import re
import sys

from pydantic import BaseModel, Field

# OpenAI-style secret keys; they can appear in SDK exception text
SECRET_PATTERN = re.compile(r"sk-[A-Za-z0-9_\-]{4,}")
REDACTED = "sk-***"


class LogConfig(BaseModel):
    level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    quiet_loggers: list[str] = ["openai", "httpx", "httpcore", "uvicorn.access"]


class SecretRedactingFilter(logging.Filter):
    """Masks API keys in the rendered message before any handler sees it."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if SECRET_PATTERN.search(message):
            record.msg = SECRET_PATTERN.sub(REDACTED, message)
            record.args = None
        return True


def setup_logging(config: LogConfig | None = None) -> None:
    """Configure the root logger.

    Safe to call more than once; each call replaces the previous handlers.
    """
    config = config or LogConfig()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SecretRedactingFilter())

    logging.basicConfig(
        level=config.level.upper(),
        format=config.format,
        datefmt=config.date_format,
        handlers=[handler],
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a specific module.

    Args:
        name: Module name (typically __name__)
        level: Explicit level, overriding LOG_LEVEL

    Returns:
        Logger set to the requested level
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return logger


def preview(text: str, limit: int = 50) -> str:
    """Shorten user text before it goes into a log line."""
    return text if len(text) <= limit else f"{text[:limit]}..."
