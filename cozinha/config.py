"""Application settings loaded from the environment."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:8080", "http://localhost:5173"]


class Settings(BaseSettings):
    """Server configuration.

    Every field maps to the upper-cased environment variable of the same
    name (``RATE_LIMIT_MAX``, ``OPENAI_API_KEY``, ...). A ``.env`` file in the
    working directory is read as well.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Cozinha Brazilian Cuisine Assistant"

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    rate_limit_window_ms: int = Field(default=60_000, gt=0)
    rate_limit_max: int = Field(default=5, gt=0)

    # Empty or "test-key" puts the LLM gateway in offline mock mode
    openai_api_key: str | None = None
    openai_model: str = "gpt-3.5-turbo"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("openai_model", mode="before")
    @classmethod
    def default_blank_model(cls, value: str | None) -> str:
        if not value:
            return "gpt-3.5-turbo"
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
