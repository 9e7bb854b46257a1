"""Process-wide runtime settings read from the environment and .env."""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from agentcore.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class RuntimeSettings(BaseSettings):
    """Immutable snapshot of environment configuration.

    The API key is optional here: its absence only matters once a request is
    about to be sent, so it is checked lazily by the provider.
    """

    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default=DEFAULT_MODEL, alias="OPENAI_MODEL")
    openai_base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    openai_timeout_seconds: float = Field(default=60.0, gt=0, alias="OPENAI_TIMEOUT_SECONDS")
    max_concurrent: int = Field(default=3, ge=1, alias="AGENT_MAX_CONCURRENT")
    min_interval_seconds: float = Field(default=0.0, ge=0, alias="AGENT_MIN_INTERVAL_SECONDS")
    max_retries: int = Field(default=2, ge=0, alias="AGENT_MAX_RETRIES")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        """Load settings, reporting bad values as ConfigurationError."""
        try:
            return cls()
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            ]
            raise ConfigurationError(
                "Invalid environment configuration: " + "; ".join(problems),
                details={"errors": problems},
            ) from exc


@lru_cache(maxsize=1)
def get_settings() -> RuntimeSettings:
    """Cached settings singleton. Call get_settings.cache_clear() to reload."""
    settings = RuntimeSettings.from_env()
    logger.debug(
        "Loaded settings model=%s base_url=%s max_concurrent=%d",
        settings.openai_model, settings.openai_base_url, settings.max_concurrent,
    )
    return settings


def default_model() -> str:
    """Model used when an AgentConfig does not name one."""
    return get_settings().openai_model
