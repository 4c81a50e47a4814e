from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from glrequester.types import RetryPolicy


class Settings(BaseSettings):
    """
    Global settings for the requester.

    Values are loaded from environment variables (and a project ``.env``) and
    provide the defaults used when callers do not pass explicit policy objects.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    retry_status_codes: list[int] = Field(
        default=[429, 502],
        description="HTTP statuses that are retried with backoff",
        validation_alias="GLREQUESTER_RETRY_STATUS_CODES",
    )

    max_attempts: int = Field(
        default=10,
        description="Maximum number of attempts per request",
        validation_alias="GLREQUESTER_MAX_ATTEMPTS",
    )

    retry_base_delay: float = Field(
        default=0.1,
        description="Delay in seconds before the first retry",
        validation_alias="GLREQUESTER_RETRY_BASE_DELAY",
    )

    retry_backoff_factor: float = Field(
        default=2.0,
        description="Multiplier applied to the delay after each attempt",
        validation_alias="GLREQUESTER_RETRY_BACKOFF_FACTOR",
    )

    query_timeout: float = Field(
        default=300.0,
        description="Transport timeout in seconds when the caller sets none",
        validation_alias="GLREQUESTER_QUERY_TIMEOUT",
    )

    supports_custom_agents: bool = Field(
        default=True,
        description=(
            "Whether the host lets us configure TLS verification per request. "
            "Disable in browser-like sandboxes (e.g. Pyodide) where the host owns TLS."
        ),
        validation_alias="GLREQUESTER_SUPPORTS_CUSTOM_AGENTS",
    )

    def retry_policy(self) -> RetryPolicy:
        """Build the default retry policy from the configured values."""
        return RetryPolicy(
            retry_status_codes=frozenset(self.retry_status_codes),
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            backoff_factor=self.retry_backoff_factor,
        )


# Create a singleton instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
