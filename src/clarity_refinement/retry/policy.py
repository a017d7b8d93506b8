"""Retry policy model."""

from pydantic import BaseModel, ConfigDict, Field

from clarity_refinement.config import Settings


class RetryConfig(BaseModel):
    """
    Retry policy for one agent operation.

    Attributes:
        agent_name: Label used in log messages and metrics
        max_retries: Total number of attempts (first call included)
        initial_delay_ms: Delay before the first retry
        backoff_multiplier: Growth factor of the delay between retries
    """
    model_config = ConfigDict(frozen=True)

    agent_name: str = Field(..., min_length=1)
    max_retries: int = Field(default=3, ge=1)
    initial_delay_ms: int = Field(default=1000, ge=0)
    backoff_multiplier: float = Field(default=2.0, gt=0)

    @classmethod
    def from_settings(cls, agent_name: str, settings: Settings) -> "RetryConfig":
        """Build a config from application settings."""
        return cls(
            agent_name=agent_name,
            max_retries=settings.RETRY_MAX_RETRIES,
            initial_delay_ms=settings.RETRY_INITIAL_DELAY_MS,
            backoff_multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
        )

    def delay_for_retry(self, retry_index: int) -> float:
        """
        Delay in milliseconds before the given retry.

        Retry 1 runs after attempt 1 failed and waits ``initial_delay_ms``;
        every following retry multiplies the delay by ``backoff_multiplier``.
        """
        if retry_index < 1:
            raise ValueError("retry_index must be >= 1")
        return self.initial_delay_ms * self.backoff_multiplier ** (retry_index - 1)
