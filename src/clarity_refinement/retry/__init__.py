"""
Agent retry with exponential backoff and error classification.

Agent calls fail for two very different reasons: transient API trouble
(timeouts, 429/5xx, overloaded) that is worth waiting out, and permanent
problems (401/403/404, invalid API key) where retrying is futile.

Main Components:
    - RetryExecutor: Runs operations under a RetryConfig
    - with_retry / wrap_with_retry: Retry every failure
    - with_smart_retry: Fail fast on permanent errors
    - is_retryable_error: Transient vs. permanent classification
    - AgentRetryError: Raised when a retry chain gives up

Usage:
    >>> from clarity_refinement.retry import RetryConfig, with_smart_retry
    >>> config = RetryConfig(agent_name="Evidence Fixer", max_retries=3)
    >>> result = await with_smart_retry(lambda: fixer.suggest_edits(inp), config)
"""

from clarity_refinement.retry.classifier import (
    PERMANENT_INDICATORS,
    TRANSIENT_INDICATORS,
    is_retryable_error,
)
from clarity_refinement.retry.engine import (
    Delay,
    RetryExecutor,
    asyncio_delay,
    with_retry,
    with_smart_retry,
    wrap_with_retry,
)
from clarity_refinement.retry.exceptions import AgentFailure, AgentRetryError
from clarity_refinement.retry.failures import (
    Failure,
    KnownError,
    UnknownFailure,
    classify_failure,
    normalize_failure,
)
from clarity_refinement.retry.policy import RetryConfig

__all__ = [
    "AgentFailure",
    "AgentRetryError",
    "Delay",
    "Failure",
    "KnownError",
    "PERMANENT_INDICATORS",
    "RetryConfig",
    "RetryExecutor",
    "TRANSIENT_INDICATORS",
    "UnknownFailure",
    "asyncio_delay",
    "classify_failure",
    "is_retryable_error",
    "normalize_failure",
    "with_retry",
    "with_smart_retry",
    "wrap_with_retry",
]
