"""
Transient vs. permanent error classification.

Classification is a case-insensitive substring match of the failure message
against two fixed keyword sets. Permanent indicators win over transient ones,
and unknown messages are treated as transient.
"""

from clarity_refinement.retry.failures import failure_message

TRANSIENT_INDICATORS: tuple[str, ...] = (
    "timeout",
    "econnreset",
    "econnrefused",
    "socket hang up",
    "network error",
    "rate limit",
    "429",
    "500",
    "502",
    "503",
    "504",
    "overloaded",
    "temporarily unavailable",
)

PERMANENT_INDICATORS: tuple[str, ...] = (
    "401",
    "unauthorized",
    "403",
    "forbidden",
    "404",
    "not found",
    "invalid api key",
    "invalid_api_key",
)


def is_retryable_error(error: object) -> bool:
    """
    Check if an error is worth retrying.

    Args:
        error: Exception (or message string) raised by an agent call

    Returns:
        False if the message contains any permanent indicator (e.g. "401"),
        True otherwise
    """
    message = failure_message(error).lower()

    if any(indicator in message for indicator in PERMANENT_INDICATORS):
        return False

    if any(indicator in message for indicator in TRANSIENT_INDICATORS):
        return True

    # Unknown errors are assumed transient
    return True
