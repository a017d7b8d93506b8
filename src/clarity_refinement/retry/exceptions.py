"""
Retry engine exceptions.

AgentRetryError is the only exception the retry engines raise to their
callers: either every attempt failed, or smart retry hit a permanent error.
AgentFailure wraps non-exception failure values so they can sit in the
error history next to real exceptions.
"""

from collections.abc import Sequence
from typing import Optional


class AgentFailure(Exception):
    """
    Exception form of a failure that was not raised as an exception.

    Attributes:
        message: Normalized failure message
        raw: Original failure value (None if there was none)
    """

    def __init__(self, message: str, raw: object = None) -> None:
        super().__init__(message)
        self.message = message
        self.raw = raw


class AgentRetryError(Exception):
    """
    Raised when an agent's retry chain ends without a result.

    The error history is never empty when raised and is kept in attempt
    order, so ``last_error`` is the failure that ended the chain.

    Attributes:
        message: Human-readable summary ("<agent> failed after N attempts")
        errors: One exception per failed attempt, in attempt order
        agent_name: Agent label from the RetryConfig
        attempts: Number of failed attempts (== len(errors))
    """

    def __init__(
        self,
        message: str,
        errors: Sequence[Exception],
        agent_name: str,
    ) -> None:
        """
        Initialize AgentRetryError.

        Args:
            message: Summary message
            errors: Failed attempts in order
            agent_name: Agent label
        """
        super().__init__(message)
        self.message = message
        self.errors: tuple[Exception, ...] = tuple(errors)
        self.agent_name = agent_name
        self.attempts = len(self.errors)

    @property
    def last_error(self) -> Optional[Exception]:
        """Failure of the final attempt (None if no errors were recorded)."""
        return self.errors[-1] if self.errors else None
