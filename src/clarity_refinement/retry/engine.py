"""
Agent retry engine with exponential backoff.

Wraps any zero-argument async operation (typically an LLM-backed agent call)
and retries it so transient API errors do not break brief generation.

Two policies share the same attempt/backoff mechanics:
    1. Plain retry: every failure is retried until max_retries is used up
    2. Smart retry: failures are classified first; permanent errors
       (401, 403, 404, invalid API key) fail immediately

Both raise AgentRetryError when they give up. Each call keeps its own error
history, so concurrent retry chains never share state.

Usage:
    result = await with_retry(lambda: research_agent(question),
                              RetryConfig(agent_name="Research Agent"))
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Optional, Protocol, TypeVar

from clarity_refinement.logging_config import LoggerPort, get_logger
from clarity_refinement.monitoring.metrics import (
    agent_non_retryable_errors_total,
    agent_retries_total,
    agent_retry_exhausted_total,
)
from clarity_refinement.retry.classifier import is_retryable_error
from clarity_refinement.retry.exceptions import AgentRetryError
from clarity_refinement.retry.failures import as_exception, failure_message
from clarity_refinement.retry.policy import RetryConfig


T = TypeVar("T")


class Delay(Protocol):
    """Suspends the current retry chain for ``delay_ms`` milliseconds."""

    async def __call__(self, delay_ms: float) -> None: ...


async def asyncio_delay(delay_ms: float) -> None:
    """Default delay: real-clock ``asyncio.sleep``."""
    await asyncio.sleep(delay_ms / 1000)


class RetryExecutor:
    """
    Runs agent operations under a retry policy.

    The delay and the logger are injected so tests can use a virtual clock
    and a capturing logger.

    Attributes:
        delay: Backoff delay capability
        logger: Log sink for attempt/failure messages
    """

    def __init__(
        self,
        delay: Optional[Delay] = None,
        logger: Optional[LoggerPort] = None,
    ):
        """
        Initialize retry executor.

        Args:
            delay: Backoff delay (defaults to asyncio.sleep)
            logger: Logger port (defaults to get_logger(__name__))
        """
        self.delay: Delay = delay or asyncio_delay
        self.logger: LoggerPort = logger if logger is not None else get_logger(__name__)

    async def execute(
        self, operation: Callable[[], Awaitable[T]], config: RetryConfig
    ) -> T:
        """
        Execute operation, retrying every failure with exponential backoff.

        Raises:
            AgentRetryError: All max_retries attempts failed
        """
        return await self._run(operation, config, smart=False)

    async def execute_smart(
        self, operation: Callable[[], Awaitable[T]], config: RetryConfig
    ) -> T:
        """
        Execute operation, retrying only transient failures.

        Raises:
            AgentRetryError: A non-retryable error occurred, or all
                max_retries attempts failed
        """
        return await self._run(operation, config, smart=True)

    def wrap(
        self,
        agent_name: str,
        fn: Callable[..., Awaitable[T]],
        config: Optional[RetryConfig] = None,
        smart: bool = False,
    ) -> Callable[..., Awaitable[T]]:
        """
        Create a version of ``fn`` with retry built in.

        Arguments are forwarded unchanged on every attempt and the return
        value is passed through unchanged on success.
        """
        if config is None:
            config = RetryConfig(agent_name=agent_name)
        elif config.agent_name != agent_name:
            config = config.model_copy(update={"agent_name": agent_name})

        run = self.execute_smart if smart else self.execute

        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            return await run(lambda: fn(*args, **kwargs), config)

        return wrapper

    async def _run(
        self,
        operation: Callable[[], Awaitable[T]],
        config: RetryConfig,
        smart: bool,
    ) -> T:
        agent = config.agent_name
        max_retries = config.max_retries
        errors: list[Exception] = []

        for attempt in range(1, max_retries + 1):
            self.logger.info(
                f"[{agent}] Attempt {attempt}/{max_retries}",
                agent_name=agent,
                attempt=attempt,
                max_retries=max_retries,
            )

            try:
                result = await operation()
            except Exception as exc:
                error = as_exception(exc)
                errors.append(error)
                message = failure_message(exc)
                agent_retries_total.labels(agent=agent, outcome="failure").inc()

                if smart:
                    retryable = is_retryable_error(exc)
                    self.logger.error(
                        f"[{agent}] Attempt {attempt}/{max_retries} failed",
                        agent_name=agent,
                        attempt=attempt,
                        error=message,
                        retryable=retryable,
                    )
                    if not retryable:
                        self.logger.error(
                            f"[{agent}] Error is not retryable, failing immediately",
                            agent_name=agent,
                            attempt=attempt,
                            error=message,
                        )
                        agent_non_retryable_errors_total.labels(agent=agent).inc()
                        raise AgentRetryError(
                            f"{agent} failed with non-retryable error: {message}",
                            errors,
                            agent,
                        ) from exc
                else:
                    self.logger.error(
                        f"[{agent}] Attempt {attempt}/{max_retries} failed",
                        agent_name=agent,
                        attempt=attempt,
                        error=message,
                        error_type=type(exc).__name__,
                    )

                if attempt < max_retries:
                    delay_ms = config.delay_for_retry(attempt)
                    self.logger.info(
                        f"[{agent}] Retrying in {delay_ms:.0f}ms...",
                        agent_name=agent,
                        delay_ms=delay_ms,
                        next_attempt=attempt + 1,
                    )
                    await self.delay(delay_ms)
                continue

            agent_retries_total.labels(agent=agent, outcome="success").inc()
            if attempt > 1:
                self.logger.info(
                    f"[{agent}] Succeeded on attempt {attempt} after {attempt - 1} retries",
                    agent_name=agent,
                    attempt=attempt,
                    retries=attempt - 1,
                )
            return result

        self.logger.error(
            f"[{agent}] All {max_retries} attempts failed",
            agent_name=agent,
            total_attempts=max_retries,
            errors=[failure_message(e) for e in errors],
        )
        agent_retry_exhausted_total.labels(agent=agent).inc()

        raise AgentRetryError(
            f"{agent} failed after {max_retries} attempts",
            errors,
            agent,
        ) from errors[-1]


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig,
    *,
    delay: Optional[Delay] = None,
    logger: Optional[LoggerPort] = None,
) -> T:
    """
    Execute an agent operation with retry and exponential backoff.

    Args:
        operation: Zero-argument async callable
        config: Retry policy (agent_name is required)
        delay: Optional delay override (virtual clock in tests)
        logger: Optional logger override

    Returns:
        The operation's result

    Raises:
        AgentRetryError: After max_retries failed attempts
    """
    return await RetryExecutor(delay=delay, logger=logger).execute(operation, config)


async def with_smart_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig,
    *,
    delay: Optional[Delay] = None,
    logger: Optional[LoggerPort] = None,
) -> T:
    """
    Execute with retry, but only retry on transient errors.

    Raises:
        AgentRetryError: On the first non-retryable error, or after
            max_retries failed attempts
    """
    return await RetryExecutor(delay=delay, logger=logger).execute_smart(operation, config)


def wrap_with_retry(
    agent_name: str,
    fn: Callable[..., Awaitable[T]],
    config: Optional[RetryConfig] = None,
    *,
    smart: bool = False,
    delay: Optional[Delay] = None,
    logger: Optional[LoggerPort] = None,
) -> Callable[..., Awaitable[T]]:
    """
    Wrap an agent function with built-in retry logic.

    Example:
        research_with_retry = wrap_with_retry("Research Agent", research_agent)
        result = await research_with_retry(question)
    """
    return RetryExecutor(delay=delay, logger=logger).wrap(agent_name, fn, config, smart=smart)
