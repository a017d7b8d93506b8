"""Monitoring and metrics instrumentation for the refinement core.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from clarity_refinement.monitoring.metrics import (
    agent_non_retryable_errors_total,
    agent_retries_total,
    agent_retry_exhausted_total,
    execution_log_failures_total,
    fixer_executions_total,
    quality_gate_decisions_total,
    refinement_attempts_total,
    refinement_duration_seconds,
)

__all__ = [
    "agent_retries_total",
    "agent_non_retryable_errors_total",
    "agent_retry_exhausted_total",
    "refinement_attempts_total",
    "refinement_duration_seconds",
    "fixer_executions_total",
    "quality_gate_decisions_total",
    "execution_log_failures_total",
]
