"""Custom Prometheus metrics for the refinement core.

These metrics are exposed by whichever process hosts the core and should be
scraped by Prometheus. Alert rules should be configured for:
- agent_retry_exhausted_total (agents failing after every retry)
- agent_non_retryable_errors_total (credentials / configuration problems)
- quality_gate_decisions_total{tier="failed"} (refund rate)
- execution_log_failures_total (telemetry silently dropped)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

agent_retries_total = Counter(
    "agent_retries_total",
    "Agent attempts by agent name and outcome",
    ["agent", "outcome"],
)
"""
Agent attempt counter.

Labels:
- agent: agent name from RetryConfig
- outcome: success (attempt returned), failure (attempt raised)

Alert thresholds:
- WARN: failure rate > 10% of attempts
- CRITICAL: failure rate > 30% of attempts
"""

agent_non_retryable_errors_total = Counter(
    "agent_non_retryable_errors_total",
    "Permanent errors that short-circuited smart retry",
    ["agent"],
)
"""
Non-retryable error counter.

Any increase usually means a revoked or missing API key (401/403) or a
misconfigured endpoint (404).
"""

agent_retry_exhausted_total = Counter(
    "agent_retry_exhausted_total",
    "Retry chains that used every attempt without success",
    ["agent"],
)

# === Refinement Metrics ===

refinement_attempts_total = Counter(
    "refinement_attempts_total",
    "Refinement attempts by outcome",
    ["outcome"],
)
"""
Refinement attempt counter.

Labels:
- outcome: passed (target reached), improved, regressed, no_edits
"""

refinement_duration_seconds = Histogram(
    "refinement_duration_seconds",
    "Wall-clock duration of a full refinement loop",
    buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
)

fixer_executions_total = Counter(
    "fixer_executions_total",
    "Fixer agent runs by fixer type and status",
    ["fixer_type", "status"],
)

# === Quality Gate Metrics ===

quality_gate_decisions_total = Counter(
    "quality_gate_decisions_total",
    "Final quality gate decisions by tier",
    ["tier"],
)
"""
Quality gate decision counter.

Labels:
- tier: high, acceptable, failed

Alert thresholds:
- WARN: failed > 5% of decisions (refunds)
- CRITICAL: failed > 15% of decisions
"""

# === Telemetry Metrics ===

execution_log_failures_total = Counter(
    "execution_log_failures_total",
    "Execution log inserts that failed and were dropped",
    ["agent_type"],
)
