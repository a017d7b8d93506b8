"""
Execution telemetry: best-effort agent logs and refinement cost estimates.

- execution_logger.py: ExecutionLogger, rows in the agent_execution_logs table
- cost.py: Linear refinement cost estimate
"""

from clarity_refinement.telemetry.cost import (
    PER_FIXER_COST_USD,
    RECONCILIATION_COST_USD,
    SCORING_COST_USD,
    RefinementPricing,
    estimate_refinement_cost,
)
from clarity_refinement.telemetry.execution_logger import (
    ExecutionLogger,
    estimate_token_count,
)

__all__ = [
    "ExecutionLogger",
    "PER_FIXER_COST_USD",
    "RECONCILIATION_COST_USD",
    "RefinementPricing",
    "SCORING_COST_USD",
    "estimate_refinement_cost",
    "estimate_token_count",
]
