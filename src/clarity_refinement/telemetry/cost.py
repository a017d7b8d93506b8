"""
Refinement cost estimation.

Each attempt pays for every deployed fixer plus one reconciliation pass and
one re-scoring pass, so cost is linear in both fixer count and attempt count.
The prices are business configuration, not part of the algorithm.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from clarity_refinement.config import Settings

PER_FIXER_COST_USD = 0.0045
RECONCILIATION_COST_USD = 0.006
SCORING_COST_USD = 0.0125


class RefinementPricing(BaseModel):
    """Per-call prices (USD) used by the estimator."""
    model_config = ConfigDict(frozen=True)

    per_fixer: float = Field(default=PER_FIXER_COST_USD, gt=0)
    reconciliation: float = Field(default=RECONCILIATION_COST_USD, gt=0)
    scoring: float = Field(default=SCORING_COST_USD, gt=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RefinementPricing":
        return cls(
            per_fixer=settings.COST_PER_FIXER_USD,
            reconciliation=settings.COST_RECONCILIATION_USD,
            scoring=settings.COST_SCORING_USD,
        )


def estimate_refinement_cost(
    fixer_count: int,
    attempt_count: int,
    *,
    pricing: Optional[RefinementPricing] = None,
) -> float:
    """
    Estimate the USD cost of a refinement run.

    Args:
        fixer_count: Distinct fixers deployed per attempt (>= 0)
        attempt_count: Refinement attempts made (>= 0)
        pricing: Price table (defaults to the module constants)

    Returns:
        Estimated cost rounded to 4 decimal places; exactly 0 for zero attempts
    """
    if fixer_count < 0 or attempt_count < 0:
        raise ValueError("fixer_count and attempt_count must be >= 0")
    if attempt_count == 0:
        return 0.0

    pricing = pricing or RefinementPricing()
    per_attempt = pricing.per_fixer * fixer_count + pricing.reconciliation + pricing.scoring
    return round(attempt_count * per_attempt, 4)
