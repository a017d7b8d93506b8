"""
Quality gate value objects.

Both models are frozen: a gate result is derived once from the final score
and never mutated afterwards.
"""

from pydantic import BaseModel, ConfigDict, Field

from clarity_refinement.models.enums import QualityTier


class QualityGateResult(BaseModel):
    """
    Publish / refund decision for a brief.

    The three booleans are always consistent with ``tier``:

    ==========  ===========  =============  ===============
    tier        publishable  warning_badge  refund_required
    ==========  ===========  =============  ===============
    HIGH        True         False          False
    ACCEPTABLE  True         True           False
    FAILED      False        False          True
    ==========  ===========  =============  ===============
    """
    model_config = ConfigDict(frozen=True)

    tier: QualityTier
    final_score: float = Field(..., description="Score exactly as given, no rounding")
    attempts: int
    publishable: bool
    warning_badge: bool
    refund_required: bool


class TierDecision(BaseModel):
    """Tier decision plus a human-readable explanation, for logs."""
    model_config = ConfigDict(frozen=True)

    tier: QualityTier
    publishable: bool
    warning_badge: bool
    refund_required: bool
    reasoning: str
