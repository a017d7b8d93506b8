"""Quality gate: score tiers and publish/refund decisions."""

from clarity_refinement.quality.gate import (
    SCORE_THRESHOLD_ACCEPTABLE,
    SCORE_THRESHOLD_HIGH,
    create_quality_gate_result,
    get_quality_tier,
    get_tier_decision,
)

__all__ = [
    "SCORE_THRESHOLD_ACCEPTABLE",
    "SCORE_THRESHOLD_HIGH",
    "create_quality_gate_result",
    "get_quality_tier",
    "get_tier_decision",
]
