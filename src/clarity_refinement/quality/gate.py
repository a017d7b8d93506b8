"""
Tiered quality gate.

Maps a consensus score to a QualityTier and the publishing decisions that
follow from it:

    score >= 8.0          HIGH        publish normally
    6.0 <= score < 8.0    ACCEPTABLE  publish with a warning badge
    score < 6.0           FAILED      do not publish, refund credits

Thresholds are closed-open and the functions accept any real number; no
range validation is applied to the score.
"""

from clarity_refinement.models.enums import QualityTier
from clarity_refinement.models.quality import QualityGateResult, TierDecision

SCORE_THRESHOLD_HIGH = 8.0
SCORE_THRESHOLD_ACCEPTABLE = 6.0

# tier -> (publishable, warning_badge, refund_required)
_DECISIONS: dict[QualityTier, tuple[bool, bool, bool]] = {
    QualityTier.HIGH: (True, False, False),
    QualityTier.ACCEPTABLE: (True, True, False),
    QualityTier.FAILED: (False, False, True),
}


def get_quality_tier(score: float) -> QualityTier:
    """Classify a score into a quality tier."""
    if score >= SCORE_THRESHOLD_HIGH:
        return QualityTier.HIGH
    if score >= SCORE_THRESHOLD_ACCEPTABLE:
        return QualityTier.ACCEPTABLE
    return QualityTier.FAILED


def create_quality_gate_result(score: float, attempts: int) -> QualityGateResult:
    """
    Build the final gate result for a brief.

    Args:
        score: Final consensus score (kept exactly, no rounding)
        attempts: Number of refinement attempts made (0 allowed)

    Returns:
        QualityGateResult with decisions consistent with the tier
    """
    tier = get_quality_tier(score)
    publishable, warning_badge, refund_required = _DECISIONS[tier]

    return QualityGateResult(
        tier=tier,
        final_score=score,
        attempts=attempts,
        publishable=publishable,
        warning_badge=warning_badge,
        refund_required=refund_required,
    )


def get_tier_decision(score: float) -> TierDecision:
    """Tier classification with a reasoning string for logging."""
    tier = get_quality_tier(score)
    publishable, warning_badge, refund_required = _DECISIONS[tier]

    if tier is QualityTier.HIGH:
        reasoning = (
            f"Score {score:.1f} ≥ {SCORE_THRESHOLD_HIGH}: High quality, publishing normally"
        )
    elif tier is QualityTier.ACCEPTABLE:
        reasoning = (
            f"Score {score:.1f} ≥ {SCORE_THRESHOLD_ACCEPTABLE}: "
            "Acceptable quality, publishing with warning"
        )
    else:
        reasoning = (
            f"Score {score:.1f} < {SCORE_THRESHOLD_ACCEPTABLE}: "
            "Failed quality gate, refund required"
        )

    return TierDecision(
        tier=tier,
        publishable=publishable,
        warning_badge=warning_badge,
        refund_required=refund_required,
        reasoning=reasoning,
    )
