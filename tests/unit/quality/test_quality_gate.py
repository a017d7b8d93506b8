"""
Unit tests for the tiered quality gate.
"""

import pytest
from pydantic import ValidationError

from clarity_refinement.models.enums import QualityTier
from clarity_refinement.quality.gate import (
    create_quality_gate_result,
    get_quality_tier,
    get_tier_decision,
)


@pytest.mark.parametrize(
    "score,tier",
    [
        (10.0, QualityTier.HIGH),
        (8.0, QualityTier.HIGH),
        (7.999999, QualityTier.ACCEPTABLE),
        (6.0, QualityTier.ACCEPTABLE),
        (5.999999, QualityTier.FAILED),
        (0.0, QualityTier.FAILED),
        # No range validation is applied
        (12.5, QualityTier.HIGH),
        (-3.0, QualityTier.FAILED),
    ],
)
def test_get_quality_tier_boundaries(score, tier):
    assert get_quality_tier(score) is tier


@pytest.mark.parametrize(
    "score,publishable,warning_badge,refund_required",
    [
        (9.1, True, False, False),
        (7.0, True, True, False),
        (4.2, False, False, True),
    ],
)
def test_gate_decisions_follow_tier(score, publishable, warning_badge, refund_required):
    result = create_quality_gate_result(score, attempts=2)

    assert result.publishable is publishable
    assert result.warning_badge is warning_badge
    assert result.refund_required is refund_required


@pytest.mark.parametrize("score", [-1.0, 0.0, 5.5, 6.0, 6.01, 7.5, 7.999, 8.0, 9.5, 11.0])
def test_gate_invariants_hold_for_any_score(score):
    """Test refund, publish and warning flags stay consistent with the tier."""
    result = create_quality_gate_result(score, attempts=0)

    assert result.refund_required == (result.tier is QualityTier.FAILED)
    assert result.publishable == (result.tier is not QualityTier.FAILED)
    assert result.warning_badge == (result.tier is QualityTier.ACCEPTABLE)


def test_gate_keeps_score_and_attempts_exactly():
    result = create_quality_gate_result(7.456, attempts=3)

    assert result.final_score == 7.456
    assert result.attempts == 3


def test_gate_result_is_immutable():
    result = create_quality_gate_result(8.5, attempts=1)

    with pytest.raises(ValidationError):
        result.publishable = False


def test_tier_decision_reasoning():
    assert get_tier_decision(8.5).reasoning == (
        "Score 8.5 ≥ 8.0: High quality, publishing normally"
    )
    assert get_tier_decision(7.0).reasoning == (
        "Score 7.0 ≥ 6.0: Acceptable quality, publishing with warning"
    )
    assert get_tier_decision(4.25).reasoning == (
        "Score 4.2 < 6.0: Failed quality gate, refund required"
    )


def test_tier_decision_matches_gate_result():
    for score in (3.0, 6.5, 8.2):
        decision = get_tier_decision(score)
        result = create_quality_gate_result(score, attempts=1)

        assert decision.tier is result.tier
        assert decision.publishable is result.publishable
        assert decision.warning_badge is result.warning_badge
        assert decision.refund_required is result.refund_required
