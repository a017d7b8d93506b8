"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

from typing import Any, Optional

import pytest

from clarity_refinement.config import Settings
from clarity_refinement.models import (
    ConsensusResult,
    DimensionScoreChange,
    FixerType,
    RefinementAttempt,
    ScoreBeforeAfter,
    SkippedEdit,
    SuggestedEdit,
)


class RecordingDelay:
    """Virtual clock: records every requested delay and returns immediately."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay_ms: float) -> None:
        self.calls.append(delay_ms)


class CapturingLogger:
    """Logger port that keeps every message for assertions."""

    def __init__(self):
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, event: str, **kw: Any) -> None:
        self.records.append(("info", event, kw))

    def warning(self, event: str, **kw: Any) -> None:
        self.records.append(("warning", event, kw))

    def error(self, event: str, **kw: Any) -> None:
        self.records.append(("error", event, kw))

    def events(self, level: Optional[str] = None) -> list[str]:
        return [event for lvl, event, _ in self.records if level is None or lvl == level]


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        # === Application ===
        APP_NAME="Clarity Refinement Core (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Agent Retry ===
        RETRY_MAX_RETRIES=3,
        RETRY_INITIAL_DELAY_MS=1000,
        RETRY_BACKOFF_MULTIPLIER=2.0,

        # === Refinement Loop ===
        REFINEMENT_TARGET_SCORE=8.0,
        REFINEMENT_MAX_ATTEMPTS=3,
        FIXER_DEPLOY_THRESHOLD=7.0,

        # === Persistence ===
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,
        EXECUTION_LOGS_TABLE="agent_execution_logs",
        EXECUTION_LOG_TTL_SECONDS=2592000,
    )


@pytest.fixture
def recording_delay() -> RecordingDelay:
    return RecordingDelay()


@pytest.fixture
def capturing_logger() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture
def create_edit():
    """Factory fixture to create SuggestedEdit with custom text.

    Usage:
        def test_something(create_edit):
            edit = create_edit(section="Summary", suggested_text="Clearer text")
    """
    def _create(
        section: str = "Summary",
        original_text: str = "The policy is bad.",
        suggested_text: str = "The policy raised costs by 12% (CBO, 2024).",
        rationale: str = "Replace opinion with evidence",
    ) -> SuggestedEdit:
        return SuggestedEdit(
            section=section,
            original_text=original_text,
            suggested_text=suggested_text,
            rationale=rationale,
        )

    return _create


@pytest.fixture
def create_consensus():
    """Factory fixture to create ConsensusResult with some weak dimensions.

    Every dimension not listed in ``weak`` gets ``default``.

    Usage:
        def test_something(create_consensus):
            consensus = create_consensus(6.5, weak={FixerType.OBJECTIVITY: 5.0})
    """
    def _create(
        overall_score: float = 6.5,
        weak: Optional[dict[FixerType, float]] = None,
        default: float = 8.5,
    ) -> ConsensusResult:
        weak = weak or {}
        scores = {fixer_type: default for fixer_type in FixerType}
        scores.update(weak)
        return ConsensusResult(
            overall_score=overall_score,
            dimension_scores=scores,
            critique="Needs work",
            dimension_critiques={ft: f"{ft.value} is weak" for ft in weak},
        )

    return _create


@pytest.fixture
def create_attempt(create_edit):
    """Factory fixture to create a RefinementAttempt."""
    def _create(
        attempt_number: int = 1,
        fixers_deployed: Optional[list[FixerType]] = None,
        applied: int = 2,
        skipped: Optional[int] = 1,
        before: float = 6.0,
        after: float = 7.0,
        dimension_scores: Optional[dict[FixerType, DimensionScoreChange]] = None,
        processing_time: Optional[int] = 1500,
    ) -> RefinementAttempt:
        if fixers_deployed is None:
            fixers_deployed = [FixerType.EVIDENCE_QUALITY, FixerType.OBJECTIVITY]
        edits_skipped = None
        if skipped is not None:
            edits_skipped = [
                SkippedEdit(edit=create_edit(section=f"Skipped {i}"), reason="Conflicts")
                for i in range(skipped)
            ]
        return RefinementAttempt(
            attempt_number=attempt_number,
            fixers_deployed=fixers_deployed,
            edits_made=[create_edit(section=f"Section {i}") for i in range(applied)],
            edits_skipped=edits_skipped,
            score_before_after=ScoreBeforeAfter(
                before=before, after=after, dimension_scores=dimension_scores
            ),
            processing_time=processing_time,
        )

    return _create
