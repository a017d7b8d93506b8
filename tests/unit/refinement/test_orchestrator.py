"""
Unit tests for FixerOrchestrator and fixer selection.
"""

from unittest.mock import AsyncMock

import pytest

from clarity_refinement.models import (
    FixerInput,
    FixerResult,
    FixerType,
    LogStatus,
    OrchestratorInput,
    Source,
)
from clarity_refinement.refinement.orchestrator import (
    FixerOrchestrator,
    select_fixers_to_deploy,
)
from clarity_refinement.retry.engine import RetryExecutor
from clarity_refinement.retry.policy import RetryConfig


def make_fixer(fixer_type, edits=(), side_effect=None):
    """Mock fixer returning ``edits`` (or raising via ``side_effect``)."""
    fixer = AsyncMock()
    if side_effect is not None:
        fixer.suggest_edits = AsyncMock(side_effect=side_effect)
    else:
        fixer.suggest_edits = AsyncMock(
            return_value=FixerResult(
                fixer_type=fixer_type,
                suggested_edits=list(edits),
                confidence=0.8,
                processing_time=120,
            )
        )
    return fixer


@pytest.fixture
def executor(recording_delay, capturing_logger):
    return RetryExecutor(delay=recording_delay, logger=capturing_logger)


# ============================================================================
# select_fixers_to_deploy
# ============================================================================


def test_select_fixers_below_threshold_in_canonical_order():
    scores = {
        FixerType.BIAS_DETECTION: 4.0,
        FixerType.ACCESSIBILITY: 6.9,
        FixerType.FIRST_PRINCIPLES_COHERENCE: 6.0,
        FixerType.OBJECTIVITY: 7.0,
        FixerType.EVIDENCE_QUALITY: 9.0,
    }

    assert select_fixers_to_deploy(scores) == [
        FixerType.FIRST_PRINCIPLES_COHERENCE,
        FixerType.ACCESSIBILITY,
        FixerType.BIAS_DETECTION,
    ]


def test_select_fixers_honours_custom_threshold():
    scores = {ft: 7.5 for ft in FixerType}

    assert select_fixers_to_deploy(scores, threshold=7.0) == []
    assert select_fixers_to_deploy(scores, threshold=8.0) == list(FixerType)


def test_select_fixers_ignores_missing_dimensions():
    assert select_fixers_to_deploy({}) == []


# ============================================================================
# orchestrate
# ============================================================================


@pytest.mark.asyncio
async def test_orchestrate_deploys_only_weak_dimensions(
    executor, test_settings, create_consensus, create_edit
):
    evidence_edit = create_edit(section="Evidence")
    objectivity_edit = create_edit(section="Objectivity")
    fixers = {
        FixerType.EVIDENCE_QUALITY: make_fixer(FixerType.EVIDENCE_QUALITY, [evidence_edit]),
        FixerType.OBJECTIVITY: make_fixer(FixerType.OBJECTIVITY, [objectivity_edit]),
        FixerType.ACCESSIBILITY: make_fixer(FixerType.ACCESSIBILITY),
    }
    consensus = create_consensus(
        6.4, weak={FixerType.OBJECTIVITY: 5.0, FixerType.EVIDENCE_QUALITY: 6.0}
    )
    sources = [Source(url="https://example.org", title="Report")]
    orchestrator = FixerOrchestrator(fixers, executor=executor, settings=test_settings)

    result = await orchestrator.orchestrate(
        OrchestratorInput(brief="Draft brief", consensus_result=consensus, sources=sources)
    )

    assert result.fixers_deployed == [FixerType.EVIDENCE_QUALITY, FixerType.OBJECTIVITY]
    assert result.fixers_failed == []
    assert [r.fixer_type for r in result.fixer_results] == result.fixers_deployed
    assert result.all_suggested_edits == [evidence_edit, objectivity_edit]
    fixers[FixerType.ACCESSIBILITY].suggest_edits.assert_not_awaited()

    fixer_input = fixers[FixerType.OBJECTIVITY].suggest_edits.await_args.args[0]
    assert fixer_input == FixerInput(
        brief="Draft brief",
        dimension_score=5.0,
        critique="objectivity is weak",
        sources=sources,
    )


@pytest.mark.asyncio
async def test_orchestrate_nothing_to_fix(executor, test_settings, create_consensus):
    orchestrator = FixerOrchestrator({}, executor=executor, settings=test_settings)

    result = await orchestrator.orchestrate(
        OrchestratorInput(brief="Draft", consensus_result=create_consensus(8.6))
    )

    assert result.fixers_deployed == []
    assert result.fixer_results == []
    assert result.all_suggested_edits == []


@pytest.mark.asyncio
async def test_failed_fixer_does_not_abort_others(
    executor, test_settings, create_consensus, create_edit, recording_delay
):
    """Test a fixer with a permanent error is recorded while the rest succeed."""
    edit = create_edit()
    fixers = {
        FixerType.ACCESSIBILITY: make_fixer(FixerType.ACCESSIBILITY, [edit]),
        FixerType.BIAS_DETECTION: make_fixer(
            FixerType.BIAS_DETECTION, side_effect=Exception("401 Unauthorized")
        ),
    }
    consensus = create_consensus(
        6.0, weak={FixerType.ACCESSIBILITY: 6.5, FixerType.BIAS_DETECTION: 5.5}
    )
    orchestrator = FixerOrchestrator(fixers, executor=executor, settings=test_settings)

    result = await orchestrator.orchestrate(
        OrchestratorInput(brief="Draft", consensus_result=consensus)
    )

    assert result.fixers_deployed == [FixerType.ACCESSIBILITY, FixerType.BIAS_DETECTION]
    assert result.fixers_failed == [FixerType.BIAS_DETECTION]
    assert result.all_suggested_edits == [edit]
    # Permanent errors are not retried
    fixers[FixerType.BIAS_DETECTION].suggest_edits.assert_awaited_once()
    assert recording_delay.calls == []


@pytest.mark.asyncio
async def test_transient_fixer_failure_is_retried(
    executor, test_settings, create_consensus, create_edit, recording_delay
):
    edit = create_edit()
    fixer = make_fixer(FixerType.OBJECTIVITY)
    fixer.suggest_edits.side_effect = [
        Exception("429 rate limit"),
        FixerResult(fixer_type=FixerType.OBJECTIVITY, suggested_edits=[edit]),
    ]
    orchestrator = FixerOrchestrator(
        {FixerType.OBJECTIVITY: fixer},
        executor=executor,
        retry_config_factory=lambda ft: RetryConfig(agent_name=ft.value, initial_delay_ms=50),
        settings=test_settings,
    )

    result = await orchestrator.orchestrate(
        OrchestratorInput(
            brief="Draft",
            consensus_result=create_consensus(6.0, weak={FixerType.OBJECTIVITY: 5.0}),
        )
    )

    assert result.fixers_failed == []
    assert result.all_suggested_edits == [edit]
    assert recording_delay.calls == [50]


@pytest.mark.asyncio
async def test_unregistered_fixer_is_skipped(
    executor, test_settings, create_consensus, capturing_logger
):
    orchestrator = FixerOrchestrator(
        {FixerType.OBJECTIVITY: make_fixer(FixerType.OBJECTIVITY)},
        executor=executor,
        settings=test_settings,
        logger=capturing_logger,
    )
    consensus = create_consensus(
        6.0, weak={FixerType.OBJECTIVITY: 5.0, FixerType.FACTUAL_ACCURACY: 4.0}
    )

    result = await orchestrator.orchestrate(
        OrchestratorInput(brief="Draft", consensus_result=consensus)
    )

    assert result.fixers_deployed == [FixerType.OBJECTIVITY]
    assert capturing_logger.events("warning") == [
        "[FixerOrchestrator] No fixer registered for factual_accuracy"
    ]


@pytest.mark.asyncio
async def test_fixer_runs_are_logged(executor, test_settings, create_consensus):
    execution_logger = AsyncMock()
    fixers = {
        FixerType.ACCESSIBILITY: make_fixer(FixerType.ACCESSIBILITY),
        FixerType.BIAS_DETECTION: make_fixer(
            FixerType.BIAS_DETECTION, side_effect=Exception("invalid api key")
        ),
    }
    orchestrator = FixerOrchestrator(
        fixers, executor=executor, execution_logger=execution_logger, settings=test_settings
    )
    consensus = create_consensus(
        6.0, weak={FixerType.ACCESSIBILITY: 6.5, FixerType.BIAS_DETECTION: 5.5}
    )

    await orchestrator.orchestrate(
        OrchestratorInput(brief="Draft", consensus_result=consensus, brief_id="brief-1")
    )

    logged = {
        call.args[1].fixer_type: call.args[1]
        for call in execution_logger.log_fixer_execution.await_args_list
    }
    assert logged[FixerType.ACCESSIBILITY].status is LogStatus.SUCCESS
    assert logged[FixerType.BIAS_DETECTION].status is LogStatus.FAILED
    assert "invalid api key" in logged[FixerType.BIAS_DETECTION].error_message
    assert all(
        call.args[0] == "brief-1" for call in execution_logger.log_fixer_execution.await_args_list
    )
