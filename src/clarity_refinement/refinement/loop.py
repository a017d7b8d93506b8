"""
Refinement loop.

Iteratively improves a brief until it reaches the target score or the
attempt budget runs out:

    1. Deploy fixers for the weak dimensions (FixerOrchestrator)
    2. Reconcile their edits into a revised brief
    3. Re-score the revised brief

Every step is written to the execution log, and the final score is always
mapped to a quality gate decision.
"""

import time
from collections.abc import Awaitable, Callable
from typing import Optional, Protocol

from clarity_refinement.config import Settings
from clarity_refinement.logging_config import LoggerPort, get_logger
from clarity_refinement.models.enums import FixerType, LogStatus
from clarity_refinement.models.execution_log import (
    OrchestratorExecutionLog,
    ReconciliationExecutionLog,
    RefinementSummaryInput,
)
from clarity_refinement.models.refinement import (
    ConsensusResult,
    DimensionScoreChange,
    OrchestratorInput,
    OrchestratorResult,
    ReconciliationInput,
    ReconciliationResult,
    RefinementAttempt,
    RefinementLoopInput,
    RefinementResult,
    ScoreBeforeAfter,
)
from clarity_refinement.monitoring.metrics import (
    quality_gate_decisions_total,
    refinement_attempts_total,
    refinement_duration_seconds,
)
from clarity_refinement.quality.gate import create_quality_gate_result, get_tier_decision
from clarity_refinement.retry.failures import failure_message
from clarity_refinement.telemetry.execution_logger import ExecutionLogger

LOG_PREFIX = "[RefinementLoop]"

MAX_WEAK_DIMENSIONS_IN_WARNING = 3


class Orchestrator(Protocol):
    async def orchestrate(self, orchestrator_input: OrchestratorInput) -> OrchestratorResult: ...


class EditReconciler(Protocol):
    """Merges fixer suggestions into a revised brief."""

    async def reconcile(self, reconciliation_input: ReconciliationInput) -> ReconciliationResult: ...


ScoringFunction = Callable[[str], Awaitable[ConsensusResult]]


def track_dimension_score_changes(
    before: ConsensusResult, after: ConsensusResult
) -> dict[FixerType, DimensionScoreChange]:
    """Pair each dimension's score before and after an attempt."""
    return {
        fixer_type: DimensionScoreChange(
            before=before.dimension_scores[fixer_type],
            after=after.dimension_scores[fixer_type],
        )
        for fixer_type in FixerType
        if fixer_type in before.dimension_scores and fixer_type in after.dimension_scores
    }


def build_warning_reason(
    final_score: float,
    attempts: list[RefinementAttempt],
    weak_threshold: float,
) -> str:
    """Explain why refinement stopped short of the target."""
    if not attempts:
        return f"Brief scored {final_score:.1f}/10, no refinement attempts could be completed."

    changes = attempts[-1].score_before_after.dimension_scores or {}
    weakest = sorted(
        ((fixer_type, change.after) for fixer_type, change in changes.items()
         if change.after < weak_threshold),
        key=lambda item: item[1],
    )[:MAX_WEAK_DIMENSIONS_IN_WARNING]

    reason = f"Brief scored {final_score:.1f}/10 after {len(attempts)} refinement attempts."
    if weakest:
        reason += f" Lowest dimensions: {', '.join(ft.value for ft, _ in weakest)}."
    return reason


class RefinementLoop:
    """
    Drives orchestrate / reconcile / re-score cycles for one brief.

    Collaborators are injected; the loop itself holds no per-brief state,
    so one instance can refine many briefs concurrently.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        reconciler: EditReconciler,
        scoring_function: ScoringFunction,
        execution_logger: ExecutionLogger,
        settings: Optional[Settings] = None,
        logger: Optional[LoggerPort] = None,
    ):
        settings = settings or Settings()
        self.orchestrator = orchestrator
        self.reconciler = reconciler
        self.scoring_function = scoring_function
        self.execution_logger = execution_logger
        self.target_score = settings.REFINEMENT_TARGET_SCORE
        self.max_attempts = settings.REFINEMENT_MAX_ATTEMPTS
        self.weak_threshold = settings.FIXER_DEPLOY_THRESHOLD
        self.logger: LoggerPort = logger if logger is not None else get_logger(__name__)

    async def refine_until_passing(self, loop_input: RefinementLoopInput) -> RefinementResult:
        """
        Refine a brief until it scores at least the target score.

        Returns:
            RefinementResult carrying the quality gate decision for the
            final score

        Raises:
            Whatever the reconciler or the scoring function raises; fixer
            failures are absorbed by the orchestrator
        """
        started = time.perf_counter()
        brief_id = loop_input.brief_id
        max_attempts = loop_input.max_attempts or self.max_attempts
        initial_score = loop_input.initial_consensus_result.overall_score

        current_brief = loop_input.brief
        current = loop_input.initial_consensus_result
        attempts: list[RefinementAttempt] = []

        self.logger.info(
            f"{LOG_PREFIX} Starting refinement. Initial score: {initial_score:.1f}/10",
            brief_id=brief_id,
        )

        if initial_score >= self.target_score:
            self.logger.info(
                f"{LOG_PREFIX} Brief already meets target score (>={self.target_score}). "
                "No refinement needed.",
                brief_id=brief_id,
            )
            return self._finish(
                brief_id, current_brief, initial_score, True, attempts, started, None
            )

        for attempt_number in range(1, max_attempts + 1):
            attempt_started = time.perf_counter()
            score_before = current.overall_score
            self.logger.info(
                f"{LOG_PREFIX} Starting attempt {attempt_number}/{max_attempts}",
                brief_id=brief_id,
            )

            orchestrated = await self._orchestrate(loop_input, current_brief, current)
            if not orchestrated.fixers_deployed or not orchestrated.all_suggested_edits:
                self.logger.info(
                    f"{LOG_PREFIX} Attempt {attempt_number}: No edits to apply, ending refinement",
                    brief_id=brief_id,
                )
                refinement_attempts_total.labels(outcome="no_edits").inc()
                break

            reconciled = await self._reconcile(brief_id, current_brief, orchestrated)
            if not reconciled.edits_applied or not reconciled.revised_brief:
                self.logger.info(
                    f"{LOG_PREFIX} Attempt {attempt_number}: No edits applied, ending refinement",
                    brief_id=brief_id,
                )
                refinement_attempts_total.labels(outcome="no_edits").inc()
                break

            current_brief = reconciled.revised_brief
            previous = current
            current = await self.scoring_function(current_brief)
            score_after = current.overall_score

            self.logger.info(
                f"{LOG_PREFIX} Attempt {attempt_number}: Score changed from "
                f"{score_before:.1f} to {score_after:.1f} ({score_after - score_before:+.1f})",
                brief_id=brief_id,
            )

            attempt = RefinementAttempt(
                attempt_number=attempt_number,
                fixers_deployed=orchestrated.fixers_deployed,
                edits_made=reconciled.edits_applied,
                edits_skipped=reconciled.edits_skipped,
                score_before_after=ScoreBeforeAfter(
                    before=score_before,
                    after=score_after,
                    dimension_scores=track_dimension_score_changes(previous, current),
                ),
                processing_time=_elapsed_ms(attempt_started),
            )
            attempts.append(attempt)
            await self.execution_logger.log_refinement_attempt(brief_id, attempt)

            if score_after >= self.target_score:
                refinement_attempts_total.labels(outcome="passed").inc()
                self.logger.info(
                    f"{LOG_PREFIX} Target score (>={self.target_score}) reached "
                    f"after {attempt_number} attempt(s)",
                    brief_id=brief_id,
                )
                await self._log_summary(
                    brief_id, attempts, initial_score, score_after, True, started, None
                )
                return self._finish(
                    brief_id, current_brief, score_after, True, attempts, started, None
                )

            outcome = "improved" if score_after > score_before else "regressed"
            refinement_attempts_total.labels(outcome=outcome).inc()

        final_score = current.overall_score
        warning_reason = build_warning_reason(final_score, attempts, self.weak_threshold)
        self.logger.warning(
            f"{LOG_PREFIX} Refinement ended below target. Final score: {final_score:.1f}/10",
            brief_id=brief_id,
            attempts=len(attempts),
            max_attempts=max_attempts,
        )
        await self._log_summary(
            brief_id, attempts, initial_score, final_score, False, started, warning_reason
        )
        return self._finish(
            brief_id, current_brief, final_score, False, attempts, started, warning_reason
        )

    async def _orchestrate(
        self, loop_input: RefinementLoopInput, brief: str, consensus: ConsensusResult
    ) -> OrchestratorResult:
        orchestrator_started = time.perf_counter()
        result = await self.orchestrator.orchestrate(
            OrchestratorInput(
                brief=brief,
                consensus_result=consensus,
                sources=loop_input.sources,
                brief_id=loop_input.brief_id,
            )
        )

        await self.execution_logger.log_orchestrator_execution(
            loop_input.brief_id,
            OrchestratorExecutionLog(
                fixers_deployed=result.fixers_deployed,
                fixers_skipped=[ft for ft in FixerType if ft not in result.fixers_deployed],
                total_edits_collected=len(result.all_suggested_edits),
                processing_time_ms=_elapsed_ms(orchestrator_started),
                dimension_scores={ft.value: score for ft, score in consensus.dimension_scores.items()},
                status=LogStatus.SUCCESS,
            ),
        )
        self.logger.info(
            f"{LOG_PREFIX} Deployed {len(result.fixers_deployed)} fixers, "
            f"got {len(result.all_suggested_edits)} edit suggestions",
            brief_id=loop_input.brief_id,
        )
        return result

    async def _reconcile(
        self, brief_id: Optional[str], brief: str, orchestrated: OrchestratorResult
    ) -> ReconciliationResult:
        reconcile_started = time.perf_counter()
        edits_received = len(orchestrated.all_suggested_edits)
        try:
            result = await self.reconciler.reconcile(
                ReconciliationInput(original_brief=brief, fixer_results=orchestrated.fixer_results)
            )
        except Exception as exc:
            await self.execution_logger.log_reconciliation_execution(
                brief_id,
                ReconciliationExecutionLog(
                    edits_received=edits_received,
                    processing_time_ms=_elapsed_ms(reconcile_started),
                    status=LogStatus.FAILED,
                    error_message=failure_message(exc),
                ),
            )
            raise

        await self.execution_logger.log_reconciliation_execution(
            brief_id,
            ReconciliationExecutionLog(
                edits_received=edits_received,
                edits_applied=len(result.edits_applied),
                edits_skipped=len(result.edits_skipped),
                conflicts_resolved=len(result.edits_skipped),
                processing_time_ms=_elapsed_ms(reconcile_started),
                status=LogStatus.SUCCESS,
            ),
        )
        self.logger.info(
            f"{LOG_PREFIX} Applied {len(result.edits_applied)} edits, "
            f"skipped {len(result.edits_skipped)}",
            brief_id=brief_id,
        )
        return result

    async def _log_summary(
        self,
        brief_id: Optional[str],
        attempts: list[RefinementAttempt],
        initial_score: float,
        final_score: float,
        success: bool,
        started: float,
        warning_reason: Optional[str],
    ) -> None:
        await self.execution_logger.log_refinement_summary(
            brief_id,
            RefinementSummaryInput(
                attempts=attempts,
                initial_score=initial_score,
                final_score=final_score,
                success=success,
                total_processing_time_ms=_elapsed_ms(started),
                warning_reason=warning_reason,
            ),
        )

    def _finish(
        self,
        brief_id: Optional[str],
        brief: str,
        final_score: float,
        success: bool,
        attempts: list[RefinementAttempt],
        started: float,
        warning_reason: Optional[str],
    ) -> RefinementResult:
        quality_gate = create_quality_gate_result(final_score, len(attempts))
        decision = get_tier_decision(final_score)
        quality_gate_decisions_total.labels(tier=quality_gate.tier.value).inc()
        refinement_duration_seconds.observe(time.perf_counter() - started)
        self.logger.info(
            f"{LOG_PREFIX} Quality gate: {decision.reasoning}",
            brief_id=brief_id,
            tier=quality_gate.tier.value,
            publishable=quality_gate.publishable,
        )

        return RefinementResult(
            final_brief=brief,
            final_score=final_score,
            success=success,
            attempts=attempts,
            total_processing_time=_elapsed_ms(started),
            warning_reason=warning_reason,
            quality_gate=quality_gate,
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
