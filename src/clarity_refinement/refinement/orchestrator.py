"""
Fixer orchestrator.

Deploys one fixer agent per quality dimension scoring below the deploy
threshold, runs them concurrently under smart retry and collects their edit
suggestions. A fixer that still fails after its retries is recorded in
``fixers_failed``; the other fixers' results are kept.
"""

import asyncio
import time
from collections.abc import Callable, Mapping
from typing import Optional, Protocol

from clarity_refinement.config import Settings
from clarity_refinement.logging_config import LoggerPort, get_logger
from clarity_refinement.models.enums import FixerType, LogStatus
from clarity_refinement.models.execution_log import FixerExecutionLog
from clarity_refinement.models.refinement import (
    FixerInput,
    FixerResult,
    OrchestratorInput,
    OrchestratorResult,
)
from clarity_refinement.monitoring.metrics import fixer_executions_total
from clarity_refinement.retry.engine import RetryExecutor
from clarity_refinement.retry.failures import failure_message
from clarity_refinement.retry.policy import RetryConfig
from clarity_refinement.telemetry.execution_logger import ExecutionLogger

DEFAULT_DEPLOY_THRESHOLD = 7.0

LOG_PREFIX = "[FixerOrchestrator]"


class Fixer(Protocol):
    """An agent that proposes edits for one quality dimension."""

    async def suggest_edits(self, fixer_input: FixerInput) -> FixerResult: ...


RetryConfigFactory = Callable[[FixerType], RetryConfig]


def select_fixers_to_deploy(
    dimension_scores: Mapping[FixerType, float],
    threshold: float = DEFAULT_DEPLOY_THRESHOLD,
) -> list[FixerType]:
    """
    Pick the fixers whose dimension scores below ``threshold``.

    The result follows ``FixerType`` declaration order. Dimensions missing
    from ``dimension_scores`` are never selected.
    """
    return [
        fixer_type
        for fixer_type in FixerType
        if fixer_type in dimension_scores and dimension_scores[fixer_type] < threshold
    ]


def fixer_agent_name(fixer_type: FixerType) -> str:
    return f"{fixer_type.value} fixer"


class FixerOrchestrator:
    """
    Runs the fixers a consensus result calls for.

    Attributes:
        fixers: Fixer implementation per dimension
        executor: Retry executor used for every fixer call
        threshold: Dimensions scoring below this get a fixer
        execution_logger: Optional telemetry sink for per-fixer rows
    """

    def __init__(
        self,
        fixers: Mapping[FixerType, Fixer],
        executor: Optional[RetryExecutor] = None,
        retry_config_factory: Optional[RetryConfigFactory] = None,
        execution_logger: Optional[ExecutionLogger] = None,
        settings: Optional[Settings] = None,
        logger: Optional[LoggerPort] = None,
    ):
        settings = settings or Settings()
        self.fixers = dict(fixers)
        self.logger: LoggerPort = logger if logger is not None else get_logger(__name__)
        self.executor = executor or RetryExecutor(logger=self.logger)
        self.threshold = settings.FIXER_DEPLOY_THRESHOLD
        self.execution_logger = execution_logger

        if retry_config_factory is None:
            def retry_config_factory(fixer_type: FixerType) -> RetryConfig:
                return RetryConfig.from_settings(fixer_agent_name(fixer_type), settings)

        self.retry_config_factory: RetryConfigFactory = retry_config_factory

    async def orchestrate(self, orchestrator_input: OrchestratorInput) -> OrchestratorResult:
        """
        Deploy fixers for every weak dimension and gather their edits.

        Returns:
            OrchestratorResult with results of the fixers that succeeded and
            the types of those that did not in ``fixers_failed``
        """
        started = time.perf_counter()
        consensus = orchestrator_input.consensus_result

        selected = select_fixers_to_deploy(consensus.dimension_scores, self.threshold)
        unavailable = [ft for ft in selected if ft not in self.fixers]
        if unavailable:
            self.logger.warning(
                f"{LOG_PREFIX} No fixer registered for {', '.join(ft.value for ft in unavailable)}",
                brief_id=orchestrator_input.brief_id,
            )
        to_deploy = [ft for ft in selected if ft in self.fixers]

        self.logger.info(
            f"{LOG_PREFIX} Deploying {len(to_deploy)} fixers for dimensions scoring <{self.threshold}",
            brief_id=orchestrator_input.brief_id,
            fixers=[ft.value for ft in to_deploy],
            overall_score=consensus.overall_score,
        )

        if not to_deploy:
            self.logger.info(
                f"{LOG_PREFIX} No fixers needed - all dimensions scoring >={self.threshold}",
                brief_id=orchestrator_input.brief_id,
            )
            return OrchestratorResult(total_processing_time=_elapsed_ms(started))

        outcomes = await asyncio.gather(
            *(self._run_fixer(ft, orchestrator_input) for ft in to_deploy),
            return_exceptions=True,
        )

        fixer_results: list[FixerResult] = []
        fixers_failed: list[FixerType] = []
        for fixer_type, outcome in zip(to_deploy, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                fixers_failed.append(fixer_type)
                self.logger.error(
                    f"{LOG_PREFIX} {fixer_type.value} failed",
                    brief_id=orchestrator_input.brief_id,
                    error=failure_message(outcome),
                )
                fixer_executions_total.labels(
                    fixer_type=fixer_type.value, status=LogStatus.FAILED.value
                ).inc()
                await self._log_fixer(
                    orchestrator_input,
                    FixerExecutionLog(
                        fixer_type=fixer_type,
                        dimension_score=consensus.dimension_scores[fixer_type],
                        status=LogStatus.FAILED,
                        error_message=failure_message(outcome),
                    ),
                )
                continue

            fixer_results.append(outcome)
            self.logger.info(
                f"{LOG_PREFIX} {fixer_type.value}: {len(outcome.suggested_edits)} edits, "
                f"confidence: {outcome.confidence:.2f}, time: {outcome.processing_time}ms",
                brief_id=orchestrator_input.brief_id,
            )
            fixer_executions_total.labels(
                fixer_type=fixer_type.value, status=LogStatus.SUCCESS.value
            ).inc()
            await self._log_fixer(
                orchestrator_input,
                FixerExecutionLog(
                    fixer_type=fixer_type,
                    dimension_score=consensus.dimension_scores[fixer_type],
                    edits_generated=len(outcome.suggested_edits),
                    confidence=outcome.confidence,
                    processing_time_ms=outcome.processing_time,
                    status=LogStatus.SUCCESS,
                ),
            )

        all_suggested_edits = [edit for result in fixer_results for edit in result.suggested_edits]
        total_processing_time = _elapsed_ms(started)

        self.logger.info(
            f"{LOG_PREFIX} Completed in {total_processing_time}ms "
            f"with {len(all_suggested_edits)} total edits",
            brief_id=orchestrator_input.brief_id,
            fixers_failed=[ft.value for ft in fixers_failed],
        )

        return OrchestratorResult(
            fixers_deployed=to_deploy,
            fixer_results=fixer_results,
            all_suggested_edits=all_suggested_edits,
            total_processing_time=total_processing_time,
            fixers_failed=fixers_failed,
        )

    async def _run_fixer(
        self, fixer_type: FixerType, orchestrator_input: OrchestratorInput
    ) -> FixerResult:
        consensus = orchestrator_input.consensus_result
        fixer = self.fixers[fixer_type]
        fixer_input = FixerInput(
            brief=orchestrator_input.brief,
            dimension_score=consensus.dimension_scores[fixer_type],
            critique=consensus.dimension_critiques.get(fixer_type, ""),
            sources=orchestrator_input.sources,
        )
        return await self.executor.execute_smart(
            lambda: fixer.suggest_edits(fixer_input),
            self.retry_config_factory(fixer_type),
        )

    async def _log_fixer(
        self, orchestrator_input: OrchestratorInput, entry: FixerExecutionLog
    ) -> None:
        if self.execution_logger is None:
            return
        await self.execution_logger.log_fixer_execution(orchestrator_input.brief_id, entry)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
