"""
Agent execution logger.

Records structured telemetry for every agent invocation, refinement attempt
and refinement summary in the ``agent_execution_logs`` table.

Logging is best-effort: any exception while building or inserting a row,
and any datastore error, is reported at error level and turned into a
``None`` return. It never reaches the refinement pipeline being
instrumented.

Row layout (snake_case, independent of the in-memory models):
    brief_id, agent_name, agent_type, started_at, completed_at,
    duration_ms, status, error_message, metadata
"""

import functools
import math
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, TypeVar

from pydantic import ValidationError

from clarity_refinement.config import Settings
from clarity_refinement.logging_config import LoggerPort, get_logger
from clarity_refinement.models.enums import AgentType, ExecutionMode, LogStatus
from clarity_refinement.models.execution_log import (
    AgentExecutionLog,
    BriefPerformanceSummary,
    ExecutionContext,
    ExecutionLogEntry,
    FixerExecutionLog,
    OrchestratorExecutionLog,
    ReconciliationExecutionLog,
    RefinementSummaryInput,
)
from clarity_refinement.models.refinement import RefinementAttempt
from clarity_refinement.monitoring.metrics import execution_log_failures_total
from clarity_refinement.persistence.store import ExecutionLogStore
from clarity_refinement.retry.failures import failure_message
from clarity_refinement.telemetry.cost import RefinementPricing, estimate_refinement_cost


T = TypeVar("T")

LOG_PREFIX = "[ExecutionLogger]"

# Metric label for rows logged without an agent type (research, scoring, ...)
UNTYPED_AGENT_LABEL = "agent"

Row = dict[str, Any]


def estimate_token_count(text: Optional[str]) -> int:
    """Rough token estimate (~4 characters per token)."""
    if not text:
        return 0
    return math.ceil(len(text) / 4)


class ExecutionLogger:
    """
    Best-effort writer for agent execution telemetry.

    Every ``log_*`` method returns the generated row id, or None when the
    row could not be built or stored.

    Attributes:
        store: Execution log datastore
        table: Target table name
        pricing: Prices used for refinement cost estimates
        logger: Logger port for side-channel messages
    """

    def __init__(
        self,
        store: ExecutionLogStore,
        settings: Optional[Settings] = None,
        logger: Optional[LoggerPort] = None,
    ):
        """
        Initialize execution logger.

        Args:
            store: Datastore implementing ExecutionLogStore
            settings: Application settings (table name, pricing)
            logger: Logger port (defaults to get_logger(__name__))
        """
        settings = settings or Settings()
        self.store = store
        self.table = settings.EXECUTION_LOGS_TABLE
        self.pricing = RefinementPricing.from_settings(settings)
        self.logger: LoggerPort = logger if logger is not None else get_logger(__name__)

    # ------------------------------------------------------------------
    # Public log_* entry points
    # ------------------------------------------------------------------

    async def log_agent_execution(self, entry: AgentExecutionLog) -> Optional[str]:
        """Insert a generic agent execution row."""
        return await self._write(lambda: self._agent_row(entry))

    async def log_refinement_attempt(
        self, brief_id: Optional[str], attempt: RefinementAttempt
    ) -> Optional[str]:
        """Insert one refinement attempt with edit counts and score movement."""
        return await self._write(lambda: self._attempt_row(brief_id, attempt))

    async def log_refinement_summary(
        self, brief_id: Optional[str], summary: RefinementSummaryInput
    ) -> Optional[str]:
        """Insert the aggregate outcome of a refinement loop."""
        return await self._write(lambda: self._summary_row(brief_id, summary))

    async def log_fixer_execution(
        self, brief_id: Optional[str], entry: FixerExecutionLog
    ) -> Optional[str]:
        """Insert one fixer agent run."""
        return await self._write(lambda: self._fixer_row(brief_id, entry))

    async def log_orchestrator_execution(
        self, brief_id: Optional[str], entry: OrchestratorExecutionLog
    ) -> Optional[str]:
        """Insert one fixer orchestration round."""
        return await self._write(lambda: self._orchestrator_row(brief_id, entry))

    async def log_reconciliation_execution(
        self, brief_id: Optional[str], entry: ReconciliationExecutionLog
    ) -> Optional[str]:
        """Insert one edit reconciliation run."""
        return await self._write(lambda: self._reconciliation_row(brief_id, entry))

    # ------------------------------------------------------------------
    # Wrapping agents
    # ------------------------------------------------------------------

    async def execute_with_logging(
        self,
        agent_name: str,
        operation: Callable[[], Awaitable[T]],
        context: ExecutionContext,
        *,
        agent_type: Optional[AgentType] = None,
        input_text: Optional[str] = None,
        get_output_size: Optional[Callable[[T], int]] = None,
    ) -> T:
        """
        Run a one-off agent operation and log its outcome.

        Args:
            agent_name: Name recorded on the row
            operation: Zero-argument coroutine factory
            context: Brief id and execution mode
            agent_type: Optional agent kind; research or scoring agents omit it
            input_text: Prompt text, stored as ``input_token_estimate``
            get_output_size: Maps the result to ``output_token_estimate``

        Returns:
            The operation's result, unchanged.

        The operation's own exception is re-raised after the failed row is
        written; logging problems never replace it.
        """
        input_size = estimate_token_count(input_text) if input_text is not None else None
        return await self._run_logged(
            agent_name, operation, context, agent_type, input_size, get_output_size
        )

    def with_execution_logging(
        self,
        agent_name: str,
        fn: Callable[..., Awaitable[T]],
        context: ExecutionContext,
        *,
        agent_type: Optional[AgentType] = None,
        get_input_size: Optional[Callable[..., int]] = None,
        get_output_size: Optional[Callable[[T], int]] = None,
    ) -> Callable[..., Awaitable[T]]:
        """
        Create a version of ``fn`` that logs every call.

        Arguments are forwarded unchanged, ``get_input_size`` receives the
        same arguments, and the return value is passed through unchanged.

        Example:
            logged_research = execution_logger.with_execution_logging(
                "Research Agent",
                research_agent,
                ExecutionContext(brief_id="abc123"),
                get_input_size=lambda question: estimate_token_count(question),
            )
            findings = await logged_research(question)
        """

        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            input_size = self._measure(agent_name, "input", get_input_size, args, kwargs)
            return await self._run_logged(
                agent_name,
                lambda: fn(*args, **kwargs),
                context,
                agent_type,
                input_size,
                get_output_size,
            )

        return wrapper

    async def _run_logged(
        self,
        agent_name: str,
        operation: Callable[[], Awaitable[T]],
        context: ExecutionContext,
        agent_type: Optional[AgentType],
        input_size: Optional[int],
        get_output_size: Optional[Callable[[T], int]],
    ) -> T:
        started = time.perf_counter()
        metadata: dict[str, Any] = {
            "execution_mode": context.execution_mode.value,
            "parallel_group": context.parallel_group,
        }
        if input_size is not None:
            metadata["input_token_estimate"] = input_size

        try:
            result = await operation()
        except Exception as exc:
            duration_ms = _elapsed_ms(started)
            self.logger.error(
                f"{LOG_PREFIX} Agent failed: {agent_name}",
                brief_id=context.brief_id,
                duration_ms=duration_ms,
                error=failure_message(exc),
            )
            await self.log_agent_execution(
                AgentExecutionLog(
                    brief_id=context.brief_id,
                    agent_name=agent_name,
                    agent_type=agent_type,
                    status=LogStatus.FAILED,
                    duration_ms=duration_ms,
                    error_message=failure_message(exc),
                    metadata=metadata,
                )
            )
            raise

        duration_ms = _elapsed_ms(started)
        output_size = self._measure(agent_name, "output", get_output_size, (result,))
        if output_size is not None:
            metadata["output_token_estimate"] = output_size

        self.logger.info(
            f"{LOG_PREFIX} Agent completed: {agent_name}",
            brief_id=context.brief_id,
            duration_ms=duration_ms,
            output_token_estimate=output_size,
        )
        await self.log_agent_execution(
            AgentExecutionLog(
                brief_id=context.brief_id,
                agent_name=agent_name,
                agent_type=agent_type,
                status=LogStatus.SUCCESS,
                duration_ms=duration_ms,
                metadata=metadata,
            )
        )
        return result

    def _measure(
        self,
        agent_name: str,
        kind: str,
        size_of: Optional[Callable[..., int]],
        args: tuple,
        kwargs: Optional[dict[str, Any]] = None,
    ) -> Optional[int]:
        """Apply a size callback; a failing callback only costs the estimate."""
        if size_of is None:
            return None
        try:
            return size_of(*args, **(kwargs or {}))
        except Exception as e:
            self.logger.warning(
                f"{LOG_PREFIX} Could not measure {kind} size",
                agent_name=agent_name,
                error=str(e),
            )
            return None

    # ------------------------------------------------------------------
    # Reading back
    # ------------------------------------------------------------------

    async def get_execution_logs_for_brief(self, brief_id: str) -> list[ExecutionLogEntry]:
        """Read back every row logged for a brief, oldest first ([] on error)."""
        try:
            result = await self.store.select_by_brief(self.table, brief_id)
        except Exception as e:
            self.logger.error(
                f"{LOG_PREFIX} Error retrieving logs", brief_id=brief_id, error=str(e)
            )
            return []

        if result.error is not None:
            self.logger.error(
                f"{LOG_PREFIX} Failed to retrieve logs", brief_id=brief_id, error=result.error
            )
            return []

        entries: list[ExecutionLogEntry] = []
        for row in result.data or []:
            try:
                entries.append(ExecutionLogEntry.model_validate(row))
            except ValidationError as e:
                self.logger.warning(
                    f"{LOG_PREFIX} Skipping malformed log row",
                    brief_id=brief_id,
                    row_id=row.get("id"),
                    error=str(e),
                )
        return entries

    async def get_brief_performance_summary(
        self, brief_id: str
    ) -> Optional[BriefPerformanceSummary]:
        """Summarize agent timings for a brief (None if nothing was logged)."""
        logs = await self.get_execution_logs_for_brief(brief_id)
        if not logs:
            return None

        def mode_of(entry: ExecutionLogEntry) -> Optional[str]:
            return entry.metadata.get("execution_mode")

        start_times = [entry.started_at for entry in logs]
        end_times = [entry.completed_at for entry in logs if entry.completed_at is not None]
        total_duration_ms = (
            int((max(end_times) - min(start_times)).total_seconds() * 1000) if end_times else 0
        )

        return BriefPerformanceSummary(
            total_duration_ms=total_duration_ms,
            agent_count=len(logs),
            parallel_executions=sum(1 for e in logs if mode_of(e) == ExecutionMode.PARALLEL.value),
            sequential_executions=sum(
                1 for e in logs if mode_of(e) == ExecutionMode.SEQUENTIAL.value
            ),
            failed_agents=[e.agent_name for e in logs if e.status == LogStatus.FAILED],
        )

    # ------------------------------------------------------------------
    # Row builders (always called inside _write)
    # ------------------------------------------------------------------

    def _agent_row(self, entry: AgentExecutionLog) -> Row:
        return self._build_record(
            brief_id=entry.brief_id,
            agent_name=entry.agent_name,
            agent_type=entry.agent_type,
            status=entry.status,
            duration_ms=entry.duration_ms,
            error_message=entry.error_message,
            metadata=entry.metadata,
        )

    def _attempt_row(self, brief_id: Optional[str], attempt: RefinementAttempt) -> Row:
        edits_skipped = attempt.edits_skipped or []
        processing_time = attempt.processing_time or 0
        scores = attempt.score_before_after

        dimension_scores = None
        if scores.dimension_scores is not None:
            dimension_scores = {
                fixer_type.value: {"before": change.before, "after": change.after}
                for fixer_type, change in scores.dimension_scores.items()
            }

        metadata = {
            "attempt_number": attempt.attempt_number,
            "fixers_deployed": [f.value for f in attempt.fixers_deployed],
            "edits_count": {
                "suggested": len(attempt.edits_made) + len(edits_skipped),
                "applied": len(attempt.edits_made),
                "skipped": len(edits_skipped),
            },
            "scores": {
                "before": scores.before,
                "after": scores.after,
                "change": scores.after - scores.before,
            },
            "dimension_scores": dimension_scores,
            "processing_time_ms": processing_time,
        }

        self.logger.info(
            f"{LOG_PREFIX} Refinement attempt {attempt.attempt_number}: "
            f"{scores.before:.1f} -> {scores.after:.1f}, "
            f"{len(attempt.edits_made)} edits applied, {len(edits_skipped)} skipped",
            brief_id=brief_id,
            attempt_number=attempt.attempt_number,
        )

        return self._build_record(
            brief_id=brief_id,
            agent_name=f"refinement_attempt_{attempt.attempt_number}",
            agent_type=AgentType.REFINEMENT_LOOP,
            status=LogStatus.SUCCESS,
            duration_ms=processing_time,
            metadata=metadata,
        )

    def _summary_row(self, brief_id: Optional[str], summary: RefinementSummaryInput) -> Row:
        attempts = summary.attempts

        total_applied = sum(len(a.edits_made) for a in attempts)
        total_skipped = sum(len(a.edits_skipped or []) for a in attempts)
        distinct_fixers = {f for a in attempts for f in a.fixers_deployed}
        estimated_cost = estimate_refinement_cost(
            len(distinct_fixers), len(attempts), pricing=self.pricing
        )

        metadata = {
            "total_attempts": len(attempts),
            "initial_score": summary.initial_score,
            "final_score": summary.final_score,
            "success": summary.success,
            "total_processing_time_ms": summary.total_processing_time_ms,
            "total_edits_suggested": total_applied + total_skipped,
            "total_edits_applied": total_applied,
            "total_edits_skipped": total_skipped,
            "score_progression": [
                {"attempt": a.attempt_number, "score": a.score_before_after.after}
                for a in attempts
            ],
            "estimated_cost_usd": estimated_cost,
            "warning_reason": summary.warning_reason,
        }

        self.logger.info(
            f"{LOG_PREFIX} Refinement summary: "
            f"{summary.initial_score:.1f} -> {summary.final_score:.1f} "
            f"in {len(attempts)} attempt(s), "
            f"{'success' if summary.success else 'failed'}, "
            f"est. cost ${estimated_cost:.4f}",
            brief_id=brief_id,
            total_attempts=len(attempts),
            success=summary.success,
        )

        return self._build_record(
            brief_id=brief_id,
            agent_name="refinement_loop_summary",
            agent_type=AgentType.REFINEMENT_LOOP,
            status=LogStatus.SUCCESS if summary.success else LogStatus.FAILED,
            duration_ms=summary.total_processing_time_ms,
            error_message=summary.warning_reason,
            metadata=metadata,
        )

    def _fixer_row(self, brief_id: Optional[str], entry: FixerExecutionLog) -> Row:
        self.logger.info(
            f"{LOG_PREFIX} Fixer {entry.fixer_type.value}: {entry.status.value}, "
            f"{entry.edits_generated} edits",
            brief_id=brief_id,
            fixer_type=entry.fixer_type.value,
        )

        return self._build_record(
            brief_id=brief_id,
            agent_name=f"fixer_{entry.fixer_type.value}",
            agent_type=AgentType.FIXER,
            status=entry.status,
            duration_ms=entry.processing_time_ms,
            error_message=entry.error_message,
            metadata={
                "fixer_type": entry.fixer_type.value,
                "dimension_score": entry.dimension_score,
                "edits_generated": entry.edits_generated,
                "confidence": entry.confidence,
                "processing_time_ms": entry.processing_time_ms,
            },
        )

    def _orchestrator_row(
        self, brief_id: Optional[str], entry: OrchestratorExecutionLog
    ) -> Row:
        self.logger.info(
            f"{LOG_PREFIX} Orchestrator: {len(entry.fixers_deployed)} fixers deployed, "
            f"{len(entry.fixers_skipped)} skipped, "
            f"{entry.total_edits_collected} edits collected",
            brief_id=brief_id,
        )

        return self._build_record(
            brief_id=brief_id,
            agent_name="fixer_orchestrator",
            agent_type=AgentType.ORCHESTRATOR,
            status=entry.status,
            duration_ms=entry.processing_time_ms,
            error_message=entry.error_message,
            metadata={
                "fixers_deployed": [f.value for f in entry.fixers_deployed],
                "fixers_skipped": [f.value for f in entry.fixers_skipped],
                "total_edits_collected": entry.total_edits_collected,
                "processing_time_ms": entry.processing_time_ms,
                "dimension_scores": dict(entry.dimension_scores),
            },
        )

    def _reconciliation_row(
        self, brief_id: Optional[str], entry: ReconciliationExecutionLog
    ) -> Row:
        self.logger.info(
            f"{LOG_PREFIX} Reconciliation: {entry.edits_applied}/{entry.edits_received} "
            f"edits applied, {entry.conflicts_resolved} conflicts resolved",
            brief_id=brief_id,
        )

        return self._build_record(
            brief_id=brief_id,
            agent_name="edit_reconciliation",
            agent_type=AgentType.RECONCILIATION,
            status=entry.status,
            duration_ms=entry.processing_time_ms,
            error_message=entry.error_message,
            metadata={
                "edits_received": entry.edits_received,
                "edits_applied": entry.edits_applied,
                "edits_skipped": entry.edits_skipped,
                "conflicts_resolved": entry.conflicts_resolved,
                "processing_time_ms": entry.processing_time_ms,
            },
        )

    def _build_record(
        self,
        brief_id: Optional[str],
        agent_name: str,
        agent_type: Optional[AgentType],
        status: LogStatus,
        duration_ms: Optional[int] = None,
        error_message: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Row:
        """Flatten a log entry into a datastore row."""
        now = datetime.now(timezone.utc)
        if duration_ms is not None:
            completed_at: Optional[datetime] = now
            # OverflowError for durations reaching back past year 1
            started_at = now - timedelta(milliseconds=duration_ms)
        else:
            completed_at = None
            started_at = now

        return {
            "brief_id": brief_id,
            "agent_name": agent_name,
            "agent_type": agent_type.value if agent_type is not None else None,
            "started_at": started_at.isoformat(),
            "completed_at": completed_at.isoformat() if completed_at else None,
            "duration_ms": duration_ms,
            "status": status.value,
            "error_message": error_message,
            "metadata": metadata or {},
        }

    # ------------------------------------------------------------------
    # Guarded write
    # ------------------------------------------------------------------

    async def _write(self, build: Callable[[], Row]) -> Optional[str]:
        """Build and insert a row, swallowing every failure."""
        record: Optional[Row] = None
        try:
            record = build()
            result = await self.store.insert(self.table, record)
            if result.error is not None:
                self._write_failed("Failed to create log entry", record, result.error)
                return None
            data = result.data or {}
            return data.get("id")
        except Exception as e:
            self._write_failed("Error creating log entry", record, str(e))
            return None

    def _write_failed(self, message: str, record: Optional[Row], error: Any) -> None:
        record = record or {}
        self.logger.error(
            f"{LOG_PREFIX} {message}",
            agent_name=record.get("agent_name"),
            error=error,
        )
        execution_log_failures_total.labels(
            agent_type=record.get("agent_type") or UNTYPED_AGENT_LABEL
        ).inc()


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
