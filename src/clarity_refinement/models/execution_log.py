"""
Execution log payload models.

In-memory payloads use Python naming; the execution logger flattens them into
snake_case rows for the datastore (see ``ExecutionLogger``).
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from clarity_refinement.models.enums import (
    AgentType,
    ExecutionMode,
    FixerType,
    LogStatus,
)
from clarity_refinement.models.refinement import RefinementAttempt


class AgentExecutionLog(BaseModel):
    """Generic agent execution entry."""
    model_config = ConfigDict(frozen=True)

    brief_id: Optional[str] = None
    agent_name: str
    agent_type: Optional[AgentType] = None
    status: LogStatus
    duration_ms: Optional[int] = Field(default=None, ge=0)
    error_message: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class RefinementSummaryInput(BaseModel):
    """Aggregate outcome of a whole refinement loop."""
    model_config = ConfigDict(frozen=True)

    attempts: list[RefinementAttempt] = Field(default_factory=list)
    initial_score: float
    final_score: float
    success: bool
    total_processing_time_ms: int = Field(default=0, ge=0)
    warning_reason: Optional[str] = None


class FixerExecutionLog(BaseModel):
    """One fixer agent run."""
    model_config = ConfigDict(frozen=True)

    fixer_type: FixerType
    dimension_score: float
    edits_generated: int = Field(default=0, ge=0)
    confidence: float = 0.0
    processing_time_ms: int = Field(default=0, ge=0)
    status: LogStatus
    error_message: Optional[str] = None


class OrchestratorExecutionLog(BaseModel):
    """One fixer orchestration round."""
    model_config = ConfigDict(frozen=True)

    fixers_deployed: list[FixerType] = Field(default_factory=list)
    fixers_skipped: list[FixerType] = Field(default_factory=list)
    total_edits_collected: int = Field(default=0, ge=0)
    processing_time_ms: int = Field(default=0, ge=0)
    dimension_scores: dict[str, float] = Field(default_factory=dict)
    status: LogStatus
    error_message: Optional[str] = None


class ReconciliationExecutionLog(BaseModel):
    """One edit reconciliation run."""
    model_config = ConfigDict(frozen=True)

    edits_received: int = Field(default=0, ge=0)
    edits_applied: int = Field(default=0, ge=0)
    edits_skipped: int = Field(default=0, ge=0)
    conflicts_resolved: int = Field(default=0, ge=0)
    processing_time_ms: int = Field(default=0, ge=0)
    status: LogStatus
    error_message: Optional[str] = None


class ExecutionContext(BaseModel):
    """Where an agent run sits inside brief generation."""
    model_config = ConfigDict(frozen=True)

    brief_id: Optional[str] = None
    execution_mode: ExecutionMode = ExecutionMode.SEQUENTIAL
    parallel_group: Optional[str] = None


class ExecutionLogEntry(BaseModel):
    """A row read back from the execution log store."""

    id: Optional[str] = None
    brief_id: Optional[str] = None
    agent_name: str
    agent_type: Optional[AgentType] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    status: LogStatus
    error_message: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class BriefPerformanceSummary(BaseModel):
    """Wall-clock and failure overview of all agents logged for a brief."""
    model_config = ConfigDict(frozen=True)

    total_duration_ms: int
    agent_count: int
    parallel_executions: int
    sequential_executions: int
    failed_agents: list[str] = Field(default_factory=list)
