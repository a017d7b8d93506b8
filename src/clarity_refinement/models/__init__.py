"""
Pydantic data models for the refinement core.

Includes:
- Enums (QualityTier, FixerType, EditPriority, AgentType, LogStatus, ExecutionMode)
- Quality gate values (QualityGateResult, TierDecision)
- Refinement models (SuggestedEdit, RefinementAttempt, ConsensusResult, etc.)
- Execution log payloads (AgentExecutionLog, RefinementSummaryInput, etc.)
"""

from clarity_refinement.models.enums import (
    AgentType,
    EditPriority,
    ExecutionMode,
    FixerType,
    LogStatus,
    QualityTier,
)
from clarity_refinement.models.quality import QualityGateResult, TierDecision
from clarity_refinement.models.refinement import (
    ConsensusResult,
    DimensionScoreChange,
    FixerInput,
    FixerResult,
    OrchestratorInput,
    OrchestratorResult,
    ReconciliationInput,
    ReconciliationResult,
    RefinementAttempt,
    RefinementLoopInput,
    RefinementResult,
    ScoreBeforeAfter,
    SkippedEdit,
    Source,
    SuggestedEdit,
)
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

__all__ = [
    # Enums
    "AgentType",
    "EditPriority",
    "ExecutionMode",
    "FixerType",
    "LogStatus",
    "QualityTier",
    # Quality gate
    "QualityGateResult",
    "TierDecision",
    # Refinement
    "ConsensusResult",
    "DimensionScoreChange",
    "FixerInput",
    "FixerResult",
    "OrchestratorInput",
    "OrchestratorResult",
    "ReconciliationInput",
    "ReconciliationResult",
    "RefinementAttempt",
    "RefinementLoopInput",
    "RefinementResult",
    "ScoreBeforeAfter",
    "SkippedEdit",
    "Source",
    "SuggestedEdit",
    # Execution log
    "AgentExecutionLog",
    "BriefPerformanceSummary",
    "ExecutionContext",
    "ExecutionLogEntry",
    "FixerExecutionLog",
    "OrchestratorExecutionLog",
    "ReconciliationExecutionLog",
    "RefinementSummaryInput",
]
