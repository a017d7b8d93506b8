"""
Refinement data models.

These describe what flows through one refinement attempt: the edits a fixer
proposes, what the reconciler applied or skipped, and how the scores moved.
Fixers, the reconciler and the scoring function are external collaborators;
these models are the contract with them.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from clarity_refinement.models.enums import EditPriority, FixerType
from clarity_refinement.models.quality import QualityGateResult


class SuggestedEdit(BaseModel):
    """A single edit suggestion from a fixer agent."""
    model_config = ConfigDict(frozen=True)

    section: str = Field(..., description="Brief section the edit applies to")
    original_text: str = Field(..., description="Text to replace")
    suggested_text: str = Field(..., description="Replacement text")
    rationale: str = Field(default="", description="Why the fixer proposes this edit")
    priority: EditPriority = Field(default=EditPriority.MEDIUM)


class SkippedEdit(BaseModel):
    """An edit the reconciler chose not to apply."""
    model_config = ConfigDict(frozen=True)

    edit: SuggestedEdit
    reason: str


class DimensionScoreChange(BaseModel):
    """Score of one dimension before and after an attempt."""
    model_config = ConfigDict(frozen=True)

    before: float
    after: float


class ScoreBeforeAfter(BaseModel):
    """Overall score before and after an attempt, with per-dimension deltas."""
    model_config = ConfigDict(frozen=True)

    before: float
    after: float
    dimension_scores: Optional[dict[FixerType, DimensionScoreChange]] = None


class RefinementAttempt(BaseModel):
    """
    Record of one refinement attempt.

    ``edits_skipped`` and ``processing_time`` may be absent when the attempt
    was assembled by an external driver; loggers treat them as empty / zero.
    """
    model_config = ConfigDict(frozen=True)

    attempt_number: int = Field(..., ge=1)
    fixers_deployed: list[FixerType] = Field(default_factory=list)
    edits_made: list[SuggestedEdit] = Field(default_factory=list)
    edits_skipped: Optional[list[SkippedEdit]] = None
    score_before_after: ScoreBeforeAfter
    processing_time: Optional[int] = Field(default=None, ge=0, description="Milliseconds")


class Source(BaseModel):
    """Research source handed to fixers."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    content: str = ""


class FixerInput(BaseModel):
    """Input for a single fixer agent."""
    model_config = ConfigDict(frozen=True)

    brief: str
    dimension_score: float
    critique: str = ""
    sources: Optional[list[Source]] = None


class FixerResult(BaseModel):
    """Result from a single fixer agent run."""
    model_config = ConfigDict(frozen=True)

    fixer_type: FixerType
    suggested_edits: list[SuggestedEdit] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    processing_time: int = Field(default=0, ge=0, description="Milliseconds")


class ConsensusResult(BaseModel):
    """Consensus scoring output with a per-dimension breakdown."""
    model_config = ConfigDict(frozen=True)

    overall_score: float
    dimension_scores: dict[FixerType, float]
    critique: str = ""
    dimension_critiques: dict[FixerType, str] = Field(default_factory=dict)


class ReconciliationInput(BaseModel):
    """Brief plus every fixer's suggestions, handed to the reconciler."""
    model_config = ConfigDict(frozen=True)

    original_brief: str
    fixer_results: list[FixerResult] = Field(default_factory=list)


class ReconciliationResult(BaseModel):
    """Result of merging fixer edits into the brief."""
    model_config = ConfigDict(frozen=True)

    revised_brief: str
    edits_applied: list[SuggestedEdit] = Field(default_factory=list)
    edits_skipped: list[SkippedEdit] = Field(default_factory=list)


class OrchestratorInput(BaseModel):
    """Input for one fixer orchestration round."""
    model_config = ConfigDict(frozen=True)

    brief: str
    consensus_result: ConsensusResult
    sources: Optional[list[Source]] = None
    brief_id: Optional[str] = None


class OrchestratorResult(BaseModel):
    """Outcome of one fixer orchestration round (partial failures included)."""
    model_config = ConfigDict(frozen=True)

    fixers_deployed: list[FixerType] = Field(default_factory=list)
    fixer_results: list[FixerResult] = Field(default_factory=list)
    all_suggested_edits: list[SuggestedEdit] = Field(default_factory=list)
    total_processing_time: int = Field(default=0, ge=0)
    fixers_failed: list[FixerType] = Field(default_factory=list)


class RefinementLoopInput(BaseModel):
    """Input for one refinement loop run."""
    model_config = ConfigDict(frozen=True)

    brief: str
    brief_id: Optional[str] = None
    initial_consensus_result: ConsensusResult
    sources: Optional[list[Source]] = None
    max_attempts: Optional[int] = Field(default=None, ge=1)


class RefinementResult(BaseModel):
    """Final result of the refinement loop."""
    model_config = ConfigDict(frozen=True)

    final_brief: str
    final_score: float
    success: bool
    attempts: list[RefinementAttempt] = Field(default_factory=list)
    total_processing_time: int = Field(default=0, ge=0)
    warning_reason: Optional[str] = None
    quality_gate: QualityGateResult
