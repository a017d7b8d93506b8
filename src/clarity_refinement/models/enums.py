"""
Enumerations for the refinement core data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class QualityTier(str, Enum):
    """
    Coarse quality bucket derived from a consensus score.

    Drives the publish / warning badge / refund decisions.
    """

    HIGH = "high"
    ACCEPTABLE = "acceptable"
    FAILED = "failed"


class FixerType(str, Enum):
    """
    Scoring dimensions targeted by fixer agents.

    Declaration order is the canonical deployment order.
    """

    FIRST_PRINCIPLES_COHERENCE = "first_principles_coherence"
    INTERNAL_CONSISTENCY = "internal_consistency"
    EVIDENCE_QUALITY = "evidence_quality"
    ACCESSIBILITY = "accessibility"
    OBJECTIVITY = "objectivity"
    FACTUAL_ACCURACY = "factual_accuracy"
    BIAS_DETECTION = "bias_detection"


class EditPriority(str, Enum):
    """Priority of a suggested edit."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AgentType(str, Enum):
    """Kind of agent recorded in the execution log."""

    FIXER = "fixer"
    ORCHESTRATOR = "orchestrator"
    RECONCILIATION = "reconciliation"
    REFINEMENT_LOOP = "refinement_loop"


class LogStatus(str, Enum):
    """Execution status of a logged agent run."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class ExecutionMode(str, Enum):
    """How an agent was scheduled relative to its siblings."""

    PARALLEL = "parallel"
    SEQUENTIAL = "sequential"
