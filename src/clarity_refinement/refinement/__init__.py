"""
Refinement drivers.

FixerOrchestrator fans out fixer agents for weak dimensions; RefinementLoop
runs orchestrate / reconcile / re-score cycles until the brief passes.
"""

from clarity_refinement.refinement.loop import (
    EditReconciler,
    RefinementLoop,
    ScoringFunction,
    build_warning_reason,
    track_dimension_score_changes,
)
from clarity_refinement.refinement.orchestrator import (
    Fixer,
    FixerOrchestrator,
    select_fixers_to_deploy,
)

__all__ = [
    "EditReconciler",
    "Fixer",
    "FixerOrchestrator",
    "RefinementLoop",
    "ScoringFunction",
    "build_warning_reason",
    "select_fixers_to_deploy",
    "track_dimension_score_changes",
]
