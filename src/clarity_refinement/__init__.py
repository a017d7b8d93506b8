"""
Clarity Refinement Core.

Reliability and quality-control layer of the brief generation pipeline:
agent retry with error classification, the tiered quality gate, refinement
cost estimation, execution telemetry and the refinement loop that ties them
together.
"""

__version__ = "0.1.0"
