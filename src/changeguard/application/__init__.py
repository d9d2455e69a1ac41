"""
Application layer for the change-request pipeline.

Contains generation, failure analysis and the orchestration state machine.
"""

from changeguard.application.analysis import (
    analyze,
    generate_requirements,
    generate_test_plan,
)
from changeguard.application.event_emitter import PipelineEventEmitter
from changeguard.application.failure_analysis import (
    analyze_failures,
    synthesize_fix_requirements,
)
from changeguard.application.orchestrator import (
    CancellationToken,
    ChangeRequestOrchestrator,
)

__all__ = [
    "CancellationToken",
    "ChangeRequestOrchestrator",
    "PipelineEventEmitter",
    "analyze",
    "analyze_failures",
    "generate_requirements",
    "generate_test_plan",
    "synthesize_fix_requirements",
]
