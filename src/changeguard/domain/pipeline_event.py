"""Pipeline execution trace models."""

from dataclasses import dataclass
from enum import Enum


class PipelineEventType(str, Enum):
    """Types of pipeline execution events."""

    STATE_ENTER = "STATE_ENTER"
    WORKER_START = "WORKER_START"
    WORKER_FAILURE = "WORKER_FAILURE"
    VALIDATION_PASS = "VALIDATION_PASS"
    VALIDATION_FAIL = "VALIDATION_FAIL"
    ESCALATE = "ESCALATE"
    TERMINAL = "TERMINAL"


@dataclass(frozen=True)
class PipelineEvent:
    """Single pipeline state transition.

    Represents an atomic event in a request's execution trace,
    capturing state changes for observability and debugging.
    """

    event_id: str
    event_type: PipelineEventType
    request_id: str
    state: str
    role: str | None = None  # "developer" or "tester" for worker events
    attempt: int | None = None
    model_tier: str | None = None
    summary: str = ""
    created_at: str = ""  # ISO 8601
