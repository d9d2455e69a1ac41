"""
Domain exceptions for the change-request pipeline.

Each one names a recovery scope: WorkerFailure costs one attempt,
CheckerException costs one test result, NonFatalSideEffectFailure costs
nothing but a manifest note, and AttemptsExhausted ends the request.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from changeguard.domain.models import AttemptRecord


class ChangeGuardError(Exception):
    """Base class for all changeguard errors."""


class FailureKind(str, Enum):
    """How a worker call went wrong. Informational only; every kind costs one attempt."""

    CRASH = "crash"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    REPORTED = "reported"  # Worker emitted a success=false envelope


class WorkerFailure(ChangeGuardError):
    """
    Raised when a worker call does not yield a usable result envelope.

    Crashes, hangs, malformed output and worker-reported errors are all
    normalized into this one exception at the invocation boundary.
    """

    def __init__(self, role: str, kind: FailureKind, detail: str):
        """
        Args:
            role: Worker role that failed ("developer" or "tester")
            kind: Failure classification, for logging
            detail: Human-readable description
        """
        super().__init__(f"{role} worker failed ({kind.value}): {detail}")
        self.role = role
        self.kind = kind
        self.detail = detail


class ProtocolError(ChangeGuardError, ValueError):
    """Raised when an envelope cannot be decoded or violates its schema."""


class CheckerException(ChangeGuardError):
    """Raised by a checker or probe when a measurement cannot be taken."""


class NonFatalSideEffectFailure(ChangeGuardError):
    """Raised by side effects whose failure must not fail the manifest."""


class AttemptsExhausted(ChangeGuardError):
    """
    Raised when no attempt is left for a request.

    Carries the full attempt history so a human can diagnose the failure
    without re-running the pipeline.
    """

    def __init__(self, message: str, provenance: list["AttemptRecord"]):
        """
        Args:
            message: Human-readable error message
            provenance: Every attempt record, oldest first
        """
        super().__init__(message)
        self.provenance = provenance


class PipelineCancelled(ChangeGuardError):
    """Raised between states when the request's cancellation token is set."""


class ArtifactExistsError(ChangeGuardError, KeyError):
    """Raised when a store is asked to overwrite an existing key."""


class ConfigurationError(ChangeGuardError):
    """Raised when configuration files are invalid or missing."""
