"""
Domain layer for the change-request pipeline.

Contains core records, ports and lookup tables with no external dependencies.
"""

from changeguard.domain.exceptions import (
    ArtifactExistsError,
    AttemptsExhausted,
    ChangeGuardError,
    CheckerException,
    ConfigurationError,
    FailureKind,
    NonFatalSideEffectFailure,
    PipelineCancelled,
    ProtocolError,
    WorkerFailure,
)
from changeguard.domain.interfaces import (
    ArtifactStoreInterface,
    CheckerInterface,
    EndpointProberInterface,
    LayoutInspectorInterface,
    PipelineEventStoreInterface,
    SchemaLinterInterface,
    SchemaSyncInterface,
    WorkerRunnerInterface,
)
from changeguard.domain.models import (
    Analysis,
    AttemptRecord,
    ChangeEntry,
    ChangeManifest,
    ChangeRequest,
    Complexity,
    FailureContext,
    ModelTier,
    PipelineResult,
    PipelineState,
    Priority,
    RequestStatus,
    Requirement,
    RequirementType,
    TargetEnvironment,
    TerminalRecord,
    TestCase,
    TestCaseType,
    TestReport,
    TestResult,
    TestStatus,
)
from changeguard.domain.protocol import WorkerRequest, WorkerResponse, WorkerRole

__all__ = [
    # Exceptions
    "ArtifactExistsError",
    "AttemptsExhausted",
    "ChangeGuardError",
    "CheckerException",
    "ConfigurationError",
    "FailureKind",
    "NonFatalSideEffectFailure",
    "PipelineCancelled",
    "ProtocolError",
    "WorkerFailure",
    # Interfaces
    "ArtifactStoreInterface",
    "CheckerInterface",
    "EndpointProberInterface",
    "LayoutInspectorInterface",
    "PipelineEventStoreInterface",
    "SchemaLinterInterface",
    "SchemaSyncInterface",
    "WorkerRunnerInterface",
    # Models
    "Analysis",
    "AttemptRecord",
    "ChangeEntry",
    "ChangeManifest",
    "ChangeRequest",
    "Complexity",
    "FailureContext",
    "ModelTier",
    "PipelineResult",
    "PipelineState",
    "Priority",
    "RequestStatus",
    "Requirement",
    "RequirementType",
    "TargetEnvironment",
    "TerminalRecord",
    "TestCase",
    "TestCaseType",
    "TestReport",
    "TestResult",
    "TestStatus",
    # Protocol
    "WorkerRequest",
    "WorkerResponse",
    "WorkerRole",
]
