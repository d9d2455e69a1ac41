"""
changeguard: Change-Request Orchestration Pipeline.

Turns a free-text change request into a verified code change by driving
an isolated Developer worker and an isolated Tester worker through a
bounded number of attempts, escalating capability after a failed
validation.

Example:
    from changeguard import ChangeRequestOrchestrator, PipelineConfig
    from changeguard.infrastructure.persistence import FilesystemArtifactStore
    from changeguard.infrastructure.workers import SubprocessWorkerRunner

    config = PipelineConfig(max_attempts=3)
    orchestrator = ChangeRequestOrchestrator(
        runner=SubprocessWorkerRunner(timeout=config.worker_timeout),
        store=FilesystemArtifactStore(config.artifact_dir),
        config=config,
    )
    result = orchestrator.run("align the comment field with the account column")
"""

# Application layer (orchestration)
from changeguard.application import (
    CancellationToken,
    ChangeRequestOrchestrator,
    analyze,
    generate_requirements,
    generate_test_plan,
)

# Configuration
from changeguard.config import PipelineConfig, WorkerSettings, load_config

# Domain exceptions
from changeguard.domain.exceptions import (
    AttemptsExhausted,
    PipelineCancelled,
    WorkerFailure,
)

# Domain interfaces (for type hints and custom implementations)
from changeguard.domain.interfaces import (
    ArtifactStoreInterface,
    CheckerInterface,
    WorkerRunnerInterface,
)
from changeguard.domain.models import (
    ChangeManifest,
    PipelineResult,
    Requirement,
    TerminalRecord,
    TestCase,
    TestReport,
)

# Infrastructure (explicit import encouraged for dependency injection)
from changeguard.infrastructure.persistence import (
    FilesystemArtifactStore,
    InMemoryArtifactStore,
)
from changeguard.infrastructure.workers import (
    MockWorkerRunner,
    SubprocessWorkerRunner,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Domain models
    "ChangeManifest",
    "PipelineResult",
    "Requirement",
    "TerminalRecord",
    "TestCase",
    "TestReport",
    # Domain interfaces
    "ArtifactStoreInterface",
    "CheckerInterface",
    "WorkerRunnerInterface",
    # Domain exceptions
    "AttemptsExhausted",
    "PipelineCancelled",
    "WorkerFailure",
    # Application layer
    "CancellationToken",
    "ChangeRequestOrchestrator",
    "analyze",
    "generate_requirements",
    "generate_test_plan",
    # Configuration
    "PipelineConfig",
    "WorkerSettings",
    "load_config",
    # Infrastructure
    "FilesystemArtifactStore",
    "InMemoryArtifactStore",
    "MockWorkerRunner",
    "SubprocessWorkerRunner",
]
