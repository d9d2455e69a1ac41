"""
Domain interfaces (Ports) for the change-request pipeline.

These abstract base classes define the contracts that adapters must satisfy.
They have no external dependencies and represent the core domain boundaries.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from changeguard.domain.models import (
        ChangeManifest,
        CheckOutcome,
        LayoutMeasurement,
        ProbeResponse,
        Requirement,
        TestCase,
    )
    from changeguard.domain.pipeline_event import PipelineEvent, PipelineEventType
    from changeguard.domain.protocol import WorkerRequest, WorkerResponse


class WorkerRunnerInterface(ABC):
    """
    Port for invoking an isolated worker.

    The only observable effect of a worker on its caller is the returned
    response envelope or a raised WorkerFailure.
    """

    @abstractmethod
    def invoke(self, request: "WorkerRequest") -> "WorkerResponse":
        """
        Send one request envelope and wait for one response envelope.

        Args:
            request: The request envelope

        Returns:
            A successful response envelope

        Raises:
            WorkerFailure: On crash, malformed output, timeout or a
                worker-reported error
        """
        pass


class ArtifactStoreInterface(ABC):
    """
    Port for audit persistence.

    A simple key -> document store. Keys are append-only: once written,
    a key is never rewritten.
    """

    @abstractmethod
    def store_document(self, key: str, document: dict[str, Any]) -> str:
        """
        Store a JSON-compatible document.

        Returns:
            The key

        Raises:
            ArtifactExistsError: If the key was already written
        """
        pass

    @abstractmethod
    def store_text(self, key: str, text: str) -> str:
        """Store a text document (e.g. rendered Markdown). Same rules as store_document."""
        pass

    @abstractmethod
    def get_document(self, key: str) -> dict[str, Any]:
        """
        Raises:
            KeyError: If the key is unknown
        """
        pass

    @abstractmethod
    def get_text(self, key: str) -> str:
        pass

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix, in write order."""
        pass


class CheckerInterface(ABC):
    """
    Port for test-case verification.

    Checkers may raise; the Tester converts any exception into a failing result.
    """

    @abstractmethod
    def check(
        self,
        test_case: "TestCase",
        manifest: "ChangeManifest",
        requirement: "Requirement | None",
    ) -> "CheckOutcome":
        pass


class SchemaSyncInterface(ABC):
    """Pushes the persistence schema to the backing database."""

    @abstractmethod
    def sync(self) -> None:
        """
        Raises:
            NonFatalSideEffectFailure: If the sync did not succeed
        """
        pass


class SchemaLinterInterface(ABC):
    """Validates the persistence schema."""

    @abstractmethod
    def lint(self) -> list[str]:
        """
        Returns:
            Validation error lines; empty when the schema is consistent

        Raises:
            CheckerException: If the linter could not run
        """
        pass


class LayoutInspectorInterface(ABC):
    """Renders a UI surface and measures two of its elements."""

    @abstractmethod
    def measure(
        self, surface: str, subject: str, reference: str
    ) -> "LayoutMeasurement":
        """
        Args:
            surface: Page path to render
            subject: Selector of the element under test
            reference: Selector of the element it must align with

        Raises:
            CheckerException: If rendering or measuring fails
        """
        pass


class EndpointProberInterface(ABC):
    """Issues one live call against an application endpoint."""

    @abstractmethod
    def probe(self, endpoint: str) -> "ProbeResponse":
        """
        Raises:
            CheckerException: If the call cannot be completed
        """
        pass


class PipelineEventStoreInterface(ABC):
    """Port for storing pipeline trace events."""

    @abstractmethod
    def store_event(self, event: "PipelineEvent") -> str:
        pass

    @abstractmethod
    def get_events(
        self,
        request_id: str,
        event_type: "PipelineEventType | None" = None,
    ) -> list["PipelineEvent"]:
        pass
