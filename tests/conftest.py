"""Shared pytest fixtures for changeguard tests."""

from collections.abc import Callable

import pytest

from changeguard.config import PipelineConfig
from changeguard.domain.models import (
    ChangeEntry,
    ChangeManifest,
    ModelTier,
    Priority,
    Requirement,
    RequirementType,
    TestCase,
    TestCaseType,
    TestDetails,
    TestReport,
    TestResult,
    TestStatus,
    TestSummary,
)
from changeguard.domain.protocol import WorkerRequest, WorkerResponse
from changeguard.domain.serialization import (
    case_from_dict,
    manifest_to_dict,
    report_to_dict,
)
from changeguard.infrastructure.persistence import (
    InMemoryArtifactStore,
    InMemoryPipelineEventStore,
)

CONTRACTORS_PAGE = "src/app/entities/contractors/page.tsx"

WorkerScript = Callable[[WorkerRequest], WorkerResponse]


@pytest.fixture
def config() -> PipelineConfig:
    """Default pipeline configuration with three attempts."""
    return PipelineConfig(max_attempts=3)


@pytest.fixture
def memory_store() -> InMemoryArtifactStore:
    """Create an in-memory artifact store."""
    return InMemoryArtifactStore()


@pytest.fixture
def event_store() -> InMemoryPipelineEventStore:
    """Create an in-memory pipeline event store."""
    return InMemoryPipelineEventStore()


@pytest.fixture
def ui_requirement() -> Requirement:
    """A UI requirement as generated for the alignment request."""
    return Requirement(
        id="R1",
        type=RequirementType.UI,
        description="UI changes as specified: align the comment field with the account column",
        priority=Priority.HIGH,
    )


@pytest.fixture
def layout_case() -> TestCase:
    """Layout test case covering R1."""
    return TestCase(
        id="T1",
        name="UI Layout Test for R1",
        type=TestCaseType.LAYOUT,
        requirement_id="R1",
        expected_result="Visual elements properly aligned",
    )


@pytest.fixture
def sample_manifest() -> ChangeManifest:
    """Manifest touching the contractors page once."""
    return ChangeManifest(
        request_id="req-001",
        attempt=1,
        model_tier=ModelTier.BASELINE,
        model="sonnet",
        changes=(ChangeEntry(CONTRACTORS_PAGE, "R1", "align_comment_field"),),
        files_modified=(CONTRACTORS_PAGE,),
        created_at="2025-01-01T00:00:00Z",
    )


@pytest.fixture
def make_developer() -> Callable[..., WorkerScript]:
    """Factory for scripted Developer outcomes that echo the request."""

    def factory(files: tuple[str, ...] = (CONTRACTORS_PAGE,)) -> WorkerScript:
        def develop(request: WorkerRequest) -> WorkerResponse:
            requirement_id = request.payload["requirements"][-1]["id"]
            manifest = ChangeManifest(
                request_id=request.request_id,
                attempt=request.attempt,
                model_tier=ModelTier(request.payload["modelTier"]),
                model=request.payload["model"],
                changes=tuple(ChangeEntry(f, requirement_id, "edited") for f in files),
                files_modified=files,
            )
            return WorkerResponse.ok(
                request.request_id, {"changeManifest": manifest_to_dict(manifest)}
            )

        return develop

    return factory


@pytest.fixture
def make_tester() -> Callable[..., WorkerScript]:
    """Factory for scripted Tester outcomes.

    `failures` maps a test case type value to the failure reason reported
    for every case of that type; all other cases pass.
    """

    def factory(failures: dict[str, str] | None = None) -> WorkerScript:
        failing = failures or {}

        def run_tests(request: WorkerRequest) -> WorkerResponse:
            results = []
            for data in request.payload["testPlan"]:
                case = case_from_dict(data)
                reason = failing.get(case.type.value)
                results.append(
                    TestResult(
                        id=case.id,
                        name=case.name,
                        requirement_id=case.requirement_id,
                        status=TestStatus.FAIL if reason else TestStatus.PASS,
                        duration_ms=1,
                        details=(
                            TestDetails(reason=reason, expected=case.expected_result)
                            if reason
                            else TestDetails(message="ok")
                        ),
                    )
                )
            report = TestReport(
                request_id=request.request_id,
                attempt=request.attempt,
                results=tuple(results),
                summary=TestSummary.from_results(tuple(results)),
            )
            return WorkerResponse.ok(
                request.request_id, {"testReport": report_to_dict(report)}
            )

        return run_tests

    return factory
