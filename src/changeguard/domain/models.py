"""
Domain models for the change-request pipeline.

These are pure data structures. Everything is immutable (frozen dataclasses)
except ChangeRequest, which the Orchestrator owns and mutates as the request
moves through its states.
"""

from dataclasses import dataclass
from enum import Enum

# =============================================================================
# ENUMERATIONS
# =============================================================================


class RequirementType(str, Enum):
    """Kind of change a requirement asks for."""

    UI = "ui"
    DATABASE = "database"
    API = "api"
    FIX = "fix"  # Synthesized from a failed attempt
    GENERIC = "generic"


class TestCaseType(str, Enum):
    """Checker a test case is dispatched to."""

    __test__ = False  # Not a pytest test class

    LAYOUT = "layout-validation"
    DATABASE = "database-validation"
    API = "api-validation"
    GENERIC = "generic"


class Priority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class TargetEnvironment(str, Enum):
    """Deployment target a request applies to."""

    REMOTE = "remote"
    LOCAL = "local"
    ALL = "all"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class ModelTier(str, Enum):
    """Capability tier used by the Developer worker."""

    BASELINE = "baseline"
    ELEVATED = "elevated"


class TestStatus(str, Enum):
    __test__ = False

    PASS = "pass"
    FAIL = "fail"


class RequestStatus(str, Enum):
    """Terminal outcome of a change request."""

    COMPLETED = "completed"
    FAILED = "failed"


class PipelineState(str, Enum):
    """States of the orchestration state machine."""

    INIT = "init"
    ANALYZE = "analyze"
    GENERATE_REQUIREMENTS = "generate_requirements"
    GENERATE_TEST_PLAN = "generate_test_plan"
    DEVELOP = "develop"
    TEST = "test"
    VALIDATE = "validate"
    RETRY = "retry"
    FINALIZE = "finalize"
    FAIL = "fail"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.FINALIZE, PipelineState.FAIL)


# =============================================================================
# ANALYSIS, REQUIREMENTS AND TEST PLAN
# =============================================================================


@dataclass(frozen=True)
class Analysis:
    """Derived view of the free-text request."""

    affected_areas: tuple[str, ...]  # Tag names in table order
    target_environment: TargetEnvironment
    complexity: Complexity
    ambiguities: tuple[str, ...] = ()


@dataclass(frozen=True)
class FailureContext:
    """Failing evidence for one requirement after one attempt."""

    requirement_id: str
    attempt: int
    test_ids: tuple[str, ...]
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class Requirement:
    """
    A structured unit of required change.

    Requirements are append-only within a request: a retry adds new FIX
    requirements referencing the failing one via origin_requirement_id.
    """

    id: str  # R1, R2, ... by position
    type: RequirementType
    description: str
    priority: Priority
    testable: bool = True
    failure_context: FailureContext | None = None  # Only set on FIX requirements
    origin_requirement_id: str | None = None


@dataclass(frozen=True)
class TestCase:
    """A single verifiable expectation tied to one requirement."""

    __test__ = False

    id: str  # T1, T2, ... by position
    name: str
    type: TestCaseType
    requirement_id: str
    expected_result: str


# =============================================================================
# CHANGE MANIFEST (Developer output)
# =============================================================================


@dataclass(frozen=True)
class ChangeEntry:
    """One file-level edit made for one requirement."""

    file: str  # Workspace-relative path
    requirement_id: str
    description: str
    change_kind: str = "modified"


@dataclass(frozen=True)
class ChangeManifest:
    """Immutable record of the edits one Developer attempt applied."""

    request_id: str
    attempt: int
    model_tier: ModelTier
    model: str
    changes: tuple[ChangeEntry, ...]
    files_modified: tuple[str, ...]  # Deduplicated, first-touch order
    notes: tuple[str, ...] = ()  # Non-fatal failures
    created_at: str = ""


# =============================================================================
# TEST RESULTS (Tester output)
# =============================================================================


@dataclass(frozen=True)
class TestDetails:
    """Structured diagnostic for one test result."""

    __test__ = False

    message: str = ""  # Success message
    reason: str = ""  # Failure reason
    expected: str = ""
    actual: str = ""
    measurements: tuple[tuple[str, float], ...] = ()


@dataclass(frozen=True)
class TestResult:
    """Verdict for one test case."""

    __test__ = False

    id: str  # Test case id
    name: str
    requirement_id: str
    status: TestStatus
    duration_ms: int
    details: TestDetails
    verified: bool = True  # False for checks that cannot be independently verified

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASS


@dataclass(frozen=True)
class TestSummary:
    __test__ = False

    total: int
    passed: int
    failed: int
    unverified: int
    pass_rate: float

    @classmethod
    def from_results(cls, results: tuple[TestResult, ...]) -> "TestSummary":
        total = len(results)
        passed = sum(1 for r in results if r.passed)
        unverified = sum(1 for r in results if r.passed and not r.verified)
        return cls(
            total=total,
            passed=passed,
            failed=total - passed,
            unverified=unverified,
            pass_rate=passed / total if total else 0.0,
        )


@dataclass(frozen=True)
class TestReport:
    """All verdicts for one attempt."""

    __test__ = False

    request_id: str
    attempt: int
    results: tuple[TestResult, ...]
    summary: TestSummary
    created_at: str = ""

    @property
    def all_passed(self) -> bool:
        """Strict AND over every result, independent of pass rate."""
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> tuple[TestResult, ...]:
        return tuple(r for r in self.results if not r.passed)


# =============================================================================
# EXTERNAL PROBE MEASUREMENTS
# =============================================================================


@dataclass(frozen=True)
class BoundingBox:
    left: float
    top: float
    right: float
    bottom: float


@dataclass(frozen=True)
class LayoutMeasurement:
    """Rendered boxes of the element under test and its reference."""

    subject: BoundingBox
    reference: BoundingBox


@dataclass(frozen=True)
class ProbeResponse:
    """Outcome of one live endpoint call."""

    status_code: int
    body: str
    parsed: bool  # True if the body decoded as structured output


@dataclass(frozen=True)
class CheckOutcome:
    """What a checker reports before the Tester stamps id and timing."""

    passed: bool
    details: TestDetails
    verified: bool = True


# =============================================================================
# REQUEST LIFECYCLE
# =============================================================================


@dataclass
class ChangeRequest:
    """Mutable unit of work, owned exclusively by the Orchestrator."""

    id: str
    original_text: str
    max_attempts: int = 3
    analysis: Analysis | None = None
    attempts: int = 0
    state: PipelineState = PipelineState.INIT
    created_at: str = ""

    def transition(self, state: PipelineState) -> None:
        if self.state.is_terminal:
            raise ValueError(
                f"Request {self.id} is terminal ({self.state.value}); "
                f"cannot enter {state.value}"
            )
        self.state = state


@dataclass(frozen=True)
class AttemptRecord:
    """Audit trail of one Develop/Test attempt."""

    attempt: int
    model_tier: ModelTier
    requirement_ids: tuple[str, ...]
    manifest: ChangeManifest | None = None
    report: TestReport | None = None
    worker_failure: str | None = None
    failure_analysis: tuple[FailureContext, ...] = ()


@dataclass(frozen=True)
class TerminalRecord:
    """Immutable Completed/Failed summary that ends a request's pipeline."""

    request_id: str
    status: RequestStatus
    attempts: int
    started_at: str
    finished_at: str
    requirement_count: int
    test_count: int
    original_request: str
    reason: str
    recommendation: str | None = None
    failing_requirements: tuple[FailureContext, ...] = ()


@dataclass(frozen=True)
class PipelineResult:
    """Everything a finished pipeline produced, for callers and audit."""

    request: ChangeRequest
    requirements: tuple[Requirement, ...]
    test_plan: tuple[TestCase, ...]
    attempts: tuple[AttemptRecord, ...]
    terminal: TerminalRecord

    @property
    def succeeded(self) -> bool:
        return self.terminal.status == RequestStatus.COMPLETED
