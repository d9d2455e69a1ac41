"""
ChangeRequestOrchestrator: the state machine that drives one change request.

Init -> Analyze -> GenerateRequirements -> GenerateTestPlan -> Develop ->
Test -> Validate -> {Retry -> Develop | Finalize | Fail}

The orchestrator never touches worker internals. It sends one request
envelope per worker call and reads back one response envelope; anything
that goes wrong inside a worker surfaces here as a WorkerFailure and costs
exactly one attempt.
"""

import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from changeguard.application.analysis import (
    analyze,
    generate_requirements,
    generate_test_plan,
)
from changeguard.application.documents import (
    render_requirements_document,
    render_test_plan_document,
)
from changeguard.application.event_emitter import PipelineEventEmitter
from changeguard.application.failure_analysis import (
    analyze_failures,
    summarize_failures,
    synthesize_fix_requirements,
)
from changeguard.domain.exceptions import (
    AttemptsExhausted,
    FailureKind,
    PipelineCancelled,
    WorkerFailure,
)
from changeguard.domain.interfaces import (
    ArtifactStoreInterface,
    PipelineEventStoreInterface,
    WorkerRunnerInterface,
)
from changeguard.domain.models import (
    AttemptRecord,
    ChangeManifest,
    ChangeRequest,
    FailureContext,
    ModelTier,
    PipelineResult,
    PipelineState,
    RequestStatus,
    Requirement,
    TerminalRecord,
    TestCase,
)
from changeguard.domain.pipeline_event import PipelineEvent, PipelineEventType
from changeguard.domain.protocol import WorkerRequest, WorkerResponse, WorkerRole
from changeguard.domain.serialization import (
    analysis_to_dict,
    attempt_record_to_dict,
    case_to_dict,
    manifest_from_dict,
    manifest_to_dict,
    report_from_dict,
    report_to_dict,
    requirement_to_dict,
    terminal_record_to_dict,
)

if TYPE_CHECKING:
    from changeguard.config import PipelineConfig

logger = logging.getLogger("changeguard.orchestrator")

RECOMMENDATION = "Manual intervention required"
REASON_PASSED = "all tests passed"
REASON_EXHAUSTED = "attempts exhausted"
REASON_CANCELLED = "cancelled"


class CancellationToken:
    """
    Thread-safe cancellation flag for one request.

    Checked only between states: a worker call in flight always runs to
    completion (or timeout) before the pipeline moves to Fail.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class _DiscardingEventStore(PipelineEventStoreInterface):
    """Event sink used when no event store is configured."""

    def store_event(self, event: PipelineEvent) -> str:
        return event.event_id

    def get_events(
        self, request_id: str, event_type: PipelineEventType | None = None
    ) -> list[PipelineEvent]:
        return []


@dataclass
class _Run:
    """Per-request working state. Owned by a single run() call."""

    request: ChangeRequest
    token: CancellationToken
    events: PipelineEventEmitter
    requirements: list[Requirement] = field(default_factory=list)
    test_plan: list[TestCase] = field(default_factory=list)
    attempts: list[AttemptRecord] = field(default_factory=list)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChangeRequestOrchestrator:
    """
    Drives change requests from free text to a Completed or Failed record.

    Each run() call owns a fresh ChangeRequest. One orchestrator may serve
    several requests, but requests must not share a workspace concurrently.
    """

    def __init__(
        self,
        runner: WorkerRunnerInterface,
        store: ArtifactStoreInterface,
        config: "PipelineConfig",
        event_store: PipelineEventStoreInterface | None = None,
    ):
        """
        Args:
            runner: Invokes Developer and Tester workers
            store: Append-only audit store
            config: Attempt bound, timeouts, models and worker settings
            event_store: Optional sink for pipeline trace events
        """
        self._runner = runner
        self._store = store
        self._config = config
        self._event_store = event_store or _DiscardingEventStore()

    def run(
        self, text: str, cancellation: CancellationToken | None = None
    ) -> PipelineResult:
        """
        Run one change request to a terminal record.

        Args:
            text: The free-text change request
            cancellation: Optional token; when set, the pipeline fails with
                reason "cancelled" at the next state boundary

        Returns:
            PipelineResult whose terminal record is Completed or Failed

        Raises:
            Exception: Any unexpected error, after an error report has been
                persisted for the request
        """
        request = ChangeRequest(
            id=secrets.token_hex(8),
            original_text=text,
            max_attempts=self._config.max_attempts,
            created_at=_now(),
        )
        run = _Run(
            request=request,
            token=cancellation or CancellationToken(),
            events=PipelineEventEmitter(self._event_store, request.id),
        )
        logger.info("Change request %s: %s", request.id, text)

        try:
            status, reason = self._execute(run)
            return self._terminate(run, status, reason)
        except Exception as e:
            logger.error("Critical error in request %s: %s", request.id, e)
            self._write_error_report(run, e)
            raise

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _execute(self, run: _Run) -> tuple[RequestStatus, str]:
        try:
            self._prepare(run)
            self._attempt_loop(run)
        except AttemptsExhausted as e:
            logger.warning("%s (%d attempts recorded)", e, len(e.provenance))
            return RequestStatus.FAILED, REASON_EXHAUSTED
        except PipelineCancelled:
            logger.warning("Request %s cancelled", run.request.id)
            return RequestStatus.FAILED, REASON_CANCELLED
        return RequestStatus.COMPLETED, REASON_PASSED

    @staticmethod
    def _check_cancelled(run: _Run, upcoming: PipelineState) -> None:
        if run.token.cancelled:
            raise PipelineCancelled(
                f"Request {run.request.id} cancelled before {upcoming.value}"
            )

    def _enter(self, run: _Run, state: PipelineState, attempt: int | None = None) -> None:
        """Transition to state. Cancellation is observed only at these boundaries."""
        self._check_cancelled(run, state)
        run.request.transition(state)
        run.events.state_enter(state, attempt)
        logger.debug("Request %s -> %s", run.request.id, state.value)

    def _prepare(self, run: _Run) -> None:
        """Analyze, GenerateRequirements and GenerateTestPlan; once per request."""
        request = run.request

        self._enter(run, PipelineState.ANALYZE)
        request.analysis = analyze(request.original_text)

        self._enter(run, PipelineState.GENERATE_REQUIREMENTS)
        run.requirements = generate_requirements(request.original_text, request.analysis)
        self._store.store_document(
            f"{request.id}/requirements.json",
            {
                "requestId": request.id,
                "originalRequest": request.original_text,
                "analysis": analysis_to_dict(request.analysis),
                "requirements": [requirement_to_dict(r) for r in run.requirements],
            },
        )
        self._store.store_text(
            f"{request.id}/requirements.md",
            render_requirements_document(
                request.id, request.original_text, request.analysis, run.requirements
            ),
        )

        self._enter(run, PipelineState.GENERATE_TEST_PLAN)
        run.test_plan = generate_test_plan(run.requirements)
        covered = {t.requirement_id for t in run.test_plan}
        uncovered = [r.id for r in run.requirements if r.testable and r.id not in covered]
        if uncovered:
            raise ValueError(f"Testable requirements without tests: {uncovered}")
        self._store.store_document(
            f"{request.id}/test-plan.json",
            {
                "requestId": request.id,
                "testPlan": [case_to_dict(t) for t in run.test_plan],
            },
        )
        self._store.store_text(
            f"{request.id}/test-plan.md",
            render_test_plan_document(request.id, run.test_plan),
        )

    def _attempt_loop(self, run: _Run) -> None:
        """
        Develop/Test/Validate until validation passes.

        Raises:
            AttemptsExhausted: When no attempt is left
            PipelineCancelled: When the token is set at a state boundary
        """
        request = run.request
        escalated = False

        while True:
            self._check_cancelled(run, PipelineState.DEVELOP)
            if request.attempts >= request.max_attempts:
                raise AttemptsExhausted(
                    f"Request {request.id} failed after {request.attempts} attempts",
                    provenance=list(run.attempts),
                )
            request.attempts += 1
            tier = ModelTier.ELEVATED if escalated else ModelTier.BASELINE

            record = self._run_attempt(run, tier)
            if record.report is None:
                continue  # Worker failure: same tier, next attempt

            self._enter(run, PipelineState.VALIDATE, record.attempt)
            if record.report.all_passed:
                run.events.validation_pass(record.attempt)
                logger.info("Attempt %d: all tests passed", record.attempt)
                return

            summary = summarize_failures(record.failure_analysis)
            run.events.validation_fail(record.attempt, summary)
            logger.warning(
                "Attempt %d: %d of %d tests failed (pass rate %.1f%%)\n%s",
                record.attempt,
                record.report.summary.failed,
                record.report.summary.total,
                record.report.summary.pass_rate * 100,
                summary,
            )
            if request.attempts >= request.max_attempts:
                raise AttemptsExhausted(
                    f"Request {request.id} failed validation on its last attempt",
                    provenance=list(run.attempts),
                )

            self._enter(run, PipelineState.RETRY, record.attempt)
            fixes = synthesize_fix_requirements(run.requirements, record.failure_analysis)
            run.requirements = [*run.requirements, *fixes]
            logger.info("Added %d fix requirements", len(fixes))
            if not escalated:
                escalated = True
                run.events.escalate(record.attempt, ModelTier.ELEVATED)
                logger.info("Escalating to %s tier", ModelTier.ELEVATED.value)

    def _run_attempt(self, run: _Run, tier: ModelTier) -> AttemptRecord:
        """One Develop + Test pass. Always appends exactly one AttemptRecord."""
        request = run.request
        attempt = request.attempts
        model = self._config.model_for(tier)
        requirement_ids = tuple(r.id for r in run.requirements)
        prefix = f"{request.id}/attempts/{attempt}"

        self._enter(run, PipelineState.DEVELOP, attempt)
        logger.info("Attempt %d/%d using model %s", attempt, request.max_attempts, model)
        self._store.store_document(
            f"{prefix}/requirements.json",
            {
                "modelTier": tier.value,
                "model": model,
                "requirements": [requirement_to_dict(r) for r in run.requirements],
            },
        )

        try:
            response = self._invoke(
                run,
                WorkerRole.DEVELOPER,
                tier,
                {
                    "requirements": [requirement_to_dict(r) for r in run.requirements],
                    "context": analysis_to_dict(request.analysis),
                    "modelTier": tier.value,
                    "model": model,
                },
            )
            manifest = self._decode(
                WorkerRole.DEVELOPER, response, "changeManifest", manifest_from_dict
            )
        except WorkerFailure as e:
            return self._record_worker_failure(run, tier, requirement_ids, e)
        self._store.store_document(f"{prefix}/manifest.json", manifest_to_dict(manifest))
        logger.info("Developer modified %d files", len(manifest.files_modified))

        try:
            self._enter(run, PipelineState.TEST, attempt)
        except PipelineCancelled:
            self._record(run, AttemptRecord(attempt, tier, requirement_ids, manifest))
            raise

        try:
            response = self._invoke(
                run,
                WorkerRole.TESTER,
                tier,
                {
                    "testPlan": [case_to_dict(t) for t in run.test_plan],
                    "changeManifest": manifest_to_dict(manifest),
                    "requirements": [requirement_to_dict(r) for r in run.requirements],
                },
            )
            report = self._decode(
                WorkerRole.TESTER, response, "testReport", report_from_dict
            )
        except WorkerFailure as e:
            return self._record_worker_failure(run, tier, requirement_ids, e, manifest)
        self._store.store_document(f"{prefix}/report.json", report_to_dict(report))

        failure_analysis: tuple[FailureContext, ...] = ()
        if not report.all_passed:
            failure_analysis = analyze_failures(report)
        return self._record(
            run,
            AttemptRecord(
                attempt=attempt,
                model_tier=tier,
                requirement_ids=requirement_ids,
                manifest=manifest,
                report=report,
                failure_analysis=failure_analysis,
            ),
        )

    # =========================================================================
    # WORKER CALLS
    # =========================================================================

    def _invoke(
        self,
        run: _Run,
        role: WorkerRole,
        tier: ModelTier,
        payload: dict[str, Any],
    ) -> WorkerResponse:
        request = WorkerRequest(
            role=role,
            request_id=run.request.id,
            attempt=run.request.attempts,
            settings=self._config.worker.to_dict(),
            payload=payload,
        )
        run.events.worker_start(run.request.state, role.value, request.attempt, tier)
        return self._runner.invoke(request)

    @staticmethod
    def _decode(
        role: WorkerRole,
        response: WorkerResponse,
        key: str,
        from_dict: Callable[[dict[str, Any]], Any],
    ) -> Any:
        try:
            return from_dict((response.payload or {})[key])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise WorkerFailure(
                role.value, FailureKind.MALFORMED, f"unreadable {key}: {e!r}"
            ) from e

    def _record_worker_failure(
        self,
        run: _Run,
        tier: ModelTier,
        requirement_ids: tuple[str, ...],
        error: WorkerFailure,
        manifest: ChangeManifest | None = None,
    ) -> AttemptRecord:
        attempt = run.request.attempts
        logger.warning("Attempt %d: %s", attempt, error)
        run.events.worker_failure(run.request.state, error.role, attempt, str(error))
        self._store.store_document(
            f"{run.request.id}/attempts/{attempt}/worker-failure.json",
            {"role": error.role, "kind": error.kind.value, "detail": error.detail},
        )
        return self._record(
            run,
            AttemptRecord(
                attempt=attempt,
                model_tier=tier,
                requirement_ids=requirement_ids,
                manifest=manifest,
                worker_failure=str(error),
            ),
        )

    @staticmethod
    def _record(run: _Run, record: AttemptRecord) -> AttemptRecord:
        run.attempts.append(record)
        return record

    # =========================================================================
    # TERMINAL RECORDS
    # =========================================================================

    def _terminate(
        self, run: _Run, status: RequestStatus, reason: str
    ) -> PipelineResult:
        """Finalize or Fail: persist the summary record; never re-entered."""
        request = run.request
        state = (
            PipelineState.FINALIZE
            if status == RequestStatus.COMPLETED
            else PipelineState.FAIL
        )
        request.transition(state)
        run.events.state_enter(state, request.attempts)

        failing: tuple[FailureContext, ...] = ()
        if status == RequestStatus.FAILED:
            last_report = self._last_reported(run)
            failing = last_report.failure_analysis if last_report else ()

        terminal = TerminalRecord(
            request_id=request.id,
            status=status,
            attempts=request.attempts,
            started_at=request.created_at,
            finished_at=_now(),
            requirement_count=len(run.requirements),
            test_count=len(run.test_plan),
            original_request=request.original_text,
            reason=reason,
            recommendation=RECOMMENDATION if status == RequestStatus.FAILED else None,
            failing_requirements=failing,
        )
        summary = terminal_record_to_dict(terminal)
        summary["attemptHistory"] = [attempt_record_to_dict(a) for a in run.attempts]
        self._store.store_document(f"{request.id}/summary.json", summary)
        run.events.terminal(state, request.attempts, reason)

        if status == RequestStatus.COMPLETED:
            logger.info("Request %s completed in %d attempts", request.id, request.attempts)
        else:
            logger.error(
                "Request %s failed after %d attempts: %s", request.id, request.attempts, reason
            )

        return PipelineResult(
            request=request,
            requirements=tuple(run.requirements),
            test_plan=tuple(run.test_plan),
            attempts=tuple(run.attempts),
            terminal=terminal,
        )

    @staticmethod
    def _last_reported(run: _Run) -> AttemptRecord | None:
        for record in reversed(run.attempts):
            if record.report is not None:
                return record
        return None

    def _write_error_report(self, run: _Run, error: Exception) -> None:
        self._store.store_document(
            f"{run.request.id}/error.json",
            {
                "requestId": run.request.id,
                "state": run.request.state.value,
                "attempts": run.request.attempts,
                "error": str(error),
                "errorType": type(error).__name__,
                "timestamp": _now(),
            },
        )


__all__ = [
    "CancellationToken",
    "ChangeRequestOrchestrator",
    "RECOMMENDATION",
]
