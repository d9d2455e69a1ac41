"""
Wire serialization for domain records.

Explicit to/from dict pairs with camelCase keys. These dicts are what
travels in worker envelopes and what the artifact store persists.
"""

from typing import Any

from changeguard.domain.models import (
    Analysis,
    AttemptRecord,
    ChangeEntry,
    ChangeManifest,
    Complexity,
    FailureContext,
    ModelTier,
    Priority,
    RequestStatus,
    Requirement,
    RequirementType,
    TargetEnvironment,
    TerminalRecord,
    TestCase,
    TestCaseType,
    TestDetails,
    TestReport,
    TestResult,
    TestStatus,
    TestSummary,
)
from changeguard.domain.pipeline_event import PipelineEvent, PipelineEventType

# =============================================================================
# ANALYSIS AND REQUIREMENTS
# =============================================================================


def analysis_to_dict(analysis: Analysis) -> dict[str, Any]:
    return {
        "affectedAreas": list(analysis.affected_areas),
        "targetEnvironment": analysis.target_environment.value,
        "complexity": analysis.complexity.value,
        "ambiguities": list(analysis.ambiguities),
    }


def analysis_from_dict(data: dict[str, Any]) -> Analysis:
    return Analysis(
        affected_areas=tuple(data["affectedAreas"]),
        target_environment=TargetEnvironment(data["targetEnvironment"]),
        complexity=Complexity(data["complexity"]),
        ambiguities=tuple(data.get("ambiguities", ())),
    )


def failure_context_to_dict(context: FailureContext) -> dict[str, Any]:
    return {
        "requirementId": context.requirement_id,
        "attempt": context.attempt,
        "testIds": list(context.test_ids),
        "reasons": list(context.reasons),
    }


def failure_context_from_dict(data: dict[str, Any]) -> FailureContext:
    return FailureContext(
        requirement_id=data["requirementId"],
        attempt=data["attempt"],
        test_ids=tuple(data["testIds"]),
        reasons=tuple(data["reasons"]),
    )


def requirement_to_dict(requirement: Requirement) -> dict[str, Any]:
    return {
        "id": requirement.id,
        "type": requirement.type.value,
        "description": requirement.description,
        "priority": requirement.priority.value,
        "testable": requirement.testable,
        "failureContext": (
            failure_context_to_dict(requirement.failure_context)
            if requirement.failure_context
            else None
        ),
        "originRequirementId": requirement.origin_requirement_id,
    }


def requirement_from_dict(data: dict[str, Any]) -> Requirement:
    context = data.get("failureContext")
    return Requirement(
        id=data["id"],
        type=RequirementType(data["type"]),
        description=data["description"],
        priority=Priority(data["priority"]),
        testable=data.get("testable", True),
        failure_context=failure_context_from_dict(context) if context else None,
        origin_requirement_id=data.get("originRequirementId"),
    )


def case_to_dict(test_case: TestCase) -> dict[str, Any]:
    return {
        "id": test_case.id,
        "name": test_case.name,
        "type": test_case.type.value,
        "requirementId": test_case.requirement_id,
        "expectedResult": test_case.expected_result,
    }


def case_from_dict(data: dict[str, Any]) -> TestCase:
    return TestCase(
        id=data["id"],
        name=data["name"],
        type=TestCaseType(data["type"]),
        requirement_id=data["requirementId"],
        expected_result=data["expectedResult"],
    )


# =============================================================================
# MANIFEST
# =============================================================================


def manifest_to_dict(manifest: ChangeManifest) -> dict[str, Any]:
    return {
        "requestId": manifest.request_id,
        "attempt": manifest.attempt,
        "modelTier": manifest.model_tier.value,
        "model": manifest.model,
        "changes": [
            {
                "file": c.file,
                "changeKind": c.change_kind,
                "requirementId": c.requirement_id,
                "description": c.description,
            }
            for c in manifest.changes
        ],
        "filesModified": list(manifest.files_modified),
        "notes": list(manifest.notes),
        "createdAt": manifest.created_at,
    }


def manifest_from_dict(data: dict[str, Any]) -> ChangeManifest:
    return ChangeManifest(
        request_id=data["requestId"],
        attempt=data["attempt"],
        model_tier=ModelTier(data["modelTier"]),
        model=data["model"],
        changes=tuple(
            ChangeEntry(
                file=c["file"],
                requirement_id=c["requirementId"],
                description=c["description"],
                change_kind=c.get("changeKind", "modified"),
            )
            for c in data["changes"]
        ),
        files_modified=tuple(data["filesModified"]),
        notes=tuple(data.get("notes", ())),
        created_at=data.get("createdAt", ""),
    )


# =============================================================================
# TEST REPORT
# =============================================================================


def _details_to_dict(details: TestDetails) -> dict[str, Any]:
    return {
        "message": details.message,
        "reason": details.reason,
        "expected": details.expected,
        "actual": details.actual,
        "measurements": {name: value for name, value in details.measurements},
    }


def _details_from_dict(data: dict[str, Any]) -> TestDetails:
    return TestDetails(
        message=data.get("message", ""),
        reason=data.get("reason", ""),
        expected=data.get("expected", ""),
        actual=data.get("actual", ""),
        measurements=tuple(data.get("measurements", {}).items()),
    )


def result_to_dict(result: TestResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "name": result.name,
        "requirementId": result.requirement_id,
        "status": result.status.value,
        "durationMs": result.duration_ms,
        "details": _details_to_dict(result.details),
        "verified": result.verified,
    }


def result_from_dict(data: dict[str, Any]) -> TestResult:
    return TestResult(
        id=data["id"],
        name=data["name"],
        requirement_id=data["requirementId"],
        status=TestStatus(data["status"]),
        duration_ms=data["durationMs"],
        details=_details_from_dict(data["details"]),
        verified=data.get("verified", True),
    )


def report_to_dict(report: TestReport) -> dict[str, Any]:
    return {
        "requestId": report.request_id,
        "attempt": report.attempt,
        "results": [result_to_dict(r) for r in report.results],
        "summary": {
            "total": report.summary.total,
            "passed": report.summary.passed,
            "failed": report.summary.failed,
            "unverified": report.summary.unverified,
            "passRate": report.summary.pass_rate,
        },
        "createdAt": report.created_at,
    }


def report_from_dict(data: dict[str, Any]) -> TestReport:
    summary = data["summary"]
    return TestReport(
        request_id=data["requestId"],
        attempt=data["attempt"],
        results=tuple(result_from_dict(r) for r in data["results"]),
        summary=TestSummary(
            total=summary["total"],
            passed=summary["passed"],
            failed=summary["failed"],
            unverified=summary.get("unverified", 0),
            pass_rate=summary["passRate"],
        ),
        created_at=data.get("createdAt", ""),
    )


# =============================================================================
# AUDIT RECORDS
# =============================================================================


def attempt_record_to_dict(record: AttemptRecord) -> dict[str, Any]:
    return {
        "attempt": record.attempt,
        "modelTier": record.model_tier.value,
        "requirementIds": list(record.requirement_ids),
        "manifest": manifest_to_dict(record.manifest) if record.manifest else None,
        "report": report_to_dict(record.report) if record.report else None,
        "workerFailure": record.worker_failure,
        "failureAnalysis": [
            failure_context_to_dict(c) for c in record.failure_analysis
        ],
    }


def terminal_record_to_dict(record: TerminalRecord) -> dict[str, Any]:
    return {
        "requestId": record.request_id,
        "status": record.status.value,
        "attempts": record.attempts,
        "startedAt": record.started_at,
        "finishedAt": record.finished_at,
        "requirementCount": record.requirement_count,
        "testCount": record.test_count,
        "originalRequest": record.original_request,
        "reason": record.reason,
        "recommendation": record.recommendation,
        "failingRequirements": [
            failure_context_to_dict(c) for c in record.failing_requirements
        ],
    }


def terminal_record_from_dict(data: dict[str, Any]) -> TerminalRecord:
    return TerminalRecord(
        request_id=data["requestId"],
        status=RequestStatus(data["status"]),
        attempts=data["attempts"],
        started_at=data["startedAt"],
        finished_at=data["finishedAt"],
        requirement_count=data["requirementCount"],
        test_count=data["testCount"],
        original_request=data["originalRequest"],
        reason=data["reason"],
        recommendation=data.get("recommendation"),
        failing_requirements=tuple(
            failure_context_from_dict(c) for c in data.get("failingRequirements", [])
        ),
    )


def event_to_dict(event: PipelineEvent) -> dict[str, Any]:
    return {
        "eventId": event.event_id,
        "eventType": event.event_type.value,
        "requestId": event.request_id,
        "state": event.state,
        "role": event.role,
        "attempt": event.attempt,
        "modelTier": event.model_tier,
        "summary": event.summary,
        "createdAt": event.created_at,
    }


def event_from_dict(data: dict[str, Any]) -> PipelineEvent:
    return PipelineEvent(
        event_id=data["eventId"],
        event_type=PipelineEventType(data["eventType"]),
        request_id=data["requestId"],
        state=data["state"],
        role=data.get("role"),
        attempt=data.get("attempt"),
        model_tier=data.get("modelTier"),
        summary=data.get("summary", ""),
        created_at=data.get("createdAt", ""),
    )
