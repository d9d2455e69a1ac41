"""Tests for wire serialization of domain records."""

from changeguard.domain.models import (
    ChangeManifest,
    FailureContext,
    Priority,
    RequestStatus,
    Requirement,
    RequirementType,
    TerminalRecord,
    TestDetails,
    TestReport,
    TestResult,
    TestStatus,
    TestSummary,
)
from changeguard.domain.serialization import (
    manifest_to_dict,
    report_from_dict,
    report_to_dict,
    requirement_from_dict,
    requirement_to_dict,
    terminal_record_from_dict,
    terminal_record_to_dict,
)


class TestRequirementSerialization:
    """Tests for requirement dicts."""

    def test_fix_requirement_keeps_failure_context(self) -> None:
        """Failure context and origin survive the wire form."""
        context = FailureContext("R1", 1, ("T1",), ("misaligned by 12px",))
        fix = Requirement(
            id="R3",
            type=RequirementType.FIX,
            description="Fix failures for R1: misaligned by 12px",
            priority=Priority.CRITICAL,
            testable=False,
            failure_context=context,
            origin_requirement_id="R1",
        )

        data = requirement_to_dict(fix)

        assert data["type"] == "fix"
        assert data["failureContext"]["reasons"] == ["misaligned by 12px"]
        assert requirement_from_dict(data) == fix

    def test_missing_optional_fields_take_defaults(self) -> None:
        """Envelopes from older producers decode with defaults."""
        requirement = requirement_from_dict(
            {"id": "R1", "type": "ui", "description": "d", "priority": "high"}
        )

        assert requirement.testable is True
        assert requirement.failure_context is None


class TestManifestSerialization:
    """Tests for manifest dicts."""

    def test_change_entries_use_wire_names(self, sample_manifest: ChangeManifest) -> None:
        """Each change is {file, changeKind, requirementId, description}."""
        data = manifest_to_dict(sample_manifest)

        assert data["modelTier"] == "baseline"
        assert data["changes"] == [
            {
                "file": "src/app/entities/contractors/page.tsx",
                "changeKind": "modified",
                "requirementId": "R1",
                "description": "align_comment_field",
            }
        ]


class TestReportSerialization:
    """Tests for report dicts."""

    def test_summary_and_measurements(self) -> None:
        """The summary carries passRate; measurements become a mapping."""
        result = TestResult(
            id="T1",
            name="UI Layout Test for R1",
            requirement_id="R1",
            status=TestStatus.FAIL,
            duration_ms=40,
            details=TestDetails(
                reason="misaligned by 12px",
                expected="within 5px",
                actual="left 12px",
                measurements=(("leftDelta", 12.0),),
            ),
        )
        report = TestReport("req", 1, (result,), TestSummary.from_results((result,)))

        data = report_to_dict(report)

        assert data["summary"]["passRate"] == 0.0
        assert data["results"][0]["details"]["measurements"] == {"leftDelta": 12.0}
        assert report_from_dict(data) == report


class TestTerminalRecordSerialization:
    """Tests for terminal record dicts."""

    def test_failed_record(self) -> None:
        """A failed record keeps its recommendation and failing requirements."""
        record = TerminalRecord(
            request_id="req",
            status=RequestStatus.FAILED,
            attempts=3,
            started_at="2025-01-01T00:00:00Z",
            finished_at="2025-01-01T00:05:00Z",
            requirement_count=4,
            test_count=2,
            original_request="align it",
            reason="attempts exhausted",
            recommendation="Manual intervention required",
            failing_requirements=(FailureContext("R1", 3, ("T1",), ("misaligned by 7px",)),),
        )

        data = terminal_record_to_dict(record)

        assert data["status"] == "failed"
        assert data["failingRequirements"][0]["requirementId"] == "R1"
        assert terminal_record_from_dict(data) == record
