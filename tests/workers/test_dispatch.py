"""Tests for worker request dispatch and the stdin/stdout loop."""

import io
import json
from pathlib import Path

import pytest

from changeguard.checkers import GenericChecker
from changeguard.config import WorkerSettings
from changeguard.domain.models import (
    ChangeManifest,
    ModelTier,
    Requirement,
    TestCase,
    TestCaseType,
)
from changeguard.domain.protocol import WorkerRequest, WorkerRole
from changeguard.domain.serialization import (
    case_to_dict,
    manifest_from_dict,
    manifest_to_dict,
    report_from_dict,
    requirement_to_dict,
)
from changeguard.workers import dispatch
from changeguard.workers.dispatch import UNKNOWN_REQUEST_ID, handle_request, run_worker
from changeguard.workers.tester import Tester


def _developer_request(workspace: Path, requirement: Requirement) -> WorkerRequest:
    return WorkerRequest(
        role=WorkerRole.DEVELOPER,
        request_id="req-1",
        attempt=2,
        settings=WorkerSettings(workspace=str(workspace)).to_dict(),
        payload={
            "requirements": [requirement_to_dict(requirement)],
            "context": {},
            "modelTier": "elevated",
            "model": "opus",
        },
    )


def _run(text: str) -> tuple[int, dict]:
    stdout = io.StringIO()
    code = run_worker(io.StringIO(text), stdout)
    output = stdout.getvalue()
    assert output.endswith("\n")
    assert output.count("\n") == 1
    return code, json.loads(output)


class TestHandleRequest:
    """Tests for handle_request()."""

    def test_developer_request_returns_manifest(
        self, tmp_path: Path, ui_requirement: Requirement
    ) -> None:
        """The manifest echoes request id, attempt, tier and model."""
        response = handle_request(_developer_request(tmp_path, ui_requirement))

        assert response.success
        manifest = manifest_from_dict(response.payload["changeManifest"])
        assert manifest.request_id == "req-1"
        assert manifest.attempt == 2
        assert manifest.model_tier == ModelTier.ELEVATED
        assert manifest.model == "opus"
        # The empty workspace has no contractors page to edit
        assert manifest.changes == ()
        assert len(manifest.notes) == 1

    def test_tester_request_uses_injected_factory(
        self, sample_manifest: ChangeManifest, ui_requirement: Requirement
    ) -> None:
        """The tester factory receives the settings from the envelope."""
        received: list[WorkerSettings] = []

        def tester_factory(settings: WorkerSettings) -> Tester:
            received.append(settings)
            return Tester({TestCaseType.GENERIC: GenericChecker()})

        case = TestCase("T1", "Generic Test for R1", TestCaseType.GENERIC, "R1", "done")
        request = WorkerRequest(
            role=WorkerRole.TESTER,
            request_id="req-001",
            attempt=1,
            settings={"layoutTolerance": 2.5},
            payload={
                "testPlan": [case_to_dict(case)],
                "changeManifest": manifest_to_dict(sample_manifest),
                "requirements": [requirement_to_dict(ui_requirement)],
            },
        )

        response = handle_request(request, tester_factory=tester_factory)

        report = report_from_dict(response.payload["testReport"])
        assert report.all_passed
        assert report.results[0].verified is False
        assert received[0].layout_tolerance == 2.5

    def test_incomplete_payload_raises(self) -> None:
        """A payload missing its requirements is a KeyError."""
        request = WorkerRequest(WorkerRole.DEVELOPER, "req-1", 1, {}, {})

        with pytest.raises(KeyError):
            handle_request(request)


class TestRunWorker:
    """Tests for run_worker()."""

    def test_success_writes_one_envelope(
        self, tmp_path: Path, ui_requirement: Requirement
    ) -> None:
        """A valid request produces exactly one success line and exit 0."""
        request = _developer_request(tmp_path, ui_requirement)

        code, envelope = _run(json.dumps(request.to_dict()))

        assert code == 0
        assert envelope["success"] is True
        assert envelope["requestId"] == "req-1"
        assert "changeManifest" in envelope["payload"]

    def test_invalid_json_reports_unknown_request(self) -> None:
        """Unparseable input gets a failure envelope with an unknown id."""
        code, envelope = _run("{not json")

        assert code == 1
        assert envelope == {
            "success": False,
            "requestId": UNKNOWN_REQUEST_ID,
            "error": envelope["error"],
        }
        assert "not valid JSON" in envelope["error"]

    def test_schema_violation_keeps_request_id(self) -> None:
        """A readable request id is echoed even when validation fails."""
        code, envelope = _run(json.dumps({"role": "reviewer", "requestId": "req-9"}))

        assert code == 1
        assert envelope["requestId"] == "req-9"
        assert "violates schema" in envelope["error"]

    def test_handler_error_becomes_failure_envelope(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, ui_requirement: Requirement
    ) -> None:
        """Exceptions inside the role are reported, not raised."""

        def explode(request: WorkerRequest) -> None:
            raise ValueError("workspace is read-only")

        monkeypatch.setattr(dispatch, "handle_request", explode)
        request = _developer_request(tmp_path, ui_requirement)

        code, envelope = _run(json.dumps(request.to_dict()))

        assert code == 1
        assert envelope["error"] == "ValueError: workspace is read-only"
        assert envelope["requestId"] == "req-1"
