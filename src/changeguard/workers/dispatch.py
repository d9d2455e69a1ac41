"""
Worker process dispatch: one request envelope in, one response envelope out.

The settings carried in the request decide which workspace and which
probe endpoints the worker uses. Everything that goes wrong inside the
worker is reported as a failure envelope, never as extra stdout output.
"""

import json
import logging
from collections.abc import Callable
from typing import TextIO

from changeguard.checkers import ApiChecker, DatabaseChecker, GenericChecker, LayoutChecker
from changeguard.config import WorkerSettings
from changeguard.domain.exceptions import ProtocolError
from changeguard.domain.models import ModelTier, TestCaseType
from changeguard.domain.protocol import WorkerRequest, WorkerResponse, WorkerRole
from changeguard.domain.serialization import (
    analysis_from_dict,
    case_from_dict,
    manifest_from_dict,
    manifest_to_dict,
    report_to_dict,
    requirement_from_dict,
)
from changeguard.infrastructure.collaborators import (
    HttpEndpointProber,
    HttpLayoutInspector,
    PrismaSchemaLinter,
    PrismaSchemaSync,
)
from changeguard.schemas import decode_request, encode_response
from changeguard.workers.developer import Developer
from changeguard.workers.tester import Tester

logger = logging.getLogger("changeguard.worker")

UNKNOWN_REQUEST_ID = "unknown"


def build_developer(settings: WorkerSettings) -> Developer:
    return Developer(
        settings.workspace,
        PrismaSchemaSync(
            settings.workspace, settings.schema_sync_command, settings.command_timeout
        ),
    )


def build_tester(settings: WorkerSettings) -> Tester:
    return Tester(
        {
            TestCaseType.LAYOUT: LayoutChecker(
                HttpLayoutInspector(settings.inspector_url, settings.probe_timeout),
                surface=settings.layout_surface,
                subject=settings.layout_subject,
                reference=settings.layout_reference,
                tolerance=settings.layout_tolerance,
            ),
            TestCaseType.DATABASE: DatabaseChecker(
                PrismaSchemaLinter(
                    settings.workspace,
                    settings.schema_lint_command,
                    settings.command_timeout,
                )
            ),
            TestCaseType.API: ApiChecker(
                HttpEndpointProber(settings.app_base_url, settings.probe_timeout),
                settings.api_endpoint,
            ),
            TestCaseType.GENERIC: GenericChecker(),
        }
    )


def handle_request(
    request: WorkerRequest,
    developer_factory: Callable[[WorkerSettings], Developer] = build_developer,
    tester_factory: Callable[[WorkerSettings], Tester] = build_tester,
) -> WorkerResponse:
    """
    Run the role named in the request and wrap its output.

    Raises:
        KeyError, ValueError, TypeError: If the payload is incomplete
    """
    settings = WorkerSettings.from_dict(request.settings)
    payload = request.payload
    requirements = [requirement_from_dict(r) for r in payload["requirements"]]

    if request.role == WorkerRole.DEVELOPER:
        context = payload.get("context")
        manifest = developer_factory(settings).develop(
            request_id=request.request_id,
            attempt=request.attempt,
            requirements=requirements,
            model_tier=ModelTier(payload["modelTier"]),
            model=payload["model"],
            context=analysis_from_dict(context) if context else None,
        )
        return WorkerResponse.ok(
            request.request_id, {"changeManifest": manifest_to_dict(manifest)}
        )

    report = tester_factory(settings).run(
        request_id=request.request_id,
        attempt=request.attempt,
        test_plan=[case_from_dict(t) for t in payload["testPlan"]],
        manifest=manifest_from_dict(payload["changeManifest"]),
        requirements=requirements,
    )
    return WorkerResponse.ok(request.request_id, {"testReport": report_to_dict(report)})


def _request_id_of(text: str) -> str:
    """Best-effort request id from an envelope that failed validation."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return UNKNOWN_REQUEST_ID
    request_id = data.get("requestId") if isinstance(data, dict) else None
    return request_id if isinstance(request_id, str) else UNKNOWN_REQUEST_ID


def run_worker(stdin: TextIO, stdout: TextIO) -> int:
    """
    Read one request from stdin and write exactly one response to stdout.

    Returns:
        Process exit code: 0 on success, 1 on a failure envelope
    """
    text = stdin.read()
    try:
        request = decode_request(text)
    except ProtocolError as e:
        logger.error("Rejected request: %s", e)
        response = WorkerResponse.failed(_request_id_of(text), str(e))
    else:
        logger.info(
            "%s worker: request %s, attempt %d",
            request.role.value,
            request.request_id,
            request.attempt,
        )
        try:
            response = handle_request(request)
        except Exception as e:  # Reported through the envelope, not the exit status alone
            logger.exception("%s worker failed", request.role.value)
            response = WorkerResponse.failed(request.request_id, f"{type(e).__name__}: {e}")

    stdout.write(encode_response(response))
    stdout.write("\n")
    stdout.flush()
    return 0 if response.success else 1
