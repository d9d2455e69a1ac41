"""
Out-of-process worker invocation.

Each call spawns a fresh worker process, writes one request envelope to its
stdin and reads one response envelope from its stdout. Whatever the worker
does wrong (crash, hang, garbage output, reported error) comes back as a
single WorkerFailure.
"""

import logging
import subprocess
import sys
from collections.abc import Sequence

from changeguard.domain.exceptions import FailureKind, ProtocolError, WorkerFailure
from changeguard.domain.interfaces import WorkerRunnerInterface
from changeguard.domain.protocol import WorkerRequest, WorkerResponse
from changeguard.schemas import decode_response, encode_request

logger = logging.getLogger("changeguard.workers.runner")

DEFAULT_WORKER_COMMAND = (sys.executable, "-m", "changeguard.workers")


class SubprocessWorkerRunner(WorkerRunnerInterface):
    """
    Runs each worker call in an isolated child process.

    The child's stderr is captured for diagnostics only; the response is
    read from stdout, which must hold exactly one JSON document.
    """

    def __init__(
        self,
        timeout: float = 300.0,
        command: Sequence[str] = DEFAULT_WORKER_COMMAND,
        cwd: str | None = None,
    ):
        """
        Args:
            timeout: Wall-clock seconds before a call counts as hung
            command: Worker entry point (defaults to `python -m changeguard.workers`)
            cwd: Working directory for the child process
        """
        self.timeout = timeout
        self._command = list(command)
        self._cwd = cwd

    def invoke(self, request: WorkerRequest) -> WorkerResponse:
        role = request.role.value
        logger.debug("Invoking %s worker for attempt %d", role, request.attempt)
        try:
            result = subprocess.run(
                self._command,
                input=encode_request(request),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self._cwd,
            )
        except subprocess.TimeoutExpired as e:
            raise WorkerFailure(
                role, FailureKind.TIMEOUT, f"no response within {self.timeout:g}s"
            ) from e
        except OSError as e:
            raise WorkerFailure(role, FailureKind.CRASH, f"could not start: {e}") from e

        if result.stderr:
            for line in result.stderr.rstrip().splitlines():
                logger.debug("[%s] %s", role, line)

        stdout = result.stdout.strip()
        if not stdout:
            raise WorkerFailure(
                role,
                FailureKind.CRASH,
                f"exited with {result.returncode} without a response"
                f"{self._stderr_tail(result.stderr)}",
            )

        try:
            response = decode_response(stdout)
        except ProtocolError as e:
            raise WorkerFailure(role, FailureKind.MALFORMED, str(e)) from e

        if response.request_id != request.request_id:
            raise WorkerFailure(
                role,
                FailureKind.MALFORMED,
                f"response for request {response.request_id!r}, "
                f"expected {request.request_id!r}",
            )
        if not response.success:
            raise WorkerFailure(role, FailureKind.REPORTED, response.error or "unknown error")
        if result.returncode != 0:
            raise WorkerFailure(
                role,
                FailureKind.MALFORMED,
                f"success envelope with exit code {result.returncode}",
            )
        return response

    @staticmethod
    def _stderr_tail(stderr: str | None) -> str:
        if not stderr or not stderr.strip():
            return ""
        return f": {stderr.strip()[-500:]}"
