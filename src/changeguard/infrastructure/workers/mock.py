"""
Mock worker runner for testing without spawning processes.

Replays scripted outcomes per role, in sequence.
"""

from collections.abc import Callable, Sequence

from changeguard.domain.exceptions import FailureKind, WorkerFailure
from changeguard.domain.interfaces import WorkerRunnerInterface
from changeguard.domain.protocol import WorkerRequest, WorkerResponse, WorkerRole

# A scripted outcome: a fixed response, a failure to raise, or a function
# that builds the response from the request
ScriptedOutcome = (
    WorkerResponse | WorkerFailure | Callable[[WorkerRequest], WorkerResponse]
)


class MockWorkerRunner(WorkerRunnerInterface):
    """Returns predefined outcomes for testing."""

    def __init__(
        self,
        developer: Sequence[ScriptedOutcome] = (),
        tester: Sequence[ScriptedOutcome] = (),
    ):
        """
        Args:
            developer: Outcomes for successive developer calls
            tester: Outcomes for successive tester calls
        """
        self._scripts: dict[WorkerRole, list[ScriptedOutcome]] = {
            WorkerRole.DEVELOPER: list(developer),
            WorkerRole.TESTER: list(tester),
        }
        self._positions: dict[WorkerRole, int] = {role: 0 for role in WorkerRole}
        self.requests: list[WorkerRequest] = []

    def invoke(self, request: WorkerRequest) -> WorkerResponse:
        """Return (or raise) the next scripted outcome for the request's role."""
        self.requests.append(request)
        script = self._scripts[request.role]
        position = self._positions[request.role]
        if position >= len(script):
            raise RuntimeError(f"MockWorkerRunner exhausted {request.role.value} outcomes")
        self._positions[request.role] = position + 1

        outcome = script[position]
        if isinstance(outcome, WorkerFailure):
            raise outcome
        response = outcome if isinstance(outcome, WorkerResponse) else outcome(request)
        if not response.success:
            raise WorkerFailure(
                request.role.value, FailureKind.REPORTED, response.error or "unknown error"
            )
        return response

    def calls(self, role: WorkerRole) -> list[WorkerRequest]:
        """Requests received for one role, in order."""
        return [r for r in self.requests if r.role == role]
