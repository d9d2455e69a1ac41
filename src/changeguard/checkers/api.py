"""Live endpoint checker."""

from changeguard.domain.interfaces import CheckerInterface, EndpointProberInterface
from changeguard.domain.models import (
    ChangeManifest,
    CheckOutcome,
    Requirement,
    TestCase,
    TestDetails,
)

DEFAULT_ENDPOINT = "/api/contractors"


class ApiChecker(CheckerInterface):
    """Passes iff one live call returns a 2xx status with a parseable body."""

    def __init__(self, prober: EndpointProberInterface, endpoint: str = DEFAULT_ENDPOINT):
        self._prober = prober
        self._endpoint = endpoint

    def check(
        self,
        test_case: TestCase,
        manifest: ChangeManifest,
        requirement: Requirement | None,
    ) -> CheckOutcome:
        response = self._prober.probe(self._endpoint)
        actual = f"status {response.status_code}, {len(response.body)} bytes"
        expected = "2xx status with a JSON body"

        if not 200 <= response.status_code < 300:
            reason = f"endpoint {self._endpoint} returned status {response.status_code}"
        elif not response.parsed:
            reason = f"endpoint {self._endpoint} response is not parseable JSON"
        else:
            return CheckOutcome(
                passed=True,
                details=TestDetails(
                    message=f"{self._endpoint} responded with {actual}",
                    expected=expected,
                    actual=actual,
                ),
            )
        return CheckOutcome(
            passed=False,
            details=TestDetails(reason=reason, expected=expected, actual=actual),
        )
