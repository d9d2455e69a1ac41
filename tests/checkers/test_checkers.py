"""Tests for the Tester's checkers."""

import pytest

from changeguard.checkers import ApiChecker, DatabaseChecker, GenericChecker, LayoutChecker
from changeguard.domain.exceptions import CheckerException
from changeguard.domain.interfaces import (
    EndpointProberInterface,
    LayoutInspectorInterface,
    SchemaLinterInterface,
)
from changeguard.domain.models import (
    BoundingBox,
    ChangeManifest,
    LayoutMeasurement,
    ProbeResponse,
    TestCase,
)


class StaticInspector(LayoutInspectorInterface):
    def __init__(self, subject: BoundingBox, reference: BoundingBox) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self._measurement = LayoutMeasurement(subject=subject, reference=reference)

    def measure(self, surface: str, subject: str, reference: str) -> LayoutMeasurement:
        self.calls.append((surface, subject, reference))
        return self._measurement


class BrokenInspector(LayoutInspectorInterface):
    def measure(self, surface: str, subject: str, reference: str) -> LayoutMeasurement:
        raise CheckerException("renderer unavailable")


class StaticLinter(SchemaLinterInterface):
    def __init__(self, errors: list[str]) -> None:
        self._errors = errors

    def lint(self) -> list[str]:
        return self._errors


class StaticProber(EndpointProberInterface):
    def __init__(self, status_code: int, body: str, parsed: bool) -> None:
        self.endpoints: list[str] = []
        self._response = ProbeResponse(status_code, body, parsed)

    def probe(self, endpoint: str) -> ProbeResponse:
        self.endpoints.append(endpoint)
        return self._response


REFERENCE = BoundingBox(left=100.0, top=10.0, right=400.0, bottom=30.0)


def _layout_checker(subject: BoundingBox, tolerance: float = 5.0) -> LayoutChecker:
    return LayoutChecker(
        StaticInspector(subject, REFERENCE),
        surface="/entities/contractors",
        subject="[data-field='comment']",
        reference="[data-field='accountName']",
        tolerance=tolerance,
    )


def _shifted(left: float = 0.0, right: float = 0.0) -> BoundingBox:
    return BoundingBox(
        left=REFERENCE.left + left,
        top=40.0,
        right=REFERENCE.right + right,
        bottom=80.0,
    )


class TestLayoutChecker:
    """Tests for LayoutChecker."""

    def test_misalignment_is_reported_in_pixels(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """A 12px offset fails with the delta in the reason."""
        outcome = _layout_checker(_shifted(left=12.0, right=12.0)).check(
            layout_case, sample_manifest, None
        )

        assert not outcome.passed
        assert outcome.details.reason == "misaligned by 12px"
        assert dict(outcome.details.measurements)["leftDelta"] == 12.0

    def test_delta_equal_to_tolerance_fails(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """The tolerance is exclusive."""
        outcome = _layout_checker(_shifted(right=-5.0)).check(
            layout_case, sample_manifest, None
        )

        assert not outcome.passed
        assert outcome.details.reason == "misaligned by 5px"

    def test_delta_below_tolerance_passes(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """Deltas strictly below the tolerance pass."""
        outcome = _layout_checker(_shifted(left=4.9, right=-4.9)).check(
            layout_case, sample_manifest, None
        )

        assert outcome.passed
        assert outcome.verified
        assert outcome.details.reason == ""

    def test_configured_selectors_are_measured(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """The inspector is asked for the configured surface and elements."""
        inspector = StaticInspector(_shifted(), REFERENCE)
        checker = LayoutChecker(inspector, "/a", "#comment", "#account")

        checker.check(layout_case, sample_manifest, None)

        assert inspector.calls == [("/a", "#comment", "#account")]

    def test_inspector_errors_propagate(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """Measurement failures are left for the Tester to convert."""
        checker = LayoutChecker(BrokenInspector(), "/a", "#comment", "#account")

        with pytest.raises(CheckerException, match="renderer unavailable"):
            checker.check(layout_case, sample_manifest, None)


class TestDatabaseChecker:
    """Tests for DatabaseChecker."""

    def test_clean_schema_passes(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """No linter errors means pass."""
        outcome = DatabaseChecker(StaticLinter([])).check(layout_case, sample_manifest, None)

        assert outcome.passed
        assert outcome.details.message == "Schema is valid"

    def test_first_error_is_the_reason(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """The reason quotes the first error and actual lists all of them."""
        linter = StaticLinter(["Error: unknown type Strin", "Error: missing @id"])

        outcome = DatabaseChecker(linter).check(layout_case, sample_manifest, None)

        assert not outcome.passed
        assert outcome.details.reason == "schema validation failed: Error: unknown type Strin"
        assert outcome.details.actual.count("Error") == 2


class TestApiChecker:
    """Tests for ApiChecker."""

    def test_2xx_json_passes(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """A 200 with a JSON body passes."""
        prober = StaticProber(200, '{"data": []}', parsed=True)

        outcome = ApiChecker(prober, "/api/contractors").check(
            layout_case, sample_manifest, None
        )

        assert outcome.passed
        assert prober.endpoints == ["/api/contractors"]

    @pytest.mark.parametrize(
        ("status_code", "parsed", "reason"),
        [
            (500, True, "endpoint /api/contractors returned status 500"),
            (404, False, "endpoint /api/contractors returned status 404"),
            (200, False, "endpoint /api/contractors response is not parseable JSON"),
        ],
    )
    def test_failures(
        self,
        layout_case: TestCase,
        sample_manifest: ChangeManifest,
        status_code: int,
        parsed: bool,
        reason: str,
    ) -> None:
        """Bad status is reported before an unparseable body."""
        outcome = ApiChecker(StaticProber(status_code, "<html>", parsed)).check(
            layout_case, sample_manifest, None
        )

        assert not outcome.passed
        assert outcome.details.reason == reason


class TestGenericChecker:
    """Tests for GenericChecker."""

    def test_passes_unverified(
        self, layout_case: TestCase, sample_manifest: ChangeManifest
    ) -> None:
        """Generic checks always pass and are flagged as unverified."""
        outcome = GenericChecker().check(layout_case, sample_manifest, None)

        assert outcome.passed
        assert outcome.verified is False
        assert "1 files modified" in outcome.details.message
