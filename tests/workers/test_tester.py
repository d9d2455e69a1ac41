"""Tests for the Tester worker."""

from changeguard.domain.interfaces import CheckerInterface
from changeguard.domain.models import (
    ChangeManifest,
    CheckOutcome,
    ModelTier,
    Requirement,
    TestCase,
    TestCaseType,
    TestDetails,
    TestStatus,
)
from changeguard.workers.tester import Tester


class PassingChecker(CheckerInterface):
    def __init__(self, verified: bool = True) -> None:
        self.seen: list[str] = []
        self._verified = verified

    def check(self, test_case, manifest, requirement) -> CheckOutcome:  # noqa: ANN001
        self.seen.append(test_case.id)
        return CheckOutcome(
            passed=True, details=TestDetails(message="ok"), verified=self._verified
        )


class ExplodingChecker(CheckerInterface):
    def check(self, test_case, manifest, requirement) -> CheckOutcome:  # noqa: ANN001
        raise RuntimeError("browser crashed")


def _plan(*types: TestCaseType) -> list[TestCase]:
    return [
        TestCase(f"T{i}", f"{t.value} test", t, f"R{i}", "expected outcome")
        for i, t in enumerate(types, start=1)
    ]


def _run(tester: Tester, plan: list[TestCase], sample_manifest: ChangeManifest):  # noqa: ANN202
    return tester.run("req-001", 1, plan, sample_manifest, [])


class TestTester:
    """Tests for Tester.run()."""

    def test_every_case_gets_one_result_in_plan_order(
        self, sample_manifest: ChangeManifest
    ) -> None:
        """Results follow the plan, one per case."""
        checker = PassingChecker()
        tester = Tester({TestCaseType.LAYOUT: checker, TestCaseType.API: checker})
        plan = _plan(TestCaseType.LAYOUT, TestCaseType.API)

        report = _run(tester, plan, sample_manifest)

        assert [r.id for r in report.results] == ["T1", "T2"]
        assert checker.seen == ["T1", "T2"]
        assert report.all_passed
        assert report.summary.pass_rate == 1.0
        assert report.request_id == "req-001"

    def test_raising_checker_fails_only_its_own_case(
        self, sample_manifest: ChangeManifest
    ) -> None:
        """The remaining cases still run after a checker error."""
        passing = PassingChecker()
        tester = Tester(
            {TestCaseType.LAYOUT: ExplodingChecker(), TestCaseType.API: passing}
        )
        plan = _plan(TestCaseType.LAYOUT, TestCaseType.API)

        report = _run(tester, plan, sample_manifest)

        failed, passed = report.results
        assert failed.status == TestStatus.FAIL
        assert failed.details.reason == "browser crashed"
        assert failed.details.actual == "RuntimeError raised"
        assert failed.details.expected == "expected outcome"
        assert passed.status == TestStatus.PASS
        assert report.summary.failed == 1
        assert report.summary.pass_rate == 0.5

    def test_missing_checker_is_a_failure(self, sample_manifest: ChangeManifest) -> None:
        """A case type without a checker fails with a clear reason."""
        tester = Tester({})

        report = _run(tester, _plan(TestCaseType.DATABASE), sample_manifest)

        [result] = report.results
        assert result.status == TestStatus.FAIL
        assert result.details.reason == "no checker for database-validation"

    def test_unverified_passes_are_counted(self, sample_manifest: ChangeManifest) -> None:
        """Passing results flagged unverified are counted separately."""
        tester = Tester({TestCaseType.GENERIC: PassingChecker(verified=False)})

        report = _run(tester, _plan(TestCaseType.GENERIC), sample_manifest)

        assert report.all_passed
        assert report.summary.unverified == 1
        assert report.results[0].verified is False

    def test_empty_plan_passes_vacuously(self) -> None:
        """No cases means nothing failed."""
        manifest = ChangeManifest("req-001", 1, ModelTier.BASELINE, "sonnet", (), ())

        report = Tester({}).run("req-001", 1, [], manifest, [])

        assert report.results == ()
        assert report.all_passed
        assert report.summary.total == 0

    def test_requirement_is_passed_to_checker(
        self, sample_manifest: ChangeManifest, ui_requirement: Requirement
    ) -> None:
        """Checkers receive the requirement the case belongs to."""
        received: list[Requirement | None] = []

        class RecordingChecker(CheckerInterface):
            def check(self, test_case, manifest, requirement) -> CheckOutcome:  # noqa: ANN001
                received.append(requirement)
                return CheckOutcome(passed=True, details=TestDetails())

        tester = Tester({TestCaseType.LAYOUT: RecordingChecker()})
        plan = [TestCase("T1", "UI Test for R1", TestCaseType.LAYOUT, "R1", "aligned")]

        tester.run("req-001", 1, plan, sample_manifest, [ui_requirement])

        assert received == [ui_requirement]
