"""
Tester worker: runs a test plan against the workspace and reports verdicts.

Every test case gets exactly one result. A checker that raises produces a
failing result for its own case and the plan carries on.
"""

import logging
import time
from collections.abc import Mapping
from datetime import datetime, timezone

from changeguard.domain.interfaces import CheckerInterface
from changeguard.domain.models import (
    ChangeManifest,
    CheckOutcome,
    Requirement,
    TestCase,
    TestCaseType,
    TestDetails,
    TestReport,
    TestResult,
    TestStatus,
    TestSummary,
)

logger = logging.getLogger("changeguard.tester")


class Tester:
    """Dispatches test cases to one checker per test case type."""

    __test__ = False  # Not a pytest test class

    def __init__(self, checkers: Mapping[TestCaseType, CheckerInterface]):
        self._checkers = dict(checkers)

    def run(
        self,
        request_id: str,
        attempt: int,
        test_plan: list[TestCase],
        manifest: ChangeManifest,
        requirements: list[Requirement],
    ) -> TestReport:
        """
        Run every test case in plan order.

        Args:
            request_id: Change request id, echoed in the report
            attempt: Attempt number being tested
            test_plan: Test cases to run
            manifest: The Developer's manifest for this attempt
            requirements: Requirements the plan was built from

        Returns:
            TestReport with one result per test case
        """
        by_id = {r.id: r for r in requirements}
        logger.info(
            "Running %d tests against %d modified files",
            len(test_plan),
            len(manifest.files_modified),
        )
        results = tuple(
            self._run_case(case, manifest, by_id.get(case.requirement_id))
            for case in test_plan
        )
        summary = TestSummary.from_results(results)
        logger.info(
            "%d/%d passed (%d unverified)", summary.passed, summary.total, summary.unverified
        )
        return TestReport(
            request_id=request_id,
            attempt=attempt,
            results=results,
            summary=summary,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def _run_case(
        self,
        case: TestCase,
        manifest: ChangeManifest,
        requirement: Requirement | None,
    ) -> TestResult:
        start = time.monotonic()
        outcome = self._check(case, manifest, requirement)
        duration_ms = int((time.monotonic() - start) * 1000)

        status = TestStatus.PASS if outcome.passed else TestStatus.FAIL
        if outcome.passed:
            logger.info("%s %s: pass", case.id, case.name)
        else:
            logger.warning("%s %s: fail (%s)", case.id, case.name, outcome.details.reason)
        return TestResult(
            id=case.id,
            name=case.name,
            requirement_id=case.requirement_id,
            status=status,
            duration_ms=duration_ms,
            details=outcome.details,
            verified=outcome.verified,
        )

    def _check(
        self,
        case: TestCase,
        manifest: ChangeManifest,
        requirement: Requirement | None,
    ) -> CheckOutcome:
        checker = self._checkers.get(case.type)
        if checker is None:
            return CheckOutcome(
                passed=False,
                details=TestDetails(
                    reason=f"no checker for {case.type.value}",
                    expected=case.expected_result,
                ),
            )
        try:
            return checker.check(case, manifest, requirement)
        except Exception as e:  # Any checker error fails only its own case
            logger.debug("Checker for %s raised", case.id, exc_info=True)
            return CheckOutcome(
                passed=False,
                details=TestDetails(
                    reason=str(e) or type(e).__name__,
                    expected=case.expected_result,
                    actual=f"{type(e).__name__} raised",
                ),
            )
