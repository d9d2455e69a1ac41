"""Persistence-schema consistency checker."""

from changeguard.domain.interfaces import CheckerInterface, SchemaLinterInterface
from changeguard.domain.models import (
    ChangeManifest,
    CheckOutcome,
    Requirement,
    TestCase,
    TestDetails,
)


class DatabaseChecker(CheckerInterface):
    """Passes iff the schema linter reports no validation errors."""

    def __init__(self, linter: SchemaLinterInterface):
        self._linter = linter

    def check(
        self,
        test_case: TestCase,
        manifest: ChangeManifest,
        requirement: Requirement | None,
    ) -> CheckOutcome:
        errors = self._linter.lint()
        if not errors:
            return CheckOutcome(
                passed=True,
                details=TestDetails(message="Schema is valid"),
            )
        return CheckOutcome(
            passed=False,
            details=TestDetails(
                reason=f"schema validation failed: {errors[0]}",
                expected="no schema validation errors",
                actual="\n".join(errors),
            ),
        )
