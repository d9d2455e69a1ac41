"""
Layout alignment checker.

Measures two rendered elements of a UI surface and passes iff their left
and right edges line up within a pixel tolerance.
"""

from changeguard.domain.interfaces import CheckerInterface, LayoutInspectorInterface
from changeguard.domain.models import (
    ChangeManifest,
    CheckOutcome,
    Requirement,
    TestCase,
    TestDetails,
)

DEFAULT_TOLERANCE_PX = 5.0


class LayoutChecker(CheckerInterface):
    """
    Checks that a subject element is aligned with a reference element.

    Aligned means both |left delta| and |right delta| are strictly below the
    tolerance. A delta equal to the tolerance fails.
    """

    def __init__(
        self,
        inspector: LayoutInspectorInterface,
        surface: str,
        subject: str,
        reference: str,
        tolerance: float = DEFAULT_TOLERANCE_PX,
    ):
        """
        Args:
            inspector: Renders the surface and measures elements
            surface: Page path to render
            subject: Selector of the element under test
            reference: Selector of the element it must align with
            tolerance: Maximum allowed edge delta in pixels (exclusive)
        """
        self._inspector = inspector
        self._surface = surface
        self._subject = subject
        self._reference = reference
        self._tolerance = tolerance

    def check(
        self,
        test_case: TestCase,
        manifest: ChangeManifest,
        requirement: Requirement | None,
    ) -> CheckOutcome:
        """
        Raises:
            CheckerException: If the inspector cannot render or measure
        """
        measured = self._inspector.measure(self._surface, self._subject, self._reference)
        subject, reference = measured.subject, measured.reference
        left_delta = abs(subject.left - reference.left)
        right_delta = abs(subject.right - reference.right)

        measurements = (
            ("subjectLeft", subject.left),
            ("subjectRight", subject.right),
            ("referenceLeft", reference.left),
            ("referenceRight", reference.right),
            ("leftDelta", left_delta),
            ("rightDelta", right_delta),
        )
        expected = f"left and right edges within {self._tolerance:g}px"
        actual = (
            f"left {subject.left:g}px vs {reference.left:g}px, "
            f"right {subject.right:g}px vs {reference.right:g}px"
        )

        if left_delta < self._tolerance and right_delta < self._tolerance:
            return CheckOutcome(
                passed=True,
                details=TestDetails(
                    message=f"Aligned ({actual})",
                    expected=expected,
                    actual=actual,
                    measurements=measurements,
                ),
            )
        return CheckOutcome(
            passed=False,
            details=TestDetails(
                reason=f"misaligned by {max(left_delta, right_delta):g}px",
                expected=expected,
                actual=actual,
                measurements=measurements,
            ),
        )
