"""
Failure analysis: turns a failed TestReport into new work.

After a failed validation the failing results are grouped per requirement,
and each group becomes one critical FIX requirement for the next attempt.
Prior requirements are never touched.
"""

from changeguard.domain.models import (
    FailureContext,
    Priority,
    Requirement,
    RequirementType,
    TestReport,
)


def analyze_failures(report: TestReport) -> tuple[FailureContext, ...]:
    """Group failing results by requirement, in plan order.

    Args:
        report: The report of the attempt that just failed validation

    Returns:
        One FailureContext per requirement with at least one failing result
    """
    grouped: dict[str, list[tuple[str, str]]] = {}
    for result in report.failures:
        grouped.setdefault(result.requirement_id, []).append(
            (result.id, result.details.reason or result.details.message)
        )
    return tuple(
        FailureContext(
            requirement_id=requirement_id,
            attempt=report.attempt,
            test_ids=tuple(test_id for test_id, _ in failures),
            reasons=tuple(reason for _, reason in failures),
        )
        for requirement_id, failures in grouped.items()
    )


def synthesize_fix_requirements(
    requirements: list[Requirement],
    analysis: tuple[FailureContext, ...],
) -> list[Requirement]:
    """Create one FIX requirement per failing requirement.

    Ids continue the existing R-sequence. The caller appends the result;
    nothing in `requirements` is modified.

    Args:
        requirements: Every requirement accumulated so far
        analysis: Output of analyze_failures

    Returns:
        The new FIX requirements only
    """
    next_id = len(requirements) + 1
    fixes: list[Requirement] = []
    for context in analysis:
        fixes.append(
            Requirement(
                id=f"R{next_id + len(fixes)}",
                type=RequirementType.FIX,
                description=(
                    f"Fix failures for {context.requirement_id}: "
                    f"{', '.join(context.reasons)}"
                ),
                priority=Priority.CRITICAL,
                testable=False,  # Verified by the origin requirement's tests
                failure_context=context,
                origin_requirement_id=context.requirement_id,
            )
        )
    return fixes


def summarize_failures(analysis: tuple[FailureContext, ...]) -> str:
    """One line per failing requirement, for logs and terminal output."""
    return "\n".join(
        f"{context.requirement_id}: {'; '.join(context.reasons)}"
        for context in analysis
    )
