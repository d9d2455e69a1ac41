"""
Requirement and test-plan generation.

Turns free text into an Analysis, the Analysis into Requirements, and the
Requirements into a TestCase plan. Everything here is deterministic: ids
come from position, never from randomness, so the same text always yields
the same ids and fields.
"""

import logging

from changeguard.domain.keywords import (
    AMBIGUITY_RULES,
    AREA_KEYWORDS,
    ENVIRONMENT_KEYWORDS,
    MODERATE_WORD_LIMIT,
    REQUIREMENT_AREAS,
    SIMPLE_WORD_LIMIT,
    has_any,
    tokenize,
)
from changeguard.domain.models import (
    Analysis,
    Complexity,
    Priority,
    Requirement,
    RequirementType,
    TargetEnvironment,
    TestCase,
    TestCaseType,
)

logger = logging.getLogger("changeguard.analysis")

# Requirement type -> description prefix
_DESCRIPTIONS: dict[RequirementType, str] = {
    RequirementType.UI: "UI changes as specified",
    RequirementType.DATABASE: "Database modifications as specified",
    RequirementType.API: "API updates as specified",
    RequirementType.GENERIC: "Change as specified",
}

# Requirement type -> (test case type, name prefix, expected result)
_TEST_TEMPLATES: dict[RequirementType, tuple[TestCaseType, str, str]] = {
    RequirementType.UI: (
        TestCaseType.LAYOUT,
        "UI Layout Test",
        "Visual elements properly aligned",
    ),
    RequirementType.DATABASE: (
        TestCaseType.DATABASE,
        "Database Test",
        "Schema changes applied and data integrity maintained",
    ),
    RequirementType.API: (
        TestCaseType.API,
        "API Test",
        "API responds correctly with expected data",
    ),
    RequirementType.GENERIC: (
        TestCaseType.GENERIC,
        "Generic Check",
        "Change applied (not independently verifiable)",
    ),
}


def analyze(text: str) -> Analysis:
    """
    Classify a free-text change request.

    Ambiguities are surfaced as clarifying questions but never block:
    they are logged and the pipeline continues with a best-guess reading.

    Args:
        text: The verbatim change request

    Returns:
        Analysis with affected areas in table order
    """
    tokens = set(tokenize(text))

    affected_areas = tuple(
        area for area, keywords in AREA_KEYWORDS.items() if has_any(tokens, keywords)
    )

    target_environment = TargetEnvironment.ALL
    for environment, keywords in ENVIRONMENT_KEYWORDS:
        if has_any(tokens, keywords):
            target_environment = TargetEnvironment(environment)
            break

    ambiguities = tuple(
        question
        for trigger, qualifiers, question in AMBIGUITY_RULES
        if has_any(tokens, (trigger,)) and not has_any(tokens, qualifiers)
    )
    if ambiguities:
        for question in ambiguities:
            logger.warning("Clarification needed: %s", question)
        logger.warning("Continuing with best guess")

    analysis = Analysis(
        affected_areas=affected_areas,
        target_environment=target_environment,
        complexity=_assess_complexity(text, affected_areas),
        ambiguities=ambiguities,
    )
    logger.info(
        "Analysis: areas=%s environment=%s complexity=%s",
        ",".join(affected_areas) or "-",
        analysis.target_environment.value,
        analysis.complexity.value,
    )
    return analysis


def _assess_complexity(text: str, affected_areas: tuple[str, ...]) -> Complexity:
    words = len(text.split())
    areas = max(len(affected_areas), 1)  # No recognized area counts as one
    if words < SIMPLE_WORD_LIMIT and areas == 1:
        return Complexity.SIMPLE
    if words < MODERATE_WORD_LIMIT and areas <= 2:
        return Complexity.MODERATE
    return Complexity.COMPLEX


def generate_requirements(text: str, analysis: Analysis) -> list[Requirement]:
    """
    Emit one requirement per requirement-bearing area, in table order.

    Domain tags (e.g. contractor) produce no requirement of their own. When no
    requirement-bearing area is present, a single generic requirement is
    emitted so the plan is never empty.

    Args:
        text: The verbatim change request, embedded in each description
        analysis: Result of analyze(text)

    Returns:
        Requirements numbered R1, R2, ... by position
    """
    types = [
        RequirementType(area)
        for area in REQUIREMENT_AREAS
        if area in analysis.affected_areas
    ]
    if not types:
        types = [RequirementType.GENERIC]

    requirements = [
        Requirement(
            id=f"R{position}",
            type=requirement_type,
            description=f"{_DESCRIPTIONS[requirement_type]}: {text}",
            priority=(
                Priority.NORMAL
                if requirement_type == RequirementType.GENERIC
                else Priority.HIGH
            ),
        )
        for position, requirement_type in enumerate(types, start=1)
    ]
    logger.info("Generated %d requirements", len(requirements))
    return requirements


def generate_test_plan(requirements: list[Requirement]) -> list[TestCase]:
    """
    Emit exactly one test case per testable requirement, mirroring its type.

    Fix requirements are never testable on their own: they are verified by
    the test cases of the requirement they originate from.

    Args:
        requirements: Requirements in generation order

    Returns:
        Test cases numbered T1, T2, ... by position
    """
    test_plan: list[TestCase] = []
    for requirement in requirements:
        if not requirement.testable or requirement.type not in _TEST_TEMPLATES:
            continue
        case_type, name, expected = _TEST_TEMPLATES[requirement.type]
        test_plan.append(
            TestCase(
                id=f"T{len(test_plan) + 1}",
                name=f"{name} for {requirement.id}",
                type=case_type,
                requirement_id=requirement.id,
                expected_result=expected,
            )
        )
    logger.info("Created test plan with %d tests", len(test_plan))
    return test_plan
