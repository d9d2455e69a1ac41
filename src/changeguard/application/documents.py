"""
Markdown rendering of requirement and test-plan documents.

Templates live in changeguard/templates and are rendered with jinja2.
"""

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from changeguard.domain.models import Analysis, Requirement, TestCase

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=False,  # Markdown output
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def render_requirements_document(
    request_id: str,
    original_request: str,
    analysis: Analysis,
    requirements: list[Requirement],
    generated_at: str | None = None,
) -> str:
    template = _env.get_template("requirements.md.j2")
    return template.render(
        request_id=request_id,
        original_request=original_request,
        analysis=analysis,
        requirements=requirements,
        generated_at=generated_at or _now(),
    )


def render_test_plan_document(
    request_id: str,
    test_plan: list[TestCase],
    generated_at: str | None = None,
) -> str:
    template = _env.get_template("test-plan.md.j2")
    return template.render(
        request_id=request_id,
        test_plan=test_plan,
        generated_at=generated_at or _now(),
    )
