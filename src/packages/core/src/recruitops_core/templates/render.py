"""Deterministic template substitution."""
import re

from recruitops_core.jobs.models import ItemContext

DEFAULT_EMAIL_TEMPLATE = (
    "Hi {{firstName}}, I noticed your experience at {{company}}. "
    "Would you be interested in discussing new opportunities with our team?"
)

PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def template_variables(item: ItemContext) -> dict[str, str]:
    """Substitution values for one candidate, with neutral defaults."""
    return {
        "firstName": item.first_name or "there",
        "fullName": item.full_name or "there",
        "company": item.company or "your company",
        "title": item.title or "your current role",
        "primarySkill": "your skills",
    }


def render_template(template: str, variables: dict[str, str]) -> str:
    """Replace every known {{name}} placeholder; unknown ones are left as-is."""
    return PLACEHOLDER.sub(lambda m: variables.get(m.group(1), m.group(0)), template)
