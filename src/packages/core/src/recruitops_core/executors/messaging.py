"""Outreach message executors: generated text with a template fallback."""
import asyncio
from typing import Any

import structlog

from recruitops_core.generation import GenerationClient
from recruitops_core.jobs.models import ExecutorResult, ItemContext
from recruitops_core.templates import (
    DEFAULT_EMAIL_TEMPLATE,
    TemplateRepository,
    render_template,
    template_variables,
)
from recruitops_core.tiers import TierResult, with_fallback

logger = structlog.get_logger()

LINKEDIN_MAX_CHARS = 300

EMAIL_SYSTEM_PROMPT = "You are a skilled recruiter personalizing outreach emails."
LINKEDIN_SYSTEM_PROMPT = "Write brief, personalized LinkedIn connection requests."
LINKEDIN_FALLBACK = (
    "Hi {{firstName}}, impressed by your work at {{company}}. "
    "Would love to connect and share an opportunity."
)


async def _generated(generation: GenerationClient, system_prompt: str, prompt: str, **kwargs) -> TierResult:
    result = await generation.generate(system_prompt, prompt, **kwargs)
    return TierResult(ok=result.ok, value=result.text, error=result.error)


class PersonalizedEmailExecutor:
    """Writes one outreach email per candidate.

    The template comes from ``parameters["template_id"]`` (``templateId`` is
    also accepted) or the built-in default. When generation fails the
    template is filled in locally, which still counts as success.
    """

    def __init__(self, generation: GenerationClient, templates: TemplateRepository):
        self.generation = generation
        self.templates = templates

    async def _template(self, parameters: dict[str, Any]) -> tuple[str, str | None]:
        template_id = parameters.get("template_id") or parameters.get("templateId")
        if template_id:
            template = await asyncio.to_thread(self.templates.get, str(template_id))
            if template is not None:
                await asyncio.to_thread(self.templates.record_use, template.id)
                return template.base_template, template.name
            logger.warning("template_not_found_using_default", template_id=template_id)
        return DEFAULT_EMAIL_TEMPLATE, None

    async def execute(self, item: ItemContext, parameters: dict[str, Any]) -> ExecutorResult:
        base_template, template_name = await self._template(parameters)
        prompt = (
            "Create a personalized email (<=150 words) for candidate:\n"
            f"Name: {item.full_name}\n"
            f"Role: {item.title}\n"
            f"Company: {item.company}\n"
            f"Base: {base_template}"
        )

        async def substitute(error: str | None) -> TierResult:
            return TierResult(ok=True, value=render_template(base_template, template_variables(item)), error=error)

        outcome = await with_fallback(
            lambda: _generated(self.generation, EMAIL_SYSTEM_PROMPT, prompt, temperature=0.7, max_tokens=300),
            substitute,
            operation="personalized_email",
        )
        details: dict[str, Any] = {"template_used": template_name, "fallback": outcome.degraded}
        if outcome.degraded:
            details["generation_error"] = outcome.error
        return ExecutorResult.ok(outcome.value, **details)


class LinkedInConnectExecutor:
    """Writes a connection request note, capped at LinkedIn's length limit."""

    def __init__(self, generation: GenerationClient):
        self.generation = generation

    async def execute(self, item: ItemContext, parameters: dict[str, Any]) -> ExecutorResult:
        prompt = (
            f"Max {LINKEDIN_MAX_CHARS} chars. Candidate {item.full_name}, "
            f"{item.title} at {item.company}. Mention something specific and why connect."
        )

        async def substitute(error: str | None) -> TierResult:
            return TierResult(ok=True, value=render_template(LINKEDIN_FALLBACK, template_variables(item)), error=error)

        outcome = await with_fallback(
            lambda: _generated(self.generation, LINKEDIN_SYSTEM_PROMPT, prompt, temperature=0.8, max_tokens=120),
            substitute,
            operation="linkedin_connect",
        )
        content = (outcome.value or "")[:LINKEDIN_MAX_CHARS]
        return ExecutorResult.ok(content, type="linkedin_connect", fallback=outcome.degraded)
