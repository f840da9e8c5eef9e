"""Personalization templates consumed by message executors."""
from recruitops_core.templates.render import DEFAULT_EMAIL_TEMPLATE, render_template, template_variables
from recruitops_core.templates.repo import Template, TemplateRepository

__all__ = [
    "Template",
    "TemplateRepository",
    "DEFAULT_EMAIL_TEMPLATE",
    "render_template",
    "template_variables",
]
