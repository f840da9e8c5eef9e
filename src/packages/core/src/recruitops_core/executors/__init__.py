"""Action executors and their registry."""
from recruitops_core.candidates import CandidateRepository
from recruitops_core.executors.base import ActionExecutor, ActionType, ExecutorRegistry
from recruitops_core.executors.candidate_ops import PipelineMoveExecutor, TagExecutor
from recruitops_core.executors.messaging import LinkedInConnectExecutor, PersonalizedEmailExecutor
from recruitops_core.generation import GenerationClient
from recruitops_core.jobs.models import ExecutorResult
from recruitops_core.templates import TemplateRepository


def build_default_registry(
    candidates: CandidateRepository,
    templates: TemplateRepository,
    generation: GenerationClient,
) -> ExecutorRegistry:
    """Registry with every built-in action type."""
    registry = ExecutorRegistry()
    registry.register(ActionType.PERSONALIZED_EMAIL, PersonalizedEmailExecutor(generation, templates))
    registry.register(ActionType.LINKEDIN_CONNECT, LinkedInConnectExecutor(generation))
    registry.register(ActionType.TAG, TagExecutor(candidates))
    registry.register(ActionType.PIPELINE_MOVE, PipelineMoveExecutor(candidates))
    return registry


__all__ = [
    "ActionExecutor",
    "ActionType",
    "ExecutorRegistry",
    "ExecutorResult",
    "PersonalizedEmailExecutor",
    "LinkedInConnectExecutor",
    "TagExecutor",
    "PipelineMoveExecutor",
    "build_default_registry",
]
