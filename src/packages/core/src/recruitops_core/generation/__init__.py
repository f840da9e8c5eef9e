"""Generative text service client."""
from recruitops_core.generation.client import (
    PROVIDERS,
    GenerationClient,
    GenerationError,
    GenerationResult,
)

__all__ = ["GenerationClient", "GenerationError", "GenerationResult", "PROVIDERS"]
