"""Executors that update candidate records directly."""
import asyncio
from typing import Any

from recruitops_core.candidates import CandidateRepository
from recruitops_core.jobs.models import ExecutorResult, ItemContext

DEFAULT_TAG = "bulk_contacted"
DEFAULT_STAGE = "contacted"


class TagExecutor:
    """Adds a tag; tagging a candidate that already has it is a no-op."""

    def __init__(self, candidates: CandidateRepository):
        self.candidates = candidates

    async def execute(self, item: ItemContext, parameters: dict[str, Any]) -> ExecutorResult:
        tag = str(parameters.get("tag") or DEFAULT_TAG).strip()
        if not tag:
            return ExecutorResult.fail("Tag must not be empty")
        if not item.candidate_found:
            return ExecutorResult.fail(f"Candidate not found: {item.candidate_id}")
        added = await asyncio.to_thread(self.candidates.add_tag, item.candidate_id, tag)
        return ExecutorResult.ok(tag=tag, added=added)


class PipelineMoveExecutor:
    """Overwrites the candidate's pipeline stage."""

    def __init__(self, candidates: CandidateRepository):
        self.candidates = candidates

    async def execute(self, item: ItemContext, parameters: dict[str, Any]) -> ExecutorResult:
        stage = str(parameters.get("stage") or DEFAULT_STAGE).strip()
        if not stage:
            return ExecutorResult.fail("Stage must not be empty")
        if not item.candidate_found:
            return ExecutorResult.fail(f"Candidate not found: {item.candidate_id}")
        moved = await asyncio.to_thread(self.candidates.set_stage, item.candidate_id, stage)
        if not moved:
            return ExecutorResult.fail(f"Candidate not found: {item.candidate_id}")
        return ExecutorResult.ok(stage=stage)
