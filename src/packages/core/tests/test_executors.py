"""Tests for action executors and the registry."""
import pytest

from recruitops_core.executors import (
    ActionType,
    ExecutorRegistry,
    LinkedInConnectExecutor,
    PersonalizedEmailExecutor,
    PipelineMoveExecutor,
    TagExecutor,
    build_default_registry,
)
from recruitops_core.executors.messaging import LINKEDIN_MAX_CHARS
from recruitops_core.jobs import ExecutorResult, ItemContext
from recruitops_core.templates import DEFAULT_EMAIL_TEMPLATE, render_template, template_variables
from recruitops_core.util import UnknownActionTypeError, ValidationError


def _item(candidate_id="c1", found=True, **fields) -> ItemContext:
    return ItemContext(
        item_id="item-1",
        job_id="job-1",
        candidate_id=candidate_id,
        action_type="tag",
        candidate_found=found,
        **fields,
    )


class _Noop:
    async def execute(self, item, parameters):
        return ExecutorResult.ok()


class _SyncExecute:
    def execute(self, item, parameters):
        return ExecutorResult.ok()


def test_registry_rejects_unknown_action_type():
    registry = ExecutorRegistry()
    with pytest.raises(UnknownActionTypeError):
        registry.register("teleport", _Noop())
    with pytest.raises(ValidationError):
        registry.get("teleport")


def test_registry_rejects_duplicates_and_sync_executors():
    registry = ExecutorRegistry()
    registry.register(ActionType.TAG, _Noop())
    with pytest.raises(ValueError):
        registry.register("tag", _Noop())
    with pytest.raises(TypeError):
        registry.register(ActionType.PIPELINE_MOVE, _SyncExecute())


def test_registry_lookup_by_string_or_enum():
    registry = ExecutorRegistry()
    executor = registry.register("tag", _Noop())
    assert registry.get("tag") is executor
    assert registry.get(ActionType.TAG) is executor
    assert "tag" in registry
    assert "pipeline_move" not in registry
    with pytest.raises(UnknownActionTypeError):
        registry.get(ActionType.PIPELINE_MOVE)


def test_default_registry_covers_all_action_types(candidates, templates, working_generation):
    registry = build_default_registry(candidates, templates, working_generation)
    assert registry.action_types == sorted(a.value for a in ActionType)


@pytest.mark.asyncio
async def test_tag_is_idempotent(candidates):
    candidates.create(full_name="Grace Hopper", candidate_id="c1")
    executor = TagExecutor(candidates)

    first = await executor.execute(_item(), {"tag": "vip"})
    second = await executor.execute(_item(), {"tag": "vip"})

    assert first.success and first.details == {"tag": "vip", "added": True}
    assert second.success and second.details == {"tag": "vip", "added": False}
    assert candidates.list_tags("c1") == ["vip"]


@pytest.mark.asyncio
async def test_tag_defaults_and_missing_candidate(candidates):
    candidates.create(full_name="Grace Hopper", candidate_id="c1")
    executor = TagExecutor(candidates)

    result = await executor.execute(_item(), {})
    assert result.success
    assert candidates.list_tags("c1") == ["bulk_contacted"]

    missing = await executor.execute(_item("nobody", found=False), {"tag": "vip"})
    assert missing.success is False
    assert "nobody" in missing.error


@pytest.mark.asyncio
async def test_pipeline_move_overwrites_stage(candidates):
    candidates.create(full_name="Alan Turing", stage="sourced", candidate_id="c1")
    executor = PipelineMoveExecutor(candidates)

    result = await executor.execute(_item(), {"stage": "interview"})
    assert result.success and result.details == {"stage": "interview"}
    assert candidates.get("c1").stage == "interview"

    await executor.execute(_item(), {})
    assert candidates.get("c1").stage == "contacted"


@pytest.mark.asyncio
async def test_pipeline_move_missing_candidate(candidates):
    result = await PipelineMoveExecutor(candidates).execute(_item("ghost", found=False), {"stage": "x"})
    assert result.success is False


@pytest.mark.asyncio
async def test_email_uses_generated_text(templates, working_generation):
    executor = PersonalizedEmailExecutor(working_generation, templates)
    result = await executor.execute(_item(full_name="Ada Lovelace", company="Engines"), {})
    assert result.success
    assert result.content == "Generated message"
    assert result.details["fallback"] is False


@pytest.mark.asyncio
async def test_email_falls_back_to_template(templates, broken_generation):
    template = templates.create("intro", "email", "Hello {{firstName}} from {{ company }}! {{unknown}}")
    executor = PersonalizedEmailExecutor(broken_generation, templates)

    result = await executor.execute(
        _item(full_name="Ada Lovelace", company="Engines"), {"template_id": template.id}
    )

    assert result.success is True
    assert result.content == "Hello Ada from Engines! {{unknown}}"
    assert result.details["fallback"] is True
    assert result.details["template_used"] == "intro"
    assert "500" in result.details["generation_error"]
    assert templates.get(template.id).usage_count == 1


@pytest.mark.asyncio
async def test_email_fallback_with_unknown_template_uses_default(templates, broken_generation):
    executor = PersonalizedEmailExecutor(broken_generation, templates)
    result = await executor.execute(_item(found=False), {"templateId": "missing"})
    assert result.success is True
    assert result.content == render_template(DEFAULT_EMAIL_TEMPLATE, template_variables(_item(found=False)))
    assert "Hi there" in result.content
    assert "your company" in result.content


@pytest.mark.asyncio
async def test_linkedin_fallback_and_length_cap(broken_generation):
    result = await LinkedInConnectExecutor(broken_generation).execute(
        _item(full_name="Linus Torvalds", company="Kernel"), {}
    )
    assert result.success
    assert result.content.startswith("Hi Linus, impressed by your work at Kernel.")
    assert result.details["fallback"] is True


@pytest.mark.asyncio
async def test_linkedin_generated_text_is_capped():
    import httpx

    from recruitops_core.generation import GenerationClient

    long_text = "x" * 1000
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"choices": [{"message": {"content": long_text}}]})
    )
    client = GenerationClient(provider="openai", api_key="k", transport=transport)
    result = await LinkedInConnectExecutor(client).execute(_item(full_name="A B"), {})
    assert len(result.content) == LINKEDIN_MAX_CHARS
    assert result.details["fallback"] is False
