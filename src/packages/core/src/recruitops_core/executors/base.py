"""Executor contract and the action type registry."""
import inspect
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import structlog

from recruitops_core.jobs.models import ExecutorResult, ItemContext
from recruitops_core.util import UnknownActionTypeError

logger = structlog.get_logger()


class ActionType(str, Enum):
    PERSONALIZED_EMAIL = "personalized_email"
    LINKEDIN_CONNECT = "linkedin_connect"
    TAG = "tag"
    PIPELINE_MOVE = "pipeline_move"


@runtime_checkable
class ActionExecutor(Protocol):
    """Handles one item of one action type.

    ``execute`` returns an ExecutorResult for expected outcomes, failures
    included. Only unexpected faults may raise.
    """

    async def execute(self, item: ItemContext, parameters: dict[str, Any]) -> ExecutorResult:
        ...


def _coerce_action_type(action_type: "ActionType | str") -> ActionType:
    if isinstance(action_type, ActionType):
        return action_type
    try:
        return ActionType(action_type)
    except ValueError:
        raise UnknownActionTypeError(str(action_type)) from None


class ExecutorRegistry:
    """Maps action types to executors; checked when executors are registered."""

    def __init__(self):
        self._executors: dict[ActionType, ActionExecutor] = {}

    def register(self, action_type: "ActionType | str", executor: ActionExecutor) -> ActionExecutor:
        key = _coerce_action_type(action_type)
        if key in self._executors:
            raise ValueError(f"Executor already registered for {key.value}")
        execute = getattr(executor, "execute", None)
        if execute is None or not inspect.iscoroutinefunction(execute):
            raise TypeError(f"{type(executor).__name__}.execute must be an async method")
        self._executors[key] = executor
        logger.debug("executor_registered", action_type=key.value, executor=type(executor).__name__)
        return executor

    def get(self, action_type: "ActionType | str") -> ActionExecutor:
        key = _coerce_action_type(action_type)
        executor = self._executors.get(key)
        if executor is None:
            raise UnknownActionTypeError(key.value)
        return executor

    def __contains__(self, action_type: object) -> bool:
        try:
            return _coerce_action_type(action_type) in self._executors  # type: ignore[arg-type]
        except UnknownActionTypeError:
            return False

    @property
    def action_types(self) -> list[str]:
        return sorted(k.value for k in self._executors)
