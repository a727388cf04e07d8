"""
Planner tool.

What it does:
- Asks a chat + reasoning model to break a task into atomic subtasks
- Stores the subtasks as attention items under "Current Task Plan for <task>"
- Keeps at most `maxSubtasks` of them
- Returns the model's plan as pretty JSON text ("null" when nothing came back)

Main purpose:
Give the agent a short, ordered working plan for the current task.
"""


import json
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field

from planner.agent.memory import MemoryService
from planner.core.config import settings
from planner.core.logging import get_logger
from planner.core.services import ServiceRegistry
from planner.llm.models import ModelRegistry
from planner.llm.prompts import PLANNER_SYSTEM, planner_user
from planner.llm.schemas import ValidatedPlan, classify_plan, task_plan_schema
from planner.tools.registry import ToolError, register

log = get_logger("tools.create_plan")

TOOL_NAME = "create_plan"
DESCRIPTION = "Breaks a user-provided task into a numbered list of atomic subtasks."
PLANNER_TAGS = ("chat", "reasoning")


class CreatePlanArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    task: str = Field(..., min_length=1, description="The high-level task or project to break down.")
    max_subtasks: int = Field(
        10, ge=1, le=20, alias="maxSubtasks", description="Maximum number of subtasks to generate"
    )


def plan_type_key(task: str) -> str:
    return f"Current Task Plan for {task}"


async def create_plan(args: CreatePlanArgs, *, memory: MemoryService, models: ModelRegistry) -> str:
    client = models.get_first_online_client(tags=PLANNER_TAGS, where=settings.PLANNER_MODEL_FILTER or None)

    messages = [
        {"role": "system", "content": PLANNER_SYSTEM},
        {"role": "user", "content": planner_user(args.task)},
    ]
    result = await client.generate_object(messages, task_plan_schema(args.max_subtasks))
    raw = result[0]

    plan = classify_plan(raw)
    if isinstance(plan, ValidatedPlan):
        key = plan_type_key(args.task)
        # a new plan for the same task replaces the previous one
        await memory.replace_attention_items(key, plan.subtasks, args.max_subtasks)
        log.info(f"Stored {min(len(plan.subtasks), args.max_subtasks)} subtask(s) for {args.task!r}")
    else:
        log.warning(f"Model returned no usable plan for {args.task!r}; nothing stored")

    return json.dumps(raw, indent=2, ensure_ascii=False)


@register(TOOL_NAME, description=DESCRIPTION, parameters=CreatePlanArgs)
async def execute(args: Union[CreatePlanArgs, Mapping[str, Any]], registry: ServiceRegistry) -> str:
    if not isinstance(args, CreatePlanArgs):
        args = CreatePlanArgs.model_validate(dict(args))

    try:
        memory = registry.require_first_service_by_type(MemoryService)
        models = registry.require_first_service_by_type(ModelRegistry)
        return await create_plan(args, memory=memory, models=models)
    except Exception as e:
        log.error(f"{TOOL_NAME} failed: {e}")
        raise ToolError(f"[{TOOL_NAME}] {e}") from e


name = TOOL_NAME
description = DESCRIPTION
parameters = CreatePlanArgs
