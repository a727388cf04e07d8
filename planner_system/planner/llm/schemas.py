import json
from typing import Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

SUBTASK_DESCRIPTION = "A clear, atomic subtask"


class SubtaskItems(BaseModel):
    type: Literal["string"] = "string"
    description: Literal["A clear, atomic subtask"] = SUBTASK_DESCRIPTION


class SubtasksProperty(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["array"] = "array"
    items: SubtaskItems = Field(default_factory=SubtaskItems)
    max_items: int = Field(..., alias="maxItems", ge=1)
    min_items: Literal[1] = Field(1, alias="minItems")


class TaskPlanProperties(BaseModel):
    subtasks: SubtasksProperty


class TaskPlan(BaseModel):
    """Schema the model must follow when it answers a planning request."""

    type: Literal["object"] = "object"
    properties: TaskPlanProperties

    def as_json_schema(self) -> dict:
        return self.model_dump(by_alias=True)


def task_plan_schema(max_subtasks: int) -> TaskPlan:
    return TaskPlan(
        properties=TaskPlanProperties(subtasks=SubtasksProperty(maxItems=max_subtasks))
    )


class ValidatedPlan(BaseModel):
    kind: Literal["validated"] = "validated"
    subtasks: List[str]
    raw: Any = None


class MalformedPlan(BaseModel):
    kind: Literal["malformed"] = "malformed"
    raw: Any = None


GeneratedPlan = Union[ValidatedPlan, MalformedPlan]


def subtask_text(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    return json.dumps(entry, ensure_ascii=False)


def classify_plan(raw: Any) -> GeneratedPlan:
    """
    Only the shape that matters for storage is checked: a mapping whose
    `subtasks` is a list. Entries that are not strings are kept as their JSON text.
    """
    if isinstance(raw, dict) and isinstance(raw.get("subtasks"), list):
        return ValidatedPlan(subtasks=[subtask_text(s) for s in raw["subtasks"]], raw=raw)
    return MalformedPlan(raw=raw)
