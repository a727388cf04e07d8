from typing import Any, Awaitable, Callable

from pydantic import BaseModel

Execute = Callable[[Any, Any], Awaitable[str]]


class ToolError(RuntimeError):
    """Raised by a tool's execute; the message starts with "[<tool name>]"."""


class Tool:
    def __init__(self, name: str, description: str, parameters: type[BaseModel], execute: Execute):
        self.name = name
        self.description = description
        self.parameters = parameters
        self.execute = execute

    def metadata(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters.model_json_schema(by_alias=True),
        }


TOOLS: dict[str, Tool] = {}

def register(name: str, *, description: str, parameters: type[BaseModel]):
    def deco(fn: Execute):
        TOOLS[name] = Tool(name, description, parameters, fn)
        return fn
    return deco

def get_tool(name: str) -> Tool:
    if name not in TOOLS:
        raise KeyError(f"Unknown tool: {name}. Known: {list(TOOLS.keys())}")
    return TOOLS[name]

def list_tools() -> list[dict]:
    return [t.metadata() for t in TOOLS.values()]

async def invoke_tool(name: str, raw_args: dict, registry: Any) -> str:
    """Validate `raw_args` against the tool's parameters, then run it. Bad args raise pydantic.ValidationError."""
    tool = get_tool(name)
    args = tool.parameters.model_validate(raw_args)
    return await tool.execute(args, registry)
