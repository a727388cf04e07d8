from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from planner.agent.memory import MemoryService
from planner.api.deps import get_memory, get_services
from planner.api.types import AttentionItems, ResetAttentionRequest, ToolInfo, ToolOutput
from planner.core.logging import get_logger
from planner.core.services import ServiceRegistry
from planner.tools.registry import ToolError, get_tool, invoke_tool, list_tools


"""
FastAPI routes for the planner.
What it provides:
- Tool listing (name, description, input schema)
- Tool invocation with argument validation
- Attention memory inspection / reset

And, the main purpose:
Expose the planner tool over HTTP.
"""

log = get_logger("api.routes")

router = APIRouter()

@router.get("/tools", response_model=list[ToolInfo])
async def api_list_tools():
    return list_tools()

@router.post("/tools/{name}", response_model=ToolOutput)
async def api_invoke_tool(
    name: str,
    body: dict[str, Any] = Body(...),
    services: ServiceRegistry = Depends(get_services),
):
    try:
        get_tool(name)
    except KeyError:
        raise HTTPException(404, f"unknown tool: {name}")

    try:
        output = await invoke_tool(name, body, services)
    except ValidationError as e:
        raise HTTPException(422, e.errors(include_url=False))
    except ToolError as e:
        log.warning(f"tool {name} failed: {e}")
        raise HTTPException(502, str(e))
    return ToolOutput(tool=name, output=output)

@router.get("/memory/attention", response_model=list[AttentionItems])
async def api_attention(type: Optional[str] = None, memory: MemoryService = Depends(get_memory)):
    if type is not None:
        return [AttentionItems(type=type, items=await memory.get_attention_items(type))]
    snap = await memory.attention_snapshot()
    return [AttentionItems(type=k, items=v) for k, v in snap.items()]

@router.post("/memory/attention/reset")
async def api_attention_reset(req: ResetAttentionRequest, memory: MemoryService = Depends(get_memory)):
    await memory.clear_attention_items(req.type)
    return {"ok": True}
