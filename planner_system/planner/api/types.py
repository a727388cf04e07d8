"""
API request and response schemas.
What it defines:
- Tool listing / invocation payloads
- Attention memory payloads

And, the main purpose:
Ensure structured communication between client and server.
"""


from typing import Optional

from pydantic import BaseModel, Field

class ToolInfo(BaseModel):
    name: str
    description: str
    input_schema: dict

class ToolOutput(BaseModel):
    tool: str
    output: str = Field(..., description="Tool result text (JSON for create_plan)")

class AttentionItems(BaseModel):
    type: str
    items: list[str]

class ResetAttentionRequest(BaseModel):
    type: Optional[str] = Field(None, description="Type key to clear; omit to clear everything")
