from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = Field(description="Health status")
    name: str
    version: str


class ToolDefinitionResponse(BaseModel):
    name: str
    description: str
    inputSchema: dict[str, Any]


class ToolListResponse(BaseModel):
    tools: list[ToolDefinitionResponse]


class ToolCallResponse(BaseModel):
    tool: str
    text: str = Field(description="Formatted health check report")
