# subagent/tools/builtins.py
"""
Standard tools every hosted agent exposes: `process` and `health`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from subagent.registry import ToolContext, ToolDefinition
from subagent.schemas.descriptor import obj
from subagent.schemas.process import PROCESS_REQUEST_SCHEMA
from subagent.schemas.tool_result import ToolResult

if TYPE_CHECKING:
    from subagent.agents.base import BaseSubAgent

PROCESS_TOOL_NAME = "process"
HEALTH_TOOL_NAME = "health"


def process_tool(agent: "BaseSubAgent") -> ToolDefinition:
    """Expose `agent.process` as a tool taking `{type, content, options?}`."""

    async def _process(input: Dict[str, Any], context: ToolContext) -> ToolResult:
        response = await agent.process(input, request_id=context.request_id)
        if response.success:
            return ToolResult.ok(response.results, metadata=dict(response.metadata))
        return ToolResult.fail(response.error or "Request failed", metadata=dict(response.metadata))

    return ToolDefinition(
        name=PROCESS_TOOL_NAME,
        description=f"Process a request with the {agent.get_metadata().name} sub-agent",
        input_schema=PROCESS_REQUEST_SCHEMA,
        handler=_process,
    )


def health_tool(agent: "BaseSubAgent") -> ToolDefinition:
    """Expose `agent.check_health` as a tool with empty input."""

    async def _health(input: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        status = await agent.check_health()
        return status.model_dump(exclude_none=True)

    return ToolDefinition(
        name=HEALTH_TOOL_NAME,
        description="Check the health status of this sub-agent",
        input_schema=obj(),
        handler=_health,
    )
