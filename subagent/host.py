# subagent/host.py
"""
Host-facing adapter for a sub-agent.

A host process (the caller on the other end of stdio, a test, the CLI)
sees two operations:

- `list_tools()`: one `{name, description, inputSchema}` record per tool.
- `call_tool(name, arguments)`: a text content block holding the JSON
  payload (or `{"error": ...}`) plus an `isError` flag.

Moving these records over a transport is the host's job.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from subagent.agents.base import BaseSubAgent
from subagent.exceptions import format_error
from subagent.registry import ToolDefinition, ToolRegistry, new_request_id
from subagent.schemas.tool_result import ToolResult
from subagent.tools.builtins import health_tool, process_tool


def to_json_text(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def render_result(result: ToolResult) -> Dict[str, Any]:
    """Turn a ToolResult into a host call response."""
    if result.success:
        return {"content": [{"type": "text", "text": to_json_text(result.data)}]}
    body: Dict[str, Any] = {"error": result.error}
    if result.code:
        body["code"] = result.code
    return {
        "content": [{"type": "text", "text": to_json_text(body)}],
        "isError": True,
    }


class ToolHost:
    """
    Publishes an agent's tools, plus the built-in `process` and `health`
    tools, to a host process. Agent tools win when a name clashes with a
    built-in.

    The published table follows the agent: tools registered on the agent
    after the host was created are listed and callable on the next request.
    """

    def __init__(self, agent: BaseSubAgent, include_builtins: bool = True):
        self.agent = agent
        self.logger = agent.logger.child(component="host")
        self._builtins = (
            [process_tool(agent), health_tool(agent)] if include_builtins else []
        )
        self._published: Optional[Dict[str, ToolDefinition]] = None
        self._registry = ToolRegistry(self.logger, agent.get_metadata())

    @property
    def registry(self) -> ToolRegistry:
        """Host registry, rebuilt whenever the agent's tool table has changed."""
        agent_tools = self.agent.get_tools()
        if agent_tools != self._published:
            registry = ToolRegistry(self.logger, self.agent.get_metadata())
            for builtin in self._builtins:
                if builtin.name not in agent_tools:
                    registry.register(builtin)
            for definition in agent_tools.values():
                registry.register(definition)
            self._registry = registry
            self._published = agent_tools
        return self._registry

    def list_tools(self) -> List[Dict[str, Any]]:
        return self.registry.describe()

    async def call_tool(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Invoke a tool for the host; never raises."""
        request_id = request_id or new_request_id()
        self.logger.info("Tool invoked", extra={"tool": name, "request_id": request_id})
        try:
            result = await self.registry.invoke(
                name, arguments if arguments is not None else {}, request_id
            )
            return render_result(result)
        except Exception as e:
            formatted = format_error(e)
            self.logger.error(
                "Tool execution failed",
                extra={"tool": name, "request_id": request_id, "error": formatted.to_dict()},
            )
            return render_result(
                ToolResult.fail(formatted.message, metadata={"code": formatted.code.value})
            )
