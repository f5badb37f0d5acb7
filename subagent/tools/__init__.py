"""
Tool authoring helpers (class-based and function-based) and the built-in
`process` / `health` tools.
"""

from subagent.tools.base import BaseTool, FunctionTool, compose_tools, create_tool
from subagent.tools.builtins import health_tool, process_tool

__all__ = [
    "BaseTool",
    "FunctionTool",
    "compose_tools",
    "create_tool",
    "health_tool",
    "process_tool",
]
