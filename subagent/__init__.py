"""
subagent: schema-validated tools and a request lifecycle for sub-agents
hosted by another process.
"""

from subagent.agents.base import BaseSubAgent, RequestPhase, SubAgent
from subagent.exceptions import (
    ConfigurationError,
    ErrorCode,
    SubAgentError,
    ToolNotFoundError,
    ToolValidationError,
    format_error,
)
from subagent.host import ToolHost
from subagent.registry import ToolContext, ToolDefinition, ToolRegistry
from subagent.schemas.agent import AgentConfig, AgentMetadata, HealthStatus
from subagent.schemas.json_schema import to_json_schema
from subagent.schemas.process import ProcessRequest, ProcessResponse
from subagent.schemas.tool_result import ToolResult
from subagent.tools.base import BaseTool, create_tool
from subagent.utils.logger import create_logger
from subagent.utils.validation import ValidationOutcome, ensure_valid, validate

__all__ = [
    "AgentConfig",
    "AgentMetadata",
    "BaseSubAgent",
    "BaseTool",
    "ConfigurationError",
    "ErrorCode",
    "HealthStatus",
    "ProcessRequest",
    "ProcessResponse",
    "RequestPhase",
    "SubAgent",
    "SubAgentError",
    "ToolContext",
    "ToolDefinition",
    "ToolHost",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolResult",
    "ToolValidationError",
    "ValidationOutcome",
    "create_logger",
    "create_tool",
    "ensure_valid",
    "format_error",
    "to_json_schema",
    "validate",
]
