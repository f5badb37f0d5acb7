# subagent/tools/base.py
"""
Class-based tools.

Subclass `BaseTool` and implement `run()`; register the instance with an
agent (`agent.register_tool(MyTool())`) or call `execute()` directly, which
validates input and wraps the outcome the same way the registry does.
"""

from abc import ABC, abstractmethod
import inspect
from typing import Any, Callable, Dict, Generic, TypeVar, Union

from subagent.exceptions import ErrorCode, format_error
from subagent.registry import ToolContext, ToolDefinition
from subagent.schemas.descriptor import SchemaDescriptor
from subagent.schemas.json_schema import to_json_schema
from subagent.schemas.tool_result import ToolResult
from subagent.utils.validation import validate

TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


class BaseTool(ABC, Generic[TInput, TOutput]):
    """
    Abstract base class for tools.

    :param name: Unique tool identifier within a registry.
    :param description: Human-readable description published to hosts.
    :param input_schema: Descriptor the input must satisfy.
    """

    def __init__(self, name: str, description: str, input_schema: SchemaDescriptor):
        self.name = name
        self.description = description
        self.input_schema = input_schema

    @abstractmethod
    async def run(self, input: TInput, context: ToolContext) -> TOutput:
        """Tool logic; `input` has already been validated."""

    async def execute(self, input: Any, context: ToolContext) -> ToolResult:
        """Validate `input`, run the tool, and wrap the outcome.

        Never raises; failures come back as `ToolResult(success=False)`.
        """
        logger = context.logger
        logger.debug("Executing tool", extra={"tool": self.name})

        outcome = validate(self.input_schema, input)
        if not outcome.ok:
            return ToolResult.fail(
                f"Validation failed: {', '.join(outcome.messages())}",
                metadata={"code": ErrorCode.INVALID_INPUT.value},
            )

        try:
            output = await self.run(outcome.value, context)
        except Exception as e:
            formatted = format_error(e)
            logger.error(
                "Tool failed", extra={"tool": self.name, "error": formatted.to_dict()}
            )
            return ToolResult.fail(formatted.message, metadata={"code": formatted.code.value})

        logger.debug("Tool completed successfully", extra={"tool": self.name})
        return ToolResult.ok(output)

    def json_schema(self) -> Dict[str, Any]:
        return to_json_schema(self.input_schema)

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
            handler=self.run,
        )


class FunctionTool(BaseTool[Any, Any]):
    """Adapter that turns a plain (sync or async) function into a BaseTool."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: SchemaDescriptor,
        func: Callable[[Any, ToolContext], Any],
    ):
        super().__init__(name, description, input_schema)
        self.func = func

    async def run(self, input: Any, context: ToolContext) -> Any:
        result = self.func(input, context)
        if inspect.isawaitable(result):
            result = await result
        return result


def create_tool(
    name: str,
    description: str,
    input_schema: SchemaDescriptor,
    handler: Callable[[Any, ToolContext], Any],
) -> FunctionTool:
    """Build a tool from a function without writing a subclass."""
    return FunctionTool(name, description, input_schema, handler)


def compose_tools(*tools: Union[BaseTool, ToolDefinition]) -> Dict[str, ToolDefinition]:
    """Name -> definition mapping; later tools win on a name clash."""
    composed: Dict[str, ToolDefinition] = {}
    for tool in tools:
        definition = tool if isinstance(tool, ToolDefinition) else tool.to_definition()
        composed[definition.name] = definition
    return composed
