# subagent/registry.py
"""
Tool registry and invocation pipeline.

- One registry per agent; there is no global registry.
- Registering an existing name replaces it and logs a warning.
- `invoke()` never raises: unknown tools, invalid input and handler
  exceptions all come back as a failed `ToolResult` with a classified
  `metadata.code` and `metadata.processingTimeMs`.
"""
from __future__ import annotations

import inspect
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Protocol, Union

from subagent.exceptions import ErrorCode, ToolNotFoundError, format_error
from subagent.schemas.agent import AgentMetadata
from subagent.schemas.descriptor import MISSING, SchemaDescriptor
from subagent.schemas.json_schema import to_json_schema
from subagent.schemas.tool_result import ToolResult
from subagent.utils.logger import StructuredLoggerAdapter
from subagent.utils.timing import elapsed_ms, start_timer
from subagent.utils.validation import validate


def new_request_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ToolContext:
    """Per-invocation context handed to a tool handler; not retained afterwards."""

    request_id: str
    logger: StructuredLoggerAdapter
    metadata: AgentMetadata


ToolHandler = Callable[[Any, ToolContext], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-validated unit of functionality.

    `handler` receives the validated input and a `ToolContext`. It may be a
    plain function or a coroutine function, and may return a `ToolResult`
    (passed through) or any other payload (wrapped as `data`).
    """

    name: str
    description: str
    input_schema: SchemaDescriptor
    handler: ToolHandler

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Tool name must be a non-empty string")
        if not isinstance(self.input_schema, SchemaDescriptor):
            raise TypeError(
                f"Tool '{self.name}' input_schema must be a SchemaDescriptor, "
                f"got {type(self.input_schema).__name__}"
            )

    def json_schema(self) -> Dict[str, Any]:
        return to_json_schema(self.input_schema)

    def to_dict(self) -> Dict[str, Any]:
        """Registration record published to host processes."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.json_schema(),
        }


class Tool(Protocol):
    """Anything with a name, description, input schema and a `run` method."""

    name: str
    description: str
    input_schema: SchemaDescriptor

    def run(self, input: Any, context: ToolContext) -> Any: ...


def as_definition(tool: Union[ToolDefinition, Tool]) -> ToolDefinition:
    if isinstance(tool, ToolDefinition):
        return tool
    to_definition = getattr(tool, "to_definition", None)
    if callable(to_definition):
        return to_definition()
    return ToolDefinition(
        name=tool.name,
        description=tool.description,
        input_schema=tool.input_schema,
        handler=tool.run,
    )


class ToolRegistry:
    """Name -> ToolDefinition table owned by a single agent."""

    def __init__(self, logger: StructuredLoggerAdapter, metadata: AgentMetadata):
        self._tools: Dict[str, ToolDefinition] = {}
        self._logger = logger
        self._metadata = metadata

    # ----- Registration -----

    def register(self, tool: Union[ToolDefinition, Tool]) -> ToolDefinition:
        definition = as_definition(tool)
        if definition.name in self._tools:
            self._logger.warning(
                "Overwriting existing tool", extra={"tool": definition.name}
            )
        self._tools[definition.name] = definition
        self._logger.debug("Tool registered", extra={"tool": definition.name})
        return definition

    def tool(self, name: str, input_schema: SchemaDescriptor, *, description: str = ""):
        """Decorator registering a function as a tool.

        Usage:
            @registry.tool("echo", obj(message=string()), description="Echo input")
            async def echo(input, context): ...
        """

        def _decorator(func: ToolHandler) -> ToolHandler:
            self.register(
                ToolDefinition(
                    name=name,
                    description=description or inspect.getdoc(func) or "",
                    input_schema=input_schema,
                    handler=func,
                )
            )
            return func

        return _decorator

    # ----- Lookup -----

    def get(self, name: str) -> ToolDefinition:
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(f"Tool '{name}' not found", details={"tool": name})

    def has(self, name: str) -> bool:
        return name in self._tools

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._tools.values()))

    def names(self) -> List[str]:
        return list(self._tools)

    def definitions(self) -> Dict[str, ToolDefinition]:
        """Snapshot of the table; mutating it does not affect the registry."""
        return dict(self._tools)

    def describe(self) -> List[Dict[str, Any]]:
        """`{name, description, inputSchema}` for every registered tool."""
        return [definition.to_dict() for definition in self._tools.values()]

    # ----- Invocation -----

    async def invoke(
        self,
        name: str,
        raw_input: Any = MISSING,
        request_id: str | None = None,
    ) -> ToolResult:
        """Validate `raw_input`, run the tool, and return a uniform envelope."""
        started = start_timer()
        request_id = request_id or new_request_id()
        log = self._logger.child(tool=name, request_id=request_id)

        log.debug("Tool invoked")

        definition = self._tools.get(name)
        if definition is None:
            log.error("Tool failed", extra={"code": ErrorCode.NOT_FOUND.value})
            return ToolResult.fail(
                f"Tool '{name}' not found",
                metadata={
                    "code": ErrorCode.NOT_FOUND.value,
                    "processingTimeMs": elapsed_ms(started),
                },
            )

        outcome = validate(definition.input_schema, raw_input)
        if not outcome.ok:
            messages = outcome.messages()
            log.error(
                "Tool failed",
                extra={"code": ErrorCode.INVALID_INPUT.value, "errors": messages},
            )
            return ToolResult.fail(
                f"Invalid input: {', '.join(messages)}",
                metadata={
                    "code": ErrorCode.INVALID_INPUT.value,
                    "processingTimeMs": elapsed_ms(started),
                },
            )

        context = ToolContext(request_id=request_id, logger=log, metadata=self._metadata)
        try:
            returned = definition.handler(outcome.value, context)
            if inspect.isawaitable(returned):
                returned = await returned
        except Exception as e:
            formatted = format_error(e)
            took = elapsed_ms(started)
            log.error(
                "Tool failed",
                extra={"error": formatted.to_dict(), "processing_time_ms": took},
            )
            return ToolResult.fail(
                formatted.message,
                metadata={
                    "code": formatted.code.value,
                    "retryable": formatted.retryable,
                    "processingTimeMs": took,
                },
            )

        took = elapsed_ms(started)
        if isinstance(returned, ToolResult):
            result = returned.with_metadata(processingTimeMs=took)
        else:
            result = ToolResult.ok(returned, metadata={"processingTimeMs": took})
        if result.success:
            log.debug("Tool completed", extra={"processing_time_ms": took})
        else:
            log.error(
                "Tool failed",
                extra={"code": result.code, "error": result.error, "processing_time_ms": took},
            )
        return result
