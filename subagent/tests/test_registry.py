# subagent/tests/test_registry.py
"""
Tests for the per-agent tool registry and its invocation pipeline.
"""
import asyncio
import logging
import time

import pytest

from subagent.exceptions import ErrorCode, SubAgentError, ToolNotFoundError
from subagent.registry import ToolContext, ToolDefinition, ToolRegistry
from subagent.schemas.agent import AgentMetadata
from subagent.schemas.descriptor import number, obj, optional, string
from subagent.schemas.tool_result import ToolResult
from subagent.utils.logger import create_logger

METADATA = AgentMetadata(name="registry-test", version="0.0.1")


@pytest.fixture
def registry():
    """A fresh registry per test; registries are never shared between agents."""
    return ToolRegistry(create_logger("debug", METADATA.name), METADATA)


def _definition(name="greet", handler=None, schema=None):
    async def _default(input, context):
        return {"hello": input["name"]}

    return ToolDefinition(
        name=name,
        description="Say hello",
        input_schema=schema or obj(name=string(), times=optional(number())),
        handler=handler or _default,
    )


@pytest.mark.asyncio
async def test_invoke_success_wraps_payload(registry):
    """Verify that a plain payload is wrapped with timing metadata."""
    registry.register(_definition())
    result = await registry.invoke("greet", {"name": "Ada"})
    assert result.success
    assert result.data == {"hello": "Ada"}
    assert result.error is None
    assert result.processing_time_ms >= 0


@pytest.mark.asyncio
async def test_unknown_tool_never_raises(registry):
    """Verify that invoking an unknown name yields a NOT_FOUND failure naming it."""
    result = await registry.invoke("missing_tool", {})
    assert not result.success
    assert "missing_tool" in result.error
    assert result.code == ErrorCode.NOT_FOUND.value
    assert "processingTimeMs" in result.metadata


@pytest.mark.asyncio
async def test_invalid_input_is_rejected_before_handler(registry):
    """Verify that the handler never sees input that fails validation."""
    calls = []

    async def handler(input, context):
        calls.append(input)
        return "ran"

    registry.register(_definition(handler=handler))
    result = await registry.invoke("greet", {"name": 5, "times": "x"})
    assert not result.success
    assert result.code == ErrorCode.INVALID_INPUT.value
    assert result.error == (
        "Invalid input: name: Expected string, received number, "
        "times: Expected number, received string"
    )
    assert calls == []


@pytest.mark.asyncio
async def test_absent_input_reports_required(registry):
    """Verify that omitting the input entirely is a validation failure."""
    registry.register(_definition())
    result = await registry.invoke("greet")
    assert result.error == "Invalid input: Required"


@pytest.mark.asyncio
async def test_handler_receives_typed_value_and_context(registry):
    """Verify that unknown keys are stripped and the context is populated."""
    seen = {}

    def handler(input, context: ToolContext):
        seen["input"] = input
        seen["context"] = context
        return None

    registry.register(_definition(handler=handler))
    result = await registry.invoke("greet", {"name": "a", "junk": 1}, request_id="req-7")
    assert result.success
    assert result.data is None
    assert seen["input"] == {"name": "a"}
    assert seen["context"].request_id == "req-7"
    assert seen["context"].metadata is METADATA
    assert seen["context"].logger.fields["tool"] == "greet"


@pytest.mark.asyncio
async def test_generic_exception_classified_unknown(registry):
    """Verify that a plain exception becomes an UNKNOWN failure."""

    async def handler(input, context):
        raise RuntimeError("kaboom")

    registry.register(_definition(handler=handler))
    result = await registry.invoke("greet", {"name": "a"})
    assert not result.success
    assert result.error == "kaboom"
    assert result.code == ErrorCode.UNKNOWN.value
    assert result.metadata["retryable"] is False


@pytest.mark.asyncio
async def test_typed_exception_keeps_code(registry):
    """Verify that a SubAgentError's code and retryable flag survive."""

    async def handler(input, context):
        raise SubAgentError("Upstream slow", ErrorCode.TIMEOUT)

    registry.register(_definition(handler=handler))
    result = await registry.invoke("greet", {"name": "a"})
    assert result.code == "TIMEOUT"
    assert result.metadata["retryable"] is True


@pytest.mark.asyncio
async def test_processing_time_covers_handler_delay(registry):
    """Verify that processingTimeMs is at least the time spent in the handler."""

    def handler(input, context):
        time.sleep(0.02)
        return "done"

    registry.register(_definition(handler=handler))
    result = await registry.invoke("greet", {"name": "a"})
    assert result.processing_time_ms >= 20


@pytest.mark.asyncio
async def test_async_delay_is_awaited(registry):
    """Verify that coroutine handlers are awaited before the result is built."""

    async def handler(input, context):
        await asyncio.sleep(0)
        return "later"

    registry.register(_definition(handler=handler))
    assert (await registry.invoke("greet", {"name": "a"})).data == "later"


@pytest.mark.asyncio
async def test_tool_result_is_passed_through(registry):
    """Verify that a handler-built ToolResult is kept and timing is added."""

    async def handler(input, context):
        return ToolResult.fail("declined", metadata={"code": "ACCESS_DENIED"})

    registry.register(_definition(handler=handler))
    result = await registry.invoke("greet", {"name": "a"})
    assert not result.success
    assert result.error == "declined"
    assert result.code == "ACCESS_DENIED"
    assert "processingTimeMs" in result.metadata


@pytest.mark.asyncio
async def test_overwrite_keeps_single_entry_and_warns(registry, caplog):
    """Verify that re-registering a name replaces the handler and logs a warning."""
    registry.register(_definition(handler=lambda i, c: "first"))
    with caplog.at_level(logging.WARNING, logger="subagent"):
        registry.register(_definition(handler=lambda i, c: "second"))

    assert len(registry) == 1
    assert registry.names() == ["greet"]
    assert (await registry.invoke("greet", {"name": "a"})).data == "second"
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any(r.getMessage() == "Overwriting existing tool" and r.tool == "greet" for r in warnings)


def test_get_unknown_raises_not_found(registry):
    """Verify that direct lookup of an unknown tool raises ToolNotFoundError."""
    with pytest.raises(ToolNotFoundError, match="Tool 'nope' not found"):
        registry.get("nope")


def test_decorator_registration_and_description(registry):
    """Verify that @registry.tool registers and falls back to the docstring."""

    @registry.tool("shout", obj(text=string()))
    async def shout(input, context):
        """Upper-case the text."""
        return input["text"].upper()

    assert "shout" in registry
    assert registry.has("shout")
    assert registry.get("shout").description == "Upper-case the text."


def test_describe_publishes_json_schema(registry):
    """Verify the {name, description, inputSchema} registration records."""
    registry.register(_definition())
    assert registry.describe() == [
        {
            "name": "greet",
            "description": "Say hello",
            "inputSchema": {
                "type": "object",
                "properties": {"name": {"type": "string"}, "times": {"type": "number"}},
                "required": ["name"],
            },
        }
    ]


def test_definitions_snapshot_is_detached(registry):
    """Verify that the definitions mapping is a copy."""
    registry.register(_definition())
    snapshot = registry.definitions()
    snapshot.clear()
    assert len(registry) == 1
    assert [d.name for d in registry] == ["greet"]


def test_registries_are_independent():
    """Verify that two registries never see each other's tools."""
    first = ToolRegistry(create_logger("info", "a"), METADATA)
    second = ToolRegistry(create_logger("info", "b"), METADATA)
    first.register(_definition())
    assert "greet" in first
    assert "greet" not in second


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"name": " "}, ValueError),
        ({"input_schema": {"type": "object"}}, TypeError),
    ],
)
def test_definition_rejects_bad_arguments(kwargs, error):
    """Verify that blank names and non-descriptor schemas are refused."""
    fields = {
        "name": "ok",
        "description": "",
        "input_schema": obj(),
        "handler": lambda i, c: None,
    }
    fields.update(kwargs)
    with pytest.raises(error):
        ToolDefinition(**fields)


@pytest.mark.asyncio
async def test_bad_pattern_cannot_reach_invoke(registry):
    """Verify that an invalid regex is refused when the schema is built, not at call time."""
    with pytest.raises(ValueError, match="Invalid string pattern"):
        registry.register(_definition(schema=obj(s=string(pattern="("))))
    result = await registry.invoke("greet", {"s": "a"})
    assert result.code == ErrorCode.NOT_FOUND.value


@pytest.mark.asyncio
async def test_returned_failure_logs_tool_failed(registry, caplog):
    """Verify that a handler-returned failure is logged at error level."""

    async def handler(input, context):
        return ToolResult.fail("declined", metadata={"code": "ACCESS_DENIED"})

    registry.register(_definition(handler=handler))
    with caplog.at_level(logging.DEBUG, logger="subagent"):
        await registry.invoke("greet", {"name": "a"})

    messages = [(r.levelno, r.getMessage()) for r in caplog.records if getattr(r, "tool", None) == "greet"]
    assert (logging.ERROR, "Tool failed") in messages
    assert (logging.DEBUG, "Tool completed") not in messages


@pytest.mark.asyncio
async def test_every_invocation_logs_invoked_then_outcome(registry, caplog):
    """Verify that unknown tools log the same invoked/failed events as other failures."""
    with caplog.at_level(logging.DEBUG, logger="subagent"):
        await registry.invoke("ghost", {})

    messages = [r.getMessage() for r in caplog.records if getattr(r, "tool", None) == "ghost"]
    assert messages == ["Tool invoked", "Tool failed"]
    failed = next(r for r in caplog.records if r.getMessage() == "Tool failed")
    assert failed.levelno == logging.ERROR
    assert failed.request_id
