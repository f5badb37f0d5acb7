# subagent/tests/agents/test_lifecycle.py
"""
Tests for the BaseSubAgent request lifecycle.

Covers:
- Construction-time validation of metadata and configuration.
- process(): success/failure exclusivity, hook rejection, error codes,
  request id propagation and timing.
- execute_tool() and check_health().
"""
import asyncio
import logging

import pytest

from subagent.agents.base import BaseSubAgent, SubAgent
from subagent.exceptions import ConfigurationError, ErrorCode, SubAgentError, validation_error
from subagent.schemas.agent import AgentConfig
from subagent.schemas.descriptor import obj, string
from subagent.schemas.process import ProcessRequest
from subagent.tools.base import create_tool

METADATA = {"name": "lifecycle", "version": "2.1.0", "capabilities": ["analyze"]}


class SummaryAgent(BaseSubAgent):
    """Returns the request length; rejects requests of type 'forbidden'."""

    def __init__(self, config=None, failure=None, unhealthy=False):
        super().__init__(METADATA, config)
        self.failure = failure
        self.unhealthy = unhealthy
        self.seen_ids = []
        self.register_tool(
            create_tool(
                "upper",
                "Upper-case text",
                obj(text=string()),
                lambda input, context: input["text"].upper(),
            )
        )

    async def validate_request(self, request: ProcessRequest) -> None:
        if request.type == "forbidden":
            raise validation_error("Request type 'forbidden' is not accepted")

    async def handle_request(self, request: ProcessRequest, request_id: str):
        self.seen_ids.append(request_id)
        if self.failure is not None:
            raise self.failure
        return {"length": len(request.content), "options": request.options}

    async def run_health_checks(self) -> None:
        if self.unhealthy:
            raise ConnectionError("database unreachable")


def test_base_class_is_abstract():
    """Verify that handle_request must be implemented."""
    with pytest.raises(TypeError):
        BaseSubAgent(METADATA)


def test_agent_satisfies_protocol():
    """Verify that a concrete agent satisfies the SubAgent protocol."""
    assert isinstance(SummaryAgent(), SubAgent)


def test_invalid_config_fails_construction():
    """Verify that a bad configuration aborts construction with a typed error."""
    with pytest.raises(ConfigurationError) as exc_info:
        SummaryAgent(config={"timeoutMs": 0})
    assert exc_info.value.code is ErrorCode.INVALID_CONFIG


def test_invalid_metadata_fails_construction():
    """Verify that metadata is validated at construction."""

    class Nameless(SummaryAgent):
        def __init__(self):
            BaseSubAgent.__init__(self, {"name": "", "version": "1"})

    with pytest.raises(ConfigurationError, match="Invalid agent metadata"):
        Nameless()


def test_accessors():
    """Verify metadata, config, uptime and tool accessors."""
    agent = SummaryAgent(config={"logLevel": "warn", "max_concurrent": 2})
    assert agent.get_metadata().name == "lifecycle"
    assert agent.get_config() == AgentConfig(log_level="warn", max_concurrent=2)
    assert agent.get_uptime() >= 0
    assert list(agent.get_tools()) == ["upper"]


def test_each_agent_owns_its_tools():
    """Verify that tools registered on one agent are invisible to another."""
    first, second = SummaryAgent(), SummaryAgent()
    first.register_tool(create_tool("only_first", "", obj(), lambda i, c: None))
    assert "only_first" in first.get_tools()
    assert "only_first" not in second.get_tools()


@pytest.mark.asyncio
async def test_process_success():
    """Verify a successful response carries results, timing and the request id."""
    agent = SummaryAgent()
    response = await agent.process(
        {"type": "summarize", "content": "hello", "options": {"depth": 1}},
        request_id="req-42",
    )
    assert response.success
    assert response.error is None
    assert response.results == {"length": 5, "options": {"depth": 1}}
    assert response.metadata["requestId"] == "req-42"
    assert response.processing_time_ms >= 0
    assert agent.seen_ids == ["req-42"]


@pytest.mark.asyncio
async def test_processing_time_covers_handler_delay():
    """Verify that processingTimeMs includes time spent awaiting in handle_request."""

    class SlowAgent(SummaryAgent):
        async def handle_request(self, request, request_id):
            await asyncio.sleep(0.05)
            return "slow"

    response = await SlowAgent().process({"type": "t", "content": "c"})
    assert response.success
    assert response.processing_time_ms >= 50


@pytest.mark.asyncio
async def test_process_generates_request_id():
    """Verify that a request id is generated when none is supplied."""
    agent = SummaryAgent()
    response = await agent.process(ProcessRequest(type="t", content="c"))
    assert response.metadata["requestId"] == agent.seen_ids[0]
    assert len(response.metadata["requestId"]) == 36


@pytest.mark.asyncio
async def test_validate_hook_rejection_skips_handler():
    """Verify that a rejecting validate_request hook prevents handle_request."""
    agent = SummaryAgent()
    response = await agent.process({"type": "forbidden", "content": "x"})
    assert not response.success
    assert response.results is None
    assert response.error == "Request type 'forbidden' is not accepted"
    assert response.metadata["code"] == ErrorCode.INVALID_INPUT.value
    assert agent.seen_ids == []


@pytest.mark.asyncio
async def test_malformed_request_is_rejected():
    """Verify that structurally invalid requests fail validation."""
    agent = SummaryAgent()
    response = await agent.process({"type": "t"})
    assert not response.success
    assert response.error == "Invalid input: content: Required"
    assert response.metadata["code"] == "INVALID_INPUT"

    response = await agent.process("not a request")
    assert not response.success
    assert response.error == "Request must be an object, received str"


@pytest.mark.asyncio
async def test_handler_typed_error_keeps_code():
    """Verify that a SubAgentError raised by handle_request keeps its code."""
    agent = SummaryAgent(failure=SubAgentError("Model busy", ErrorCode.RATE_LIMITED))
    response = await agent.process({"type": "t", "content": "c"})
    assert not response.success
    assert response.results is None
    assert response.error == "Model busy"
    assert response.metadata["code"] == "RATE_LIMITED"
    assert "processingTimeMs" in response.metadata


@pytest.mark.asyncio
async def test_handler_untyped_error_is_unknown(caplog):
    """Verify that any other exception is reported as UNKNOWN and logged."""
    agent = SummaryAgent(failure=ZeroDivisionError("division by zero"))
    with caplog.at_level(logging.ERROR, logger="subagent"):
        response = await agent.process({"type": "t", "content": "c"}, request_id="r-9")
    assert response.error == "division by zero"
    assert response.metadata["code"] == "UNKNOWN"
    failures = [r for r in caplog.records if r.getMessage() == "Request failed"]
    assert failures and failures[0].request_id == "r-9"
    assert failures[0].failed_during == "executing"


@pytest.mark.asyncio
async def test_execute_tool_success_and_failure():
    """Verify that execute_tool maps tool results onto ProcessResponse."""
    agent = SummaryAgent()
    ok = await agent.execute_tool("upper", {"text": "abc"})
    assert ok.success
    assert ok.results == "ABC"
    assert "processingTimeMs" in ok.metadata

    missing = await agent.execute_tool("nope", {})
    assert not missing.success
    assert missing.results is None
    assert missing.metadata["code"] == "NOT_FOUND"
    assert "nope" in missing.error


@pytest.mark.asyncio
async def test_health_reports_no_errors_when_healthy():
    """Verify a healthy report has no errors field."""
    status = await SummaryAgent().check_health()
    assert status.healthy
    assert status.errors is None
    assert status.version == "2.1.0"
    assert status.capabilities == ["analyze"]
    assert status.uptime >= 0


@pytest.mark.asyncio
async def test_health_reports_failing_checks():
    """Verify that a failing health check marks the agent unhealthy without raising."""
    status = await SummaryAgent(unhealthy=True).check_health()
    assert not status.healthy
    assert status.errors == ["database unreachable"]


@pytest.mark.asyncio
async def test_initialize_and_shutdown_hooks(caplog):
    """Verify the default lifecycle hooks run without error."""
    agent = SummaryAgent()
    await agent.initialize()
    with caplog.at_level(logging.INFO, logger="subagent"):
        await agent.shutdown()
    assert any(r.getMessage() == "Sub-agent shutting down" for r in caplog.records)
