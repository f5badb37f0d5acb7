# subagent/agents/base.py
"""
The sub-agent request lifecycle.

A concrete agent subclasses `BaseSubAgent`, registers its tools in
`__init__`, and implements `handle_request`. Every request then moves through

    RECEIVED -> VALIDATING -> EXECUTING -> COMPLETED | FAILED

and comes back as a `ProcessResponse` stamped with `processingTimeMs` and
`requestId`. No exception escapes `process`, `execute_tool` or
`check_health`.
"""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

from pydantic import ValidationError

from subagent.exceptions import ConfigurationError, format_error, validation_error
from subagent.registry import Tool, ToolDefinition, ToolRegistry, new_request_id
from subagent.schemas.agent import AgentConfig, AgentMetadata, HealthStatus
from subagent.schemas.process import PROCESS_REQUEST_SCHEMA, ProcessRequest, ProcessResponse
from subagent.utils.config import build_agent_config, describe_validation_error
from subagent.utils.logger import StructuredLoggerAdapter, create_logger
from subagent.utils.timing import elapsed_ms, start_timer
from subagent.utils.validation import ensure_valid


class RequestPhase(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@runtime_checkable
class SubAgent(Protocol):
    """What a host needs from an agent."""

    def get_metadata(self) -> AgentMetadata: ...

    def get_tools(self) -> Dict[str, ToolDefinition]: ...

    async def handle_request(self, request: ProcessRequest, request_id: str) -> Any: ...


class BaseSubAgent(ABC):
    """
    Shared lifecycle state (configuration, logger, tool registry, start time)
    plus the request pipeline around the agent-specific `handle_request`.

    :param metadata: Agent identity (model or mapping).
    :param config: AgentConfig, a mapping of overrides, or None for defaults.
    :raises ConfigurationError: If metadata or config fail validation.
    """

    def __init__(
        self,
        metadata: Union[AgentMetadata, Mapping[str, Any]],
        config: Union[AgentConfig, Mapping[str, Any], None] = None,
    ):
        self.metadata = self._build_metadata(metadata)
        self.config = build_agent_config(config)
        self.logger: StructuredLoggerAdapter = create_logger(
            self.config.log_level, self.metadata.name
        )
        self.tools = ToolRegistry(self.logger, self.metadata)
        self._started_at = time.monotonic()

        self.logger.info(
            "Sub-agent initialized",
            extra={
                "version": self.metadata.version,
                "capabilities": list(self.metadata.capabilities),
            },
        )

    @staticmethod
    def _build_metadata(metadata: Union[AgentMetadata, Mapping[str, Any]]) -> AgentMetadata:
        if isinstance(metadata, AgentMetadata):
            return metadata
        try:
            return AgentMetadata.model_validate(dict(metadata))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid agent metadata: {describe_validation_error(e)}"
            ) from e

    # ----- Accessors -----

    def get_metadata(self) -> AgentMetadata:
        return self.metadata

    def get_config(self) -> AgentConfig:
        return self.config

    def get_uptime(self) -> int:
        """Milliseconds since construction."""
        return int((time.monotonic() - self._started_at) * 1000)

    def get_tools(self) -> Dict[str, ToolDefinition]:
        return self.tools.definitions()

    def register_tool(self, tool: Union[ToolDefinition, Tool]) -> ToolDefinition:
        return self.tools.register(tool)

    # ----- Health -----

    async def check_health(self) -> HealthStatus:
        errors = []
        try:
            await self.run_health_checks()
        except Exception as e:
            formatted = format_error(e)
            self.logger.warning("Health check failed", extra={"error": formatted.to_dict()})
            errors.append(formatted.message)

        return HealthStatus(
            healthy=not errors,
            version=self.metadata.version,
            uptime=self.get_uptime(),
            capabilities=list(self.metadata.capabilities),
            errors=errors or None,
        )

    # ----- Request lifecycle -----

    def _coerce_request(self, request: Union[ProcessRequest, Mapping[str, Any]]) -> ProcessRequest:
        if isinstance(request, ProcessRequest):
            return request
        if not isinstance(request, Mapping):
            raise validation_error(
                f"Request must be an object, received {type(request).__name__}"
            )
        return ProcessRequest(**ensure_valid(PROCESS_REQUEST_SCHEMA, request))

    async def process(
        self,
        request: Union[ProcessRequest, Mapping[str, Any]],
        request_id: Optional[str] = None,
    ) -> ProcessResponse:
        """Run one request through validation and `handle_request`.

        :param request: A ProcessRequest or a raw `{type, content, context?, options?}`.
        :param request_id: Caller-supplied identifier; generated when omitted.
        """
        started = start_timer()
        request_id = request_id or new_request_id()
        log = self.logger.child(request_id=request_id)
        phase = RequestPhase.RECEIVED
        if isinstance(request, ProcessRequest):
            request_type = request.type
        elif isinstance(request, Mapping):
            request_type = request.get("type")
        else:
            request_type = None
        log.info("Processing request", extra={"phase": phase.value, "type": request_type})

        try:
            phase = RequestPhase.VALIDATING
            log.debug("Request phase", extra={"phase": phase.value})
            parsed = self._coerce_request(request)
            await self.validate_request(parsed)

            phase = RequestPhase.EXECUTING
            log.debug("Request phase", extra={"phase": phase.value})
            results = await self.handle_request(parsed, request_id)
        except Exception as e:
            formatted = format_error(e)
            took = elapsed_ms(started)
            log.error(
                "Request failed",
                extra={
                    "phase": RequestPhase.FAILED.value,
                    "failed_during": phase.value,
                    "error": formatted.to_dict(),
                    "processing_time_ms": took,
                },
            )
            return ProcessResponse(
                success=False,
                results=None,
                metadata={
                    "processingTimeMs": took,
                    "requestId": request_id,
                    "code": formatted.code.value,
                },
                error=formatted.message,
            )

        took = elapsed_ms(started)
        log.info(
            "Request completed successfully",
            extra={"phase": RequestPhase.COMPLETED.value, "processing_time_ms": took},
        )
        return ProcessResponse(
            success=True,
            results=results,
            metadata={"processingTimeMs": took, "requestId": request_id},
        )

    async def execute_tool(
        self,
        tool_name: str,
        input: Any,
        request_id: Optional[str] = None,
    ) -> ProcessResponse:
        """Invoke a registered tool and present the outcome as a ProcessResponse."""
        result = await self.tools.invoke(tool_name, input, request_id)
        metadata = dict(result.metadata or {})
        metadata.setdefault("processingTimeMs", 0.0)
        return ProcessResponse(
            success=result.success,
            results=result.data if result.success else None,
            metadata=metadata,
            error=result.error,
        )

    # ----- Hooks -----

    async def initialize(self) -> None:
        """Override to perform async setup before serving requests."""

    async def shutdown(self) -> None:
        """Override to release resources; call super() to keep the log event."""
        self.logger.info("Sub-agent shutting down")

    async def validate_request(self, request: ProcessRequest) -> None:
        """Override to reject a request before `handle_request` runs (raise to reject)."""

    async def run_health_checks(self) -> None:
        """Override to probe dependencies; raise to report the agent unhealthy."""

    @abstractmethod
    async def handle_request(self, request: ProcessRequest, request_id: str) -> Any:
        """Agent-specific work for one request."""
