# subagent/schemas/agent.py
"""
Schemas describing a sub-agent: its identity, its configuration, and its
health report.
"""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    field_validator,
)
from pydantic.alias_generators import to_camel

from subagent.utils.logger import LOG_LEVELS

Capability = Literal[
    "validate",
    "analyze",
    "transform",
    "generate",
    "execute",
    "retrieve",
    "search",
]


class AgentMetadata(BaseModel):
    """
    Identity of a sub-agent, shared read-only with every tool it runs.

    :param name: Unique agent name, also used as the logger name.
    :param version: Version string reported by health checks.
    :param capabilities: What kinds of work the agent advertises.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    version: str
    description: str = ""
    capabilities: List[Capability] = Field(default_factory=list)
    author: Optional[str] = None
    repository: Optional[str] = None


class AgentConfig(BaseModel):
    """
    Per-agent configuration, validated once at construction and immutable after.

    Accepts both snake_case names and the camelCase spelling used by hosts
    (`logLevel`, `timeoutMs`, `maxConcurrent`, `retryAttempts`, `retryDelayMs`).

    `timeout_ms`, `max_concurrent`, `retry_attempts` and `retry_delay_ms` are
    published for the host process to enforce; the framework itself does not
    bound concurrency, abort slow calls, or retry.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    log_level: str = "info"
    timeout_ms: PositiveInt = 30000
    max_concurrent: PositiveInt = 5
    retry_attempts: NonNegativeInt = 3
    retry_delay_ms: NonNegativeInt = 1000

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in LOG_LEVELS:
            raise ValueError(
                f"Unknown log level '{value}'. Expected one of: {', '.join(LOG_LEVELS)}"
            )
        return normalized


class HealthStatus(BaseModel):
    """Health report; `errors` is absent (None) when the agent is fully healthy."""

    healthy: bool
    version: str
    uptime: int = Field(..., ge=0, description="Milliseconds since agent construction")
    capabilities: List[Capability] = Field(default_factory=list)
    errors: Optional[List[str]] = None

    @field_validator("errors")
    @classmethod
    def _no_empty_error_list(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return value or None
