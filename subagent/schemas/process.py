# subagent/schemas/process.py
"""
Top-level request/response envelope for `BaseSubAgent.process`.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from subagent.schemas.descriptor import obj, optional, record, string

# Descriptor used to check raw (untyped) process requests before they become
# a ProcessRequest; also the input schema of the built-in "process" tool.
PROCESS_REQUEST_SCHEMA = obj(
    type=string().describe("The type of request"),
    content=string().describe("The content to process"),
    context=optional(record()).describe("Caller-supplied context"),
    options=optional(record()).describe("Additional options"),
)


class ProcessRequest(BaseModel):
    type: str
    content: str
    context: Optional[Dict[str, Any]] = None
    options: Optional[Dict[str, Any]] = None


class ProcessResponse(BaseModel):
    """
    Result of one request. `results` and `error` are mutually exclusive and
    `results` is always None on failure. `metadata["processingTimeMs"]` is
    always present.
    """

    success: bool
    results: Any = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None

    @model_validator(mode="after")
    def _exclusive_outcome(self) -> "ProcessResponse":
        if self.success and self.error is not None:
            raise ValueError("A successful response cannot carry an error")
        if not self.success:
            if not self.error:
                raise ValueError("A failed response requires an error message")
            if self.results is not None:
                raise ValueError("A failed response must have results=None")
        if "processingTimeMs" not in self.metadata:
            raise ValueError("metadata.processingTimeMs is required")
        return self

    @property
    def processing_time_ms(self) -> float:
        return self.metadata["processingTimeMs"]
