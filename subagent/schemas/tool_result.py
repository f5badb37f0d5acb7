# subagent/schemas/tool_result.py
"""
The uniform envelope returned by every tool invocation.

`success` decides which side is populated: `data` on success, `error` on
failure. `metadata` carries auxiliary values such as `processingTimeMs` and,
for failures, the classified error `code`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class ToolResult(BaseModel):
    success: bool = Field(..., description="True on success, False on error")
    data: Optional[Any] = Field(None, description="Payload, only set on success")
    error: Optional[str] = Field(None, description="One-line message, only set on failure")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, description="Auxiliary values (timing, error code, ...)"
    )

    @model_validator(mode="after")
    def _exclusive_outcome(self) -> "ToolResult":
        if self.success and self.error is not None:
            raise ValueError("A successful ToolResult cannot carry an error")
        if not self.success:
            if not self.error:
                raise ValueError("A failed ToolResult requires an error message")
            if self.data is not None:
                raise ValueError("A failed ToolResult cannot carry data")
        return self

    # ----- Builders -----

    @classmethod
    def ok(cls, data: Any = None, metadata: Optional[Dict[str, Any]] = None) -> "ToolResult":
        return cls(success=True, data=data, metadata=metadata or None)

    @classmethod
    def fail(cls, error: str, metadata: Optional[Dict[str, Any]] = None) -> "ToolResult":
        return cls(success=False, error=error, metadata=metadata or None)

    # ----- Convenience -----

    @property
    def code(self) -> Optional[str]:
        return (self.metadata or {}).get("code")

    @property
    def processing_time_ms(self) -> Optional[float]:
        return (self.metadata or {}).get("processingTimeMs")

    def with_metadata(self, **extra: Any) -> "ToolResult":
        """Copy with `extra` merged over the existing metadata."""
        merged = dict(self.metadata or {})
        merged.update(extra)
        return self.model_copy(update={"metadata": merged})
