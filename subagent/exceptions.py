# subagent/exceptions.py
"""
Error taxonomy for the subagent framework.

Every failure that crosses a tool or request boundary is described by an
`ErrorCode`. Raising a `SubAgentError` (or one of its subclasses) from a tool
handler preserves that code in the result envelope; any other exception is
reported as `ErrorCode.UNKNOWN`. Nothing here retries: `retryable` is advisory
metadata for whoever called us.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Machine-friendly error kinds surfaced in `metadata.code`."""

    # General errors
    UNKNOWN = "UNKNOWN"
    INVALID_INPUT = "INVALID_INPUT"
    TIMEOUT = "TIMEOUT"
    RATE_LIMITED = "RATE_LIMITED"

    # Processing errors
    PROCESSING_FAILED = "PROCESSING_FAILED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    MISSING_DEPENDENCY = "MISSING_DEPENDENCY"

    # Communication errors
    CONNECTION_FAILED = "CONNECTION_FAILED"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"


# Kinds a caller may retry when the raiser did not say otherwise.
RETRYABLE_BY_DEFAULT = frozenset(
    {
        ErrorCode.TIMEOUT,
        ErrorCode.RATE_LIMITED,
        ErrorCode.RESOURCE_EXHAUSTED,
        ErrorCode.CONNECTION_FAILED,
        ErrorCode.PROTOCOL_ERROR,
    }
)


class SubAgentError(Exception):
    """Base exception for all classified failures raised by agents and tools."""

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code) if code is not None else self.default_code
        self.details = details
        self.retryable = (
            retryable if retryable is not None else self.code in RETRYABLE_BY_DEFAULT
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable view of the error."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code.value,
            "details": self.details,
            "retryable": self.retryable,
        }


class ConfigurationError(SubAgentError):
    """Raised when agent configuration fails validation at construction time."""

    default_code = ErrorCode.INVALID_CONFIG


class ToolNotFoundError(SubAgentError, KeyError):
    """Raised when a requested tool is not present in a registry.

    Inherits from `KeyError` so mapping-style callers can catch it as usual.
    """

    default_code = ErrorCode.NOT_FOUND

    def __str__(self) -> str:
        # KeyError.__str__ would wrap the message in quotes
        return self.message


class ToolValidationError(SubAgentError, ValueError):
    """Raised when input does not satisfy a schema descriptor."""

    default_code = ErrorCode.INVALID_INPUT


@dataclass(frozen=True)
class FormattedError:
    """One-line, classified view of an arbitrary exception."""

    message: str
    code: ErrorCode
    retryable: bool = False
    details: Optional[Dict[str, Any]] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "message": self.message,
            "code": self.code.value,
            "retryable": self.retryable,
        }
        if self.details:
            data["details"] = self.details
        return data


def _first_line(text: str) -> str:
    lines = text.strip().splitlines()
    return lines[0] if lines else ""


def format_error(error: BaseException) -> FormattedError:
    """Classify an exception for a response envelope.

    Typed `SubAgentError`s keep their code; everything else is `UNKNOWN`.
    """
    if isinstance(error, SubAgentError):
        return FormattedError(
            message=_first_line(error.message) or type(error).__name__,
            code=error.code,
            retryable=error.retryable,
            details=error.details,
        )
    return FormattedError(
        message=_first_line(str(error)) or type(error).__name__,
        code=ErrorCode.UNKNOWN,
        retryable=False,
        details={"type": type(error).__name__},
    )


def validation_error(
    message: str, details: Optional[Dict[str, Any]] = None
) -> ToolValidationError:
    return ToolValidationError(message, details=details, retryable=False)


def processing_error(
    message: str,
    details: Optional[Dict[str, Any]] = None,
    retryable: bool = False,
) -> SubAgentError:
    return SubAgentError(
        message, ErrorCode.PROCESSING_FAILED, details=details, retryable=retryable
    )


def timeout_error(operation: str, timeout_ms: int) -> SubAgentError:
    """Error for callers that detect an operation ran past its allotted time."""
    return SubAgentError(
        f"Operation '{operation}' timed out after {timeout_ms}ms",
        ErrorCode.TIMEOUT,
        details={"operation": operation, "timeout_ms": timeout_ms},
        retryable=True,
    )
