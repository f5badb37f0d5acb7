# subagent/utils/validation.py
"""
Validate untyped values against schema descriptors.

`validate()` never raises: it returns a `ValidationOutcome` that either holds
the typed value or every path-stamped problem found in one pass, so callers
can report all of them in a single round trip.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Generic, List, Mapping, Sequence, Tuple, TypeVar
from urllib.parse import urlparse

from subagent.exceptions import ToolValidationError
from subagent.schemas.descriptor import (
    MISSING,
    AnySchema,
    ArraySchema,
    BooleanSchema,
    EnumSchema,
    LiteralSchema,
    NumberSchema,
    ObjectSchema,
    OptionalSchema,
    RecordSchema,
    SchemaDescriptor,
    StringSchema,
    UnionSchema,
)

T = TypeVar("T")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem; `path` is dot-joined keys/indices, empty at the root."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


@dataclass(frozen=True)
class ValidationOutcome(Generic[T]):
    ok: bool
    value: Any = MISSING
    errors: Tuple[ValidationIssue, ...] = ()

    def messages(self) -> List[str]:
        return [str(issue) for issue in self.errors]


def _join(path: str, key: Any) -> str:
    return f"{path}.{key}" if path else str(key)


def type_name(value: Any) -> str:
    """JSON-flavoured name of a Python value's type, for error messages."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return "nan" if math.isnan(value) else "infinity"
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _mismatch(expected: str, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    message = "Required" if value is MISSING else f"Expected {expected}, received {type_name(value)}"
    errors.append(ValidationIssue(path, message))
    return MISSING


def _check_format(fmt: str, value: str) -> bool:
    if fmt == "email":
        return bool(_EMAIL_RE.match(value))
    if fmt == "uri":
        parsed = urlparse(value)
        return bool(parsed.scheme and (parsed.netloc or parsed.path))
    if fmt == "date-time":
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return False
        return "T" in value or " " in value
    return True


def _string(d: StringSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if not isinstance(value, str):
        return _mismatch("string", value, path, errors)
    before = len(errors)
    if d.min_length is not None and len(value) < d.min_length:
        errors.append(
            ValidationIssue(path, f"String must contain at least {d.min_length} character(s)")
        )
    if d.max_length is not None and len(value) > d.max_length:
        errors.append(
            ValidationIssue(path, f"String must contain at most {d.max_length} character(s)")
        )
    if d.pattern is not None and not re.search(d.pattern, value):
        errors.append(ValidationIssue(path, f"String does not match pattern {d.pattern}"))
    if d.format is not None and not _check_format(d.format, value):
        errors.append(ValidationIssue(path, f"Invalid {d.format}"))
    return value if len(errors) == before else MISSING


def _number(d: NumberSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return _mismatch("integer" if d.integer else "number", value, path, errors)
    if isinstance(value, float) and not math.isfinite(value):
        return _mismatch("number", value, path, errors)
    before = len(errors)
    if d.integer and not isinstance(value, int):
        errors.append(ValidationIssue(path, "Expected integer, received float"))
    if d.minimum is not None and value < d.minimum:
        errors.append(ValidationIssue(path, f"Number must be greater than or equal to {d.minimum}"))
    if d.maximum is not None and value > d.maximum:
        errors.append(ValidationIssue(path, f"Number must be less than or equal to {d.maximum}"))
    if d.exclusive_minimum is not None and value <= d.exclusive_minimum:
        errors.append(ValidationIssue(path, f"Number must be greater than {d.exclusive_minimum}"))
    return value if len(errors) == before else MISSING


def _array(d: ArraySchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if not isinstance(value, (list, tuple)):
        return _mismatch("array", value, path, errors)
    before = len(errors)
    items = [_check(d.element, item, _join(path, index), errors) for index, item in enumerate(value)]
    return items if len(errors) == before else MISSING


def _object(d: ObjectSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if not isinstance(value, Mapping):
        return _mismatch("object", value, path, errors)
    before = len(errors)
    result: Dict[str, Any] = {}
    for name, child in d.fields.items():
        present = name in value
        if not present and name in d.optional_names:
            continue
        checked = _check(child, value[name] if present else MISSING, _join(path, name), errors)
        if checked is not MISSING:
            result[name] = checked
    # Undeclared keys are ignored, not rejected.
    return result if len(errors) == before else MISSING


def _record(d: RecordSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if not isinstance(value, Mapping):
        return _mismatch("object", value, path, errors)
    before = len(errors)
    result: Dict[str, Any] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            errors.append(ValidationIssue(_join(path, key), "Expected string key"))
            continue
        checked = _check(d.values, item, _join(path, key), errors)
        if checked is not MISSING:
            result[key] = checked
    return result if len(errors) == before else MISSING


def _enum(d: EnumSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if isinstance(value, str) and value in d.values:
        return value
    if value is MISSING:
        return _mismatch("string", value, path, errors)
    allowed = " | ".join(f"'{v}'" for v in d.values)
    received = f"'{value}'" if isinstance(value, str) else type_name(value)
    errors.append(ValidationIssue(path, f"Invalid enum value. Expected {allowed}, received {received}"))
    return MISSING


def _literal_equal(expected: Any, value: Any) -> bool:
    # True == 1 in Python, but not in JSON
    if isinstance(expected, bool) or isinstance(value, bool):
        return type(expected) is type(value) and expected == value
    return expected == value


def _literal(d: LiteralSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if value is not MISSING and _literal_equal(d.value, value):
        return value
    if value is MISSING:
        errors.append(ValidationIssue(path, "Required"))
    else:
        errors.append(ValidationIssue(path, f"Invalid literal value, expected {d.value!r}"))
    return MISSING


def _union(d: UnionSchema, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    first_failure: Sequence[ValidationIssue] = ()
    for index, option in enumerate(d.options):
        attempt: List[ValidationIssue] = []
        checked = _check(option, value, path, attempt)
        if not attempt:
            return checked
        if index == 0:
            first_failure = attempt
    # Only the first alternative's issues are reported.
    errors.extend(first_failure)
    return MISSING


def _check(d: SchemaDescriptor, value: Any, path: str, errors: List[ValidationIssue]) -> Any:
    if isinstance(d, OptionalSchema):
        if value is MISSING:
            return MISSING
        return _check(d.inner, value, path, errors)
    if isinstance(d, AnySchema):
        return value
    if isinstance(d, StringSchema):
        return _string(d, value, path, errors)
    if isinstance(d, NumberSchema):
        return _number(d, value, path, errors)
    if isinstance(d, BooleanSchema):
        if isinstance(value, bool):
            return value
        return _mismatch("boolean", value, path, errors)
    if isinstance(d, ArraySchema):
        return _array(d, value, path, errors)
    if isinstance(d, ObjectSchema):
        return _object(d, value, path, errors)
    if isinstance(d, EnumSchema):
        return _enum(d, value, path, errors)
    if isinstance(d, LiteralSchema):
        return _literal(d, value, path, errors)
    if isinstance(d, UnionSchema):
        return _union(d, value, path, errors)
    if isinstance(d, RecordSchema):
        return _record(d, value, path, errors)
    errors.append(ValidationIssue(path, f"Unsupported schema descriptor: {type(d).__name__}"))
    return MISSING


def validate(descriptor: SchemaDescriptor, value: Any = MISSING) -> ValidationOutcome:
    """Check `value` against `descriptor`.

    :param descriptor: Root descriptor.
    :param value: Untyped input; leave out (or pass `MISSING`) for "absent".
    :return: `ok=True` with the typed value, or `ok=False` with all issues.
    """
    errors: List[ValidationIssue] = []
    checked = _check(descriptor, value, "", errors)
    if errors:
        return ValidationOutcome(ok=False, errors=tuple(errors))
    return ValidationOutcome(ok=True, value=None if checked is MISSING else checked)


def ensure_valid(descriptor: SchemaDescriptor, value: Any = MISSING) -> Any:
    """Return the typed value or raise `ToolValidationError` listing every issue."""
    outcome = validate(descriptor, value)
    if not outcome.ok:
        raise ToolValidationError(
            f"Invalid input: {', '.join(outcome.messages())}",
            details={"errors": outcome.messages()},
        )
    return outcome.value
