# subagent/schemas/descriptor.py
"""
Schema descriptors: the internal description of an accepted input shape.

Descriptors are immutable trees built once when a tool is authored and shared
by every invocation of that tool. The validator (`subagent.utils.validation`)
and the JSON-Schema converter (`subagent.schemas.json_schema`) both walk the
same tree. Trees must be finite and acyclic; recursive schemas are not
supported.

Build them with the lower-case helpers::

    schema = obj(
        name=string(min_length=1),
        age=optional(number(integer=True)),
        tags=array(string()).describe("Free-form labels"),
    )
"""
from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple


class _Missing:
    """Sentinel for an absent value (a missing key, not JSON null)."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

STRING_FORMATS = ("email", "uri", "date-time")


class SchemaDescriptor:
    """Base class of every descriptor variant."""

    description: Optional[str] = None

    def describe(self, text: str) -> "SchemaDescriptor":
        """Return a copy of this descriptor carrying a human description."""
        return dataclasses.replace(self, description=text)  # type: ignore[type-var]

    def optional(self) -> "OptionalSchema":
        return OptionalSchema(self)


def accepts_missing(descriptor: SchemaDescriptor) -> bool:
    """True when `descriptor` validates an absent value."""
    if isinstance(descriptor, (OptionalSchema, AnySchema)):
        return True
    if isinstance(descriptor, UnionSchema):
        return any(accepts_missing(option) for option in descriptor.options)
    return False


@dataclass(frozen=True)
class StringSchema(SchemaDescriptor):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    format: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.format is not None and self.format not in STRING_FORMATS:
            raise ValueError(
                f"Unsupported string format '{self.format}'. "
                f"Expected one of: {', '.join(STRING_FORMATS)}"
            )
        if self.pattern is not None:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"Invalid string pattern '{self.pattern}': {e}") from e


@dataclass(frozen=True)
class NumberSchema(SchemaDescriptor):
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: Optional[float] = None
    integer: bool = False
    description: Optional[str] = None


@dataclass(frozen=True)
class BooleanSchema(SchemaDescriptor):
    description: Optional[str] = None


@dataclass(frozen=True)
class ArraySchema(SchemaDescriptor):
    element: SchemaDescriptor
    description: Optional[str] = None


@dataclass(frozen=True)
class ObjectSchema(SchemaDescriptor):
    """Keyed mapping with declared fields.

    Fields whose descriptor accepts an absent value (`OptionalSchema`,
    `AnySchema`, or a `UnionSchema` with such an option) are folded into
    `optional_names`, so a field is required exactly when its name is not in
    `optional_names`.
    """

    fields: Mapping[str, SchemaDescriptor] = field(default_factory=dict)
    optional_names: FrozenSet[str] = frozenset()
    description: Optional[str] = None

    def __post_init__(self) -> None:
        ordered = dict(self.fields)
        unknown = set(self.optional_names) - set(ordered)
        if unknown:
            raise ValueError(
                f"Optional names not declared as fields: {', '.join(sorted(unknown))}"
            )
        folded = set(self.optional_names) | {
            name
            for name, child in ordered.items()
            if accepts_missing(child)
        }
        object.__setattr__(self, "fields", MappingProxyType(ordered))
        object.__setattr__(self, "optional_names", frozenset(folded))

    @property
    def required_names(self) -> Tuple[str, ...]:
        """Required field names in declaration order."""
        return tuple(n for n in self.fields if n not in self.optional_names)

    def is_required(self, name: str) -> bool:
        return name in self.fields and name not in self.optional_names


@dataclass(frozen=True)
class OptionalSchema(SchemaDescriptor):
    inner: SchemaDescriptor
    description: Optional[str] = None


@dataclass(frozen=True)
class EnumSchema(SchemaDescriptor):
    values: Tuple[str, ...]
    description: Optional[str] = None

    def __post_init__(self) -> None:
        values = tuple(self.values)
        if not values:
            raise ValueError("EnumSchema requires at least one value")
        if not all(isinstance(v, str) for v in values):
            raise ValueError("EnumSchema values must be strings")
        object.__setattr__(self, "values", values)


@dataclass(frozen=True)
class LiteralSchema(SchemaDescriptor):
    value: Any
    description: Optional[str] = None


@dataclass(frozen=True)
class UnionSchema(SchemaDescriptor):
    options: Tuple[SchemaDescriptor, ...]
    description: Optional[str] = None

    def __post_init__(self) -> None:
        options = tuple(self.options)
        if not options:
            raise ValueError("UnionSchema requires at least one option")
        object.__setattr__(self, "options", options)


@dataclass(frozen=True)
class RecordSchema(SchemaDescriptor):
    """String-keyed mapping whose values all satisfy `values`."""

    values: SchemaDescriptor = field(default_factory=lambda: AnySchema())
    description: Optional[str] = None


@dataclass(frozen=True)
class AnySchema(SchemaDescriptor):
    """Accepts any value, including an absent one."""

    description: Optional[str] = None


# --- Builders ---


def string(
    *,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    pattern: Optional[str] = None,
    format: Optional[str] = None,
    description: Optional[str] = None,
) -> StringSchema:
    return StringSchema(min_length, max_length, pattern, format, description)


def number(
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    exclusive_minimum: Optional[float] = None,
    integer: bool = False,
    description: Optional[str] = None,
) -> NumberSchema:
    return NumberSchema(minimum, maximum, exclusive_minimum, integer, description)


def boolean(*, description: Optional[str] = None) -> BooleanSchema:
    return BooleanSchema(description)


def array(element: SchemaDescriptor, *, description: Optional[str] = None) -> ArraySchema:
    return ArraySchema(element, description)


def obj(
    fields: Optional[Mapping[str, SchemaDescriptor]] = None,
    *,
    optional_names: Iterable[str] = (),
    description: Optional[str] = None,
    **named: SchemaDescriptor,
) -> ObjectSchema:
    """Build an object descriptor from a mapping and/or keyword fields.

    Keyword fields keep their declaration order after any mapping fields.
    """
    merged = dict(fields or {})
    merged.update(named)
    return ObjectSchema(merged, frozenset(optional_names), description)


def optional(inner: SchemaDescriptor, *, description: Optional[str] = None) -> OptionalSchema:
    return OptionalSchema(inner, description)


def enum(*values: str, description: Optional[str] = None) -> EnumSchema:
    return EnumSchema(tuple(values), description)


def literal(value: Any, *, description: Optional[str] = None) -> LiteralSchema:
    return LiteralSchema(value, description)


def union(*options: SchemaDescriptor, description: Optional[str] = None) -> UnionSchema:
    return UnionSchema(tuple(options), description)


def record(
    values: Optional[SchemaDescriptor] = None, *, description: Optional[str] = None
) -> RecordSchema:
    return RecordSchema(values if values is not None else AnySchema(), description)


def any_(*, description: Optional[str] = None) -> AnySchema:
    return AnySchema(description)
