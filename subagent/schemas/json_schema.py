# subagent/schemas/json_schema.py
"""
Lower a schema descriptor tree into a JSON-Schema document.

The result is advisory metadata published to host processes so they can build
their own caller-side validation. Conversion is pure and total: a descriptor
variant this module does not know about converts to `{}` instead of failing,
so a tool is never blocked from registration by its schema.
"""
from typing import Any, Dict, Optional

from subagent.schemas.descriptor import (
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


def _string(d: StringSchema) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"type": "string"}
    if d.min_length is not None:
        doc["minLength"] = d.min_length
    if d.max_length is not None:
        doc["maxLength"] = d.max_length
    if d.pattern is not None:
        doc["pattern"] = d.pattern
    if d.format is not None:
        doc["format"] = d.format
    return doc


def _number(d: NumberSchema) -> Dict[str, Any]:
    doc: Dict[str, Any] = {"type": "integer" if d.integer else "number"}
    if d.minimum is not None:
        doc["minimum"] = d.minimum
    if d.maximum is not None:
        doc["maximum"] = d.maximum
    if d.exclusive_minimum is not None:
        doc["exclusiveMinimum"] = d.exclusive_minimum
    return doc


def _object(d: ObjectSchema) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "type": "object",
        "properties": {name: to_json_schema(child) for name, child in d.fields.items()},
    }
    required = list(d.required_names)
    if required:
        doc["required"] = required
    return doc


def _convert(d: SchemaDescriptor) -> Optional[Dict[str, Any]]:
    if isinstance(d, StringSchema):
        return _string(d)
    if isinstance(d, NumberSchema):
        return _number(d)
    if isinstance(d, BooleanSchema):
        return {"type": "boolean"}
    if isinstance(d, ArraySchema):
        return {"type": "array", "items": to_json_schema(d.element)}
    if isinstance(d, ObjectSchema):
        return _object(d)
    if isinstance(d, OptionalSchema):
        # Optionality lives in the parent's "required" list, never inline.
        return to_json_schema(d.inner)
    if isinstance(d, EnumSchema):
        return {"type": "string", "enum": list(d.values)}
    if isinstance(d, LiteralSchema):
        return {"const": d.value}
    if isinstance(d, UnionSchema):
        return {"oneOf": [to_json_schema(option) for option in d.options]}
    if isinstance(d, RecordSchema):
        return {"type": "object", "additionalProperties": to_json_schema(d.values)}
    if isinstance(d, AnySchema):
        return {}
    return None


def to_json_schema(descriptor: SchemaDescriptor) -> Dict[str, Any]:
    """Convert `descriptor` to a JSON-Schema document.

    :param descriptor: Root of an acyclic descriptor tree.
    :return: A fresh dict; callers may mutate it freely.
    """
    doc = _convert(descriptor)
    if doc is None:
        return {}
    if descriptor.description:
        doc["description"] = descriptor.description
    return doc
