# subagent/schemas/common.py
"""Reusable descriptors for inputs that many tools share."""

from subagent.schemas.descriptor import enum, number, obj, optional, string

non_empty_string = string(min_length=1)

positive_number = number(exclusive_minimum=0)

url = string(format="uri")

email = string(format="email")

iso_date = string(format="date-time")

file_path = string(pattern=r"^[a-zA-Z0-9_\-./\\]+$")

code_snippet = obj(
    code=string(),
    language=optional(string()),
    filename=optional(string()),
)

severity = enum("error", "warning", "info", "hint")
