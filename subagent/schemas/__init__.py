# subagent/schemas/__init__.py
"""
Data shapes used across the framework: schema descriptors and their
JSON-Schema conversion, plus the Pydantic models for envelopes, agent
metadata and configuration.
"""
