# subagent/utils/__init__.py
"""
Cross-cutting helpers: structured logging, configuration loading, schema
validation and timing.
"""
