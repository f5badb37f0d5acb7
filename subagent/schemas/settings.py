# subagent/schemas/settings.py
"""
Environment-driven configuration using pydantic-settings.

Every field is optional: only variables that are actually set (for example
`SUBAGENT_LOG_LEVEL=debug` or `SUBAGENT_TIMEOUT_MS=5000`) override lower
layers when `load_agent_config` merges its sources.
"""
from typing import Any, Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AgentSettings(BaseSettings):
    """
    :ivar log_level: `SUBAGENT_LOG_LEVEL`
    :ivar timeout_ms: `SUBAGENT_TIMEOUT_MS`
    :ivar max_concurrent: `SUBAGENT_MAX_CONCURRENT`
    :ivar retry_attempts: `SUBAGENT_RETRY_ATTEMPTS`
    :ivar retry_delay_ms: `SUBAGENT_RETRY_DELAY_MS`
    """

    log_level: Optional[str] = None
    timeout_ms: Optional[int] = None
    max_concurrent: Optional[int] = None
    retry_attempts: Optional[int] = None
    retry_delay_ms: Optional[int] = None

    model_config = SettingsConfigDict(
        env_prefix="SUBAGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def overrides(self) -> Dict[str, Any]:
        """Only the values that were actually provided."""
        return self.model_dump(exclude_none=True)
