# subagent/utils/config.py
"""
Agent configuration loader.

Sources are merged with increasing precedence:
defaults < `config.yaml` (`agent:` section) < `SUBAGENT_*` environment < overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from subagent.exceptions import ConfigurationError
from subagent.schemas.agent import AgentConfig
from subagent.schemas.settings import AgentSettings


def _read_yaml_section(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    section = data.get("agent") or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'agent' section of {path} must be a mapping")
    return section


def _snake_keys(values: Mapping[str, Any]) -> Dict[str, Any]:
    # "logLevel" and "log_level" must land on the same key before merging.
    return {to_snake(str(key)): value for key, value in values.items()}


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into `field: message` pairs."""
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    return ", ".join(parts)


def build_agent_config(raw: Union[AgentConfig, Mapping[str, Any], None]) -> AgentConfig:
    """Validate a raw mapping (or pass through an AgentConfig)."""
    if isinstance(raw, AgentConfig):
        return raw
    try:
        return AgentConfig.model_validate(dict(raw or {}))
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {describe_validation_error(e)}",
            details={"fields": [".".join(str(p) for p in item["loc"]) for item in e.errors()]},
        ) from e


def load_agent_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_path: Union[str, Path, None] = "config.yaml",
) -> AgentConfig:
    """Load and validate an AgentConfig from file, environment, and overrides.

    :param overrides: Highest-precedence values (snake_case or camelCase keys).
    :param config_path: YAML file to read; None skips the file.
    :raises ConfigurationError: If any source is malformed or a value is invalid.
    """
    merged: Dict[str, Any] = {}
    if config_path is not None:
        merged.update(_snake_keys(_read_yaml_section(Path(config_path))))
    try:
        merged.update(AgentSettings().overrides())
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid environment configuration: {describe_validation_error(e)}"
        ) from e
    merged.update(_snake_keys(overrides or {}))
    return build_agent_config(merged)
