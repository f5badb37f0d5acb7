# subagent/utils/logger.py
"""
Structured logging for sub-agents.

Records are emitted as JSON through python-json-logger. Handlers are attached
once to the `subagent` package logger and write to stderr, because stdout is
reserved for whatever protocol the host process speaks over it.

There is no module-level logger shared by agents: each agent creates its own
adapter with `create_logger()` and hands scoped children to its tools via
`StructuredLoggerAdapter.child()`.
"""
import logging
import sys
from typing import Any, Dict, MutableMapping, Optional

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "subagent"

# Accepted level names (pino-style names included) mapped onto logging levels.
LOG_LEVELS: Dict[str, int] = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "silent": logging.CRITICAL + 10,
}

_HANDLER_NAME = "subagent-json"


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that carries context fields into every record.

    Fields bound on the adapter and fields passed per call through `extra`
    are merged (per-call values win) and land as top-level keys in the JSON
    output.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        merged = dict(self.extra or {})
        merged.update(kwargs.get("extra") or {})
        kwargs["extra"] = merged
        return msg, kwargs

    @property
    def fields(self) -> Dict[str, Any]:
        return dict(self.extra or {})

    def child(self, **fields: Any) -> "StructuredLoggerAdapter":
        """Return a new adapter on the same logger with `fields` bound."""
        bound = dict(self.extra or {})
        bound.update(fields)
        return StructuredLoggerAdapter(self.logger, bound)


def resolve_level(level: str) -> int:
    """Map a level name to a `logging` level; unknown names fall back to INFO."""
    return LOG_LEVELS.get(str(level).strip().lower(), logging.INFO)


def _ensure_package_handler() -> None:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if any(h.get_name() == _HANDLER_NAME for h in package_logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    )
    package_logger.addHandler(handler)


def create_logger(level: str = "info", name: Optional[str] = None) -> StructuredLoggerAdapter:
    """Create the structured logger for one agent.

    :param level: Level name, e.g. "debug" or "warn".
    :param name: Agent name; records are logged under `subagent.agent.<name>`.
    :return: An adapter with `agent=<name>` bound.
    """
    _ensure_package_handler()
    agent_name = name or "subagent"
    logger = logging.getLogger(f"{PACKAGE_LOGGER}.agent.{agent_name}")
    logger.setLevel(resolve_level(level))
    return StructuredLoggerAdapter(logger, {"agent": agent_name})
