# subagent/agents/echo.py
"""
A small reference agent used by the command line and the test-suite.

It echoes request content back and exposes two tools, `echo` and
`word_count`, so the full pipeline (validation, registry, lifecycle, host
boundary) can be exercised without any external service.
"""
from collections import Counter
from typing import Any, Dict, Mapping, Optional, Union

from subagent.agents.base import BaseSubAgent
from subagent.exceptions import validation_error
from subagent.registry import ToolContext
from subagent.schemas.agent import AgentConfig, AgentMetadata
from subagent.schemas.common import non_empty_string
from subagent.schemas.descriptor import boolean, enum, number, obj, optional, string
from subagent.schemas.process import ProcessRequest
from subagent.tools.base import BaseTool

ECHO_METADATA = AgentMetadata(
    name="echo",
    version="0.1.0",
    description="Echoes requests back; a reference sub-agent.",
    capabilities=["transform", "analyze"],
)


class WordCountTool(BaseTool[Dict[str, Any], Dict[str, Any]]):
    def __init__(self) -> None:
        super().__init__(
            name="word_count",
            description="Count words in a text and report the most common ones.",
            input_schema=obj(
                text=string().describe("Text to analyze"),
                top=optional(number(integer=True, minimum=1)).describe(
                    "How many of the most common words to return (default 3)"
                ),
                ignore_case=optional(boolean()),
            ),
        )

    async def run(self, input: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
        text = input["text"]
        if input.get("ignore_case", True):
            text = text.lower()
        words = text.split()
        common = Counter(words).most_common(input.get("top", 3))
        context.logger.debug("Counted words", extra={"words": len(words)})
        return {
            "words": len(words),
            "unique": len(set(words)),
            "most_common": [{"word": w, "count": c} for w, c in common],
        }


class EchoAgent(BaseSubAgent):
    """Reference agent: `handle_request` echoes, tools transform and count."""

    def __init__(
        self,
        config: Union[AgentConfig, Mapping[str, Any], None] = None,
        metadata: Optional[AgentMetadata] = None,
    ):
        super().__init__(metadata or ECHO_METADATA, config)

        @self.tools.tool(
            "echo",
            obj(
                message=non_empty_string.describe("Text to echo back"),
                style=optional(enum("plain", "upper", "lower")),
            ),
            description="Echo a message, optionally changing its case.",
        )
        async def echo(input: Dict[str, Any], context: ToolContext) -> Dict[str, Any]:
            message = input["message"]
            style = input.get("style", "plain")
            if style == "upper":
                message = message.upper()
            elif style == "lower":
                message = message.lower()
            return {"message": message, "request_id": context.request_id}

        self.register_tool(WordCountTool())

    async def validate_request(self, request: ProcessRequest) -> None:
        if not request.content.strip():
            raise validation_error("Request content must not be empty")

    async def handle_request(self, request: ProcessRequest, request_id: str) -> Any:
        return {
            "type": request.type,
            "echo": request.content,
            "options": request.options or {},
        }
