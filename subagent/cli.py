# subagent/cli.py
"""
Command-line interface for running a sub-agent in-process.

Useful for poking at an agent without a host: list its tools and their
JSON Schemas, call a tool, send a process request, or check health. JSON
results go to stdout; structured logs go to stderr.
"""

import asyncio
import importlib
import json
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from subagent.agents.base import BaseSubAgent
from subagent.exceptions import SubAgentError
from subagent.host import ToolHost, to_json_text
from subagent.utils.config import load_agent_config

DEFAULT_AGENT = "subagent.agents.echo:EchoAgent"

T = TypeVar("T")

app = typer.Typer(
    name="subagent",
    help="Inspect and exercise a sub-agent's tools and request lifecycle.",
    add_completion=False,
)
console = Console()

AgentOption = Annotated[
    str,
    typer.Option(
        "--agent",
        "-a",
        help="Agent to load as 'module:attribute' (class, factory, or instance).",
    ),
]


def load_agent(target: str) -> BaseSubAgent:
    """Import `module:attribute` and turn it into an agent instance.

    Classes and factories are called with the config resolved by
    `load_agent_config()` (config.yaml, SUBAGENT_* environment).
    """
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise typer.BadParameter(f"Expected 'module:attribute', got '{target}'")
    try:
        module = importlib.import_module(module_name)
        obj = getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise typer.BadParameter(f"Cannot load agent '{target}': {e}") from e

    if isinstance(obj, BaseSubAgent):
        return obj
    if callable(obj):
        agent = obj(config=load_agent_config())
        if isinstance(agent, BaseSubAgent):
            return agent
    raise typer.BadParameter(f"'{target}' is not a sub-agent")


def _parse_json_object(raw: Optional[str], option: str) -> Dict[str, Any]:
    if raw is None:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{option} is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise typer.BadParameter(f"{option} must be a JSON object")
    return value


def _run(agent: BaseSubAgent, work: Callable[[], Awaitable[T]]) -> T:
    async def _session() -> T:
        await agent.initialize()
        try:
            return await work()
        finally:
            await agent.shutdown()

    return asyncio.run(_session())


def _build(agent_target: str) -> BaseSubAgent:
    try:
        return load_agent(agent_target)
    except SubAgentError as e:
        console.print(f"[bold red]Agent failed to start:[/bold red] {e}")
        raise typer.Exit(code=2)


@app.command(name="tools")
def list_tools(
    agent: AgentOption = DEFAULT_AGENT,
    as_json: Annotated[bool, typer.Option("--json", help="Print raw JSON.")] = False,
) -> None:
    """List tools with their input schemas."""
    host = ToolHost(_build(agent))
    records = host.list_tools()
    if as_json:
        typer.echo(to_json_text(records))
        return

    table = Table(title=f"Tools: {host.agent.get_metadata().name}")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Required", style="magenta")
    for record in records:
        required = ", ".join(record["inputSchema"].get("required", [])) or "-"
        table.add_row(record["name"], record["description"], required)
    console.print(table)


@app.command(name="call")
def call_tool(
    name: Annotated[str, typer.Argument(help="Tool name.")],
    input_json: Annotated[
        Optional[str], typer.Option("--input", "-i", help="Tool input as a JSON object.")
    ] = None,
    agent: AgentOption = DEFAULT_AGENT,
) -> None:
    """Call one tool and print its response."""
    arguments = _parse_json_object(input_json, "--input")
    sub_agent = _build(agent)
    host = ToolHost(sub_agent)
    response = _run(sub_agent, lambda: host.call_tool(name, arguments))
    typer.echo(response["content"][0]["text"])
    if response.get("isError"):
        raise typer.Exit(code=1)


@app.command(name="process")
def process_request(
    request_type: Annotated[str, typer.Argument(metavar="TYPE", help="Request type.")],
    content: Annotated[str, typer.Argument(help="Request content.")],
    options_json: Annotated[
        Optional[str], typer.Option("--options", help="Options as a JSON object.")
    ] = None,
    agent: AgentOption = DEFAULT_AGENT,
) -> None:
    """Send a process request through the agent's lifecycle."""
    request: Dict[str, Any] = {"type": request_type, "content": content}
    options = _parse_json_object(options_json, "--options")
    if options:
        request["options"] = options
    sub_agent = _build(agent)
    response = _run(sub_agent, lambda: sub_agent.process(request))
    typer.echo(to_json_text(response.model_dump()))
    if not response.success:
        raise typer.Exit(code=1)


@app.command(name="health")
def health(agent: AgentOption = DEFAULT_AGENT) -> None:
    """Run the agent's health checks."""
    sub_agent = _build(agent)
    status = _run(sub_agent, sub_agent.check_health)
    typer.echo(to_json_text(status.model_dump(exclude_none=True)))
    if not status.healthy:
        raise typer.Exit(code=1)
