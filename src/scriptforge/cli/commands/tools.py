"""Tool commands: list the agent tools and run one against a file."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape

from scriptforge.cli.commands.document import FileArgument, JsonOption
from scriptforge.cli.formatters import JsonFormatter, rows_table
from scriptforge.cli.utils.error_handler import handle_cli_error
from scriptforge.cli.utils.files import read_fountain, write_fountain
from scriptforge.config import get_logger, get_settings
from scriptforge.exceptions import ScriptForgeError
from scriptforge.tools import (
    TOOL_REGISTRY,
    ToolContext,
    execute_tool,
    load_story_bible,
    tool_definitions,
)
from scriptforge.tools.executor import WRITERS_ROOM

logger = get_logger(__name__)
console = Console()


class ToolMode(str, Enum):
    """Which tools an agent session may call."""

    ALL = "all"
    WRITERS_ROOM = WRITERS_ROOM


def _summary(description: str) -> str:
    sentence, _, _ = description.partition(". ")
    return sentence.rstrip(".")


def tools_command(
    mode: Annotated[
        ToolMode,
        typer.Option(
            "--mode",
            "-m",
            help="Only list tools available in this mode",
            case_sensitive=False,
        ),
    ] = ToolMode.ALL,
    json_output: JsonOption = False,
) -> None:
    """List the tools an agent can call, with their input schemas in JSON."""
    definitions = tool_definitions(None if mode is ToolMode.ALL else mode.value)
    if json_output:
        print(JsonFormatter().format(definitions))
        return

    rows = [
        {
            "name": definition["name"],
            "kind": "edit" if TOOL_REGISTRY[definition["name"]].mutating else "read",
            "description": escape(_summary(definition["description"])),
        }
        for definition in definitions
    ]
    console.print(rows_table(rows, title=f"Tools ({mode.value})"))


def _parse_input(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ScriptForgeError(
            message="Tool input is not valid JSON",
            hint='Pass a JSON object, e.g. --input \'{"sceneNumber": 2}\'',
            details={"input": raw, "error": str(e)},
        ) from e
    if not isinstance(data, dict):
        raise ScriptForgeError(
            message="Tool input must be a JSON object",
            hint='Wrap the arguments in braces, e.g. {"query": "JAKE"}',
            details={"input": raw},
        )
    return data


def tool_command(
    name: Annotated[str, typer.Argument(help="Tool name, see `scriptforge tools`")],
    file: FileArgument,
    tool_input: Annotated[
        str | None,
        typer.Option("--input", "-i", help="Tool arguments as a JSON object"),
    ] = None,
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Save the updated screenplay to FILE"),
    ] = False,
    bible: Annotated[
        Path | None,
        typer.Option("--bible", "-b", help="Story bible file (YAML or JSON)"),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Run one agent tool against a screenplay file."""
    settings = get_settings()
    try:
        arguments = _parse_input(tool_input)
        text = read_fountain(file)
        story_bible = load_story_bible(bible) if bible else None
    except ScriptForgeError as e:
        handle_cli_error(e, verbose=settings.debug)

    context = ToolContext(settings=settings, story_bible=story_bible)
    result = execute_tool(name, arguments, text, context)

    if json_output:
        print(JsonFormatter().format(result))
    else:
        typer.echo(result.result)

    if result.updated_screenplay is None:
        return
    if not write:
        if not json_output:
            console.print(
                "\n[dim]Screenplay changed; rerun with --write to save it[/dim]"
            )
        return
    try:
        write_fountain(file, result.updated_screenplay)
    except OSError as e:
        handle_cli_error(e, verbose=settings.debug)
    logger.debug("Saved tool result", tool=name, path=str(file))
    if not json_output:
        console.print(f"[green]✓ Saved changes to {escape(str(file))}[/green]")
