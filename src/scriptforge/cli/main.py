"""Main CLI entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from scriptforge import __version__
from scriptforge.cli.commands import (
    format_command,
    parse_command,
    stats_command,
    structure_command,
    tool_command,
    tools_command,
    validate_command,
)
from scriptforge.cli.formatters import JsonFormatter
from scriptforge.cli.utils.error_handler import handle_cli_error
from scriptforge.config import (
    configure_logging,
    get_logger,
    get_settings_for_cli,
    set_settings,
)
from scriptforge.exceptions import ScriptForgeError

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="scriptforge",
    help="Parse, check, analyze and edit Fountain screenplays",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="parse")(parse_command)
app.command(name="validate")(validate_command)
app.command(name="stats")(stats_command)
app.command(name="structure")(structure_command)
app.command(name="format")(format_command)
app.command(name="tools")(tools_command)
app.command(name="tool")(tool_command)


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show ScriptForge version."""
    version_info = {
        "name": "ScriptForge",
        "version": __version__,
        "description": "Fountain screenplay document engine",
    }
    if json_output:
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"ScriptForge v{version_info['version']}")


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (YAML, TOML, or JSON)",
            envvar="SCRIPTFORGE_CONFIG",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug", help="Enable debug logging", envvar="SCRIPTFORGE_DEBUG"
        ),
    ] = False,
) -> None:
    """Configure global options."""
    overrides: dict[str, object] = {}
    if debug:
        overrides = {"debug": True, "log_level": "DEBUG"}
    elif verbose:
        overrides = {"log_level": "INFO"}

    try:
        settings = get_settings_for_cli(config, overrides or None)
    except (ScriptForgeError, FileNotFoundError) as e:
        handle_cli_error(e, verbose=debug)

    set_settings(settings)
    configure_logging(settings)
    logger.debug(
        "CLI configured",
        config=str(config) if config else None,
        log_level=settings.log_level,
    )
