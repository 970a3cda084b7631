"""ScriptForge CLI commands."""

from __future__ import annotations

from scriptforge.cli.commands.document import (
    format_command,
    parse_command,
    stats_command,
    validate_command,
)
from scriptforge.cli.commands.structure import structure_command
from scriptforge.cli.commands.tools import tool_command, tools_command

__all__ = [
    "format_command",
    "parse_command",
    "stats_command",
    "structure_command",
    "tool_command",
    "tools_command",
    "validate_command",
]
