"""Error handling utilities for CLI commands."""

from __future__ import annotations

import traceback
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from scriptforge.config import get_logger
from scriptforge.exceptions import ScriptForgeError

logger = get_logger(__name__)
console = Console()


def handle_cli_error(
    error: Exception, verbose: bool = False, exit_code: int = 1
) -> NoReturn:
    """Handle errors in CLI commands with helpful formatting.

    Args:
        error: The exception that was raised
        verbose: Whether to show detailed error information
        exit_code: Exit code to use when exiting
    """
    if isinstance(error, ScriptForgeError):
        console.print(f"[red]✗ {escape(error.message)}[/red]")

        if error.hint:
            console.print(f"[yellow]→ {escape(error.hint)}[/yellow]")

        if verbose and error.details:
            console.print("\n[dim]Details:[/dim]")
            for key, value in error.details.items():
                console.print(f"  [dim]{key}:[/dim] {escape(str(value))}")

        logger.error(
            "ScriptForge error occurred",
            error_type=type(error).__name__,
            message=error.message,
            hint=error.hint,
            details=error.details,
            verbose_mode=verbose,
            exit_code=exit_code,
        )

    elif isinstance(error, FileNotFoundError):
        console.print(f"[red]✗ File not found: {escape(str(error))}[/red]")
        console.print("[yellow]→ Check that the file path is correct[/yellow]")
        logger.error(
            "File not found",
            error=str(error),
            filename=getattr(error, "filename", None),
            error_type="FileNotFoundError",
            exit_code=exit_code,
        )

    else:
        console.print(f"[red]✗ Unexpected error: {escape(str(error))}[/red]")

        if verbose:
            console.print("\n[dim]Full traceback:[/dim]")
            console.print(escape(traceback.format_exc()))
        else:
            console.print("[dim]Run with --debug for full error details[/dim]")

        logger.error(
            "Unexpected error occurred",
            error=str(error),
            error_type=type(error).__name__,
            verbose_mode=verbose,
            exit_code=exit_code,
            exc_info=True,
        )

    raise typer.Exit(exit_code)
