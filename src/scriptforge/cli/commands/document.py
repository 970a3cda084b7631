"""Document commands: parse, validate, stats and format."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape

from scriptforge.analyzers.statistics import analyze
from scriptforge.cli.formatters import JsonFormatter, rows_table
from scriptforge.cli.utils.error_handler import handle_cli_error
from scriptforge.cli.utils.files import read_fountain, write_fountain
from scriptforge.config import get_logger, get_settings
from scriptforge.exceptions import ScriptForgeError
from scriptforge.parser.fountain_parser import parse
from scriptforge.parser.models import Document
from scriptforge.parser.serializer import serialize
from scriptforge.validators.document_validator import Issue, Severity, validate

logger = get_logger(__name__)
console = Console()

SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}

FileArgument = Annotated[
    Path, typer.Argument(help="Path to a Fountain screenplay", show_default=False)
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def load_document(file: Path) -> tuple[str, Document]:
    """Read and parse a screenplay, exiting with a message when it cannot be read."""
    try:
        text = read_fountain(file)
    except ScriptForgeError as e:
        handle_cli_error(e, verbose=get_settings().debug)
    return text, parse(text)


def document_payload(document: Document) -> dict[str, Any]:
    """JSON-friendly view of a parsed document."""
    return {
        "title_page": dict(document.title_page),
        "line_count": document.line_count,
        "characters": document.characters,
        "locations": document.locations,
        "scenes": [scene.to_dict() for scene in document.scenes],
        "elements": [element.to_dict() for element in document.elements],
    }


def parse_command(file: FileArgument, json_output: JsonOption = False) -> None:
    """Parse a screenplay and summarize its scenes."""
    _, document = load_document(file)
    if json_output:
        # Pure JSON without ANSI escape codes
        print(JsonFormatter().format(document_payload(document)))
        return

    title = document.title_page.get("title")
    if title:
        console.print(f"[bold cyan]{escape(' '.join(title.splitlines()))}[/bold cyan]")
    console.print(
        f"Parsed {len(document.elements)} elements in {len(document.scenes)} "
        f"scenes ({document.line_count} lines)"
    )
    if not document.scenes:
        console.print("[yellow]No scenes found[/yellow]")
        return
    rows = [
        {
            "#": scene.number,
            "heading": escape(scene.heading),
            "lines": f"{scene.start_line}-{scene.end_line}",
            "characters": escape(", ".join(scene.characters)),
        }
        for scene in document.scenes
    ]
    console.print(rows_table(rows, column_options={"#": {"justify": "right"}}))


def _issue_line(issue: Issue) -> str:
    style = SEVERITY_STYLES[issue.severity]
    return (
        f"  [{style}]{issue.severity.value:<7}[/{style}] line {issue.line:>4}  "
        f"{escape(issue.message)} [dim]({issue.rule})[/dim]"
    )


def validate_command(
    file: FileArgument,
    json_output: JsonOption = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with status 1 when errors are found"),
    ] = False,
) -> None:
    """Check a screenplay for Fountain formatting problems."""
    _, document = load_document(file)
    issues = validate(document)
    counts = {
        severity: sum(1 for issue in issues if issue.severity is severity)
        for severity in Severity
    }

    if json_output:
        print(
            JsonFormatter().format(
                {
                    "file": str(file),
                    "issues": [issue.to_dict() for issue in issues],
                    "errors": counts[Severity.ERROR],
                    "warnings": counts[Severity.WARNING],
                    "info": counts[Severity.INFO],
                }
            )
        )
    elif not issues:
        console.print("[green]✓ No formatting issues found[/green]")
    else:
        for issue in issues:
            console.print(_issue_line(issue))
        console.print(
            f"\n{counts[Severity.ERROR]} error(s), {counts[Severity.WARNING]} "
            f"warning(s), {counts[Severity.INFO]} info"
        )

    if strict and counts[Severity.ERROR]:
        logger.debug("Strict validation failed", errors=counts[Severity.ERROR])
        raise typer.Exit(1)


def stats_command(file: FileArgument, json_output: JsonOption = False) -> None:
    """Show page, scene, dialogue and character statistics."""
    _, document = load_document(file)
    stats = analyze(document, get_settings().lines_per_page)
    if json_output:
        print(JsonFormatter().format(stats))
        return

    overview = [
        {"metric": "Estimated pages", "value": stats.page_count},
        {"metric": "Scenes", "value": stats.scene_count},
        {"metric": "Elements", "value": stats.element_count},
        {"metric": "Dialogue lines", "value": stats.dialogue_count},
        {"metric": "Action blocks", "value": stats.action_count},
        {
            "metric": "Dialogue/action ratio",
            "value": f"{stats.dialogue_to_action_ratio:.2f}",
        },
        {"metric": "Words", "value": stats.word_count},
        {"metric": "Characters", "value": len(stats.characters)},
        {"metric": "Locations", "value": len(stats.locations)},
        {
            "metric": "INT / EXT / other",
            "value": " / ".join(str(n) for n in stats.int_ext_counts.values()),
        },
    ]
    console.print(rows_table(overview, title="Screenplay Statistics"))
    if stats.character_dialogue_counts:
        speakers = [
            {"character": escape(entry.name), "dialogue_lines": entry.count}
            for entry in stats.character_dialogue_counts
        ]
        console.print(rows_table(speakers, title="Dialogue by Character"))


def format_command(
    file: FileArgument,
    write: Annotated[
        bool,
        typer.Option("--write", "-w", help="Rewrite the file in place"),
    ] = False,
) -> None:
    """Re-emit a screenplay in canonical Fountain layout."""
    text, document = load_document(file)
    formatted = serialize(document)
    if not write:
        typer.echo(formatted, nl=False)
        return
    if formatted == text:
        console.print(f"[dim]{escape(str(file))} is already formatted[/dim]")
        return
    try:
        write_fountain(file, formatted)
    except OSError as e:
        handle_cli_error(e, verbose=get_settings().debug)
    console.print(f"[green]✓ Formatted {escape(str(file))}[/green]")
