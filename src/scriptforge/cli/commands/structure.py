"""Structure command: acts, sequences and turning points."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from scriptforge.analyzers.norms import load_norms
from scriptforge.analyzers.structure import detect_structure
from scriptforge.analyzers.turning_points import compare_turning_points
from scriptforge.cli.commands.document import (
    FileArgument,
    JsonOption,
    load_document,
)
from scriptforge.cli.formatters import JsonFormatter, rows_table
from scriptforge.cli.utils.error_handler import handle_cli_error
from scriptforge.config import get_logger, get_settings
from scriptforge.exceptions import NormsError
from scriptforge.tools.structure_tools import format_turning_points

logger = get_logger(__name__)
console = Console()


def structure_command(
    file: FileArgument,
    genre: Annotated[
        str | None,
        typer.Option(
            "--genre",
            "-g",
            help="Compare turning points against one genre (e.g. Thriller)",
        ),
    ] = None,
    json_output: JsonOption = False,
) -> None:
    """Show acts, sequences and TRIPOD turning points."""
    _, document = load_document(file)
    settings = get_settings()
    try:
        norms = load_norms(settings.norms_file)
    except NormsError as e:
        handle_cli_error(e, verbose=settings.debug)

    structure = detect_structure(
        document,
        act_count=settings.heuristic_act_count,
        min_scenes=settings.heuristic_min_scenes,
        sequence_max_scenes=settings.sequence_max_scenes,
    )
    turning_points = compare_turning_points(
        document, norms, genre, settings.lines_per_page
    )
    if genre and turning_points.genre is None:
        logger.info("Unknown genre, using cross-genre norms", genre=genre)

    if json_output:
        print(
            JsonFormatter().format(
                {
                    "structure": structure.model_dump(mode="json"),
                    "turning_points": turning_points.model_dump(mode="json"),
                }
            )
        )
        return

    if not document.scenes:
        console.print("[yellow]No scenes found[/yellow]")
        return

    headings = [scene.heading for scene in document.scenes]
    acts = [
        {
            "act": act.label,
            "source": act.source,
            "scenes": len(act.scene_indices),
            "lines": f"{act.start_line}-{act.end_line}",
            "opens_with": escape(headings[act.scene_indices[0]])
            if act.scene_indices
            else "",
        }
        for act in structure.acts
    ]
    console.print(rows_table(acts, title="Acts"))
    sequences = [
        {
            "act": sequence.act_number,
            "sequence": sequence.label,
            "scenes": len(sequence.scene_indices),
            "lines": f"{sequence.start_line}-{sequence.end_line}",
        }
        for sequence in structure.sequences
    ]
    console.print(rows_table(sequences, title="Sequences"))
    typer.echo("")
    typer.echo(format_turning_points(turning_points))
