"""Structural navigation tools: acts, sequences, arc and turning points."""

from __future__ import annotations

from pydantic import Field

from scriptforge.analyzers.norms import load_norms
from scriptforge.analyzers.structure import (
    StructureReport,
    analyze_act,
    analyze_narrative_arc,
    detect_structure,
    scene_line_span,
)
from scriptforge.analyzers.turning_points import (
    TurningPointReport,
    compare_turning_points,
)
from scriptforge.tools.base import NoInput, ToolCall, ToolInput, ToolResult, tool
from scriptforge.tools.text_ops import first_action_line

NO_SCENES = "No scenes found in the screenplay."


class ActInput(ToolInput):
    """Input for act-scoped tools."""

    act_number: int = Field(..., description="The act number (1-based).")


class CompareStructureInput(ToolInput):
    """Input for compare_structure."""

    genre: str | None = Field(
        None,
        description="Optional genre (e.g. Horror, Thriller, Drama) whose "
        "turning point norms replace the cross-genre ones. Defaults to the "
        "story bible genre when one is set.",
    )


def _structure(call: ToolCall) -> StructureReport:
    settings = call.context.settings
    return detect_structure(
        call.document,
        act_count=settings.heuristic_act_count,
        min_scenes=settings.heuristic_min_scenes,
        sequence_max_scenes=settings.sequence_max_scenes,
    )


def _act_not_found(number: int, structure: StructureReport) -> ToolResult:
    available = ", ".join(str(act.number) for act in structure.acts) or "none"
    return ToolResult(f"Act {number} not found. Available acts: {available}")


def _names(names: tuple[str, ...] | list[str]) -> str:
    return ", ".join(names) or "none"


@tool(
    "get_structure",
    "Get the high-level structure of the screenplay: acts, sequences, and "
    "narrative flow. Shows how scenes are organized into larger dramatic units.",
)
def get_structure(params: NoInput, call: ToolCall) -> ToolResult:
    document = call.document
    if not document.scenes:
        return ToolResult(NO_SCENES)

    structure = _structure(call)
    lines = [
        "## Screenplay Structure",
        "",
        f"**Detection**: {structure.detection_method}",
        f"**Total scenes**: {structure.scene_count}",
        "",
    ]
    if structure.acts:
        lines += ["### Acts", ""]
        for act in structure.acts:
            lines.append(
                f"**{act.label}** ({act.source}): {len(act.scene_indices)} scene(s), "
                f"lines {act.start_line}-{act.end_line}"
            )
            for index in act.scene_indices:
                scene = document.scenes[index]
                lines.append(
                    f"  {scene.number}. {scene.heading} "
                    f"[{len(scene.characters)} character(s)]"
                )
            lines.append("")
    if structure.sequences:
        lines += ["### Sequences", ""]
        for sequence in structure.sequences:
            lines.append(
                f"- **{sequence.label}** (Act {sequence.act_number}, "
                f"{len(sequence.scene_indices)} scene(s)): "
                f"lines {sequence.start_line}-{sequence.end_line}"
            )
    return ToolResult("\n".join(lines))


@tool(
    "read_act",
    "Read all scenes within a specific act. Returns scene headings, character "
    "lists, and summaries for every scene in the act.",
    ActInput,
)
def read_act(params: ActInput, call: ToolCall) -> ToolResult:
    structure = _structure(call)
    act = structure.act(params.act_number)
    if act is None:
        return _act_not_found(params.act_number, structure)

    lines = [
        f"## {act.label}",
        "",
        f"**Source**: {act.source} detection",
        f"**Scenes**: {len(act.scene_indices)}",
        f"**Lines**: {act.start_line}-{act.end_line}",
        "",
    ]
    for index in act.scene_indices:
        scene = call.document.scenes[index]
        lines += [
            f"### Scene {scene.number}: {scene.heading}",
            f"Lines {scene.start_line}-{scene.end_line}",
            f"Characters: {_names(scene.characters)}",
            f"Elements: {len(scene.elements)}",
        ]
        summary = first_action_line(scene.elements, 100)
        if summary:
            lines.append(f"Summary: {summary}")
        lines.append("")
    return ToolResult("\n".join(lines))


@tool(
    "get_act_analysis",
    "Analyze a specific act for pacing, character distribution, location "
    "variety, and dramatic arc. Returns structured diagnostics.",
    ActInput,
)
def get_act_analysis(params: ActInput, call: ToolCall) -> ToolResult:
    structure = _structure(call)
    act = structure.act(params.act_number)
    if act is None:
        return _act_not_found(params.act_number, structure)

    scenes = call.document.scenes
    analysis = analyze_act(call.document, act, call.context.settings.lines_per_page)
    lines = [
        f"## {act.label}: Analysis",
        "",
        "### Pacing",
        "",
        f"- **Scenes**: {analysis.scene_count}",
        f"- **Total lines**: {analysis.total_lines}",
        f"- **Estimated pages**: ~{analysis.estimated_pages}",
        f"- **Avg scene length**: ~{round(analysis.average_scene_lines)} lines",
    ]
    if analysis.longest_scene is not None and analysis.shortest_scene is not None:
        longest = scenes[analysis.longest_scene]
        shortest = scenes[analysis.shortest_scene]
        lines.append(
            f'- **Longest scene**: "{longest.heading}" '
            f"({scene_line_span(longest)} lines)"
        )
        lines.append(
            f'- **Shortest scene**: "{shortest.heading}" '
            f"({scene_line_span(shortest)} lines)"
        )
        if analysis.pacing_flag:
            lines.append(
                "- **Flag**: Longest scene is >2.5x average. Potential pacing drag."
            )

    ratio = (
        f"{analysis.dialogue_count / analysis.action_count:.2f}"
        if analysis.action_count
        else "all dialogue"
    )
    lines += [
        "",
        "### Dialogue/Action Balance",
        "",
        f"- **Dialogue blocks**: {analysis.dialogue_count}",
        f"- **Action blocks**: {analysis.action_count}",
        f"- **Ratio**: {ratio}",
        "",
        "### Character Distribution",
        "",
    ]
    for name, count in analysis.character_presence:
        pct = round(count / analysis.scene_count * 100)
        lines.append(f"- **{name}**: {count}/{analysis.scene_count} scenes ({pct}%)")
    lines += [
        "",
        "### Location Variety",
        "",
        f"- **Interior**: {analysis.interior_count} scene(s)",
        f"- **Exterior**: {analysis.exterior_count} scene(s)",
        f"- **Unique locations**: {analysis.unique_locations}",
    ]
    if analysis.single_location_flag:
        lines.append(
            "- **Flag**: All scenes in the same location. "
            "Consider adding visual variety."
        )
    return ToolResult("\n".join(lines))


@tool(
    "analyze_narrative_arc",
    "Map the narrative arc across the full screenplay: inciting incident, "
    "rising action, midpoint, climax, resolution. Identifies structural "
    "strengths and weaknesses.",
)
def analyze_arc(params: NoInput, call: ToolCall) -> ToolResult:
    document = call.document
    arc = analyze_narrative_arc(document, _structure(call))
    if arc is None:
        return ToolResult(NO_SCENES)

    scenes = document.scenes
    total = len(scenes)
    opening = scenes[arc.opening]
    lines = [
        "## Narrative Arc Analysis",
        "",
        "### Key Structural Beats",
        "",
        f'**Opening** (Scene 1): "{opening.heading}"',
        f"  Characters: {_names(opening.characters)}",
        "",
    ]
    if arc.inciting_incident is not None:
        inciting = scenes[arc.inciting_incident]
        pct = round(inciting.number / total * 100)
        lines.append(
            f"**Inciting Incident** (Scene {inciting.number}, ~{pct}% through): "
            f'"{inciting.heading}"'
        )
        if pct > 20:
            lines.append(
                "  Note: Inciting incident may be late. It typically occurs in "
                "the first 10-15% of the script."
            )
        lines.append("")

    midpoint = scenes[arc.midpoint]
    lines += [
        f'**Midpoint** (Scene {midpoint.number}): "{midpoint.heading}"',
        f"  Characters: {_names(midpoint.characters)}",
    ]
    if arc.midpoint_location_shift is not None:
        lines.append(
            f'  Location shift from "{arc.midpoint_location_shift}": '
            "potential midpoint reversal."
        )
    lines.append("")

    if arc.climax is not None:
        climax = scenes[arc.climax]
        lines += [
            f'**Climax** (Scene {climax.number}): "{climax.heading}"',
            f"  Elements: {len(climax.elements)}, "
            f"Characters: {_names(climax.characters)}",
            "",
        ]

    resolution = scenes[arc.resolution]
    lines += [
        f'**Resolution** (Scene {total}): "{resolution.heading}"',
        f"  Characters: {_names(resolution.characters)}",
        "",
        "### Structural Diagnostics",
        "",
    ]
    if len(arc.act_sizes) >= 2:
        if arc.acts_imbalanced:
            lines.append(
                f"- **Imbalanced acts**: Largest act has {max(arc.act_sizes)} "
                f"scenes vs smallest with {min(arc.act_sizes)}. "
                "Consider rebalancing."
            )
        else:
            lines.append(
                "- **Act balance**: Reasonable distribution across "
                f"{len(arc.act_sizes)} acts."
            )
    if arc.protagonist is not None:
        presence = round(arc.protagonist_scenes / total * 100)
        lines.append(
            f'- **Protagonist**: "{arc.protagonist}" appears in '
            f"{arc.protagonist_scenes}/{total} scenes ({presence}%)"
        )
        if presence < 50:
            lines.append(
                "  Note: Protagonist presence below 50%. Consider whether the "
                "story has a clear lead or is an ensemble."
            )
    lines.append(
        f"- **Location variety**: {arc.unique_locations} unique locations "
        f"across {total} scenes."
    )
    average, std_dev = arc.average_scene_lines, arc.scene_lines_std_dev
    lines.append(
        f"- **Pacing rhythm**: Avg scene length ~{round(average)} lines "
        f"(std dev: {round(std_dev)})"
    )
    if std_dev > average:
        lines.append("  Note: High scene length variance. Pacing may feel uneven.")
    elif std_dev < average * 0.3:
        lines.append(
            "  Note: Very uniform scene lengths. Consider varying rhythm for "
            "dramatic effect."
        )
    return ToolResult("\n".join(lines))


def format_turning_points(report: TurningPointReport) -> str:
    """Render a turning point report as the agent-facing markdown table."""
    lines = [
        "## Narrative Arc Analysis (TRIPOD-Enhanced)",
        "",
        f"**Screenplay**: {report.total_scenes} scenes, "
        f"~{report.estimated_pages} pages",
    ]
    if report.genre:
        lines.append(f"**Genre norms**: {report.genre}")
    lines += [
        "",
        "### Turning Point Positions",
        "",
        "| Beat | Expected | Detected | Status |",
        "|------|----------|----------|--------|",
    ]
    for tp in report.turning_points:
        guide = tp.page_guide
        expected = f"~{round(tp.expected_median * 100)}%"
        if guide is not None:
            expected += f" (p.{guide.median})"
        if tp.detected_scene_index is not None and tp.detected_scene_pct is not None:
            pct = round(tp.detected_scene_pct * 100)
            page = round(pct / 100 * report.estimated_pages)
            detected = f"Scene {tp.detected_scene_index + 1}, {pct}% (p.{page})"
        else:
            detected = "Not detected"
        lines.append(f"| **{tp.name}** | {expected} | {detected} | {tp.status} |")

    lines += ["", "### Structural Diagnostics", ""]
    for tp in report.turning_points:
        guide = tp.page_guide
        where = (
            f"page {guide.median} ({guide.typical_range[0]}-{guide.typical_range[1]})"
            if guide is not None
            else f"{round(tp.expected_median * 100)}% of the script"
        )
        if tp.status == "NOT DETECTED":
            lines.append(
                f"- **{tp.name}**: Could not identify a clear {tp.name.lower()} "
                f"beat. In professional screenplays, this typically occurs around "
                f"{where}. Consider: {tp.description}"
            )
        elif tp.status in ("EARLY", "LATE"):
            direction = "earlier" if tp.status == "EARLY" else "later"
            lines.append(
                f"- **{tp.name}** is {direction} than typical. Expected around "
                f"{where}. This isn't necessarily wrong but warrants examination."
            )
        elif tp.status in ("SLIGHTLY EARLY", "SLIGHTLY LATE"):
            drift = "early" if tp.status == "SLIGHTLY EARLY" else "late"
            lines.append(
                f"- **{tp.name}** is slightly {drift} but within acceptable range."
            )
        if tp.notes and tp.status != "WITHIN RANGE":
            lines.append(f"  Genre note: {tp.notes}")

    by_key = {tp.key: tp for tp in report.turning_points}
    tp2, tp4 = by_key.get("tp2"), by_key.get("tp4")
    if (
        tp2 is not None
        and tp4 is not None
        and tp2.detected_scene_index is not None
        and tp4.detected_scene_index is not None
    ):
        total = report.total_scenes
        act1 = (tp2.detected_scene_index + 1) / total * 100
        act2 = (tp4.detected_scene_index - tp2.detected_scene_index) / total * 100
        act3 = 100 - act1 - act2
        lines += [
            "",
            f"- **Act proportions**: Act 1 ~{round(act1)}%, Act 2 ~{round(act2)}%, "
            f"Act 3 ~{round(act3)}%",
            "  (Typical: ~25% / ~50% / ~25%)",
        ]
        if act2 > 60:
            lines.append(
                "  Note: Act 2 may be overly long. Consider tightening or "
                "splitting with a stronger midpoint."
            )
        if act1 > 35:
            lines.append(
                "  Note: Act 1 is long. The audience may wait too long before the "
                "story commits to its direction."
            )
        if act3 > 35:
            lines.append(
                "  Note: Act 3 is long. Consider whether the climax and "
                "resolution could be more efficient."
            )

    examples = [tp for tp in report.turning_points if tp.exemplars]
    if examples:
        lines += [
            "",
            "### Reference Films",
            "",
            "How professional screenplays handle these turning points:",
            "",
        ]
        for tp in examples:
            lines.append(f"**{tp.name}**:")
            lines += [f"  - {exemplar}" for exemplar in tp.exemplars[:2]]
    return "\n".join(lines)


@tool(
    "compare_structure",
    "Compare the screenplay's turning points (opportunity, change of plans, "
    "point of no return, major setback, climax) against professional "
    "screenplay norms, optionally for a specific genre.",
    CompareStructureInput,
)
def compare_structure(params: CompareStructureInput, call: ToolCall) -> ToolResult:
    if not call.document.scenes:
        return ToolResult(NO_SCENES)

    settings = call.context.settings
    genre = params.genre
    if genre is None and call.context.story_bible is not None:
        genre = call.context.story_bible.genre or None
    report = compare_turning_points(
        call.document,
        norms=load_norms(settings.norms_file),
        genre=genre,
        lines_per_page=settings.lines_per_page,
    )
    return ToolResult(format_turning_points(report))
