"""Read-only tools: reading, searching, outlining and checking the script."""

from __future__ import annotations

from pydantic import Field

from scriptforge.analyzers.statistics import analyze
from scriptforge.tools.base import NoInput, ToolCall, ToolInput, ToolResult, tool
from scriptforge.tools.resolve import ambiguity_note, resolve_scene, resolved_scene
from scriptforge.tools.text_ops import first_action_line, numbered, split_lines
from scriptforge.validators.document_validator import Issue, Severity, validate

SEVERITY_TAGS = {
    Severity.ERROR: "ERROR",
    Severity.WARNING: "WARN",
    Severity.INFO: "INFO",
}


def severity_tag(issue: Issue) -> str:
    """Short upper-case label for an issue's severity."""
    return SEVERITY_TAGS[issue.severity]


class ReadScreenplayInput(ToolInput):
    """Input for read_screenplay."""

    start_line: int | None = Field(
        None,
        description="Optional 1-based start line. Omit to read from the beginning.",
    )
    end_line: int | None = Field(
        None,
        description="Optional 1-based end line (inclusive). Omit to read to the end.",
    )


class ReadSceneInput(ToolInput):
    """Input for read_scene."""

    scene_heading: str | None = Field(
        None,
        description="The scene heading text to match "
        "(case-insensitive substring match).",
    )
    scene_number: int | None = Field(
        None,
        description="The 1-based sequential scene number. Used when sceneHeading "
        "is not provided.",
    )


class SearchInput(ToolInput):
    """Input for search_screenplay."""

    query: str = Field(..., description="The text to search for.")
    case_sensitive: bool = Field(
        False,
        description="Whether the search should be case-sensitive. Defaults to false.",
    )


@tool(
    "read_screenplay",
    "Read the full screenplay text, or a specific line range. "
    "Returns Fountain-formatted text with line numbers.",
    ReadScreenplayInput,
)
def read_screenplay(params: ReadScreenplayInput, call: ToolCall) -> ToolResult:
    lines = split_lines(call.text)
    total = len(lines)
    start = max(1, min(params.start_line or 1, total))
    end = params.end_line if params.end_line is not None else total
    end = max(start, min(end, total))
    return ToolResult(
        f"Showing lines {start}-{end} of {total}:\n\n"
        + numbered(lines[start - 1 : end], start)
    )


@tool(
    "read_scene",
    "Read a specific scene by its heading text or sequential number (1-based). "
    "Returns the full scene content including the heading.",
    ReadSceneInput,
)
def read_scene(params: ReadSceneInput, call: ToolCall) -> ToolResult:
    resolution = resolve_scene(call.document, params.scene_heading, params.scene_number)
    scene = resolved_scene(resolution)
    if scene is None:
        return ToolResult("Scene not found.")

    lines = call.document.lines[scene.start_line - 1 : scene.end_line]
    return ToolResult(
        f"Scene: {scene.heading}\nLines {scene.start_line}-{scene.end_line}:\n\n"
        + numbered(lines, scene.start_line)
        + ambiguity_note(resolution)
    )


@tool(
    "search_screenplay",
    "Search for text in the screenplay. Returns matching lines with "
    "line numbers and surrounding context.",
    SearchInput,
)
def search_screenplay(params: SearchInput, call: ToolCall) -> ToolResult:
    """Every matching line with one line of context either side."""
    lines = split_lines(call.text)
    needle = params.query if params.case_sensitive else params.query.lower()
    matches = []
    for i, line in enumerate(lines):
        haystack = line if params.case_sensitive else line.lower()
        if needle not in haystack:
            continue
        context = []
        for j in range(max(0, i - 1), min(len(lines) - 1, i + 1) + 1):
            marker = ">>>" if j == i else "   "
            context.append(f"{marker} {j + 1}: {lines[j]}")
        matches.append("\n".join(context))

    if not matches:
        return ToolResult(f'No matches found for "{params.query}".')
    return ToolResult(
        f'Found {len(matches)} match(es) for "{params.query}":\n\n'
        + "\n\n".join(matches)
    )


@tool(
    "get_outline",
    "Get a scene-level outline of the screenplay, listing each scene "
    "heading with a brief summary of its content and character appearances.",
)
def get_outline(params: NoInput, call: ToolCall) -> ToolResult:
    scenes = call.document.scenes
    if not scenes:
        return ToolResult(
            "No scenes found in the screenplay. The script may be empty or "
            "missing scene headings."
        )

    lines = ["Screenplay Outline:", ""]
    for scene in scenes:
        number = f" #{scene.scene_number}#" if scene.scene_number else ""
        lines.append(f"{scene.number}. {scene.heading}{number}")
        lines.append(f"   Characters: {', '.join(scene.characters) or 'none'}")
        lines.append(f"   Elements: {len(scene.elements)}")
        summary = first_action_line(scene.elements, 80)
        if summary:
            lines.append(f"   Summary: {summary}")
        lines.append("")
    return ToolResult("\n".join(lines))


@tool(
    "get_characters",
    "List all characters found in the screenplay with the scenes they appear in "
    "and their dialogue line counts.",
)
def get_characters(params: NoInput, call: ToolCall) -> ToolResult:
    document = call.document
    names = document.characters
    if not names:
        return ToolResult("No characters found in the screenplay.")

    stats = analyze(document, call.context.settings.lines_per_page)
    counts = {entry.name: entry.count for entry in stats.character_dialogue_counts}
    appearances: dict[str, list[str]] = {}
    for scene in document.scenes:
        for name in scene.characters:
            appearances.setdefault(name, []).append(scene.heading)

    lines = ["Characters:", ""]
    for name in sorted(names, key=lambda n: -counts.get(n, 0)):
        headings = appearances.get(name, [])
        lines.append(
            f"- **{name}**: {counts.get(name, 0)} dialogue line(s) "
            f"in {len(headings)} scene(s)"
        )
        if headings:
            listed = "; ".join(headings[:5])
            if len(headings) > 5:
                listed += f" (+{len(headings) - 5} more)"
            lines.append(f"  Scenes: {listed}")
    return ToolResult("\n".join(lines))


@tool(
    "get_statistics",
    "Get screenplay statistics including page count, scene count, "
    "dialogue-to-action ratio, character dialogue counts, and more.",
)
def get_statistics(params: NoInput, call: ToolCall) -> ToolResult:
    stats = analyze(call.document, call.context.settings.lines_per_page)
    lines = [
        "Screenplay Statistics:",
        "",
        f"- Page count: ~{stats.page_count}",
        f"- Scene count: {stats.scene_count}",
        f"- Total elements: {stats.element_count}",
        f"- Dialogue lines: {stats.dialogue_count}",
        f"- Action blocks: {stats.action_count}",
        f"- Dialogue-to-action ratio: {stats.dialogue_to_action_ratio:.2f}",
        f"- Estimated line count: {stats.line_count}",
        f"- Word count: {stats.word_count}",
        f"- Unique characters: {len(stats.characters)}",
        f"- Unique locations: {len(stats.locations)}",
        f"- Interior/exterior scenes: {stats.int_ext_counts.get('INT', 0)}"
        f"/{stats.int_ext_counts.get('EXT', 0)}",
    ]
    if stats.character_dialogue_counts:
        lines += ["", "Top characters by dialogue:"]
        lines += [
            f"  - {entry.name}: {entry.count} line(s)"
            for entry in stats.character_dialogue_counts[:10]
        ]
    if stats.locations:
        lines += ["", "Locations:"]
        lines += [f"  - {location}" for location in stats.locations]
    return ToolResult("\n".join(lines))


@tool(
    "validate_format",
    "Run the Fountain format linter/validator on the screenplay and "
    "return any errors, warnings, or informational issues.",
)
def validate_format(params: NoInput, call: ToolCall) -> ToolResult:
    issues = validate(call.document)
    if not issues:
        return ToolResult("Validation passed: no issues found.")

    tally = {severity: 0 for severity in Severity}
    for issue in issues:
        tally[issue.severity] += 1
    lines = [
        f"Validation found {len(issues)} issue(s):",
        "",
        f"Summary: {tally[Severity.ERROR]} error(s), "
        f"{tally[Severity.WARNING]} warning(s), {tally[Severity.INFO]} info(s)",
        "",
    ]
    lines += [
        f"[{severity_tag(issue)}] Line {issue.line}: {issue.message} ({issue.rule})"
        for issue in issues
    ]
    return ToolResult("\n".join(lines))


@tool(
    "get_title_page",
    "Read the title page key/value entries (title, credit, author, draft date...).",
)
def get_title_page(params: NoInput, call: ToolCall) -> ToolResult:
    title_page = call.document.title_page
    if not title_page:
        return ToolResult("No title page found.")
    lines = ["Title Page:", ""]
    lines += [
        f"- **{key}**: {' / '.join(value.splitlines())}"
        for key, value in title_page.items()
    ]
    return ToolResult("\n".join(lines))


@tool(
    "get_story_bible",
    "Read the project story bible including characters, locations, themes, "
    "beat sheet progress, and writer notes. Returns structured project context.",
)
def get_story_bible(params: NoInput, call: ToolCall) -> ToolResult:
    bible = call.context.story_bible
    if bible is None:
        return ToolResult("No story bible found for this project.")
    return ToolResult(bible.render())
