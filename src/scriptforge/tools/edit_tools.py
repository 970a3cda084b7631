"""Mutating tools.

Every edit re-parses the current text, locates a line range and splices the
raw line array. Scene-level edits re-parse the spliced text and refuse any
result whose scene count is not what the edit implies. Targets that cannot
be found produce a text result and no updated screenplay.
"""

from __future__ import annotations

import re

from pydantic import Field, field_validator

from scriptforge.config import get_logger
from scriptforge.parser.fountain_parser import parse
from scriptforge.parser.models import Document, ElementKind, Scene
from scriptforge.tools.base import ToolCall, ToolInput, ToolResult, tool
from scriptforge.tools.resolve import (
    START,
    Resolution,
    ambiguity_note,
    describe_reference,
    resolve_scene,
    resolved_scene,
)
from scriptforge.tools.text_ops import (
    body_start_index,
    content_lines,
    count_occurrences,
    splice_block,
    split_lines,
)

logger = get_logger(__name__)

class EditSceneInput(ToolInput):
    """Input for edit_scene."""

    scene_heading: str | None = Field(
        None,
        description="The scene heading text to find "
        "(case-insensitive substring match).",
    )
    scene_number: int | None = Field(
        None,
        description="The 1-based sequential scene number. Used when sceneHeading "
        "is not provided.",
    )
    new_content: str = Field(
        ...,
        description="The replacement Fountain content for the entire scene, "
        "including heading.",
    )


class InsertSceneInput(ToolInput):
    """Input for insert_scene."""

    after_scene: str | None = Field(
        None,
        description="The heading of the scene after which to insert. "
        'Use "START" to insert at the beginning.',
    )
    after_scene_number: int | None = Field(
        None,
        description="The 1-based number of the scene after which to insert. "
        "Used when afterScene is not provided.",
    )
    content: str = Field(
        ...,
        description="The Fountain-formatted content for the new scene, "
        "starting with a scene heading.",
    )


class DeleteSceneInput(ToolInput):
    """Input for delete_scene."""

    scene_heading: str | None = Field(
        None,
        description="The scene heading text to find and delete "
        "(case-insensitive substring match).",
    )
    scene_number: int | None = Field(
        None,
        description="The 1-based sequential scene number. Used when sceneHeading "
        "is not provided.",
    )


class ReorderScenesInput(ToolInput):
    """Input for reorder_scenes."""

    scene_heading: str | None = Field(
        None,
        description="The heading of the scene to move "
        "(case-insensitive substring match).",
    )
    scene_number: int | None = Field(
        None,
        description="The 1-based number of the scene to move. Used when "
        "sceneHeading is not provided.",
    )
    after_scene: str | None = Field(
        None,
        description="The heading of the scene after which to place it. "
        'Use "START" to move to the beginning.',
    )
    after_scene_number: int | None = Field(
        None,
        description="The 1-based number, before the move, of the scene after "
        "which to place it. Used when afterScene is not provided.",
    )


class ReplaceTextInput(ToolInput):
    """Input for replace_text."""

    find: str = Field(..., description="The text to find.")
    replace: str = Field(..., description="The replacement text.")
    scene_heading: str | None = Field(
        None,
        description="Optional scene heading to scope the replacement to. "
        "Omit for global replacement.",
    )
    scene_number: int | None = Field(
        None,
        description="Optional 1-based scene number to scope the replacement to. "
        "Used when sceneHeading is not provided.",
    )


class ReplaceLinesInput(ToolInput):
    """Input for replace_lines."""

    start_line: int = Field(..., ge=1, description="First 1-based line to replace.")
    end_line: int = Field(
        ..., ge=1, description="Last 1-based line to replace (inclusive)."
    )
    new_content: str = Field(
        ..., description="Replacement text; may span several lines or be empty."
    )


class RenameCharacterInput(ToolInput):
    """Input for rename_character."""

    old_name: str = Field(..., description="Current character name.")
    new_name: str = Field(..., description="New character name.")
    include_mentions: bool = Field(
        True,
        description="Also rename whole-word mentions in action and dialogue.",
    )

    @field_validator("old_name", "new_name")
    @classmethod
    def check_name(cls, value: str) -> str:
        """Names must contain something besides whitespace."""
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


def _scene_range(scene: Scene) -> tuple[int, int]:
    """0-based slice bounds of a scene's lines."""
    return scene.start_line - 1, scene.end_line


def _scene_block(document: Document, scene: Scene) -> list[str]:
    return content_lines(document.scene_text(scene))


def _scene_count(lines: list[str]) -> int:
    # leading blank line: the block is body text, never a title page
    return len(parse("\n".join(["", *lines])).scenes)


def _scene_count_problem(action: str, updated: str, expected: int) -> str | None:
    """Explain why a spliced text does not re-parse to ``expected`` scenes.

    Returns None when the count matches. An unterminated note or boneyard
    that now runs over the following scenes is named in the explanation.
    """
    document = parse(updated)
    actual = len(document.scenes)
    if actual == expected:
        return None

    logger.warning(
        "Splice changed the scene count",
        action=action,
        expected=expected,
        actual=actual,
    )
    message = (
        f"{action} would leave {actual} scene(s) instead of {expected}, so the "
        "screenplay was not changed."
    )
    dangling = next((e for e in document.elements if e.unterminated), None)
    if dangling is not None:
        label = "note" if dangling.kind is ElementKind.NOTE else "boneyard"
        message += (
            f" An unterminated {label} starting at line {dangling.start_line} "
            "swallows everything after it. Close it first."
        )
    return message


def _checked(message: str, lines: list[str], action: str, expected: int) -> ToolResult:
    updated = "\n".join(lines)
    problem = _scene_count_problem(action, updated, expected)
    if problem is not None:
        return ToolResult(problem)
    return ToolResult(message, updated)


@tool(
    "edit_scene",
    "Replace the content of a specific scene (identified by its heading or "
    "number) with new Fountain-formatted content. The new content should "
    "include the scene heading.",
    EditSceneInput,
    mutating=True,
)
def edit_scene(params: EditSceneInput, call: ToolCall) -> ToolResult:
    resolution = resolve_scene(call.document, params.scene_heading, params.scene_number)
    scene = resolved_scene(resolution)
    if scene is None:
        reference = describe_reference(params.scene_heading, params.scene_number)
        return ToolResult(f"Scene not found: {reference}")

    block = content_lines(params.new_content)
    start, end = _scene_range(scene)
    return _checked(
        f'Replaced scene "{scene.heading}" (lines {scene.start_line}-'
        f"{scene.end_line}) with new content.{ambiguity_note(resolution)}",
        splice_block(split_lines(call.text), start, end, block),
        "Edit",
        len(call.document.scenes) - 1 + _scene_count(block),
    )


@tool(
    "insert_scene",
    "Insert a new scene after the specified scene. The content should "
    "be valid Fountain text starting with a scene heading.",
    InsertSceneInput,
    mutating=True,
)
def insert_scene(params: InsertSceneInput, call: ToolCall) -> ToolResult:
    """Insert after a scene, or before the first body element for START."""
    block = content_lines(params.content)
    lines = split_lines(call.text)
    expected = len(call.document.scenes) + _scene_count(block)

    if params.after_scene == START:
        index = body_start_index(call.document)
        return _checked(
            "Inserted new scene at the beginning of the screenplay.",
            splice_block(lines, index, index, block),
            "Insert",
            expected,
        )

    resolution = resolve_scene(
        call.document, params.after_scene, params.after_scene_number
    )
    scene = resolved_scene(resolution)
    if scene is None:
        reference = describe_reference(params.after_scene, params.after_scene_number)
        return ToolResult(f"Target scene not found: {reference}")

    _, end = _scene_range(scene)
    return _checked(
        f'Inserted new scene after "{scene.heading}".{ambiguity_note(resolution)}',
        splice_block(lines, end, end, block),
        "Insert",
        expected,
    )


@tool(
    "delete_scene",
    "Delete a scene identified by its heading or number. Removes the heading "
    "and all content belonging to that scene.",
    DeleteSceneInput,
    mutating=True,
)
def delete_scene(params: DeleteSceneInput, call: ToolCall) -> ToolResult:
    resolution = resolve_scene(call.document, params.scene_heading, params.scene_number)
    scene = resolved_scene(resolution)
    if scene is None:
        reference = describe_reference(params.scene_heading, params.scene_number)
        return ToolResult(f"Scene not found: {reference}")

    start, end = _scene_range(scene)
    return _checked(
        f'Deleted scene "{scene.heading}" (lines {scene.start_line}-'
        f"{scene.end_line}).{ambiguity_note(resolution)}",
        splice_block(split_lines(call.text), start, end, []),
        "Delete",
        len(call.document.scenes) - 1,
    )


def _move_target(
    params: ReorderScenesInput, source: Scene, remaining: Document
) -> Resolution:
    """Resolve the target in the text with the source already cut out.

    Numbers count scenes before the move, so targets after the source shift
    down by one.
    """
    if params.after_scene or params.after_scene_number is None:
        return resolve_scene(remaining, params.after_scene)
    number = params.after_scene_number
    if number > source.number:
        number -= 1
    return resolve_scene(remaining, number=number)


@tool(
    "reorder_scenes",
    "Move a scene to a new position, placing it after the specified target scene.",
    ReorderScenesInput,
    mutating=True,
)
def reorder_scenes(params: ReorderScenesInput, call: ToolCall) -> ToolResult:
    """Cut the scene out, re-parse, then insert it after the target."""
    resolution = resolve_scene(call.document, params.scene_heading, params.scene_number)
    source = resolved_scene(resolution)
    if source is None:
        reference = describe_reference(params.scene_heading, params.scene_number)
        return ToolResult(f"Source scene not found: {reference}")
    if not params.after_scene and params.after_scene_number == source.number:
        return ToolResult(f'Scene "{source.heading}" cannot be moved after itself.')

    block = _scene_block(call.document, source)
    start, end = _scene_range(source)
    remaining = splice_block(split_lines(call.text), start, end, [])
    reparsed = parse("\n".join(remaining))
    expected = len(call.document.scenes)

    if params.after_scene == START:
        index = body_start_index(reparsed)
        return _checked(
            f'Moved scene "{source.heading}" to the beginning.'
            f"{ambiguity_note(resolution)}",
            splice_block(remaining, index, index, block),
            "Move",
            expected,
        )

    target_resolution = _move_target(params, source, reparsed)
    target = resolved_scene(target_resolution)
    if target is None:
        reference = describe_reference(params.after_scene, params.after_scene_number)
        return ToolResult(f"Target scene not found: {reference}")

    _, target_end = _scene_range(target)
    return _checked(
        f'Moved scene "{source.heading}" to after "{target.heading}".'
        f"{ambiguity_note(resolution)}{ambiguity_note(target_resolution)}",
        splice_block(remaining, target_end, target_end, block),
        "Move",
        expected,
    )


@tool(
    "replace_text",
    "Find and replace text within the screenplay. Can be scoped to a "
    "specific scene (by heading or number) or applied globally.",
    ReplaceTextInput,
    mutating=True,
)
def replace_text(params: ReplaceTextInput, call: ToolCall) -> ToolResult:
    """Case-sensitive literal replacement of every non-overlapping occurrence."""
    find, replacement = params.find, params.replace

    if params.scene_heading or params.scene_number is not None:
        resolution = resolve_scene(
            call.document, params.scene_heading, params.scene_number
        )
        scene = resolved_scene(resolution)
        if scene is None:
            reference = describe_reference(params.scene_heading, params.scene_number)
            return ToolResult(f"Scene not found: {reference}")

        lines = split_lines(call.text)
        start, end = _scene_range(scene)
        scene_text = "\n".join(lines[start:end])
        count = count_occurrences(scene_text, find)
        if count == 0:
            return ToolResult(
                f'No occurrences of "{find}" found in scene "{scene.heading}".'
            )
        lines[start:end] = scene_text.replace(find, replacement).split("\n")
        return ToolResult(
            f'Replaced {count} occurrence(s) of "{find}" with "{replacement}" '
            f'in scene "{scene.heading}".{ambiguity_note(resolution)}',
            "\n".join(lines),
        )

    count = count_occurrences(call.text, find)
    if count == 0:
        return ToolResult(f'No occurrences of "{find}" found in the screenplay.')
    return ToolResult(
        f'Replaced {count} occurrence(s) of "{find}" with "{replacement}" globally.',
        call.text.replace(find, replacement),
    )


@tool(
    "replace_lines",
    "Replace an inclusive range of numbered lines (as shown by read_screenplay) "
    "with new text. Use for precise edits that do not align with scenes.",
    ReplaceLinesInput,
    mutating=True,
)
def replace_lines(params: ReplaceLinesInput, call: ToolCall) -> ToolResult:
    lines = split_lines(call.text)
    total = len(lines)
    if params.end_line < params.start_line or params.end_line > total:
        return ToolResult(
            f"Line range {params.start_line}-{params.end_line} is outside the "
            f"screenplay ({total} lines)."
        )

    replacement = params.new_content.replace("\r\n", "\n").split("\n")
    if params.new_content == "":
        replacement = []
    lines[params.start_line - 1 : params.end_line] = replacement
    return ToolResult(
        f"Replaced lines {params.start_line}-{params.end_line} "
        f"with {len(replacement)} line(s).",
        "\n".join(lines),
    )


def _match_case(template: str, name: str) -> str:
    """Spell ``name`` in the letter case used by ``template``."""
    if template.isupper():
        return name.upper()
    if template[:1].isupper():
        return " ".join(word.capitalize() for word in name.split(" "))
    return name.lower()


@tool(
    "rename_character",
    "Rename a character everywhere: dialogue cues (keeping extensions such as "
    "V.O. and CONT'D) and, optionally, whole-word mentions in action and dialogue.",
    RenameCharacterInput,
    mutating=True,
)
def rename_character(params: RenameCharacterInput, call: ToolCall) -> ToolResult:
    """Rename cues and mentions line by line; other elements are untouched."""
    old, new = params.old_name, params.new_name
    cue_pattern = re.compile(re.escape(old), re.IGNORECASE)
    mention_pattern = re.compile(rf"\b{re.escape(old)}\b", re.IGNORECASE)
    lines = split_lines(call.text)
    cues = mentions = 0

    for element in call.document.elements:
        if element.kind is ElementKind.CHARACTER:
            if (element.character or "").upper() != old.upper():
                continue
            index = element.start_line - 1
            lines[index] = cue_pattern.sub(new.upper(), lines[index], count=1)
            cues += 1
        elif params.include_mentions and element.kind in (
            ElementKind.ACTION,
            ElementKind.DIALOGUE,
            ElementKind.PARENTHETICAL,
        ):
            for index in range(element.start_line - 1, element.end_line):
                lines[index], hits = mention_pattern.subn(
                    lambda m: _match_case(m.group(0), new), lines[index]
                )
                mentions += hits

    if cues == 0 and mentions == 0:
        return ToolResult(f'Character not found: "{old}"')

    logger.debug("Renamed character", old=old, new=new, cues=cues, mentions=mentions)
    return ToolResult(
        f'Renamed "{old.upper()}" to "{new.upper()}": {cues} cue(s), '
        f"{mentions} mention(s).",
        "\n".join(lines),
    )
