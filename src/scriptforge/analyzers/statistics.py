"""Screenplay statistics: counts, ratios and page estimates."""

from __future__ import annotations

import math
from collections import Counter

from pydantic import BaseModel, Field

from scriptforge.parser.models import Document, Element, ElementKind, IntExt, Scene
from scriptforge.utils.screenplay import ScreenplayUtils

DEFAULT_LINES_PER_PAGE = 56


class CharacterDialogueCount(BaseModel):
    """Number of dialogue lines spoken by one character."""

    name: str
    count: int


class SceneLength(BaseModel):
    """Size of a single scene."""

    number: int
    heading: str
    source_lines: int = Field(..., description="Physical lines in the scene range")
    estimated_lines: int = Field(..., description="Formatted lines on the page")
    words: int


class ScreenplayStatistics(BaseModel):
    """Aggregate statistics for a screenplay."""

    page_count: int = Field(..., description="Estimated page count")
    scene_count: int
    element_count: int
    dialogue_count: int
    action_count: int
    dialogue_to_action_ratio: float
    line_count: int = Field(..., description="Estimated formatted line count")
    word_count: int
    characters: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    character_dialogue_counts: list[CharacterDialogueCount] = Field(
        default_factory=list, description="Dialogue lines per character, descending"
    )
    int_ext_counts: dict[str, int] = Field(default_factory=dict)
    scene_lengths: list[SceneLength] = Field(default_factory=list)


def estimate_formatted_lines(
    elements: tuple[Element, ...] | list[Element],
    lines_per_page: int = DEFAULT_LINES_PER_PAGE,
) -> int:
    """Estimate how many lines the elements take up on a formatted page.

    Headings, cues and transitions carry a blank line with them. Action takes
    its own lines plus a blank. A page break rounds up to the next page.
    """
    lines = 0
    for element in elements:
        kind = element.kind
        if kind in (
            ElementKind.SCENE_HEADING,
            ElementKind.CHARACTER,
            ElementKind.TRANSITION,
        ):
            lines += 2
        elif kind is ElementKind.ACTION:
            lines += element.text.count("\n") + 2
        elif kind is ElementKind.DIALOGUE:
            lines += element.text.count("\n") + 1
        elif kind is ElementKind.PAGE_BREAK:
            lines = math.ceil(lines / lines_per_page) * lines_per_page
        elif kind in (ElementKind.BONEYARD, ElementKind.TITLE_PAGE_ENTRY):
            continue
        else:
            lines += 1
    return lines


def estimate_page_count(
    document: Document, lines_per_page: int = DEFAULT_LINES_PER_PAGE
) -> int:
    """Estimated page count, never less than one."""
    lines = estimate_formatted_lines(document.elements, lines_per_page)
    return max(1, math.ceil(lines / lines_per_page))


def count_words(elements: tuple[Element, ...] | list[Element]) -> int:
    """Words in action, dialogue and parentheticals."""
    return sum(
        len(element.text.split())
        for element in elements
        if element.kind
        in (ElementKind.ACTION, ElementKind.DIALOGUE, ElementKind.PARENTHETICAL)
    )


def character_dialogue_counts(
    elements: tuple[Element, ...] | list[Element],
) -> list[CharacterDialogueCount]:
    """Dialogue line counts per character, most talkative first."""
    counts = Counter(
        element.character
        for element in elements
        if element.kind is ElementKind.DIALOGUE and element.character
    )
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [CharacterDialogueCount(name=name, count=count) for name, count in ordered]


def dialogue_action_ratio(elements: tuple[Element, ...] | list[Element]) -> float:
    """Dialogue elements divided by action elements (0 when there is no action)."""
    dialogue = sum(1 for e in elements if e.kind is ElementKind.DIALOGUE)
    action = sum(1 for e in elements if e.kind is ElementKind.ACTION)
    return dialogue / action if action else 0.0


def scene_length(scene: Scene, lines_per_page: int = DEFAULT_LINES_PER_PAGE) -> int:
    """Estimated formatted lines of one scene including its heading."""
    return 2 + estimate_formatted_lines(scene.elements, lines_per_page)


def analyze(
    document: Document, lines_per_page: int = DEFAULT_LINES_PER_PAGE
) -> ScreenplayStatistics:
    """Compute statistics for a document.

    Args:
        document: Parsed document
        lines_per_page: Formatted lines per page used for the page estimate

    Returns:
        Aggregate statistics
    """
    elements = document.elements
    dialogue_count = sum(1 for e in elements if e.kind is ElementKind.DIALOGUE)
    action_count = sum(1 for e in elements if e.kind is ElementKind.ACTION)
    line_count = estimate_formatted_lines(elements, lines_per_page)
    int_ext = Counter(scene.int_ext.value for scene in document.scenes)

    return ScreenplayStatistics(
        page_count=max(1, math.ceil(line_count / lines_per_page)),
        scene_count=len(document.scenes),
        element_count=len(elements),
        dialogue_count=dialogue_count,
        action_count=action_count,
        dialogue_to_action_ratio=dialogue_action_ratio(elements),
        line_count=line_count,
        word_count=count_words(elements),
        characters=document.characters,
        locations=document.locations,
        character_dialogue_counts=character_dialogue_counts(elements),
        int_ext_counts={kind.value: int_ext.get(kind.value, 0) for kind in IntExt},
        scene_lengths=[
            SceneLength(
                number=scene.number,
                heading=scene.heading,
                source_lines=scene.end_line - scene.start_line + 1,
                estimated_lines=scene_length(scene, lines_per_page),
                words=len(ScreenplayUtils.words(document.scene_text(scene))),
            )
            for scene in document.scenes
        ],
    )
