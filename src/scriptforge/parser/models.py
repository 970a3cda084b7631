"""Data models for parsed Fountain documents.

Everything here is an immutable value object recomputed from text on every
parse. Line numbers are 1-based and inclusive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class ElementKind(str, Enum):
    """Kinds of element a Fountain line or block can become."""

    SCENE_HEADING = "scene-heading"
    CHARACTER = "character"
    DIALOGUE = "dialogue"
    PARENTHETICAL = "parenthetical"
    ACTION = "action"
    TRANSITION = "transition"
    SECTION = "section"
    SYNOPSIS = "synopsis"
    LYRIC = "lyric"
    CENTERED = "centered"
    NOTE = "note"
    BONEYARD = "boneyard"
    PAGE_BREAK = "page-break"
    TITLE_PAGE_ENTRY = "title-page-entry"


class IntExt(str, Enum):
    """Interior/exterior designation of a scene heading."""

    INT = "INT"
    EXT = "EXT"
    OTHER = "OTHER"


@dataclass(frozen=True)
class Element:
    """A single classified element of the document."""

    kind: ElementKind
    text: str
    start_line: int
    end_line: int
    forced: bool = False
    scene_number: str | None = None
    depth: int = 0
    key: str | None = None
    character: str | None = None
    extension: str | None = None
    dual: bool = False
    unterminated: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert the element to a JSON-friendly dictionary.

        Optional attributes are included only when set.
        """
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "text": self.text,
            "start_line": self.start_line,
            "end_line": self.end_line,
        }
        optional = {
            "forced": self.forced,
            "scene_number": self.scene_number,
            "depth": self.depth,
            "key": self.key,
            "character": self.character,
            "extension": self.extension,
            "dual": self.dual,
            "unterminated": self.unterminated,
        }
        data.update({name: value for name, value in optional.items() if value})
        return data


@dataclass(frozen=True)
class Scene:
    """A scene: its heading line through the line before the next heading."""

    index: int
    heading: str
    int_ext: IntExt
    location: str
    time_of_day: str
    scene_number: str | None
    start_line: int
    end_line: int
    characters: tuple[str, ...] = ()
    elements: tuple[Element, ...] = ()

    @property
    def number(self) -> int:
        """1-based position of the scene in the document."""
        return self.index + 1

    def elements_of(self, *kinds: ElementKind) -> list[Element]:
        """Return the scene's elements of the given kinds, in order."""
        return [element for element in self.elements if element.kind in kinds]

    def to_dict(self) -> dict[str, Any]:
        """Convert the scene summary to a JSON-friendly dictionary."""
        return {
            "number": self.number,
            "heading": self.heading,
            "int_ext": self.int_ext.value,
            "location": self.location,
            "time_of_day": self.time_of_day,
            "scene_number": self.scene_number,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "characters": list(self.characters),
            "element_count": len(self.elements),
        }


@dataclass(frozen=True)
class Document:
    """A parsed screenplay.

    Scenes partition the body: the preamble ``[1, preamble_end_line]`` plus
    every scene range covers ``[1, line_count]`` exactly once.
    """

    lines: tuple[str, ...]
    elements: tuple[Element, ...]
    scenes: tuple[Scene, ...]
    title_page: MappingProxyType[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def line_count(self) -> int:
        """Number of physical lines in the source text."""
        return len(self.lines)

    @property
    def preamble_end_line(self) -> int:
        """Last line before the first scene heading (0 if line 1 is a heading)."""
        if not self.scenes:
            return self.line_count
        return self.scenes[0].start_line - 1

    @property
    def characters(self) -> list[str]:
        """Sorted unique speaking characters across the document."""
        names = {
            element.character
            for element in self.elements
            if element.kind is ElementKind.CHARACTER and element.character
        }
        return sorted(names)

    @property
    def locations(self) -> list[str]:
        """Sorted unique scene locations, upper-cased."""
        return sorted(
            {scene.location.upper() for scene in self.scenes if scene.location}
        )

    @property
    def text(self) -> str:
        """The normalized source text the document was parsed from."""
        return "\n".join(self.lines)

    def scene_text(self, scene: Scene) -> str:
        """Return the raw source lines of a scene joined with newlines."""
        return self.line_range_text(scene.start_line, scene.end_line)

    def line_range_text(self, start_line: int, end_line: int) -> str:
        """Return the raw source text of an inclusive 1-based line range."""
        return "\n".join(self.lines[start_line - 1 : end_line])

