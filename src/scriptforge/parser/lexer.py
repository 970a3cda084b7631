"""Line classification for Fountain text.

Each non-blank line is classified by walking an ordered table of rules and
taking the first match. The order of ``ROOT_RULES`` is part of the contract:
moving a rule changes how ambiguous lines parse.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from scriptforge.parser.models import ElementKind


class ParserMode(str, Enum):
    """States of the parser state machine."""

    ROOT = "root"
    DIALOGUE = "dialogue"
    NOTE = "note"
    BONEYARD = "boneyard"


@dataclass(frozen=True)
class LineContext:
    """What the classifier needs to know about a line's surroundings."""

    previous_blank: bool = True
    body_started: bool = True
    mode: ParserMode = ParserMode.ROOT


@dataclass(frozen=True)
class Classification:
    """Result of classifying one line."""

    kind: ElementKind
    rule: str
    opens_block: bool = False


BONEYARD_OPEN = re.compile(r"^\s*/\*")
BONEYARD_CLOSE = re.compile(r"\*/")
NOTE_OPEN = re.compile(r"^\s*\[\[")
NOTE_CLOSE = re.compile(r"\]\]")
PAGE_BREAK = re.compile(r"^={3,}\s*$")
SECTION = re.compile(r"^(#{1,6})(?:\s+|$)(.*)$")
SYNOPSIS = re.compile(r"^=(?!=)(.*)$")
CENTERED = re.compile(r"^>(.*)<\s*$")
FORCED_SCENE_HEADING = re.compile(r"^\.[^.]")
SCENE_HEADING = re.compile(r"^(INT|EXT|EST|INT/EXT|I/E)\b", re.IGNORECASE)
FORCED_TRANSITION = re.compile(r"^>")
TRANSITION = re.compile(r"^[A-Z\s]+TO:\s*$")
LYRIC = re.compile(r"^~")
FORCED_CHARACTER = re.compile(r"^@")
CHARACTER_NAME = re.compile(r"^[A-Z0-9 .'\-]+$")
CHARACTER_EXTENSION = re.compile(r"\([^)]*\)\s*$")
DUAL_MARKER = re.compile(r"\^\s*$")
TITLE_PAGE_ENTRY = re.compile(r"^\w[\w ]*:.*$")
FORCED_ACTION = re.compile(r"^!")
PARENTHETICAL = re.compile(r"^\s*\(.*\)\s*$")

Predicate = Callable[[str, LineContext], bool]
Rule = tuple[str, Predicate, ElementKind]


def _matches(pattern: re.Pattern[str]) -> Predicate:
    return lambda line, ctx: bool(pattern.match(line))


def _looks_like_character(line: str) -> bool:
    name = DUAL_MARKER.sub("", line.strip()).strip()
    name = CHARACTER_EXTENSION.sub("", name).strip()
    return bool(re.search(r"[A-Z]", name)) and bool(CHARACTER_NAME.match(name))


ROOT_RULES: tuple[Rule, ...] = (
    ("boneyard-open", _matches(BONEYARD_OPEN), ElementKind.BONEYARD),
    ("note-open", _matches(NOTE_OPEN), ElementKind.NOTE),
    ("page-break", _matches(PAGE_BREAK), ElementKind.PAGE_BREAK),
    ("section", _matches(SECTION), ElementKind.SECTION),
    ("synopsis", _matches(SYNOPSIS), ElementKind.SYNOPSIS),
    ("centered", _matches(CENTERED), ElementKind.CENTERED),
    (
        "forced-scene-heading",
        _matches(FORCED_SCENE_HEADING),
        ElementKind.SCENE_HEADING,
    ),
    (
        "scene-heading",
        lambda line, ctx: ctx.previous_blank and bool(SCENE_HEADING.match(line)),
        ElementKind.SCENE_HEADING,
    ),
    ("forced-transition", _matches(FORCED_TRANSITION), ElementKind.TRANSITION),
    (
        "transition",
        lambda line, ctx: ctx.previous_blank and bool(TRANSITION.match(line)),
        ElementKind.TRANSITION,
    ),
    ("lyric", _matches(LYRIC), ElementKind.LYRIC),
    ("forced-character", _matches(FORCED_CHARACTER), ElementKind.CHARACTER),
    (
        "character-cue",
        lambda line, ctx: ctx.previous_blank and _looks_like_character(line),
        ElementKind.CHARACTER,
    ),
    (
        "title-page-entry",
        lambda line, ctx: not ctx.body_started
        and bool(TITLE_PAGE_ENTRY.match(line)),
        ElementKind.TITLE_PAGE_ENTRY,
    ),
    ("forced-action", _matches(FORCED_ACTION), ElementKind.ACTION),
    ("action", lambda line, ctx: True, ElementKind.ACTION),
)

DIALOGUE_RULES: tuple[Rule, ...] = (
    ("boneyard-open", _matches(BONEYARD_OPEN), ElementKind.BONEYARD),
    ("note-open", _matches(NOTE_OPEN), ElementKind.NOTE),
    ("parenthetical", _matches(PARENTHETICAL), ElementKind.PARENTHETICAL),
    ("dialogue", lambda line, ctx: True, ElementKind.DIALOGUE),
)


def closes_on_same_line(line: str, kind: ElementKind) -> bool:
    """Whether a note or boneyard opened on ``line`` also closes there."""
    if kind is ElementKind.NOTE:
        opening = line.index("[[") + 2
        return bool(NOTE_CLOSE.search(line, opening))
    if kind is ElementKind.BONEYARD:
        opening = line.index("/*") + 2
        return bool(BONEYARD_CLOSE.search(line, opening))
    return True


def classify_line(line: str, context: LineContext | None = None) -> Classification:
    """Classify a single non-blank line.

    Args:
        line: The raw source line (blank lines are handled by the parser)
        context: Surroundings of the line; defaults to a line in the body
            preceded by a blank line

    Returns:
        The first matching rule's element kind and name
    """
    ctx = context or LineContext()
    rules = DIALOGUE_RULES if ctx.mode is ParserMode.DIALOGUE else ROOT_RULES
    for name, predicate, kind in rules:
        if predicate(line, ctx):
            opens_block = kind is ElementKind.CHARACTER or (
                kind in (ElementKind.NOTE, ElementKind.BONEYARD)
                and not closes_on_same_line(line, kind)
            )
            return Classification(kind=kind, rule=name, opens_block=opens_block)
    return Classification(kind=ElementKind.ACTION, rule="action")


def is_blank(line: str) -> bool:
    """Whether a line contains only whitespace."""
    return not line.strip()
