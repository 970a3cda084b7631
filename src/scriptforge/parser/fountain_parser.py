"""Fountain screenplay parser.

The parser is a line-driven state machine over the modes root, dialogue,
note and boneyard. It never raises: anything it cannot place becomes action.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from scriptforge.config import get_logger
from scriptforge.exceptions import ScriptForgeFileNotFoundError
from scriptforge.parser.lexer import (
    BONEYARD_CLOSE,
    CENTERED,
    NOTE_CLOSE,
    SECTION,
    LineContext,
    ParserMode,
    classify_line,
    is_blank,
)
from scriptforge.parser.models import Document, Element, ElementKind, Scene
from scriptforge.utils.screenplay import ScreenplayUtils

logger = get_logger(__name__)

TITLE_CONTINUATION = re.compile(r"^(?: {3,}|\t)\S")


def normalize_newlines(text: str) -> str:
    """Convert CRLF and CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


@dataclass
class _OpenBlock:
    """A multi-line element still being accumulated."""

    kind: ElementKind
    start_line: int
    parts: list[str]
    forced: bool = False
    key: str | None = None
    end_line: int = 0

    def __post_init__(self) -> None:
        self.end_line = self.end_line or self.start_line

    def append(self, part: str, line_number: int) -> None:
        self.parts.append(part)
        self.end_line = line_number

    def finish(self, unterminated: bool = False) -> Element:
        text = "\n".join(self.parts)
        if self.kind is not ElementKind.ACTION:
            text = text.strip()
        return Element(
            kind=self.kind,
            text=text,
            start_line=self.start_line,
            end_line=self.end_line,
            forced=self.forced,
            key=self.key,
            unterminated=unterminated,
        )


class FountainParser:
    """Parse Fountain screenplay text into a :class:`Document`."""

    def parse(self, text: str) -> Document:
        """Parse Fountain text.

        Args:
            text: Raw Fountain text; any line ending style is accepted

        Returns:
            The parsed document. Malformed input degrades to action elements.
        """
        lines = tuple(normalize_newlines(text).split("\n"))
        elements = self._parse_elements(lines)
        scenes = self._build_scenes(elements, len(lines))
        title_page = {
            (element.key or "").lower(): element.text
            for element in elements
            if element.kind is ElementKind.TITLE_PAGE_ENTRY
        }
        logger.debug(
            "Parsed Fountain document",
            lines=len(lines),
            elements=len(elements),
            scenes=len(scenes),
        )
        return Document(
            lines=lines,
            elements=tuple(elements),
            scenes=tuple(scenes),
            title_page=MappingProxyType(title_page),
        )

    def parse_file(self, file_path: Path) -> Document:
        """Parse a Fountain file from disk.

        Args:
            file_path: Path to the Fountain file

        Returns:
            The parsed document

        Raises:
            ScriptForgeFileNotFoundError: If the file does not exist
        """
        if not file_path.exists():
            raise ScriptForgeFileNotFoundError(
                message=f"Fountain file not found: {file_path}",
                hint="Check the path, or create the file first",
                details={"path": str(file_path)},
            )
        return self.parse(file_path.read_text(encoding="utf-8"))

    def _parse_elements(self, lines: tuple[str, ...]) -> list[Element]:
        elements: list[Element] = []
        mode = ParserMode.ROOT
        resume_mode = ParserMode.ROOT
        block: _OpenBlock | None = None
        body_started = False
        previous_blank = True
        speaker: str | None = None

        for number, line in enumerate(lines, start=1):
            if mode in (ParserMode.NOTE, ParserMode.BONEYARD) and block is not None:
                closer = NOTE_CLOSE if mode is ParserMode.NOTE else BONEYARD_CLOSE
                match = closer.search(line)
                if match:
                    block.append(line[: match.start()], number)
                    elements.append(block.finish())
                    block = None
                    mode = resume_mode
                    previous_blank = False
                else:
                    block.append(line, number)
                continue

            if is_blank(line):
                if block is not None:
                    elements.append(block.finish())
                    block = None
                if mode is ParserMode.DIALOGUE:
                    mode = ParserMode.ROOT
                    speaker = None
                body_started = True
                previous_blank = True
                continue

            if block is not None and block.kind is ElementKind.ACTION:
                continuation = classify_line(line, LineContext(previous_blank=False))
                if continuation.kind is ElementKind.ACTION:
                    block.append(line.rstrip(), number)
                    continue
                elements.append(block.finish())
                block = None
            elif block is not None:
                if TITLE_CONTINUATION.match(line):
                    block.append(line.strip(), number)
                    continue
                elements.append(block.finish())
                block = None

            classification = classify_line(
                line,
                LineContext(
                    previous_blank=previous_blank,
                    body_started=body_started,
                    mode=mode,
                ),
            )
            kind = classification.kind
            forced = classification.rule.startswith("forced-")
            previous_blank = False
            if kind is not ElementKind.TITLE_PAGE_ENTRY:
                body_started = True

            if kind in (ElementKind.NOTE, ElementKind.BONEYARD):
                opener = "[[" if kind is ElementKind.NOTE else "/*"
                content = line[line.index(opener) + 2 :]
                if classification.opens_block:
                    block = _OpenBlock(kind=kind, start_line=number, parts=[content])
                    resume_mode = mode
                    mode = (
                        ParserMode.NOTE
                        if kind is ElementKind.NOTE
                        else ParserMode.BONEYARD
                    )
                else:
                    closer = NOTE_CLOSE if kind is ElementKind.NOTE else BONEYARD_CLOSE
                    match = closer.search(content)
                    end = match.start() if match else len(content)
                    elements.append(
                        Element(kind, content[:end].strip(), number, number)
                    )
            elif kind is ElementKind.ACTION:
                first = line[1:] if forced else line
                block = _OpenBlock(
                    kind=kind, start_line=number, parts=[first.rstrip()], forced=forced
                )
            elif kind is ElementKind.TITLE_PAGE_ENTRY:
                key, _, value = line.partition(":")
                block = _OpenBlock(
                    kind=kind, start_line=number, parts=[value.strip()], key=key.strip()
                )
            elif kind is ElementKind.CHARACTER:
                cue = line.strip()[1:].strip() if forced else line.strip()
                name, extension, dual = ScreenplayUtils.parse_character_cue(cue)
                elements.append(
                    Element(
                        kind=kind,
                        text=cue,
                        start_line=number,
                        end_line=number,
                        forced=forced,
                        character=name,
                        extension=extension,
                        dual=dual,
                    )
                )
                mode = ParserMode.DIALOGUE
                speaker = name
            elif kind in (ElementKind.DIALOGUE, ElementKind.PARENTHETICAL):
                elements.append(
                    Element(
                        kind=kind,
                        text=line.strip(),
                        start_line=number,
                        end_line=number,
                        character=speaker,
                    )
                )
            else:
                elements.append(self._single_line_element(line, number, kind, forced))

        if block is not None:
            unterminated = mode in (ParserMode.NOTE, ParserMode.BONEYARD)
            if unterminated:
                logger.debug(
                    "Unterminated block runs to end of file",
                    kind=block.kind.value,
                    start_line=block.start_line,
                )
            elements.append(block.finish(unterminated=unterminated))

        return elements

    def _single_line_element(
        self, line: str, number: int, kind: ElementKind, forced: bool
    ) -> Element:
        """Build the element for a kind that always occupies one line."""
        if kind is ElementKind.SCENE_HEADING:
            raw = line[1:].strip() if forced else line.strip()
            heading, scene_number = ScreenplayUtils.split_scene_number(raw)
            return Element(
                kind, heading, number, number, forced=forced, scene_number=scene_number
            )
        if kind is ElementKind.SECTION:
            match = SECTION.match(line)
            depth = len(match.group(1)) if match else 1
            text = match.group(2).strip() if match else line.lstrip("#").strip()
            return Element(kind, text, number, number, depth=depth)
        if kind is ElementKind.CENTERED:
            match = CENTERED.match(line)
            text = match.group(1).strip() if match else ""
            return Element(kind, text, number, number)
        if kind is ElementKind.TRANSITION:
            text = line[1:].strip() if forced else line.strip()
            return Element(kind, text, number, number, forced=forced)
        if kind in (ElementKind.SYNOPSIS, ElementKind.LYRIC):
            return Element(kind, line[1:].strip(), number, number)
        return Element(kind, "", number, number)

    def _build_scenes(self, elements: list[Element], line_count: int) -> list[Scene]:
        """Group elements under their scene headings."""
        heading_positions = [
            position
            for position, element in enumerate(elements)
            if element.kind is ElementKind.SCENE_HEADING
        ]
        scenes: list[Scene] = []
        for index, position in enumerate(heading_positions):
            heading = elements[position]
            if index + 1 < len(heading_positions):
                next_position = heading_positions[index + 1]
                end_line = elements[next_position].start_line - 1
            else:
                next_position = len(elements)
                end_line = line_count
            body = tuple(elements[position + 1 : next_position])
            characters = dict.fromkeys(
                element.character
                for element in body
                if element.kind is ElementKind.CHARACTER and element.character
            )
            int_ext, location, time_of_day = ScreenplayUtils.parse_scene_heading(
                heading.text
            )
            scenes.append(
                Scene(
                    index=index,
                    heading=heading.text,
                    int_ext=int_ext,
                    location=location,
                    time_of_day=time_of_day,
                    scene_number=heading.scene_number,
                    start_line=heading.start_line,
                    end_line=end_line,
                    characters=tuple(name for name in characters if name),
                    elements=body,
                )
            )
        return scenes


def parse(text: str) -> Document:
    """Parse Fountain text into a :class:`Document`."""
    return FountainParser().parse(text)
