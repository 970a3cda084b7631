"""Fountain format validation over a parsed document."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from scriptforge.config import get_logger
from scriptforge.parser.lexer import is_blank
from scriptforge.parser.models import Document, Element, ElementKind

logger = get_logger(__name__)


class Severity(str, Enum):
    """How serious a validation issue is."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Sort rank, most severe first."""
        return {"error": 0, "warning": 1, "info": 2}[self.value]


@dataclass(frozen=True)
class Issue:
    """A single validation finding."""

    severity: Severity
    line: int
    rule: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert the issue to a JSON-friendly dictionary."""
        return {
            "severity": self.severity.value,
            "line": self.line,
            "rule": self.rule,
            "message": self.message,
        }


def _truncate(text: str, max_len: int = 40) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def names_are_similar(first: str, second: str) -> bool:
    """Whether two names differ by exactly one edit (Levenshtein distance 1)."""
    if first == second or abs(len(first) - len(second)) > 1:
        return False
    if len(first) == len(second):
        return sum(a != b for a, b in zip(first, second, strict=True)) == 1
    shorter, longer = sorted((first, second), key=len)
    for index in range(len(longer)):
        if longer[:index] + longer[index + 1 :] == shorter:
            return True
    return False


class DocumentValidator:
    """Run every Fountain format rule over a document.

    Rules are independent of each other and all run on every call. Issues
    come back sorted by line, then by severity.
    """

    VALID_HEADING_PREFIX: ClassVar[re.Pattern[str]] = re.compile(
        r"^(INT\.?\s*/\s*EXT\.?|EXT\.?|INT\.?|EST\.?|I/E\.?)\s", re.IGNORECASE
    )
    CHARACTER_NAME_CHARS: ClassVar[re.Pattern[str]] = re.compile(r"[^A-Z0-9 .'\-#]")
    LONG_DIALOGUE_CHARS: ClassVar[int] = 500

    def __init__(self) -> None:
        """Initialize the validator with its rule table."""
        self.checks: list[Callable[[Document], list[Issue]]] = [
            self._check_title_page,
            self._check_unterminated_blocks,
            self._check_scene_headings,
            self._check_dialogue_blocks,
            self._check_transitions,
            self._check_scenes,
            self._check_similar_names,
        ]

    def validate(self, document: Document) -> list[Issue]:
        """Validate a parsed document.

        Args:
            document: Parsed document

        Returns:
            Issues sorted by line, then severity (error before warning before info)
        """
        issues: list[Issue] = []
        for check in self.checks:
            issues.extend(check(document))
        issues.sort(key=lambda issue: (issue.line, issue.severity.rank))
        logger.debug(
            "Validated document",
            issues=len(issues),
            errors=sum(1 for i in issues if i.severity is Severity.ERROR),
        )
        return issues

    def _check_title_page(self, document: Document) -> list[Issue]:
        title_page = document.title_page
        if not title_page:
            return [
                Issue(
                    Severity.WARNING,
                    1,
                    "missing-title-page",
                    "Screenplay is missing a title page. Consider adding Title, "
                    "Credit, Author, and Draft date fields.",
                )
            ]
        issues = []
        if not title_page.get("title"):
            issues.append(
                Issue(
                    Severity.WARNING,
                    1,
                    "missing-title",
                    'Title page is missing the "Title" field.',
                )
            )
        if not title_page.get("author") and not title_page.get("authors"):
            issues.append(
                Issue(
                    Severity.INFO,
                    1,
                    "missing-author",
                    'Title page is missing an "Author" or "Authors" field.',
                )
            )
        return issues

    def _check_unterminated_blocks(self, document: Document) -> list[Issue]:
        issues = []
        for element in document.elements:
            if not element.unterminated:
                continue
            if element.kind is ElementKind.NOTE:
                rule, delimiter = "unterminated-note", "]]"
            else:
                rule, delimiter = "unterminated-boneyard", "*/"
            issues.append(
                Issue(
                    Severity.ERROR,
                    element.start_line,
                    rule,
                    f"{element.kind.value.capitalize()} opened here is never "
                    f"closed with {delimiter}; it runs to the end of the file.",
                )
            )
        return issues

    def _check_scene_headings(self, document: Document) -> list[Issue]:
        issues = []
        for element in document.elements:
            if element.kind is not ElementKind.SCENE_HEADING:
                continue
            text = element.text.strip()
            line = element.start_line

            if not text:
                issues.append(
                    Issue(
                        Severity.WARNING,
                        line,
                        "empty-scene-heading",
                        "Scene heading has no text.",
                    )
                )
            else:
                if not element.forced and not self.VALID_HEADING_PREFIX.match(text):
                    issues.append(
                        Issue(
                            Severity.WARNING,
                            line,
                            "scene-heading-prefix",
                            f'Scene heading "{_truncate(text)}" does not start with '
                            "a standard prefix (INT., EXT., INT./EXT., EST., I/E.).",
                        )
                    )
                if text == text.lower() and re.search(r"[a-z]", text):
                    issues.append(
                        Issue(
                            Severity.INFO,
                            line,
                            "scene-heading-case",
                            "Scene headings are conventionally written in ALL CAPS.",
                        )
                    )
                if not element.forced and " - " not in text:
                    issues.append(
                        Issue(
                            Severity.INFO,
                            line,
                            "scene-heading-structure",
                            'Scene heading is missing the " - " separator between '
                            "location and time of day.",
                        )
                    )

            if line < document.line_count and not is_blank(document.lines[line]):
                issues.append(
                    Issue(
                        Severity.WARNING,
                        line,
                        "missing-blank-after-heading",
                        "Scene heading should be followed by a blank line.",
                    )
                )
        return issues

    def _check_dialogue_blocks(self, document: Document) -> list[Issue]:
        issues = []
        elements = document.elements
        for position, element in enumerate(elements):
            previous = elements[position - 1] if position > 0 else None
            following = elements[position + 1] if position + 1 < len(elements) else None
            if element.kind is ElementKind.CHARACTER:
                issues.extend(self._check_character_cue(element, following))
            elif element.kind is ElementKind.DIALOGUE:
                issues.extend(self._check_dialogue(element, previous))
            elif element.kind is ElementKind.PARENTHETICAL:
                issues.extend(self._check_parenthetical(element, previous))
        return issues

    def _check_character_cue(
        self, element: Element, following: Element | None
    ) -> list[Issue]:
        issues = []
        name = element.character or element.text
        if following is not None and following.kind is ElementKind.CHARACTER:
            issues.append(
                Issue(
                    Severity.WARNING,
                    element.start_line,
                    "consecutive-character-cues",
                    f'Character cue "{name}" is immediately followed by another '
                    f'cue ("{following.character or following.text}").',
                )
            )
        elif following is None or following.kind not in (
            ElementKind.DIALOGUE,
            ElementKind.PARENTHETICAL,
        ):
            issues.append(
                Issue(
                    Severity.WARNING,
                    element.start_line,
                    "empty-dialogue-block",
                    f'Character "{name}" has no following dialogue.',
                )
            )
        if element.character and self.CHARACTER_NAME_CHARS.search(element.character):
            issues.append(
                Issue(
                    Severity.INFO,
                    element.start_line,
                    "character-name-chars",
                    f'Character name "{element.character}" contains unusual '
                    "characters.",
                )
            )
        return issues

    def _check_dialogue(
        self, element: Element, previous: Element | None
    ) -> list[Issue]:
        issues = []
        if previous is not None and previous.kind not in (
            ElementKind.CHARACTER,
            ElementKind.PARENTHETICAL,
            ElementKind.DIALOGUE,
            ElementKind.NOTE,
            ElementKind.BONEYARD,
        ):
            issues.append(
                Issue(
                    Severity.ERROR,
                    element.start_line,
                    "orphaned-dialogue",
                    f'Dialogue line "{_truncate(element.text)}" is not preceded '
                    "by a character cue.",
                )
            )
        if len(element.text) > self.LONG_DIALOGUE_CHARS:
            issues.append(
                Issue(
                    Severity.WARNING,
                    element.start_line,
                    "long-dialogue",
                    "This dialogue block is unusually long. Is it intended to be "
                    "action?",
                )
            )
        return issues

    def _check_parenthetical(
        self, element: Element, previous: Element | None
    ) -> list[Issue]:
        issues = []
        if previous is not None and previous.kind not in (
            ElementKind.CHARACTER,
            ElementKind.DIALOGUE,
            ElementKind.PARENTHETICAL,
            ElementKind.NOTE,
            ElementKind.BONEYARD,
        ):
            issues.append(
                Issue(
                    Severity.ERROR,
                    element.start_line,
                    "orphaned-parenthetical",
                    "Parenthetical is not within a dialogue block.",
                )
            )
        text = element.text.strip()
        if not (text.startswith("(") and text.endswith(")")):
            issues.append(
                Issue(
                    Severity.WARNING,
                    element.start_line,
                    "parenthetical-format",
                    'Parenthetical should be enclosed in parentheses, e.g. "(softly)".',
                )
            )
        return issues

    def _check_transitions(self, document: Document) -> list[Issue]:
        return [
            Issue(
                Severity.INFO,
                element.start_line,
                "transition-case",
                "Transitions are conventionally written in ALL CAPS.",
            )
            for element in document.elements
            if element.kind is ElementKind.TRANSITION
            and element.text.strip() != element.text.strip().upper()
        ]

    def _check_scenes(self, document: Document) -> list[Issue]:
        issues = []
        if not document.scenes and any(
            element.kind is not ElementKind.TITLE_PAGE_ENTRY
            for element in document.elements
        ):
            issues.append(
                Issue(
                    Severity.WARNING,
                    1,
                    "no-scenes",
                    "No scene headings were found. The screenplay may be missing "
                    "structure.",
                )
            )

        first_use: dict[str, int] = {}
        for scene in document.scenes:
            if not scene.scene_number:
                continue
            if scene.scene_number in first_use:
                issues.append(
                    Issue(
                        Severity.ERROR,
                        scene.start_line,
                        "duplicate-scene-number",
                        f'Scene number "{scene.scene_number}" is already used at '
                        f"line {first_use[scene.scene_number]}.",
                    )
                )
            else:
                first_use[scene.scene_number] = scene.start_line

        for scene in document.scenes:
            if not scene.elements:
                issues.append(
                    Issue(
                        Severity.INFO,
                        scene.start_line,
                        "empty-scene",
                        f'Scene "{_truncate(scene.heading)}" contains no elements.',
                    )
                )
        return issues

    def _check_similar_names(self, document: Document) -> list[Issue]:
        names = document.characters
        first_lines: dict[str, int] = {}
        for element in document.elements:
            if element.kind is ElementKind.CHARACTER and element.character:
                first_lines.setdefault(element.character, element.start_line)

        issues = []
        for index, first in enumerate(names):
            for second in names[index + 1 :]:
                if names_are_similar(first, second):
                    issues.append(
                        Issue(
                            Severity.INFO,
                            first_lines.get(second, 1),
                            "similar-character-names",
                            f'Character names "{first}" and "{second}" are very '
                            "similar. Is this intentional?",
                        )
                    )
        return issues


def validate(document: Document) -> list[Issue]:
    """Validate a parsed document with every format rule."""
    return DocumentValidator().validate(document)
