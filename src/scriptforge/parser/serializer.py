"""Serialize a parsed document back to Fountain text.

Output is normalized: one blank line between blocks, none inside a dialogue
block, and a single trailing newline. Forcing markers are written whenever an
element's plain text would classify differently when read back.
"""

from __future__ import annotations

from scriptforge.parser.lexer import LineContext, classify_line, is_blank
from scriptforge.parser.models import Document, Element, ElementKind

_IN_BLOCK_KINDS = (ElementKind.DIALOGUE, ElementKind.PARENTHETICAL)
_ASIDE_KINDS = (ElementKind.NOTE, ElementKind.BONEYARD)


class FountainSerializer:
    """Render :class:`Document` objects as Fountain text."""

    def serialize(self, document: Document) -> str:
        """Serialize a document.

        Args:
            document: Parsed document

        Returns:
            Fountain text; an empty document serializes to an empty string
        """
        out: list[str] = []
        body: list[Element] = []
        for element in document.elements:
            if element.kind is ElementKind.TITLE_PAGE_ENTRY:
                out.extend(self._render_title_entry(element))
            else:
                body.append(element)

        in_dialogue = False
        for position, element in enumerate(body):
            if in_dialogue and (
                element.kind in _IN_BLOCK_KINDS
                or (
                    element.kind in _ASIDE_KINDS
                    and self._dialogue_resumes(body, position)
                )
            ):
                out.append(self._render(element, LineContext()))
                continue

            in_dialogue = False
            if out:
                out.append("")
            context = LineContext(previous_blank=True, body_started=bool(out))
            out.append(self._render(element, context))
            in_dialogue = element.kind is ElementKind.CHARACTER

        return "\n".join(out) + "\n" if out else ""

    @staticmethod
    def _dialogue_resumes(body: list[Element], position: int) -> bool:
        """Whether dialogue continues after the notes starting at ``position``."""
        for element in body[position:]:
            if element.kind in _ASIDE_KINDS:
                continue
            return element.kind in _IN_BLOCK_KINDS
        return False

    @staticmethod
    def _render_title_entry(element: Element) -> list[str]:
        key = element.key or "Title"
        first, *rest = element.text.split("\n")
        lines = [f"{key}: {first}" if first else f"{key}:"]
        lines.extend(f"   {line}" for line in rest)
        return lines

    def _render(self, element: Element, context: LineContext) -> str:
        kind = element.kind
        text = element.text

        if kind is ElementKind.SCENE_HEADING:
            if element.forced or classify_line(text, context).rule != "scene-heading":
                line = f".{text}" if text and not text.startswith(".") else f". {text}"
            else:
                line = text
            if element.scene_number:
                line = f"{line} #{element.scene_number}#"
            return line

        if kind is ElementKind.CHARACTER:
            if element.forced or classify_line(text, context).rule != "character-cue":
                return f"@{text}"
            return text

        if kind is ElementKind.ACTION:
            first = text.split("\n", 1)[0]
            if (
                element.forced
                or is_blank(first)
                or classify_line(first, context).rule != "action"
            ):
                return f"!{text}"
            return text

        if kind is ElementKind.TRANSITION:
            if element.forced or classify_line(text, context).rule != "transition":
                return f"> {text}" if text else ">"
            return text

        if kind is ElementKind.CENTERED:
            return f"> {text} <"
        if kind is ElementKind.SECTION:
            marker = "#" * max(element.depth, 1)
            return f"{marker} {text}" if text else marker
        if kind is ElementKind.SYNOPSIS:
            return f"= {text}" if text else "="
        if kind is ElementKind.LYRIC:
            return f"~{text}"
        if kind is ElementKind.NOTE:
            return f"[[{text}" if element.unterminated else f"[[{text}]]"
        if kind is ElementKind.BONEYARD:
            return f"/*{text}" if element.unterminated else f"/*{text}*/"
        if kind is ElementKind.PAGE_BREAK:
            return "==="
        return text


def serialize(document: Document) -> str:
    """Serialize a :class:`Document` to Fountain text."""
    return FountainSerializer().serialize(document)
