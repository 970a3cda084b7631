"""Line-array helpers shared by the mutating tools."""

from __future__ import annotations

from collections.abc import Iterable

from scriptforge.parser.models import Document, Element, ElementKind


def split_lines(text: str) -> list[str]:
    """Split normalized text into physical lines."""
    return text.split("\n")


def content_lines(content: str) -> list[str]:
    """Lines of inserted content with blank lines trimmed from both ends."""
    lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def splice_block(
    lines: list[str], start: int, end: int, block: list[str]
) -> list[str]:
    """Replace ``lines[start:end]`` with ``block``.

    Blank lines around the seam collapse to exactly one blank line between
    non-empty neighbours. A trailing newline on the original text is kept.
    """
    before = lines[:start]
    after = lines[end:]
    ends_with_newline = bool(lines) and lines[-1] == "" and len(lines) > 1

    while before and not before[-1].strip():
        before.pop()
    while after and not after[0].strip():
        after.pop(0)

    spliced = list(before)
    if spliced and block:
        spliced.append("")
    spliced.extend(block)
    if after:
        if spliced:
            spliced.append("")
        spliced.extend(after)
    elif ends_with_newline and spliced:
        spliced.append("")
    return spliced


def body_start_index(document: Document) -> int:
    """0-based line index where a scene inserted at the start belongs.

    That is the first element after the title page, or the end of the text
    when there is no body.
    """
    for element in document.elements:
        if element.kind is not ElementKind.TITLE_PAGE_ENTRY:
            return element.start_line - 1
    if document.title_page:
        return document.line_count
    return 0


def count_occurrences(text: str, search: str) -> int:
    """Count non-overlapping occurrences; an empty search never matches."""
    if not search:
        return 0
    return text.count(search)


def numbered(lines: list[str] | tuple[str, ...], first_line: int) -> str:
    """Prefix each line with its 1-based line number."""
    return "\n".join(f"{first_line + i}: {line}" for i, line in enumerate(lines))


def first_action_line(elements: Iterable[Element], limit: int) -> str:
    """First line of the first action element, truncated to ``limit``."""
    for element in elements:
        if element.kind is ElementKind.ACTION:
            summary = element.text.split("\n")[0]
            if len(summary) > limit:
                summary = summary[: limit - 3] + "..."
            return summary
    return ""
