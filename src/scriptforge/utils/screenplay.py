"""Screenplay-specific utility functions."""

from __future__ import annotations

import re

from scriptforge.parser.models import IntExt


class ScreenplayUtils:
    """Utility functions for scene headings, cues, and prose."""

    HEADING_PREFIX_PATTERN = re.compile(
        r"^(INT\.?\s*/\s*EXT\.?|I/E\.?|INT\.?|EXT\.?|EST\.?)(?=\s|$)\s*",
        re.IGNORECASE,
    )
    SCENE_NUMBER_PATTERN = re.compile(r"\s*#([^#]+)#\s*$")
    EXTENSION_PATTERN = re.compile(r"\(([^)]*)\)\s*$")
    DUAL_MARKER_PATTERN = re.compile(r"\^\s*$")
    WORD_PATTERN = re.compile(r"[A-Za-z']+")

    @staticmethod
    def split_scene_number(heading: str) -> tuple[str, str | None]:
        """Split a trailing ``#n#`` scene number off a heading.

        Args:
            heading: Scene heading text (e.g., "INT. HOUSE - DAY #12#")

        Returns:
            Tuple of (heading without number, scene number or None)
        """
        match = ScreenplayUtils.SCENE_NUMBER_PATTERN.search(heading)
        if not match:
            return heading, None
        return heading[: match.start()].rstrip(), match.group(1).strip()

    @staticmethod
    def parse_int_ext(heading: str) -> IntExt:
        """Classify a heading as interior, exterior, or other."""
        heading_upper = heading.upper().lstrip()
        if re.match(r"^(INT\.?\s*/\s*EXT|I/E)", heading_upper):
            return IntExt.OTHER
        if re.match(r"^INT(\.|\s|$)", heading_upper):
            return IntExt.INT
        if re.match(r"^(EXT|EST)(\.|\s|$)", heading_upper):
            return IntExt.EXT
        return IntExt.OTHER

    @staticmethod
    def extract_location(heading: str) -> str:
        """Extract location from scene heading.

        Args:
            heading: Scene heading text (e.g., "INT. COFFEE SHOP - DAY")

        Returns:
            Extracted location, or an empty string
        """
        rest = ScreenplayUtils.HEADING_PREFIX_PATTERN.sub(
            "", heading.strip(), count=1
        )
        if " - " in rest:
            location, _ = rest.rsplit(" - ", 1)
            return location.strip()
        if rest.strip().startswith("- "):
            return ""
        return rest.strip()

    @staticmethod
    def extract_time(heading: str) -> str:
        """Extract time of day from scene heading.

        Args:
            heading: Scene heading text (e.g., "INT. COFFEE SHOP - DAY")

        Returns:
            Text after the last " - ", or an empty string
        """
        rest = ScreenplayUtils.HEADING_PREFIX_PATTERN.sub(
            "", heading.strip(), count=1
        )
        if " - " not in rest:
            return ""
        return rest.rsplit(" - ", 1)[1].strip()

    @staticmethod
    def parse_scene_heading(heading: str) -> tuple[IntExt, str, str]:
        """Parse a scene heading into (int_ext, location, time_of_day)."""
        return (
            ScreenplayUtils.parse_int_ext(heading),
            ScreenplayUtils.extract_location(heading),
            ScreenplayUtils.extract_time(heading),
        )

    @staticmethod
    def strip_inline_markup(text: str) -> str:
        """Remove bold, italic, and underline emphasis markers."""
        text = re.sub(r"\*{3}(.+?)\*{3}", r"\1", text)
        text = re.sub(r"\*{2}(.+?)\*{2}", r"\1", text)
        text = re.sub(r"\*(.+?)\*", r"\1", text)
        return re.sub(r"_(.+?)_", r"\1", text)

    @staticmethod
    def parse_character_cue(cue: str) -> tuple[str, str | None, bool]:
        """Split a cue into (normalized name, extension, dual marker).

        Args:
            cue: Cue text without any forcing ``@`` (e.g., "JAKE (V.O.) ^")

        Returns:
            Tuple of (name, extension or None, whether the cue is dual)
        """
        text = cue.strip()
        dual = bool(ScreenplayUtils.DUAL_MARKER_PATTERN.search(text))
        if dual:
            text = ScreenplayUtils.DUAL_MARKER_PATTERN.sub("", text).strip()
        extension = None
        match = ScreenplayUtils.EXTENSION_PATTERN.search(text)
        if match:
            extension = match.group(1).strip() or None
            text = text[: match.start()].strip()
        name = ScreenplayUtils.strip_inline_markup(text).upper().strip()
        return name, extension, dual

    @staticmethod
    def words(text: str) -> list[str]:
        """Lower-cased word tokens of a passage."""
        tokens = (
            word.lower().strip("'")
            for word in ScreenplayUtils.WORD_PATTERN.findall(text)
        )
        return [token for token in tokens if token]
