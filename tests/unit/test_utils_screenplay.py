"""Tests for screenplay utility functions."""

import pytest

from scriptforge.parser.models import IntExt
from scriptforge.utils.screenplay import ScreenplayUtils


class TestSceneHeadings:
    """Test scene heading helpers."""

    @pytest.mark.parametrize(
        ("heading", "expected"),
        [
            ("INT. OFFICE - DAY", IntExt.INT),
            ("int office - day", IntExt.INT),
            ("EXT. PARKING LOT - NIGHT", IntExt.EXT),
            ("EST. CITY - DAWN", IntExt.EXT),
            ("INT./EXT. CAR - DAY", IntExt.OTHER),
            ("I/E TRUCK - NIGHT", IntExt.OTHER),
            ("THE VOID", IntExt.OTHER),
            ("INTERIOR DECORATOR", IntExt.OTHER),
        ],
    )
    def test_parse_int_ext(self, heading, expected):
        """Interior and exterior prefixes are recognized."""
        assert ScreenplayUtils.parse_int_ext(heading) == expected

    @pytest.mark.parametrize(
        ("heading", "location", "time"),
        [
            ("INT. COFFEE SHOP - DAY", "COFFEE SHOP", "DAY"),
            ("EXT. BEACH - SUNSET - LATER", "BEACH - SUNSET", "LATER"),
            ("INT. BASEMENT", "BASEMENT", ""),
            ("INT./EXT. CAR - MOVING", "CAR", "MOVING"),
            ("INT. - NIGHT", "", ""),
        ],
    )
    def test_location_and_time(self, heading, location, time):
        """Location is everything before the last dash; time comes after it."""
        assert ScreenplayUtils.extract_location(heading) == location
        assert ScreenplayUtils.extract_time(heading) == time

    def test_parse_scene_heading(self):
        """All three parts at once."""
        assert ScreenplayUtils.parse_scene_heading("EXT. PARK - NIGHT") == (
            IntExt.EXT,
            "PARK",
            "NIGHT",
        )

    def test_split_scene_number(self):
        """A trailing #n# is split off."""
        assert ScreenplayUtils.split_scene_number("INT. HOUSE - DAY #12A#") == (
            "INT. HOUSE - DAY",
            "12A",
        )
        assert ScreenplayUtils.split_scene_number("INT. HOUSE - DAY") == (
            "INT. HOUSE - DAY",
            None,
        )


class TestCharacterCues:
    """Test cue parsing."""

    @pytest.mark.parametrize(
        ("cue", "expected"),
        [
            ("JAKE", ("JAKE", None, False)),
            ("MARIA (V.O.)", ("MARIA", "V.O.", False)),
            ("JAKE (CONT'D) ^", ("JAKE", "CONT'D", True)),
            ("McCLANE", ("MCCLANE", None, False)),
            ("*BOB*", ("BOB", None, False)),
            ("ANNA ()", ("ANNA", None, False)),
        ],
    )
    def test_parse_character_cue(self, cue, expected):
        """Names are upper-cased and extensions split off."""
        assert ScreenplayUtils.parse_character_cue(cue) == expected


class TestProse:
    """Test prose helpers."""

    def test_strip_inline_markup(self):
        """Emphasis markers disappear, their text stays."""
        assert ScreenplayUtils.strip_inline_markup(
            "***bold italic*** **bold** *italic* _under_"
        ) == ("bold italic bold italic under")

    def test_words(self):
        """Words are lower-cased with surrounding quotes trimmed."""
        assert ScreenplayUtils.words("Keys. 'Keys!' Don't go.") == [
            "keys",
            "keys",
            "don't",
            "go",
        ]
