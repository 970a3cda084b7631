"""Tests for the Fountain parser."""

import pytest

from scriptforge.exceptions import ScriptForgeFileNotFoundError
from scriptforge.parser import (
    ElementKind,
    FountainParser,
    IntExt,
    normalize_newlines,
    parse,
)


def kinds(document):
    """Element kinds of a document, in order."""
    return [element.kind for element in document.elements]


class TestBasicParsing:
    """Test parsing of small documents."""

    def test_single_scene_with_dialogue(self):
        """A heading, a cue and one line of dialogue."""
        document = parse("INT. OFFICE - DAY\n\nJAKE\nHello.\n")

        assert len(document.scenes) == 1
        assert document.scenes[0].heading == "INT. OFFICE - DAY"
        assert document.characters == ["JAKE"]
        dialogue = [e for e in document.elements if e.kind is ElementKind.DIALOGUE]
        assert [e.text for e in dialogue] == ["Hello."]
        assert dialogue[0].character == "JAKE"

    def test_empty_text(self):
        """Empty input is a valid document without scenes."""
        document = parse("")
        assert document.elements == ()
        assert document.scenes == ()
        assert document.line_count == 1
        assert document.preamble_end_line == 1

    def test_no_scenes_is_valid(self):
        """Text without headings parses to action."""
        document = parse("Just some prose.\nMore prose.")
        assert document.scenes == ()
        assert kinds(document) == [ElementKind.ACTION]
        assert document.elements[0].text == "Just some prose.\nMore prose."
        assert document.elements[0].start_line == 1
        assert document.elements[0].end_line == 2

    def test_line_endings_are_normalized(self):
        """CRLF and CR input parse the same as LF input."""
        lf = parse("INT. A - DAY\n\nJAKE\nHi.\n")
        crlf = parse("INT. A - DAY\r\n\r\nJAKE\r\nHi.\r\n")
        cr = parse("INT. A - DAY\r\rJAKE\rHi.\r")
        assert crlf.elements == lf.elements
        assert cr.elements == lf.elements

    def test_normalize_newlines(self):
        """Both foreign line endings become LF."""
        assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"


class TestSampleScreenplay:
    """Test parsing of the sample fixture."""

    def test_title_page(self, sample_document):
        """Title page keys are lower-cased."""
        assert dict(sample_document.title_page) == {
            "title": "The Long Night",
            "credit": "Written by",
            "author": "Dana Reyes",
            "draft date": "2026-01-05",
        }

    def test_scene_ranges(self, sample_document):
        """Scenes run from their heading to the line before the next heading."""
        ranges = [(s.start_line, s.end_line) for s in sample_document.scenes]
        assert ranges == [(6, 18), (19, 25), (26, 32), (33, 36)]
        assert sample_document.preamble_end_line == 5
        assert sample_document.line_count == 36

    def test_scene_attributes(self, sample_document):
        """Headings are split into INT/EXT, location and time of day."""
        first, second, third, _ = sample_document.scenes
        assert first.int_ext is IntExt.INT
        assert first.location == "OFFICE"
        assert first.time_of_day == "DAY"
        assert second.int_ext is IntExt.EXT
        assert third.location == "JAKE'S TRUCK"
        assert third.time_of_day == "CONTINUOUS"
        assert [s.number for s in sample_document.scenes] == [1, 2, 3, 4]

    def test_scene_characters_in_order_of_appearance(self, sample_document):
        """Characters are listed once each, in speaking order."""
        first, second, third, fourth = sample_document.scenes
        assert first.characters == ("JAKE", "MARIA")
        assert second.characters == ("JAKE",)
        assert third.characters == ("MARIA",)
        assert fourth.characters == ()

    def test_dialogue_block_elements(self, sample_document):
        """Each physical line of a dialogue block is its own element."""
        first = sample_document.scenes[0]
        assert [e.kind for e in first.elements] == [
            ElementKind.ACTION,
            ElementKind.CHARACTER,
            ElementKind.DIALOGUE,
            ElementKind.CHARACTER,
            ElementKind.PARENTHETICAL,
            ElementKind.DIALOGUE,
            ElementKind.TRANSITION,
        ]
        parenthetical = first.elements[4]
        assert parenthetical.text == "(quietly)"
        assert parenthetical.character == "MARIA"

    def test_extension_is_stripped_from_name(self, sample_document):
        """Cue extensions are recorded but not part of the name."""
        cue = sample_document.scenes[2].elements_of(ElementKind.CHARACTER)[0]
        assert cue.text == "MARIA (V.O.)"
        assert cue.character == "MARIA"
        assert cue.extension == "V.O."
        assert sample_document.characters == ["JAKE", "MARIA"]

    def test_locations(self, sample_document):
        """Locations are unique and sorted."""
        assert sample_document.locations == ["JAKE'S TRUCK", "OFFICE", "PARKING LOT"]

    def test_elements_are_ordered_and_disjoint(self, sample_document):
        """Elements never overlap and appear in source order."""
        elements = sample_document.elements
        for element in elements:
            assert element.start_line <= element.end_line
        for previous, current in zip(elements, elements[1:], strict=False):
            assert previous.end_line < current.start_line

    def test_line_range_text(self, sample_document):
        """The raw source of an element can be recovered."""
        cue = sample_document.scenes[0].elements[3]
        assert sample_document.line_range_text(cue.start_line, cue.end_line) == (
            "MARIA"
        )
        scene = sample_document.scenes[1]
        assert sample_document.scene_text(scene).startswith("EXT. PARKING LOT")


class TestDialogueMode:
    """Only a blank line ends a dialogue block."""

    def test_upper_case_line_inside_block_is_dialogue(self):
        """A name-like line right after dialogue is still dialogue."""
        document = parse("INT. A - DAY\n\nMIA\nCoffee.\nBOB\n")
        assert kinds(document)[1:] == [
            ElementKind.CHARACTER,
            ElementKind.DIALOGUE,
            ElementKind.DIALOGUE,
        ]
        assert document.characters == ["MIA"]

    def test_blank_line_ends_block(self):
        """After a blank line a name is a new cue."""
        document = parse("MIA\nCoffee.\n\nBOB\nTea.\n")
        assert document.characters == ["BOB", "MIA"]

    def test_dual_dialogue_marker(self):
        """A trailing caret marks dual dialogue."""
        document = parse("BRICK ^\nScrew retirement.\n")
        cue = document.elements[0]
        assert cue.dual
        assert cue.character == "BRICK"


class TestForcedElements:
    """Forcing markers override the line heuristics."""

    def test_forced_scene_heading(self):
        """A leading period forces a heading with no prefix."""
        document = parse(".FLASHBACK\n\nAna remembers.\n")
        scene = document.scenes[0]
        assert scene.heading == "FLASHBACK"
        assert scene.int_ext is IntExt.OTHER
        assert document.elements[0].forced

    def test_forced_action(self):
        """A leading bang forces action and is dropped from the text."""
        element = parse("!INT. NOT A HEADING\n").elements[0]
        assert element.kind is ElementKind.ACTION
        assert element.text == "INT. NOT A HEADING"
        assert element.forced

    def test_forced_character(self):
        """A leading at sign forces a mixed-case cue."""
        document = parse("@McCLANE\nYippee.\n")
        assert kinds(document) == [ElementKind.CHARACTER, ElementKind.DIALOGUE]
        assert document.elements[0].text == "McCLANE"
        assert document.elements[0].character == "MCCLANE"

    def test_forced_transition(self):
        """A leading angle bracket forces a transition."""
        element = parse("> Fade out\n").elements[0]
        assert element.kind is ElementKind.TRANSITION
        assert element.text == "Fade out"
        assert element.forced


class TestOtherElements:
    """Sections, notes, boneyard and friends."""

    def test_scene_number(self):
        """A trailing #n# becomes the scene number."""
        scene = parse("INT. HOUSE - DAY #12#\n").scenes[0]
        assert scene.heading == "INT. HOUSE - DAY"
        assert scene.scene_number == "12"

    def test_section_depth(self):
        """The number of hashes is the section depth."""
        element = parse("## Sequence One\n").elements[0]
        assert element.kind is ElementKind.SECTION
        assert element.depth == 2
        assert element.text == "Sequence One"

    def test_centered_text(self):
        """Centered markers are removed from the text."""
        element = parse("> THE END <\n").elements[0]
        assert element.kind is ElementKind.CENTERED
        assert element.text == "THE END"

    def test_single_line_note(self):
        """A note closed on its own line is one element."""
        element = parse("[[check the dates]]\n").elements[0]
        assert element.kind is ElementKind.NOTE
        assert element.text == "check the dates"
        assert not element.unterminated

    def test_multi_line_boneyard(self):
        """Boneyard content spans lines until the closer."""
        document = parse("/* old\nstuff */\n\nINT. A - DAY\n")
        boneyard = document.elements[0]
        assert boneyard.kind is ElementKind.BONEYARD
        assert boneyard.text == "old\nstuff"
        assert (boneyard.start_line, boneyard.end_line) == (1, 2)
        assert len(document.scenes) == 1

    def test_unterminated_note_runs_to_end(self, load_screenplay):
        """An unclosed note swallows the rest of the file."""
        document = parse(load_screenplay("messy.fountain"))
        note = document.elements[-1]
        assert note.kind is ElementKind.NOTE
        assert note.unterminated
        assert note.text == "unfinished note"
        assert note.end_line == document.line_count

    def test_title_page_continuation(self):
        """Indented lines continue the previous title page value."""
        document = parse("Title: Brick\n   & Steel\nAuthor: Stu\n\nINT. A - DAY\n")
        assert document.title_page["title"] == "Brick\n& Steel"
        assert document.title_page["author"] == "Stu"

    def test_title_entry_after_body_is_action(self):
        """Key/value lines inside the body are plain action."""
        document = parse("INT. A - DAY\n\nNote: this is action.\n")
        assert kinds(document)[-1] is ElementKind.ACTION
        assert not document.title_page


class TestPartition:
    """Scenes and preamble cover every line exactly once."""

    @pytest.mark.parametrize(
        "name",
        [
            "sample.fountain",
            "messy.fountain",
            "kitchen.fountain",
            "act_markers.fountain",
        ],
    )
    def test_fixture_partition(self, load_screenplay, name):
        """Every fixture is partitioned."""
        document = parse(load_screenplay(name))
        covered = list(range(1, document.preamble_end_line + 1))
        for scene in document.scenes:
            covered.extend(range(scene.start_line, scene.end_line + 1))
        assert covered == list(range(1, document.line_count + 1))

    def test_heading_on_first_line(self):
        """A document starting with a heading has an empty preamble."""
        assert parse("INT. A - DAY\n").preamble_end_line == 0


class TestParseFile:
    """Test reading screenplays from disk."""

    def test_parse_file(self, fixtures_dir):
        """A fixture file parses like its text."""
        path = fixtures_dir / "screenplays" / "kitchen.fountain"
        document = FountainParser().parse_file(path)
        assert len(document.scenes) == 3

    def test_missing_file(self, tmp_path):
        """A missing file raises with a hint."""
        with pytest.raises(ScriptForgeFileNotFoundError) as exc_info:
            FountainParser().parse_file(tmp_path / "missing.fountain")
        assert exc_info.value.hint
        assert "missing.fountain" in exc_info.value.message
