"""Tests for the read-only tools."""

from scriptforge.tools import ToolContext, execute_tool, load_story_bible


def run(name, text, tool_input=None, context=None):
    """Run a tool and return its result text, checking nothing changed."""
    result = execute_tool(name, tool_input or {}, text, context)
    assert result.updated_screenplay is None
    return result.result


class TestReadScreenplay:
    """Test read_screenplay."""

    def test_full_text(self, sample_text):
        """Every line is numbered."""
        text = run("read_screenplay", sample_text)
        assert text.startswith("Showing lines 1-36 of 36:\n\n")
        assert "\n1: Title: The Long Night\n" in text
        assert "\n35: Maria waves a folder at him." in text

    def test_line_range(self, sample_text):
        """A range shows only those lines."""
        text = run("read_screenplay", sample_text, {"startLine": 6, "endLine": 8})
        assert text == (
            "Showing lines 6-8 of 36:\n\n"
            "6: INT. OFFICE - DAY\n"
            "7: \n"
            "8: Jake paces by the window."
        )

    def test_range_is_clamped(self, sample_text):
        """Out-of-range bounds are clamped to the text."""
        text = run("read_screenplay", sample_text, {"startLine": 100})
        assert text.startswith("Showing lines 36-36 of 36:")


class TestReadScene:
    """Test read_scene."""

    def test_by_number(self, sample_text):
        """Scenes can be read by their 1-based number."""
        text = run("read_scene", sample_text, {"sceneNumber": 2})
        assert text.startswith("Scene: EXT. PARKING LOT - NIGHT\nLines 19-25:\n\n")
        assert "24: Keys. Keys!" in text
        assert "Note:" not in text

    def test_by_heading(self, sample_text):
        """Headings match as a case-insensitive substring."""
        text = run("read_scene", sample_text, {"sceneHeading": "truck"})
        assert text.startswith("Scene: INT. JAKE'S TRUCK - CONTINUOUS")

    def test_heading_wins_over_number(self, sample_text):
        """A heading takes precedence over a number."""
        tool_input = {"sceneHeading": "office", "sceneNumber": 3}
        text = run("read_scene", sample_text, tool_input)
        assert text.startswith("Scene: INT. OFFICE - DAY")

    def test_ambiguous_heading(self, sample_text):
        """Several matches use the first and list the others."""
        text = run("read_scene", sample_text, {"sceneHeading": "parking lot"})
        assert "Lines 19-25" in text
        assert text.endswith(
            "Note: 2 scenes match; used the first. Other matches: "
            "4. EXT. PARKING LOT - NIGHT"
        )

    def test_not_found(self, sample_text):
        """Unknown scenes produce a text result."""
        assert run("read_scene", sample_text, {"sceneHeading": "spaceship"}) == (
            "Scene not found."
        )
        assert run("read_scene", sample_text, {"sceneNumber": 9}) == "Scene not found."
        assert run("read_scene", sample_text) == "Scene not found."


class TestSearch:
    """Test search_screenplay."""

    def test_case_insensitive_by_default(self, sample_text):
        """Matches ignore case unless asked otherwise."""
        text = run("search_screenplay", sample_text, {"query": "jake"})
        assert text.startswith('Found 6 match(es) for "jake":')

    def test_case_sensitive(self, sample_text):
        """Case-sensitive search skips the cues."""
        text = run(
            "search_screenplay", sample_text, {"query": "Jake", "caseSensitive": True}
        )
        assert text.startswith('Found 3 match(es) for "Jake":')

    def test_context_lines(self, sample_text):
        """Each match shows its neighbours."""
        text = run("search_screenplay", sample_text, {"query": "keys"})
        assert "    23: JAKE\n>>> 24: Keys. Keys!\n    25: " in text

    def test_no_matches(self, sample_text):
        """Missing text is reported."""
        assert run("search_screenplay", sample_text, {"query": "spaceship"}) == (
            'No matches found for "spaceship".'
        )


class TestOverviewTools:
    """Test outline, characters, statistics and title page."""

    def test_outline(self, sample_text):
        """Each scene is listed with cast and first action line."""
        text = run("get_outline", sample_text)
        assert "1. INT. OFFICE - DAY\n   Characters: JAKE, MARIA\n" in text
        assert "   Elements: 7\n" in text
        assert "   Summary: Jake paces by the window." in text
        assert "4. EXT. PARKING LOT - NIGHT\n   Characters: none" in text

    def test_outline_without_scenes(self):
        """No scenes is an explicit result."""
        assert run("get_outline", "Just prose.").startswith("No scenes found")

    def test_characters(self, sample_text):
        """Characters with dialogue counts and scenes."""
        text = run("get_characters", sample_text)
        assert "- **JAKE**: 2 dialogue line(s) in 2 scene(s)" in text
        assert "  Scenes: INT. OFFICE - DAY; EXT. PARKING LOT - NIGHT" in text
        assert "- **MARIA**: 2 dialogue line(s) in 2 scene(s)" in text

    def test_no_characters(self):
        """A script without cues has no characters."""
        assert run("get_characters", "INT. A - DAY\n\nQuiet.\n") == (
            "No characters found in the screenplay."
        )

    def test_statistics(self, sample_text):
        """Statistics are rendered as a list."""
        text = run("get_statistics", sample_text)
        assert "- Page count: ~1" in text
        assert "- Scene count: 4" in text
        assert "- Dialogue-to-action ratio: 1.00" in text
        assert "- Word count: 40" in text
        assert "- Interior/exterior scenes: 2/2" in text
        assert "  - JAKE: 2 line(s)" in text

    def test_statistics_use_settings(self, sample_text, tool_context):
        """The page estimate follows the configured page length."""
        settings = tool_context.settings.model_copy(update={"lines_per_page": 10})
        context = ToolContext(settings=settings)
        text = run("get_statistics", sample_text, context=context)
        assert "- Page count: ~4" in text

    def test_title_page(self, sample_text):
        """Title page entries are listed."""
        text = run("get_title_page", sample_text)
        assert "- **title**: The Long Night" in text
        assert "- **draft date**: 2026-01-05" in text
        assert run("get_title_page", "INT. A - DAY\n") == "No title page found."


class TestValidateFormat:
    """Test validate_format."""

    def test_clean(self, sample_text):
        """A clean script passes."""
        assert run("validate_format", sample_text) == (
            "Validation passed: no issues found."
        )

    def test_issues(self, load_screenplay):
        """Issues are counted and tagged."""
        text = run("validate_format", load_screenplay("messy.fountain"))
        assert text.startswith("Validation found 3 issue(s):")
        assert "Summary: 1 error(s), 2 warning(s), 0 info(s)" in text
        assert "[ERROR] Line 10:" in text
        assert "(missing-blank-after-heading)" in text


class TestStoryBibleTool:
    """Test get_story_bible."""

    def test_without_bible(self, sample_text):
        """No bible in the context."""
        assert run("get_story_bible", sample_text) == (
            "No story bible found for this project."
        )

    def test_with_bible(self, sample_text, fixtures_dir):
        """The bible comes from the context only."""
        bible = load_story_bible(fixtures_dir / "story_bible.yaml")
        context = ToolContext(story_bible=bible)
        text = run("get_story_bible", sample_text, context=context)
        assert text == bible.render()
