"""Tests for Fountain format validation."""

from scriptforge.parser import parse
from scriptforge.validators import DocumentValidator, Issue, Severity, validate
from scriptforge.validators.document_validator import names_are_similar

TITLE = "Title: Test\nAuthor: Someone\n\n"


def rules(text):
    """Rule names reported for a text."""
    return [issue.rule for issue in validate(parse(text))]


class TestCleanDocuments:
    """Well-formed screenplays produce no issues."""

    def test_sample_has_no_issues(self, sample_document):
        """The sample screenplay is clean."""
        assert validate(sample_document) == []

    def test_validator_is_stateless(self, sample_document, load_screenplay):
        """One validator instance can be reused across documents."""
        validator = DocumentValidator()
        messy = parse(load_screenplay("messy.fountain"))
        first = validator.validate(messy)
        assert validator.validate(sample_document) == []
        assert validator.validate(messy) == first


class TestMessyDocument:
    """Test the issues found in the messy fixture."""

    def test_issues_in_order(self, load_screenplay):
        """Issues are sorted by line, then by severity."""
        issues = validate(parse(load_screenplay("messy.fountain")))
        assert [(i.line, i.severity, i.rule) for i in issues] == [
            (1, Severity.WARNING, "missing-title-page"),
            (1, Severity.WARNING, "missing-blank-after-heading"),
            (10, Severity.ERROR, "unterminated-note"),
        ]

    def test_issue_to_dict(self, load_screenplay):
        """Issues render to plain dictionaries."""
        issue = validate(parse(load_screenplay("messy.fountain")))[-1]
        assert issue.to_dict() == {
            "severity": "error",
            "line": 10,
            "rule": "unterminated-note",
            "message": issue.message,
        }
        assert "]]" in issue.message


class TestRules:
    """Test individual validation rules."""

    def test_unterminated_boneyard(self):
        """An unclosed boneyard is an error."""
        assert "unterminated-boneyard" in rules(TITLE + "INT. A - DAY\n\n/* cut\n")

    def test_consecutive_character_cues(self):
        """A cue followed by another cue with no dialogue between is flagged."""
        text = TITLE + "INT. A - DAY\n\nJAKE\n\nMARIA\nHi.\n"
        issues = validate(parse(text))
        flagged = [i for i in issues if i.rule == "consecutive-character-cues"]
        assert len(flagged) == 1
        assert flagged[0].line == 6
        assert "empty-dialogue-block" not in [i.rule for i in issues]

    def test_empty_dialogue_block(self):
        """A cue with nothing after it is flagged."""
        assert "empty-dialogue-block" in rules(TITLE + "INT. A - DAY\n\nJAKE\n")

    def test_scene_heading_case(self):
        """Lower-case headings get an info issue."""
        issues = validate(parse(TITLE + "int. kitchen - day\n\nAna cooks.\n"))
        case = [i for i in issues if i.rule == "scene-heading-case"]
        assert len(case) == 1
        assert case[0].severity is Severity.INFO

    def test_scene_heading_structure(self):
        """A heading without a time of day separator is flagged."""
        assert "scene-heading-structure" in rules(TITLE + "INT. KITCHEN\n\nAction.\n")

    def test_forced_heading_skips_prefix_checks(self):
        """Forced headings need no prefix or separator."""
        found = rules(TITLE + ".FLASHBACK\n\nAna remembers.\n")
        assert "scene-heading-prefix" not in found
        assert "scene-heading-structure" not in found

    def test_transition_case(self):
        """Mixed-case transitions get an info issue."""
        assert "transition-case" in rules(TITLE + "INT. A - DAY\n\n> Fade out\n")

    def test_no_scenes(self):
        """Text with a body but no headings is flagged once."""
        assert rules(TITLE + "Just prose.\n") == ["no-scenes"]

    def test_title_page_only(self):
        """A bare title page is not reported as missing scenes."""
        assert rules(TITLE) == []

    def test_missing_title_and_author(self):
        """Title page fields are checked separately."""
        found = rules("Credit: Written by\n\nINT. A - DAY\n\nAction.\n")
        assert "missing-title" in found
        assert "missing-author" in found

    def test_duplicate_scene_number(self):
        """Scene numbers must be unique."""
        text = TITLE + "INT. A - DAY #1#\n\nOne.\n\nINT. B - DAY #1#\n\nTwo.\n"
        issues = validate(parse(text))
        duplicate = [i for i in issues if i.rule == "duplicate-scene-number"]
        assert len(duplicate) == 1
        assert duplicate[0].severity is Severity.ERROR
        assert "line 4" in duplicate[0].message

    def test_empty_scene(self):
        """A heading followed directly by another heading is an empty scene."""
        text = TITLE + "INT. A - DAY\n\nINT. B - DAY\n\nAction.\n"
        assert rules(text).count("empty-scene") == 1

    def test_long_dialogue(self):
        """Very long dialogue lines are flagged."""
        speech = "word " * 120
        assert "long-dialogue" in rules(TITLE + f"INT. A - DAY\n\nJAKE\n{speech}\n")

    def test_similar_character_names(self):
        """Names one edit apart are flagged."""
        text = TITLE + "INT. A - DAY\n\nJON\nHi.\n\nJOHN\nHey.\n"
        issues = validate(parse(text))
        similar = [i for i in issues if i.rule == "similar-character-names"]
        assert len(similar) == 1
        assert similar[0].line == 6

    def test_character_name_chars(self):
        """Forced cues with odd characters get an info issue."""
        text = TITLE + "INT. A - DAY\n\n@R2*D2\nBeep.\n"
        assert "character-name-chars" in rules(text)


class TestNamesAreSimilar:
    """Test the one-edit name comparison."""

    def test_substitution(self):
        """One changed letter."""
        assert names_are_similar("JAKE", "JAKA")

    def test_insertion(self):
        """One added letter, in either order."""
        assert names_are_similar("JON", "JOHN")
        assert names_are_similar("JOHN", "JON")

    def test_not_similar(self):
        """Identical names and distant names are not similar."""
        assert not names_are_similar("JAKE", "JAKE")
        assert not names_are_similar("JAKE", "MARIA")
        assert not names_are_similar("AL", "ALAN")


def test_severity_rank_orders_errors_first():
    """Errors sort before warnings before info."""
    ranked = sorted(Severity, key=lambda severity: severity.rank)
    assert ranked == [Severity.ERROR, Severity.WARNING, Severity.INFO]
    assert Issue(Severity.INFO, 1, "x", "y").severity.value == "info"
