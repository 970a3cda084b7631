"""Tests for character voice profiles."""

from scriptforge.analyzers.dialogue import (
    build_profile,
    characteristic_lines,
    compare_voices,
    extract_character_dialogue,
    quality_flags,
    scene_density,
)
from scriptforge.parser import parse


class TestExtraction:
    """Collect dialogue blocks per speaker."""

    def test_sample_blocks(self, sample_document):
        """Blocks are grouped by speaker in order of first appearance."""
        blocks = extract_character_dialogue(sample_document.scenes)
        assert list(blocks) == ["JAKE", "MARIA"]
        assert blocks["JAKE"] == ["Where is everyone?", "Keys. Keys!"]
        assert blocks["MARIA"] == [
            "They left an hour ago, Jake.",
            "You forgot the files.",
        ]

    def test_filter_by_character(self, sample_document):
        """The speaker filter ignores case."""
        blocks = extract_character_dialogue(sample_document.scenes, "maria")
        assert list(blocks) == ["MARIA"]

    def test_multi_line_block(self):
        """Consecutive dialogue lines form one block."""
        document = parse("INT. A - DAY\n\nANA\nFirst line.\n(beat)\nSecond line.\n")
        blocks = extract_character_dialogue(document.scenes)
        assert blocks == {"ANA": ["First line.\nSecond line."]}


class TestProfiles:
    """Test voice profiles and their comparison."""

    def test_build_profile(self):
        """Counts, averages and vocabulary of a profile."""
        profile = build_profile("JAKE", ["Where is everyone?", "Keys. Keys!"])
        assert profile.word_count == 5
        assert profile.avg_words_per_block == 2.5
        assert profile.avg_sentence_length == 1.7
        assert profile.question_ratio == 0.33
        assert profile.top_vocabulary == [("keys", 2), ("everyone", 1)]

    def test_empty_profile(self):
        """A profile without blocks is all zeros."""
        profile = build_profile("NOBODY", [])
        assert profile.word_count == 0
        assert profile.avg_sentence_length == 0.0
        assert not profile.varied_rhythm

    def test_similar_voices(self, load_screenplay):
        """Shared vocabulary makes two characters sound alike."""
        document = parse(load_screenplay("similar_voices.fountain"))
        blocks = extract_character_dialogue(document.scenes)
        anna = build_profile("ANNA", blocks["ANNA"])
        ben = build_profile("BEN", blocks["BEN"])
        comparison = compare_voices(anna, ben)
        assert comparison.overlap_pct > 50
        assert comparison.verdict == "similar"

    def test_distinct_voices(self):
        """Different words and sentence lengths read as distinct."""
        terse = build_profile("ANNA", ["Move. Now. Go."])
        chatty = build_profile(
            "BEN",
            ["Honestly the weather around this harbor changes faster than gossip."],
        )
        comparison = compare_voices(terse, chatty)
        assert comparison.overlap_pct == 0
        assert comparison.verdict == "distinct"


class TestQualityFlags:
    """Test dialogue quality warnings."""

    def test_on_the_nose(self):
        """Direct emotion words are flagged."""
        flags = quality_flags(build_profile("ANA", ["I feel so angry right now."]))
        assert [flag.kind for flag in flags] == ["on-the-nose"]
        assert 'contains "angry"' in flags[0].examples[0]

    def test_monologue(self):
        """Long blocks are flagged."""
        speech = "\n".join(f"Line number {i} goes on." for i in range(6))
        flags = quality_flags(build_profile("ANA", [speech]))
        assert [flag.kind for flag in flags] == ["monologue"]

    def test_exposition(self):
        """Expository phrases are flagged."""
        profile = build_profile("ANA", ["As you know, Bob, the plant closed."])
        flags = quality_flags(profile)
        assert [flag.kind for flag in flags] == ["exposition"]
        assert flags[0].examples == ['"as you know" detected']

    def test_clean_dialogue(self):
        """Ordinary dialogue has no flags."""
        assert quality_flags(build_profile("ANA", ["Pass the salt."])) == []


def test_scene_density(sample_document):
    """Dialogue and action counts per scene."""
    rows = scene_density(sample_document.scenes)
    counts = [(row.dialogue, row.action) for row in rows]
    assert counts == [(2, 1), (1, 1), (1, 1), (0, 1)]
    assert rows[0].ratio == 2.0
    assert rows[3].ratio == 0.0


def test_characteristic_lines():
    """Only mid-length blocks are characteristic."""
    blocks = ["Hi.", "This one has exactly six words.", "word " * 40]
    assert characteristic_lines(blocks) == ["This one has exactly six words."]
