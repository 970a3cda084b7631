"""Character voice profiles and dialogue quality checks."""

from __future__ import annotations

import re
import statistics
from collections import Counter
from collections.abc import Iterable
from typing import Literal

from pydantic import BaseModel, Field

from scriptforge.parser.models import ElementKind, Scene

STOP_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by from is it not are was were
    be been have has had do does did will would could should may might shall can
    that this what which who whom when where why how all each every both few more
    most other some such than too very just about over into back down here there
    then them they their your you we he she his her my me its our us if so no yes
    up out off also only now well know like going get got right okay
    """.split()
)
EMOTION_WORDS = (
    "angry",
    "sad",
    "happy",
    "scared",
    "love",
    "hate",
    "afraid",
    "sorry",
    "feel",
    "feeling",
)
EXPOSITION_PHRASES = (
    "as you know",
    "as we discussed",
    "remember when",
    "let me explain",
    "the reason is",
    "what you need to understand",
)
WORD_PATTERN = re.compile(r"\b[a-z']+\b")
SENTENCE_SPLIT = re.compile(r"[.!?]+")

MONOLOGUE_LINES = 5
MONOLOGUE_WORDS = 60
VARIED_RHYTHM_VARIANCE = 15.0


class VoiceProfile(BaseModel):
    """Measurable traits of one character's dialogue."""

    name: str
    blocks: list[str] = Field(default_factory=list)
    word_count: int = 0
    avg_words_per_block: float = 0.0
    avg_sentence_length: float = 0.0
    sentence_length_variance: float = 0.0
    question_ratio: float = 0.0
    top_vocabulary: list[tuple[str, int]] = Field(default_factory=list)

    @property
    def varied_rhythm(self) -> bool:
        """Whether sentence lengths vary enough to read as a mixed rhythm."""
        return self.sentence_length_variance > VARIED_RHYTHM_VARIANCE


class VoiceComparison(BaseModel):
    """How alike two characters sound."""

    first: str
    second: str
    overlap_pct: int
    sentence_length_diff: float
    verdict: Literal["similar", "distinct", "neutral"]


class DialogueFlag(BaseModel):
    """A quality warning about a character's dialogue."""

    kind: Literal["on-the-nose", "monologue", "exposition"]
    character: str
    count: int
    examples: list[str] = Field(default_factory=list)


class SceneDialogueDensity(BaseModel):
    """Dialogue and action counts for one scene."""

    scene_index: int
    heading: str
    dialogue: int
    action: int

    @property
    def ratio(self) -> float | None:
        """Dialogue per action element, None when the scene has no action."""
        return self.dialogue / self.action if self.action else None


def extract_character_dialogue(
    scenes: Iterable[Scene], character: str | None = None
) -> dict[str, list[str]]:
    """Collect dialogue blocks per speaker, in order of first appearance.

    A block is every dialogue line following one character cue, joined with
    newlines. Parentheticals inside the block are skipped.

    Args:
        scenes: Scenes to read
        character: Optional case-insensitive speaker filter

    Returns:
        Mapping of speaker name to their dialogue blocks
    """
    wanted = character.strip().upper() if character else None
    blocks: dict[str, list[str]] = {}

    def flush(speaker: str | None, lines: list[str]) -> None:
        if speaker and lines and (wanted is None or speaker == wanted):
            blocks.setdefault(speaker, []).append("\n".join(lines))

    for scene in scenes:
        speaker: str | None = None
        current: list[str] = []
        for element in scene.elements:
            if element.kind is ElementKind.CHARACTER:
                flush(speaker, current)
                speaker, current = element.character, []
            elif element.kind is ElementKind.DIALOGUE and speaker:
                current.append(element.text)
            elif element.kind not in (
                ElementKind.PARENTHETICAL,
                ElementKind.NOTE,
                ElementKind.BONEYARD,
            ):
                flush(speaker, current)
                speaker, current = None, []
        flush(speaker, current)
    return blocks


def _sentences(text: str) -> list[str]:
    return [s for s in SENTENCE_SPLIT.split(text) if s.strip()]


def build_profile(name: str, blocks: list[str]) -> VoiceProfile:
    """Profile a character from their dialogue blocks."""
    text = " ".join(blocks)
    words = WORD_PATTERN.findall(text.lower())
    vocabulary = Counter(w for w in words if len(w) >= 3 and w not in STOP_WORDS)
    # sorted() is stable, so equal counts keep first-use order
    top = sorted(vocabulary.items(), key=lambda item: -item[1])[:10]

    sentences = _sentences(text)
    lengths = [len(s.split()) for s in sentences]
    average = statistics.fmean(lengths) if lengths else 0.0
    variance = statistics.pvariance(lengths) if len(lengths) > 1 else 0.0
    questions = text.count("?")

    return VoiceProfile(
        name=name,
        blocks=blocks,
        word_count=len(words),
        avg_words_per_block=round(len(words) / len(blocks), 1) if blocks else 0.0,
        avg_sentence_length=round(average, 1),
        sentence_length_variance=round(variance, 1),
        question_ratio=round(questions / len(sentences), 2) if sentences else 0.0,
        top_vocabulary=top,
    )


def compare_voices(first: VoiceProfile, second: VoiceProfile) -> VoiceComparison:
    """Compare two profiles.

    Similar when top vocabularies overlap by more than 50% or average
    sentence lengths differ by under one word; distinct when overlap is
    under 30% and lengths differ by more than two words.
    """
    a = {word for word, _ in first.top_vocabulary}
    b = {word for word, _ in second.top_vocabulary}
    overlap_pct = round(len(a & b) / max(len(a), len(b), 1) * 100)
    diff = abs(first.avg_sentence_length - second.avg_sentence_length)

    verdict: Literal["similar", "distinct", "neutral"] = "neutral"
    if overlap_pct > 50 or diff < 1:
        verdict = "similar"
    elif overlap_pct < 30 and diff > 2:
        verdict = "distinct"
    return VoiceComparison(
        first=first.name,
        second=second.name,
        overlap_pct=overlap_pct,
        sentence_length_diff=round(diff, 1),
        verdict=verdict,
    )


def _excerpt(text: str, limit: int = 50) -> str:
    flat = text.replace("\n", " ")
    return flat if len(flat) <= limit else flat[:limit] + "..."


def quality_flags(profile: VoiceProfile) -> list[DialogueFlag]:
    """On-the-nose emotion, monologue and exposition warnings for a profile."""
    flags = []

    emotional = []
    for block in profile.blocks:
        lower = block.lower()
        hit = next((word for word in EMOTION_WORDS if word in lower), None)
        if hit:
            emotional.append(f'"{_excerpt(block)}" (contains "{hit}")')
    if emotional:
        flags.append(
            DialogueFlag(
                kind="on-the-nose",
                character=profile.name,
                count=len(emotional),
                examples=emotional[:2],
            )
        )

    long_blocks = [
        block
        for block in profile.blocks
        if block.count("\n") + 1 > MONOLOGUE_LINES
        or len(block.split()) > MONOLOGUE_WORDS
    ]
    if long_blocks:
        flags.append(
            DialogueFlag(
                kind="monologue",
                character=profile.name,
                count=len(long_blocks),
                examples=[_excerpt(b) for b in long_blocks[:2]],
            )
        )

    expository = []
    for block in profile.blocks:
        lower = block.lower()
        phrase = next((p for p in EXPOSITION_PHRASES if p in lower), None)
        if phrase:
            expository.append(f'"{phrase}" detected')
    if expository:
        flags.append(
            DialogueFlag(
                kind="exposition",
                character=profile.name,
                count=len(expository),
                examples=expository[:2],
            )
        )
    return flags


def scene_density(scenes: Iterable[Scene]) -> list[SceneDialogueDensity]:
    """Dialogue/action counts for every scene that has either."""
    rows = []
    for scene in scenes:
        dialogue = len(scene.elements_of(ElementKind.DIALOGUE))
        action = len(scene.elements_of(ElementKind.ACTION))
        if dialogue or action:
            rows.append(
                SceneDialogueDensity(
                    scene_index=scene.index,
                    heading=scene.heading,
                    dialogue=dialogue,
                    action=action,
                )
            )
    return rows


def characteristic_lines(blocks: list[str], limit: int = 5) -> list[str]:
    """Blocks of 5-30 words that show a character's voice well."""
    return [b for b in blocks if 5 <= len(b.split()) <= 30][:limit]
