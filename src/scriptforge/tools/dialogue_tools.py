"""Dialogue workshop tool: analyze voices or build generate/rewrite briefs."""

from __future__ import annotations

from itertools import combinations

from pydantic import Field

from scriptforge.analyzers.dialogue import (
    VoiceProfile,
    build_profile,
    characteristic_lines,
    compare_voices,
    extract_character_dialogue,
    quality_flags,
    scene_density,
)
from scriptforge.parser.models import ElementKind, Scene
from scriptforge.tools.base import ToolCall, ToolInput, ToolResult, tool
from scriptforge.tools.resolve import describe_reference, scene_scope

DIALOGUE_ACTIONS = ("analyze", "generate", "rewrite")
FLAG_LABELS = {
    "on-the-nose": (
        "On-the-nose alert",
        "line(s) state emotions directly",
    ),
    "monologue": (
        "Monologue alert",
        "long dialogue block(s). Consider breaking up with action beats or "
        "interruptions",
    ),
    "exposition": (
        "Exposition dump",
        "line(s) with expository patterns",
    ),
}


class DialogueInput(ToolInput):
    """Input for the dialogue workshop."""

    action: str = Field(
        ...,
        description="The dialogue workshop action to perform.",
        json_schema_extra={"enum": list(DIALOGUE_ACTIONS)},
    )
    character: str | None = Field(
        None,
        description="Character name to focus on. Required for generate and "
        "rewrite actions.",
    )
    scene_heading: str | None = Field(
        None,
        description="Scope to a specific scene (case-insensitive substring match).",
    )
    scene_number: int | None = Field(
        None,
        description="Scope to a specific 1-based scene number. Used when "
        "sceneHeading is not provided.",
    )
    direction: str | None = Field(
        None,
        description='Creative direction for generate/rewrite (e.g., "more '
        'confrontational", "add subtext", "funnier").',
    )


def _rhythm(profile: VoiceProfile, detailed: bool) -> str:
    if profile.varied_rhythm:
        return "Varied, mixes short and long" if detailed else "Varied"
    return "Uniform, consistent cadence" if detailed else "Uniform"


def _signature_words(profile: VoiceProfile) -> str:
    return ", ".join(f'"{word}"' for word, _ in profile.top_vocabulary[:5])


def _analyze(scenes: list[Scene], character: str | None) -> ToolResult:
    blocks = extract_character_dialogue(scenes, character)
    if not blocks:
        return ToolResult("No dialogue found in the specified scope.")

    profiles = [build_profile(name, lines) for name, lines in blocks.items()]
    report = ["## Dialogue Analysis", ""]
    for profile in profiles:
        rhythm = "varied rhythm" if profile.varied_rhythm else "uniform rhythm"
        report += [
            f"### {profile.name}",
            "",
            f"- **Dialogue blocks**: {len(profile.blocks)}",
            f"- **Total words**: {profile.word_count}",
            f"- **Avg words/block**: {profile.avg_words_per_block}",
            f"- **Avg sentence length**: {profile.avg_sentence_length} words",
            f"- **Sentence length variance**: "
            f"{profile.sentence_length_variance} ({rhythm})",
            f"- **Question ratio**: {round(profile.question_ratio * 100)}% of "
            "sentences are questions",
        ]
        if profile.top_vocabulary:
            vocabulary = ", ".join(
                f'"{word}" ({count}x)' for word, count in profile.top_vocabulary
            )
            report.append(f"- **Top vocabulary**: {vocabulary}")

        flags = quality_flags(profile)
        if flags:
            report += ["", "**Quality flags:**"]
            for flag in flags:
                label, summary = FLAG_LABELS[flag.kind]
                line = f"  - **{label}**: {flag.count} {summary}"
                if flag.kind != "monologue":
                    line += f": {'; '.join(flag.examples)}"
                report.append(line)
        report.append("")

    if len(profiles) >= 2:
        report += ["### Voice Distinctiveness", ""]
        for first, second in combinations(profiles, 2):
            comparison = compare_voices(first, second)
            report.append(
                f"- **{first.name} vs {second.name}**: Vocab overlap "
                f"{comparison.overlap_pct}%, sentence length diff "
                f"{comparison.sentence_length_diff:.1f} words"
            )
            if comparison.verdict == "similar":
                report.append(
                    "  ⚠ These characters sound similar. Differentiate "
                    "vocabulary, rhythm, or sentence structure."
                )
            elif comparison.verdict == "distinct":
                report.append("  ✓ Distinct voices detected")
        report.append("")

    report += ["### Scene Dialogue Density", ""]
    for row in scene_density(scenes):
        ratio = f"{row.ratio:.1f}" if row.ratio is not None else "all dialogue"
        report.append(
            f"- **{row.heading}**: {row.dialogue} dialogue / {row.action} action "
            f"(ratio: {ratio})"
        )
    return ToolResult("\n".join(report))


def _scene_context(scene: Scene) -> list[str]:
    cast = ", ".join(scene.characters) or "none"
    lines = [f"**{scene.heading}**", f"Characters present: {cast}"]
    actions = [e.text.split("\n")[0] for e in scene.elements_of(ElementKind.ACTION)]
    if actions:
        lines.append(f"Scene action: {' | '.join(actions[:3])}")
    exchanges = []
    for element in scene.elements_of(ElementKind.DIALOGUE):
        text = element.text
        if len(text) > 60:
            text = text[:60] + "..."
        exchanges.append(f"{element.character}: {text}")
    if exchanges:
        lines += ["", "Recent dialogue in scene:"]
        lines += [f"  {exchange}" for exchange in exchanges[-3:]]
    lines.append("")
    return lines


def _direction(direction: str | None) -> list[str]:
    if not direction:
        return []
    return ["### Creative Direction", "", direction, ""]


def _generate(
    all_scenes: tuple[Scene, ...],
    scenes: list[Scene],
    character: str,
    direction: str | None,
) -> ToolResult:
    name = character.strip().upper()
    blocks = extract_character_dialogue(all_scenes, name).get(name, [])
    brief = ["## Dialogue Generation Brief", "", "### Character Voice Profile", ""]
    if blocks:
        profile = build_profile(name, blocks)
        brief += [
            f"- **Character**: {name}",
            f"- **Existing dialogue blocks**: {len(profile.blocks)}",
            f"- **Avg words/block**: {profile.avg_words_per_block}",
            f"- **Avg sentence length**: {profile.avg_sentence_length} words",
            f"- **Rhythm**: {_rhythm(profile, detailed=True)}",
            f"- **Question tendency**: {round(profile.question_ratio * 100)}%",
        ]
        if profile.top_vocabulary:
            brief.append(f"- **Signature words**: {_signature_words(profile)}")
        best = characteristic_lines(blocks)
        if best:
            brief += ["", "**Characteristic lines:**"]
            brief += [f"> {line}" for line in best]
    else:
        brief.append(
            f'No existing dialogue found for "{character}". This is a new voice. '
            "Build it from scratch."
        )

    brief += ["", "### Scene Context", ""]
    for scene in scenes:
        brief += _scene_context(scene)
    brief += _direction(direction)
    brief += [
        "---",
        "Use `edit_scene` or `insert_scene` to write the new dialogue based on "
        "this brief.",
    ]
    return ToolResult("\n".join(brief))


def _rewrite(
    all_scenes: tuple[Scene, ...],
    scenes: list[Scene],
    character: str,
    direction: str | None,
) -> ToolResult:
    name = character.strip().upper()
    targets = extract_character_dialogue(scenes, name).get(name, [])
    if not targets:
        return ToolResult(
            f'No dialogue found for "{character}" in the specified scene(s).'
        )

    brief = ["## Dialogue Rewrite Brief", "", "### Original Dialogue", ""]
    brief.append(f"**{name}** in target scene(s):")
    brief += [f"> {line}" for line in targets]
    brief.append("")

    profile = build_profile(name, extract_character_dialogue(all_scenes, name)[name])
    brief += [
        "### Voice Profile",
        "",
        f"- **Avg words/block**: {profile.avg_words_per_block}",
        f"- **Avg sentence length**: {profile.avg_sentence_length} words",
        f"- **Rhythm**: {_rhythm(profile, detailed=False)}",
        f"- **Question tendency**: {round(profile.question_ratio * 100)}%",
    ]
    if profile.top_vocabulary:
        brief.append(f"- **Signature words**: {_signature_words(profile)}")
    brief.append("")
    brief += _direction(direction)
    brief += [
        "---",
        "Use `replace_text` or `edit_scene` to apply the rewritten dialogue.",
    ]
    return ToolResult("\n".join(brief))


@tool(
    "dialogue",
    "Workshop dialogue for a specific character or scene. "
    '"analyze": breaks down dialogue quality (voice distinctiveness between '
    "characters, on-the-nose flags, monologue detection, rhythm analysis). "
    '"generate": builds a character voice profile from existing dialogue and '
    "scene context, returning a structured brief for writing new dialogue. "
    '"rewrite": extracts target dialogue with character voice data and creative '
    "direction, returning a structured brief for revision.",
    DialogueInput,
)
def dialogue(params: DialogueInput, call: ToolCall) -> ToolResult:
    all_scenes = call.document.scenes
    scenes = scene_scope(call.document, params.scene_heading, params.scene_number)
    if scenes is None:
        reference = describe_reference(params.scene_heading, params.scene_number)
        return ToolResult(f"Scene not found: {reference}")

    action = params.action
    if action == "analyze":
        return _analyze(scenes, params.character)
    if action in ("generate", "rewrite"):
        if not params.character:
            return ToolResult(
                f'Error: "character" parameter is required for the {action} action.'
            )
        build = _generate if action == "generate" else _rewrite
        return build(all_scenes, scenes, params.character, params.direction)
    return ToolResult(
        f'Unknown dialogue action: "{action}". Use "analyze", "generate", '
        'or "rewrite".'
    )
