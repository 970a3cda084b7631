"""Polish pass: mechanical whitespace fixes plus a creative diagnostic.

Phase A rewrites whitespace only and is idempotent. Phase B re-parses the
fixed text and reports issues without changing it.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

from pydantic import Field

from scriptforge.config.settings import ScriptForgeSettings
from scriptforge.parser.fountain_parser import parse
from scriptforge.parser.models import Document, ElementKind, Scene
from scriptforge.tools.base import ToolCall, ToolInput, ToolResult, tool
from scriptforge.tools.read_tools import severity_tag
from scriptforge.tools.resolve import describe_reference, scene_scope
from scriptforge.validators.document_validator import Severity, validate

EXCESS_BLANK_LINES = re.compile(r"\n{4,}")
REPEATED_WORD = re.compile(r"\b[a-z]{4,}\b")
REPETITION_STOP_WORDS = frozenset(
    """
    that this with from have been were they their them then than what when where
    which will would could should into just about over some only your more back
    down here there very like does also each know take come make look said says
    goes going through
    """.split()
)
NORMALIZED_WHITESPACE = (
    "Normalized whitespace (trimmed trailing spaces, collapsed excessive blank "
    "lines, ensured trailing newline)"
)

Focus = Literal["all", "dialogue", "action", "pacing", "format"]


class Priority(IntEnum):
    """Report order of diagnostics, most important first."""

    FORMAT_ERROR = 0
    FORMAT_WARNING = 1
    DIALOGUE = 2
    ACTION = 3
    PACING = 4
    REPETITION = 5
    TRANSITION = 6
    FORMAT_INFO = 7


@dataclass(frozen=True)
class Diagnostic:
    """One advisory item of the creative diagnostic."""

    priority: Priority
    text: str


class PolishInput(ToolInput):
    """Input for polish_pass."""

    scene_heading: str | None = Field(
        None,
        description="Optional scene heading to scope the polish to a specific "
        "scene. Omit for full screenplay.",
    )
    scene_number: int | None = Field(
        None,
        description="Optional 1-based scene number to scope the polish to. "
        "Used when sceneHeading is not provided.",
    )
    focus: Focus = Field(
        "all",
        description='Filter the diagnostic to a specific area. Defaults to "all".',
    )


def mechanical_fixes(text: str) -> str:
    """Trim trailing whitespace, cap blank runs at two, end with one newline."""
    fixed = "\n".join(line.rstrip() for line in text.split("\n"))
    fixed = EXCESS_BLANK_LINES.sub("\n\n\n", fixed)
    return fixed.rstrip() + "\n"


def _dialogue_density(
    scenes: list[Scene], settings: ScriptForgeSettings
) -> list[Diagnostic]:
    found = []
    for scene in scenes:
        dialogue = len(scene.elements_of(ElementKind.DIALOGUE))
        action = len(scene.elements_of(ElementKind.ACTION))
        if action:
            ratio = dialogue / action
            if ratio > settings.polish_dialogue_ratio_high:
                text = (
                    f'Scene "{scene.heading}" is dialogue-heavy ({dialogue}:{action} '
                    "dialogue-to-action ratio). Consider adding action beats or "
                    "visual storytelling to break up the talk."
                )
            elif ratio < settings.polish_dialogue_ratio_low and dialogue:
                text = (
                    f'Scene "{scene.heading}" has underwritten dialogue '
                    f"({dialogue}:{action} ratio). Characters may need more voice "
                    "in this scene."
                )
            else:
                continue
        elif dialogue > settings.polish_dialogue_ratio_high:
            text = (
                f'Scene "{scene.heading}" is all dialogue with no action lines '
                f"({dialogue} dialogue blocks). Add physical beats to ground the "
                "scene visually."
            )
        else:
            continue
        found.append(Diagnostic(Priority.DIALOGUE, f"[DIALOGUE] {text}"))
    return found


def _verbose_action(
    scenes: list[Scene], settings: ScriptForgeSettings
) -> list[Diagnostic]:
    found = []
    for scene in scenes:
        for element in scene.elements_of(ElementKind.ACTION):
            line_count = element.text.count("\n") + 1
            if line_count > settings.polish_verbose_action_lines:
                preview = element.text.split("\n")[0][:60]
                found.append(
                    Diagnostic(
                        Priority.ACTION,
                        f"[ACTION] Verbose action block ({line_count} lines) in "
                        f'"{scene.heading}" starting with "{preview}...". '
                        "Candidate for trimming.",
                    )
                )
    return found


def _pacing(all_scenes: tuple[Scene, ...], scenes: list[Scene]) -> list[Diagnostic]:
    """Scene length outliers, measured against the whole script."""
    if len(all_scenes) < 3:
        return []
    lengths = [s.end_line - s.start_line + 1 for s in all_scenes]
    average = sum(lengths) / len(lengths)
    found = []
    for scene in scenes:
        length = scene.end_line - scene.start_line + 1
        if length > average * 2:
            text = (
                f'Scene "{scene.heading}" is significantly longer than average '
                f"({length} lines vs ~{round(average)} avg). Consider splitting "
                "or trimming."
            )
        elif length < average * 0.3 and length < 5:
            text = (
                f'Scene "{scene.heading}" is very short ({length} lines vs '
                f"~{round(average)} avg). Consider whether it serves a clear "
                "purpose or should be merged."
            )
        else:
            continue
        found.append(Diagnostic(Priority.PACING, f"[PACING] {text}"))
    return found


def _repetition(scenes: list[Scene], threshold: int) -> list[Diagnostic]:
    found = []
    for scene in scenes:
        words = REPEATED_WORD.findall(
            " ".join(element.text for element in scene.elements).lower()
        )
        counts = Counter(w for w in words if w not in REPETITION_STOP_WORDS)
        repeated = [(w, n) for w, n in counts.most_common() if n >= threshold]
        if repeated:
            top = ", ".join(f'"{word}" ({count}x)' for word, count in repeated[:5])
            found.append(
                Diagnostic(
                    Priority.REPETITION,
                    f'[REPETITION] Scene "{scene.heading}" has repeated words: '
                    f"{top}. Vary the language.",
                )
            )
    return found


def _transitions(scenes: list[Scene]) -> list[Diagnostic]:
    found = []
    for current, following in zip(scenes, scenes[1:]):
        if current.int_ext is following.int_ext:
            continue
        last = current.elements[-1] if current.elements else None
        if last is None or last.kind is not ElementKind.TRANSITION:
            found.append(
                Diagnostic(
                    Priority.TRANSITION,
                    f'[TRANSITION] No transition between "{current.heading}" and '
                    f'"{following.heading}" ({current.int_ext.value} -> '
                    f"{following.int_ext.value}). Consider whether a CUT TO: or "
                    "visual bridge is needed.",
                )
            )
    return found


def _format_issues(
    document: Document, scenes: list[Scene], scoped: bool
) -> list[Diagnostic]:
    priorities = {
        Severity.ERROR: Priority.FORMAT_ERROR,
        Severity.WARNING: Priority.FORMAT_WARNING,
        Severity.INFO: Priority.FORMAT_INFO,
    }
    found = []
    for issue in validate(document):
        if scoped and not any(s.start_line <= issue.line <= s.end_line for s in scenes):
            continue
        found.append(
            Diagnostic(
                priorities[issue.severity],
                f"[FORMAT/{severity_tag(issue)}] Line {issue.line}: "
                f"{issue.message} ({issue.rule})",
            )
        )
    return found


@tool(
    "polish_pass",
    "Run a comprehensive polish pass on the screenplay or a specific scene. "
    "Auto-fixes mechanical issues (whitespace, blank line spacing) and returns "
    "a prioritized diagnostic of creative issues for further editing.",
    PolishInput,
    mutating=True,
)
def polish_pass(params: PolishInput, call: ToolCall) -> ToolResult:
    """Apply phase A fixes, then report phase B diagnostics in priority order."""
    settings = call.context.settings
    fixed = mechanical_fixes(call.text)
    changed = fixed != call.text
    updated = fixed if changed else None

    document = parse(fixed)
    scoped = bool(params.scene_heading) or params.scene_number is not None
    scenes = scene_scope(document, params.scene_heading, params.scene_number)
    if scenes is None:
        reference = describe_reference(params.scene_heading, params.scene_number)
        return ToolResult(f"Scene not found: {reference}", updated)

    focus = params.focus
    everything = focus == "all"
    diagnostics: list[Diagnostic] = []
    if everything or focus == "dialogue":
        diagnostics += _dialogue_density(scenes, settings)
    if everything or focus == "action":
        diagnostics += _verbose_action(scenes, settings)
    if everything or focus == "pacing":
        diagnostics += _pacing(document.scenes, scenes)
    if everything or focus in ("dialogue", "action"):
        diagnostics += _repetition(scenes, settings.polish_repetition_threshold)
    if everything or focus == "pacing":
        diagnostics += _transitions(scenes)
    if everything or focus == "format":
        diagnostics += _format_issues(document, scenes, scoped)

    report = ["## Polish Pass Report", ""]
    if params.scene_heading:
        plural = "s" if len(scenes) > 1 else ""
        report.append(f'**Scope**: Scene{plural} matching "{params.scene_heading}"')
    elif scoped:
        report.append(f"**Scope**: Scene {scenes[0].number}: {scenes[0].heading}")
    else:
        report.append("**Scope**: Full screenplay")
    report += [f"**Focus**: {focus}", "", "### Mechanical Fixes Applied", ""]
    if changed:
        report.append(f"- {NORMALIZED_WHITESPACE}")
    else:
        report.append("No mechanical issues found. The screenplay is clean.")
    report += ["", "### Creative Diagnostic", ""]

    if diagnostics:
        report += [
            f"Found {len(diagnostics)} item(s) to review (prioritized by impact):",
            "",
        ]
        ordered = sorted(diagnostics, key=lambda d: d.priority)
        report += [f"{i}. {d.text}" for i, d in enumerate(ordered, start=1)]
    else:
        report.append("No creative issues detected.")
    return ToolResult("\n".join(report), updated)
