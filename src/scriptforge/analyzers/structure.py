"""Act and sequence detection plus narrative arc heuristics.

Acts come from explicit markers when a script carries at least two of them
(depth-1 sections or centered text such as ``ACT ONE`` or ``Second Act``).
Otherwise the scene list is split heuristically. Sequences are always
heuristic: location clusters inside each act, with an even-split fallback.
"""

from __future__ import annotations

import math
import re
from collections import Counter
from typing import Literal

from pydantic import BaseModel, Field

from scriptforge.config import get_logger
from scriptforge.parser.models import Document, ElementKind, IntExt, Scene

logger = get_logger(__name__)

ACT_LABEL_PATTERN = re.compile(
    r"^act\s+(one|two|three|four|five|i{1,3}|iv|v|[1-5])\b", re.IGNORECASE
)
ACT_ALT_PATTERN = re.compile(
    r"^(first|second|third|fourth|fifth)\s+act\b", re.IGNORECASE
)
ACT_NAMES = (
    "One",
    "Two",
    "Three",
    "Four",
    "Five",
    "Six",
    "Seven",
    "Eight",
    "Nine",
    "Ten",
)

# Scenes per sequence aimed for when location clusters are unusable
SEQUENCE_TARGET_SIZE = 5
TENSION_CAPS_PATTERN = re.compile(r"\b[A-Z]{2,}\b")


class Act(BaseModel):
    """A contiguous run of scenes forming one act."""

    number: int
    label: str
    source: Literal["marker", "heuristic"]
    scene_indices: list[int] = Field(default_factory=list)
    start_line: int
    end_line: int


class Sequence(BaseModel):
    """A group of consecutive scenes inside one act."""

    number: int
    label: str
    act_number: int
    scene_indices: list[int] = Field(default_factory=list)
    start_line: int
    end_line: int


class StructureReport(BaseModel):
    """Acts and sequences detected in a document."""

    acts: list[Act] = Field(default_factory=list)
    sequences: list[Sequence] = Field(default_factory=list)
    scene_count: int = 0
    detection_method: Literal["marker", "heuristic"] = "heuristic"

    def act(self, number: int) -> Act | None:
        """Return the act with the given 1-based number, if any."""
        for act in self.acts:
            if act.number == number:
                return act
        return None


def is_act_label(text: str) -> bool:
    """Whether text reads like an act marker ("Act Two", "ACT III", "First Act")."""
    stripped = text.strip()
    return bool(ACT_LABEL_PATTERN.match(stripped) or ACT_ALT_PATTERN.match(stripped))


def _act_markers(document: Document) -> list[tuple[str, int]]:
    markers = []
    for element in document.elements:
        if element.kind is ElementKind.SECTION and element.depth != 1:
            continue
        if element.kind in (ElementKind.SECTION, ElementKind.CENTERED) and is_act_label(
            element.text
        ):
            markers.append((element.text.strip(), element.start_line))
    return markers


def _marker_acts(document: Document, markers: list[tuple[str, int]]) -> list[Act]:
    scenes = document.scenes
    first_start = scenes[0].start_line if scenes else markers[0][1]
    starts = [min(markers[0][1], first_start)] + [line for _, line in markers[1:]]

    acts = []
    for position, (label, _) in enumerate(markers):
        start = starts[position]
        end = (
            starts[position + 1] - 1
            if position + 1 < len(starts)
            else document.line_count
        )
        if position == 0:
            indices = [s.index for s in scenes if s.start_line <= end]
        else:
            indices = [s.index for s in scenes if start <= s.start_line <= end]
        acts.append(
            Act(
                number=position + 1,
                label=label,
                source="marker",
                scene_indices=indices,
                start_line=start,
                end_line=end,
            )
        )
    return acts


def _act_label(number: int) -> str:
    if number <= len(ACT_NAMES):
        return f"Act {ACT_NAMES[number - 1]}"
    return f"Act {number}"


def _heuristic_acts(document: Document, act_count: int, min_scenes: int) -> list[Act]:
    scenes = document.scenes
    total = len(scenes)
    if total == 0:
        return []
    count = act_count if total >= min_scenes else 1

    acts: list[Act] = []
    bounds = [i * total // count for i in range(count)] + [total]
    for start, end in zip(bounds, bounds[1:], strict=False):
        if start >= end:
            continue
        number = len(acts) + 1
        acts.append(
            Act(
                number=number,
                label=_act_label(number),
                source="heuristic",
                scene_indices=list(range(start, end)),
                start_line=scenes[start].start_line,
                end_line=scenes[end - 1].end_line,
            )
        )
    return acts


def normalize_location(location: str) -> str:
    """Lower-case a location and strip everything but letters, digits and spaces."""
    return re.sub(r"[^a-z0-9\s]", "", location.lower().strip())


def _same_place(first: Scene, second: Scene) -> bool:
    a = normalize_location(first.location)
    b = normalize_location(second.location)
    return a == b or a in b or b in a


def _cluster_by_location(
    scenes: tuple[Scene, ...], indices: list[int], max_size: int
) -> list[list[int]]:
    clusters: list[list[int]] = [[indices[0]]]
    for previous, current in zip(indices, indices[1:], strict=False):
        cluster = clusters[-1]
        if _same_place(scenes[previous], scenes[current]) and len(cluster) < max_size:
            cluster.append(current)
        else:
            clusters.append([current])

    merged: list[list[int]] = []
    for cluster in clusters:
        if len(cluster) < 2 and merged and len(merged[-1]) < max_size:
            merged[-1].extend(cluster)
        else:
            merged.append(cluster)
    return merged


def _even_groups(indices: list[int]) -> list[list[int]]:
    group_count = max(1, round(len(indices) / SEQUENCE_TARGET_SIZE))
    size = math.ceil(len(indices) / group_count)
    return [indices[i : i + size] for i in range(0, len(indices), size)]


def _build_sequence(
    scenes: tuple[Scene, ...], act: Act, indices: list[int], number: int
) -> Sequence:
    counts = Counter(scenes[i].location for i in indices if scenes[i].location)
    if counts:
        # most_common keeps first-seen order among ties
        label = f"{counts.most_common(1)[0][0]} Sequence"
    else:
        label = f"Sequence {number}"
    return Sequence(
        number=number,
        label=label,
        act_number=act.number,
        scene_indices=indices,
        start_line=scenes[indices[0]].start_line,
        end_line=scenes[indices[-1]].end_line,
    )


def _act_sequences(document: Document, act: Act, max_size: int) -> list[Sequence]:
    scenes = document.scenes
    indices = act.scene_indices
    if len(indices) <= 3:
        groups = [indices]
    else:
        clusters = _cluster_by_location(scenes, indices, max_size)
        if len(clusters) > 1 and all(2 <= len(c) <= max_size for c in clusters):
            groups = clusters
        else:
            groups = _even_groups(indices)
    return [
        _build_sequence(scenes, act, group, number)
        for number, group in enumerate(groups, start=1)
    ]


def detect_structure(
    document: Document,
    act_count: int = 3,
    min_scenes: int = 8,
    sequence_max_scenes: int = 8,
) -> StructureReport:
    """Detect acts and sequences.

    Args:
        document: Parsed document
        act_count: Acts to split into when the script has no act markers
        min_scenes: Scripts with fewer scenes and no markers form a single act
        sequence_max_scenes: Largest location cluster kept as one sequence

    Returns:
        Structure report whose acts partition the scene indices
    """
    markers = _act_markers(document)
    if len(markers) >= 2:
        acts = _marker_acts(document, markers)
        method: Literal["marker", "heuristic"] = "marker"
    else:
        acts = _heuristic_acts(document, act_count, min_scenes)
        method = "heuristic"

    sequences = []
    for act in acts:
        if act.scene_indices:
            sequences.extend(_act_sequences(document, act, sequence_max_scenes))

    logger.debug(
        "Detected structure",
        method=method,
        acts=len(acts),
        sequences=len(sequences),
        scenes=len(document.scenes),
    )
    return StructureReport(
        acts=acts,
        sequences=sequences,
        scene_count=len(document.scenes),
        detection_method=method,
    )


class ActAnalysis(BaseModel):
    """Pacing, balance, cast and location diagnostics for one act."""

    act: Act
    scene_count: int
    total_lines: int
    estimated_pages: int
    average_scene_lines: float
    longest_scene: int | None = Field(None, description="Index of the longest scene")
    shortest_scene: int | None = Field(None, description="Index of the shortest scene")
    pacing_flag: bool = False
    dialogue_count: int = 0
    action_count: int = 0
    character_presence: list[tuple[str, int]] = Field(default_factory=list)
    interior_count: int = 0
    exterior_count: int = 0
    unique_locations: int = 0
    single_location_flag: bool = False


def scene_line_span(scene: Scene) -> int:
    """Physical lines covered by a scene."""
    return scene.end_line - scene.start_line + 1


def analyze_act(document: Document, act: Act, lines_per_page: int = 56) -> ActAnalysis:
    """Compute act diagnostics.

    The longest scene is flagged when it runs past 2.5x the average; a
    single-location act with more than one scene is flagged for variety.
    """
    scenes = [document.scenes[i] for i in act.scene_indices]
    lengths = [scene_line_span(s) for s in scenes]
    total = sum(lengths)
    average = total / len(lengths) if lengths else 0.0

    longest = shortest = None
    if scenes:
        longest = max(range(len(lengths)), key=lambda i: (lengths[i], -i))
        shortest = min(range(len(lengths)), key=lambda i: (lengths[i], i))

    presence: Counter[str] = Counter()
    for scene in scenes:
        presence.update(scene.characters)
    ranked = sorted(presence.items(), key=lambda item: (-item[1], item[0]))

    locations = {s.location for s in scenes}
    return ActAnalysis(
        act=act,
        scene_count=len(scenes),
        total_lines=total,
        estimated_pages=max(1, math.ceil(total / lines_per_page)),
        average_scene_lines=average,
        longest_scene=scenes[longest].index if longest is not None else None,
        shortest_scene=scenes[shortest].index if shortest is not None else None,
        pacing_flag=bool(lengths) and max(lengths) > average * 2.5,
        dialogue_count=sum(len(s.elements_of(ElementKind.DIALOGUE)) for s in scenes),
        action_count=sum(len(s.elements_of(ElementKind.ACTION)) for s in scenes),
        character_presence=ranked[:10],
        interior_count=sum(1 for s in scenes if s.int_ext is IntExt.INT),
        exterior_count=sum(1 for s in scenes if s.int_ext is IntExt.EXT),
        unique_locations=len(locations),
        single_location_flag=len(locations) == 1 and len(scenes) > 1,
    )


def tension_score(scene: Scene) -> int:
    """Crude dramatic tension proxy for a scene.

    One point per exclamation mark, two per ALL-CAPS token in dialogue and
    one per short single-line action paragraph.
    """
    score = 0
    for element in scene.elements:
        text = element.text
        score += text.count("!")
        if element.kind is ElementKind.DIALOGUE:
            score += 2 * len(TENSION_CAPS_PATTERN.findall(text))
        if element.kind is ElementKind.ACTION and "\n" not in text and len(text) < 40:
            score += 1
    return score


def element_density(scene: Scene) -> float:
    """Elements per physical line of a scene."""
    return len(scene.elements) / max(1, scene_line_span(scene))


def find_inciting_incident(document: Document, threshold: int = 3) -> Scene | None:
    """First scene after the opening, inside the first 30%, with real tension.

    Falls back to the second scene.
    """
    scenes = document.scenes
    limit = min(len(scenes), math.ceil(len(scenes) * 0.3))
    for scene in scenes[1:limit]:
        if tension_score(scene) >= threshold:
            return scene
    return scenes[1] if len(scenes) > 1 else None


def find_climax(document: Document) -> Scene | None:
    """Densest scene in the final third, weighted by element count."""
    scenes = document.scenes
    best: Scene | None = None
    best_score = 0.0
    for scene in scenes[math.floor(len(scenes) * 0.67) :]:
        score = element_density(scene) * len(scene.elements)
        if score > best_score:
            best, best_score = scene, score
    return best


class NarrativeArc(BaseModel):
    """Key beats and structural diagnostics across the whole script."""

    opening: int
    inciting_incident: int | None = None
    midpoint: int
    midpoint_location_shift: str | None = None
    climax: int | None = None
    resolution: int
    act_sizes: list[int] = Field(default_factory=list)
    protagonist: str | None = None
    protagonist_scenes: int = 0
    unique_locations: int = 0
    average_scene_lines: float = 0.0
    scene_lines_std_dev: float = 0.0

    @property
    def acts_imbalanced(self) -> bool:
        """Whether the largest act is more than three times the smallest."""
        sizes = self.act_sizes
        return len(sizes) >= 2 and max(sizes) > min(sizes) * 3


def analyze_narrative_arc(
    document: Document, structure: StructureReport
) -> NarrativeArc | None:
    """Locate opening, inciting incident, midpoint, climax and resolution.

    Returns:
        The arc, or None for a document without scenes
    """
    scenes = document.scenes
    if not scenes:
        return None

    midpoint = len(scenes) // 2
    shift = None
    if midpoint > 0 and scenes[midpoint - 1].location != scenes[midpoint].location:
        shift = scenes[midpoint - 1].location

    presence: Counter[str] = Counter()
    for scene in scenes:
        presence.update(scene.characters)
    protagonist = None
    protagonist_scenes = 0
    if presence:
        protagonist, protagonist_scenes = sorted(
            presence.items(), key=lambda item: (-item[1], item[0])
        )[0]

    lengths = [scene_line_span(s) for s in scenes]
    average = sum(lengths) / len(lengths)
    variance = sum((length - average) ** 2 for length in lengths) / len(lengths)

    inciting = find_inciting_incident(document)
    climax = find_climax(document)
    return NarrativeArc(
        opening=0,
        inciting_incident=inciting.index if inciting else None,
        midpoint=midpoint,
        midpoint_location_shift=shift,
        climax=climax.index if climax else None,
        resolution=len(scenes) - 1,
        act_sizes=[len(act.scene_indices) for act in structure.acts],
        protagonist=protagonist,
        protagonist_scenes=protagonist_scenes,
        unique_locations=len({s.location for s in scenes}),
        average_scene_lines=average,
        scene_lines_std_dev=math.sqrt(variance),
    )
