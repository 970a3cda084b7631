"""Locate the five TRIPOD turning points and compare them with reference norms.

Each turning point is searched for inside its own window ``[p10, p90]`` of the
scene list. Scenes are scored by proximity to the reference median plus
density, cast size, tension proxies and a turning-point specific signal.
"""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field

from scriptforge.analyzers.norms import (
    NormsTable,
    PageGuide,
    TurningPointNorm,
    load_norms,
)
from scriptforge.analyzers.statistics import estimate_page_count
from scriptforge.analyzers.structure import (
    element_density,
    scene_line_span,
    tension_score,
)
from scriptforge.config import get_logger
from scriptforge.parser.models import Document, ElementKind, Scene

logger = get_logger(__name__)

Status = Literal[
    "WITHIN RANGE", "SLIGHTLY EARLY", "SLIGHTLY LATE", "EARLY", "LATE", "NOT DETECTED"
]

POSITION_SIGMA = 0.08
POSITION_WEIGHT = 5.0


class TurningPointComparison(BaseModel):
    """One detected turning point set against its reference range."""

    key: str
    name: str
    description: str = ""
    detected_scene_index: int | None = None
    detected_heading: str | None = None
    detected_scene_pct: float | None = Field(
        None, description="(index + 1) / scene count of the detected scene"
    )
    expected_median: float
    expected_range: tuple[float, float]
    typical_range: tuple[float, float]
    page_guide: PageGuide | None = None
    status: Status = "NOT DETECTED"
    flag: bool = True
    confidence: float = 0.0
    exemplars: list[str] = Field(default_factory=list)
    notes: str | None = None


class TurningPointReport(BaseModel):
    """All five comparisons for a script."""

    total_scenes: int
    estimated_pages: int
    genre: str | None = None
    turning_points: list[TurningPointComparison] = Field(default_factory=list)

    @property
    def flagged(self) -> list[TurningPointComparison]:
        """Comparisons that fall outside their expected range."""
        return [tp for tp in self.turning_points if tp.flag]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def search_window(norm: TurningPointNorm, total_scenes: int) -> tuple[int, int]:
    """Inclusive scene index window searched for a turning point."""
    start = max(0, _round_half_up(norm.position.p10 * total_scenes) - 1)
    end = min(total_scenes - 1, _round_half_up(norm.position.p90 * total_scenes))
    return start, end


def score_scene(
    scenes: tuple[Scene, ...], index: int, norm: TurningPointNorm
) -> float:
    """Score how likely a scene is to be the given turning point."""
    scene = scenes[index]
    total = len(scenes)
    previous = scenes[index - 1] if index > 0 else None

    diff = (index + 1) / total - norm.position.median
    score = math.exp(-(diff * diff) / (2 * POSITION_SIGMA**2)) * POSITION_WEIGHT
    score += min(element_density(scene) * 2, 2.0)
    score += min(len(scene.characters) * 0.3, 1.5)
    score += min(tension_score(scene) * 0.2, 1.0)

    actions = len(scene.elements_of(ElementKind.ACTION))
    dialogue = len(scene.elements_of(ElementKind.DIALOGUE))
    moved = previous is not None and previous.location != scene.location

    if norm.key == "tp1":
        if previous is not None:
            known = set(previous.characters)
            score += 0.5 * sum(1 for name in scene.characters if name not in known)
        score += min(actions * 0.2, 1.0)
    elif norm.key == "tp2":
        if moved:
            score += 1.0
        if previous is not None and previous.int_ext is not scene.int_ext:
            score += 0.5
    elif norm.key == "tp3":
        if moved:
            score += 0.8
        score += min(scene_line_span(scene) / 50, 1.0)
    elif norm.key == "tp4":
        if moved:
            score += 1.0
        score += min(dialogue * 0.15, 1.0)
    elif norm.key == "tp5":
        score += min(len(scene.elements) * 0.1, 2.0)
        if actions and dialogue:
            score += 0.5
    return score


def classify_position(pct: float, norm: TurningPointNorm) -> Status:
    """Map a detected position onto a status label."""
    position = norm.position
    if position.p25 <= pct <= position.p75:
        return "WITHIN RANGE"
    if position.p10 <= pct <= position.p90:
        return "SLIGHTLY EARLY" if pct < position.median else "SLIGHTLY LATE"
    return "EARLY" if pct < position.p10 else "LATE"


def detect_turning_point(
    document: Document, norm: TurningPointNorm
) -> TurningPointComparison:
    """Find the best candidate scene for one turning point.

    Equal scores keep the earliest scene, except for the climax where the
    denser scene wins.
    """
    scenes = document.scenes
    comparison = TurningPointComparison(
        key=norm.key,
        name=norm.name,
        description=norm.description,
        expected_median=norm.position.median,
        expected_range=norm.expected_range,
        typical_range=(norm.position.p25, norm.position.p75),
        page_guide=norm.page_guide,
        exemplars=list(norm.exemplars),
        notes=norm.notes,
    )
    if not scenes:
        return comparison

    start, end = search_window(norm, len(scenes))
    best: int | None = None
    best_score = -math.inf
    for index in range(start, end + 1):
        score = score_scene(scenes, index, norm)
        if score > best_score or (
            norm.key == "tp5"
            and best is not None
            and score == best_score
            and element_density(scenes[index]) > element_density(scenes[best])
        ):
            best, best_score = index, score

    if best is None:
        return comparison

    pct = (best + 1) / len(scenes)
    low, high = norm.expected_range
    proximity = 1 - abs(pct - norm.position.median) / 0.5
    confidence = max(0.0, min(1.0, proximity * 0.5 + min(best_score / 10, 0.5)))
    return comparison.model_copy(
        update={
            "detected_scene_index": best,
            "detected_heading": scenes[best].heading,
            "detected_scene_pct": pct,
            "status": classify_position(pct, norm),
            "flag": not low <= pct <= high,
            "confidence": round(confidence, 2),
        }
    )


def compare_turning_points(
    document: Document,
    norms: NormsTable | None = None,
    genre: str | None = None,
    lines_per_page: int = 56,
) -> TurningPointReport:
    """Detect all five turning points and compare them with the norms.

    Args:
        document: Parsed document
        norms: Reference table; the bundled one when omitted
        genre: Optional genre whose positions replace the aggregate ones
        lines_per_page: Page estimate setting

    Returns:
        Report with one comparison per turning point, in story order
    """
    table = norms or load_norms()
    matched = table.find_genre(genre) if genre else None
    comparisons = [
        detect_turning_point(document, norm) for norm in table.norms_for(genre)
    ]
    logger.debug(
        "Compared turning points",
        scenes=len(document.scenes),
        genre=matched.genre if matched else None,
        flagged=sum(1 for c in comparisons if c.flag),
    )
    return TurningPointReport(
        total_scenes=len(document.scenes),
        estimated_pages=estimate_page_count(document, lines_per_page),
        genre=matched.genre if matched else None,
        turning_points=comparisons,
    )
