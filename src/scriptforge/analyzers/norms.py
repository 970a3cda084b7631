"""Turning point reference norms loaded from YAML.

The bundled table lives in ``data/tripod_norms.yaml``; a replacement file can
be configured with ``norms_file``. Genre tables only carry a median and a
typical range, so their outer bounds are widened by ``GENRE_OUTER_MARGIN``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from scriptforge.config import get_logger
from scriptforge.exceptions import NormsError

logger = get_logger(__name__)

TURNING_POINT_KEYS = ("tp1", "tp2", "tp3", "tp4", "tp5")
DEFAULT_NORMS_PATH = Path(__file__).parent / "data" / "tripod_norms.yaml"
GENRE_OUTER_MARGIN = 0.05
STANDARD_PAGES = 120


class PositionStats(BaseModel):
    """Relative position statistics (0-1) for a turning point."""

    mean: float | None = None
    median: float = Field(..., ge=0.0, le=1.0)
    p10: float = Field(..., ge=0.0, le=1.0)
    p25: float = Field(..., ge=0.0, le=1.0)
    p75: float = Field(..., ge=0.0, le=1.0)
    p90: float = Field(..., ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_order(self) -> PositionStats:
        """Percentiles must be non-decreasing around the median."""
        if not self.p10 <= self.p25 <= self.median <= self.p75 <= self.p90:
            raise ValueError("expected p10 <= p25 <= median <= p75 <= p90")
        return self


class PageGuide(BaseModel):
    """Page positions for a standard 120 page script."""

    median: int
    typical_range: tuple[int, int]


class TurningPointNorm(BaseModel):
    """Reference data for one of the five turning points."""

    key: str = ""
    name: str
    aliases: list[str] = Field(default_factory=list)
    save_the_cat_beat: str = ""
    description: str = ""
    position: PositionStats
    page_guide: PageGuide | None = None
    exemplars: list[str] = Field(default_factory=list)
    notes: str | None = None

    @property
    def expected_range(self) -> tuple[float, float]:
        """Outer bounds a detection must fall inside to go unflagged."""
        return (self.position.p10, self.position.p90)


class GenreTurningPoint(BaseModel):
    """Genre-specific position of one turning point."""

    median: float = Field(..., ge=0.0, le=1.0)
    typical_range: tuple[float, float]
    notes: str | None = None


class GenreNorm(BaseModel):
    """Structural conventions of one genre."""

    genre: str
    sample_size: int = 0
    turning_points: dict[str, GenreTurningPoint]
    structural_notes: list[str] = Field(default_factory=list)
    example_films: list[str] = Field(default_factory=list)


class NormsTable(BaseModel):
    """The aggregate norms plus optional per-genre overrides."""

    turning_points: dict[str, TurningPointNorm]
    genres: list[GenreNorm] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_keys(self) -> NormsTable:
        """All five turning points must be present; keys are copied onto norms."""
        missing = [key for key in TURNING_POINT_KEYS if key not in self.turning_points]
        if missing:
            raise ValueError(f"missing turning points: {', '.join(missing)}")
        for key, norm in self.turning_points.items():
            norm.key = key
        return self

    @property
    def genre_names(self) -> list[str]:
        """Names of the available genres."""
        return [genre.genre for genre in self.genres]

    def find_genre(self, genre: str) -> GenreNorm | None:
        """Case-insensitive genre lookup; exact names win over partial matches."""
        wanted = genre.lower().strip()
        if not wanted:
            return None
        for candidate in self.genres:
            if candidate.genre.lower() == wanted:
                return candidate
        for candidate in self.genres:
            name = candidate.genre.lower()
            if wanted in name or name in wanted:
                return candidate
        return None

    def norms_for(self, genre: str | None = None) -> list[TurningPointNorm]:
        """Ordered turning point norms, with genre positions when one is given.

        Unknown genres fall back to the aggregate table.
        """
        aggregate = [self.turning_points[key] for key in TURNING_POINT_KEYS]
        match = self.find_genre(genre) if genre else None
        if match is None:
            if genre:
                logger.debug("Unknown genre, using aggregate norms", genre=genre)
            return aggregate

        norms = []
        for norm in aggregate:
            override = match.turning_points.get(norm.key)
            if override is None:
                norms.append(norm)
                continue
            low, high = override.typical_range
            position = PositionStats(
                median=override.median,
                p25=low,
                p75=high,
                p10=max(0.0, low - GENRE_OUTER_MARGIN),
                p90=min(1.0, high + GENRE_OUTER_MARGIN),
            )
            page_guide = PageGuide(
                median=round(override.median * STANDARD_PAGES),
                typical_range=(
                    round(low * STANDARD_PAGES),
                    round(high * STANDARD_PAGES),
                ),
            )
            norms.append(
                norm.model_copy(
                    update={
                        "position": position,
                        "page_guide": page_guide,
                        "notes": override.notes,
                    }
                )
            )
        return norms


def load_norms(path: Path | str | None = None) -> NormsTable:
    """Load and validate a norms file.

    Args:
        path: YAML file to read; the bundled table when omitted

    Returns:
        Validated norms table

    Raises:
        NormsError: If the file is missing, unreadable or malformed
    """
    if path is None:
        return _load_default()
    return _load(Path(path))


@lru_cache(maxsize=1)
def _load_default() -> NormsTable:
    return _load(DEFAULT_NORMS_PATH)


def _load(norms_path: Path) -> NormsTable:
    if not norms_path.is_file():
        raise NormsError(
            message=f"Norms file not found: {norms_path}",
            hint="Point norms_file at an existing YAML file or unset it",
            details={"file": str(norms_path)},
        )
    try:
        with norms_path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise NormsError(
            message=f"Norms file is not valid YAML: {norms_path}",
            hint="Check the file for indentation or quoting mistakes",
            details={"file": str(norms_path), "error": str(e)},
        ) from e

    if not isinstance(data, dict):
        raise NormsError(
            message="Norms file must contain a mapping",
            hint="Start the file with a top-level 'turning_points:' key",
            details={"file": str(norms_path)},
        )
    try:
        table = NormsTable.model_validate(data)
    except ValidationError as e:
        raise NormsError(
            message=f"Norms file failed validation: {norms_path}",
            hint="Each of tp1..tp5 needs a name and median/p10/p25/p75/p90 positions",
            details={"file": str(norms_path), "errors": e.error_count()},
        ) from e

    logger.debug("Loaded turning point norms", file=str(norms_path))
    return table
