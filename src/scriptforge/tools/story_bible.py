"""Story bible: project context the agent can read alongside the script."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from scriptforge.config import get_logger
from scriptforge.exceptions import ConfigurationError, ScriptForgeFileNotFoundError

logger = get_logger(__name__)


class _BibleModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Relationship(_BibleModel):
    """A character's relationship to another character."""

    character_id: str
    relationship: str


class CharacterProfile(_BibleModel):
    """Writer-maintained notes about one character."""

    id: str = ""
    name: str
    description: str = ""
    arc: str = ""
    relationships: list[Relationship] = Field(default_factory=list)
    notes: str = ""


class LocationProfile(_BibleModel):
    """Writer-maintained notes about one location."""

    id: str = ""
    name: str
    description: str = ""
    associated_scenes: list[str] = Field(default_factory=list)


class BeatSheetEntry(_BibleModel):
    """One Save the Cat beat and whether it has been written."""

    id: str = ""
    beat: str
    description: str = ""
    scene_refs: list[str] = Field(default_factory=list)
    completed: bool = False


class StoryBible(_BibleModel):
    """Structured project context: overview, cast, places and beats."""

    project_id: str = ""
    genre: str = ""
    tone: str = ""
    themes: list[str] = Field(default_factory=list)
    logline: str = ""
    synopsis: str = ""
    characters: list[CharacterProfile] = Field(default_factory=list)
    locations: list[LocationProfile] = Field(default_factory=list)
    beat_sheet: list[BeatSheetEntry] = Field(default_factory=list)
    custom_notes: str = ""

    def render(self) -> str:
        """Markdown rendering handed to the agent."""
        lines = ["## Story Bible", "", "### Overview", ""]
        lines.append(f"- **Genre**: {self.genre or '(not set)'}")
        lines.append(f"- **Tone**: {self.tone or '(not set)'}")
        lines.append(f"- **Themes**: {', '.join(self.themes) or '(none)'}")
        lines.append(f"- **Logline**: {self.logline or '(not set)'}")
        if self.synopsis:
            lines.append(f"- **Synopsis**: {self.synopsis}")
        lines.append("")

        lines += ["### Characters", ""]
        if not self.characters:
            lines.append("No characters defined.")
        for character in self.characters:
            lines.append(f"#### {character.name}")
            if character.description:
                lines.append(f"- **Description**: {character.description}")
            if character.arc:
                lines.append(f"- **Arc**: {character.arc}")
            if character.relationships:
                related = "; ".join(
                    f"{r.character_id}: {r.relationship}"
                    for r in character.relationships
                )
                lines.append(f"- **Relationships**: {related}")
            if character.notes:
                lines.append(f"- **Notes**: {character.notes}")
            lines.append("")

        lines += ["### Locations", ""]
        if not self.locations:
            lines.append("No locations defined.")
        for location in self.locations:
            suffix = f": {location.description}" if location.description else ""
            lines.append(f"- **{location.name}**{suffix}")
            if location.associated_scenes:
                lines.append(f"  Scenes: {', '.join(location.associated_scenes)}")
        lines.append("")

        completed = sum(1 for beat in self.beat_sheet if beat.completed)
        lines += [
            "### Beat Sheet (Save the Cat)",
            "",
            f"Progress: {completed}/{len(self.beat_sheet)} beats completed",
            "",
        ]
        for beat in self.beat_sheet:
            lines.append(f"{'[x]' if beat.completed else '[ ]'} **{beat.beat}**")
            if beat.description:
                lines.append(f"    {beat.description}")
            if beat.scene_refs:
                lines.append(f"    Scene refs: {', '.join(beat.scene_refs)}")
        lines.append("")

        if self.custom_notes:
            lines += ["### Writer Notes", "", self.custom_notes]
        return "\n".join(lines)


def load_story_bible(path: Path | str) -> StoryBible:
    """Load a story bible from a YAML or JSON file.

    Args:
        path: File to read; ``.json`` files are parsed as JSON, anything
            else as YAML

    Returns:
        Validated story bible

    Raises:
        ScriptForgeFileNotFoundError: If the file does not exist
        ConfigurationError: If the file cannot be parsed or validated
    """
    bible_path = Path(path)
    if not bible_path.is_file():
        raise ScriptForgeFileNotFoundError(
            message=f"Story bible not found: {bible_path}",
            hint="Check the path passed to --bible",
            details={"file": str(bible_path)},
        )

    try:
        with bible_path.open(encoding="utf-8") as f:
            data: Any
            if bible_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        bible = StoryBible.model_validate(data or {})
    except (json.JSONDecodeError, yaml.YAMLError, ValidationError) as e:
        raise ConfigurationError(
            message=f"Invalid story bible: {bible_path}",
            hint="The file must be a mapping with genre, characters, locations...",
            details={"file": str(bible_path), "error": str(e)},
        ) from e

    logger.debug(
        "Loaded story bible",
        file=str(bible_path),
        characters=len(bible.characters),
        beats=len(bible.beat_sheet),
    )
    return bible
