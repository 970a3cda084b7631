"""Scene lookup by heading substring or 1-based number."""

from __future__ import annotations

from dataclasses import dataclass

from scriptforge.parser.models import Document, Scene

START = "START"


@dataclass(frozen=True)
class Found:
    """Exactly one scene matched."""

    scene: Scene


@dataclass(frozen=True)
class Ambiguous:
    """Several headings matched; the first one is used."""

    scene: Scene
    alternatives: tuple[Scene, ...]


@dataclass(frozen=True)
class NotFound:
    """No scene matched the query."""

    query: str


Resolution = Found | Ambiguous | NotFound


def matching_scenes(document: Document, heading: str) -> list[Scene]:
    """Every scene whose heading contains ``heading``, ignoring case."""
    wanted = heading.lower()
    return [scene for scene in document.scenes if wanted in scene.heading.lower()]


def resolve_scene(
    document: Document,
    heading: str | None = None,
    number: int | None = None,
) -> Resolution:
    """Resolve a scene reference.

    A non-empty heading takes precedence over the number. When several
    headings match, the first in document order wins.
    """
    if heading:
        matches = matching_scenes(document, heading)
        if not matches:
            return NotFound(query=heading)
        if len(matches) == 1:
            return Found(scene=matches[0])
        return Ambiguous(scene=matches[0], alternatives=tuple(matches[1:]))
    if number is not None and 1 <= number <= len(document.scenes):
        return Found(scene=document.scenes[number - 1])
    return NotFound(query=str(number) if number is not None else "")


def resolved_scene(resolution: Resolution) -> Scene | None:
    """The scene a resolution settled on, if any."""
    if isinstance(resolution, NotFound):
        return None
    return resolution.scene


def describe_reference(heading: str | None, number: int | None = None) -> str:
    """Quote a scene reference for a not-found message."""
    if not heading and number is not None:
        return f"number {number}"
    return f'"{heading or ""}"'


def scene_scope(
    document: Document,
    heading: str | None = None,
    number: int | None = None,
) -> list[Scene] | None:
    """Scenes a scoped tool works on.

    A heading selects every matching scene and a number selects one. With
    neither, every scene is in scope. None means the reference matched nothing.
    """
    if heading:
        return matching_scenes(document, heading) or None
    if number is not None:
        scene = resolved_scene(resolve_scene(document, number=number))
        return [scene] if scene is not None else None
    return list(document.scenes)


def ambiguity_note(resolution: Resolution) -> str:
    """Text appended to a result when a heading matched several scenes."""
    if not isinstance(resolution, Ambiguous):
        return ""
    others = "; ".join(
        f"{scene.number}. {scene.heading}" for scene in resolution.alternatives[:5]
    )
    more = len(resolution.alternatives) - 5
    if more > 0:
        others += f" (+{more} more)"
    return (
        f"\n\nNote: {len(resolution.alternatives) + 1} scenes match; used the "
        f"first. Other matches: {others}"
    )
