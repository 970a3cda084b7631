"""Tool plumbing: results, context, input models and the registry."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from scriptforge.config.settings import ScriptForgeSettings
from scriptforge.parser.models import Document
from scriptforge.tools.story_bible import StoryBible


@dataclass(frozen=True)
class ToolResult:
    """Outcome of a tool call.

    ``updated_screenplay`` is only set when a mutating tool changed the text;
    its absence means the caller's text is unchanged.
    """

    result: str
    updated_screenplay: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the camelCase wire form."""
        data: dict[str, Any] = {"result": self.result}
        if self.updated_screenplay is not None:
            data["updatedScreenplay"] = self.updated_screenplay
        return data


@dataclass(frozen=True)
class ToolContext:
    """Explicit inputs a tool may read besides the screenplay text."""

    settings: ScriptForgeSettings = field(default_factory=ScriptForgeSettings)
    story_bible: StoryBible | None = None


class ToolInput(BaseModel):
    """Base for tool inputs. Accepts camelCase (wire) or snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class NoInput(ToolInput):
    """Tools that take no arguments."""


@dataclass(frozen=True)
class ToolCall:
    """Everything a tool function receives."""

    text: str
    document: Document
    context: ToolContext


ToolFunction = Callable[[Any, ToolCall], ToolResult]


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool."""

    name: str
    description: str
    input_model: type[ToolInput]
    function: ToolFunction
    mutating: bool = False

    def definition(self) -> dict[str, Any]:
        """Agent-facing name, description and JSON input schema."""
        schema = self.input_model.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.pop("description", None)
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": schema,
        }


TOOL_REGISTRY: dict[str, ToolSpec] = {}


def tool(
    name: str,
    description: str,
    input_model: type[ToolInput] = NoInput,
    mutating: bool = False,
) -> Callable[[ToolFunction], ToolFunction]:
    """Register a function as a named tool.

    Args:
        name: Tool name exposed to agents
        description: What the tool does, written for the agent
        input_model: Pydantic model validating the tool input
        mutating: Whether the tool may return an updated screenplay
    """

    def decorator(function: ToolFunction) -> ToolFunction:
        if name in TOOL_REGISTRY:
            raise ValueError(f"Tool already registered: {name}")
        TOOL_REGISTRY[name] = ToolSpec(
            name=name,
            description=description,
            input_model=input_model,
            function=function,
            mutating=mutating,
        )
        return function

    return decorator
