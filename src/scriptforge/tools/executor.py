"""Tool dispatch: validate input, run the tool, return a text result."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from scriptforge.config import get_logger
from scriptforge.exceptions import ScriptForgeError, ToolInputError
from scriptforge.parser.fountain_parser import normalize_newlines, parse
from scriptforge.tools import (  # noqa: F401  (importing registers the tools)
    dialogue_tools,
    edit_tools,
    polish,
    read_tools,
    structure_tools,
)
from scriptforge.tools.base import (
    TOOL_REGISTRY,
    ToolCall,
    ToolContext,
    ToolResult,
    ToolSpec,
)

logger = get_logger(__name__)

WRITERS_ROOM = "writers-room"


def _input_errors(error: ValidationError) -> list[str]:
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "input"
        messages.append(f"{location}: {detail['msg']}")
    return messages


def _validate_input(spec: ToolSpec, data: dict[str, Any] | None) -> Any:
    try:
        return spec.input_model.model_validate(data or {})
    except ValidationError as e:
        raise ToolInputError(spec.name, _input_errors(e)) from e


def execute_tool(
    name: str,
    tool_input: dict[str, Any] | None,
    text: str,
    context: ToolContext | None = None,
) -> ToolResult:
    """Run a named tool against the current screenplay text.

    Args:
        name: Tool name
        tool_input: Tool arguments; camelCase or snake_case keys
        text: Current Fountain text; line endings are normalized first
        context: Settings and story bible; defaults when omitted

    Returns:
        The tool's result. ``updated_screenplay`` is set only when the text
        actually changed. Unknown tools, invalid input and reference-data
        errors come back as text, never as exceptions.
    """
    spec = TOOL_REGISTRY.get(name)
    if spec is None:
        logger.debug("Unknown tool requested", tool=name)
        return ToolResult(f"Unknown tool: {name}")

    try:
        params = _validate_input(spec, tool_input)
    except ToolInputError as e:
        logger.warning("Invalid tool input", tool=name, errors=e.errors)
        return ToolResult(f"Invalid input for {name}: {'; '.join(e.errors)}")

    normalized = normalize_newlines(text)
    call = ToolCall(
        text=normalized, document=parse(normalized), context=context or ToolContext()
    )
    logger.debug("Executing tool", tool=name, mutating=spec.mutating)
    try:
        result = spec.function(params, call)
    except ScriptForgeError as e:
        logger.warning("Tool failed", tool=name, error=e.message)
        return ToolResult(f"Error: {e.message}")

    if result.updated_screenplay == normalized:
        return ToolResult(result.result)
    return result


def tool_definitions(mode: str | None = None) -> list[dict[str, Any]]:
    """Agent-facing definitions of the tools available in a mode.

    The ``writers-room`` mode only exposes tools that never change the text.
    """
    specs = list(TOOL_REGISTRY.values())
    if mode == WRITERS_ROOM:
        specs = [spec for spec in specs if not spec.mutating]
    return [spec.definition() for spec in specs]


def tool_names(mode: str | None = None) -> list[str]:
    """Names of the tools available in a mode."""
    return [definition["name"] for definition in tool_definitions(mode)]
