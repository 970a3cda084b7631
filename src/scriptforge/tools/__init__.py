"""Agent tools that read and edit Fountain text."""

from scriptforge.tools.base import TOOL_REGISTRY, ToolContext, ToolResult
from scriptforge.tools.executor import execute_tool, tool_definitions, tool_names
from scriptforge.tools.story_bible import StoryBible, load_story_bible

__all__ = [
    "TOOL_REGISTRY",
    "StoryBible",
    "ToolContext",
    "ToolResult",
    "execute_tool",
    "load_story_bible",
    "tool_definitions",
    "tool_names",
]
