"""ScriptForge: a Fountain screenplay document engine.

Parses Fountain text into a line-addressable document model, serializes it
back, validates formatting, derives acts and turning points, and exposes the
text-editing tools an agent calls with ``execute_tool``.
"""

from .parser.fountain_parser import FountainParser, parse
from .parser.models import Document, Element, ElementKind, IntExt, Scene
from .parser.serializer import serialize
from .tools import ToolContext, ToolResult, execute_tool, tool_definitions
from .validators.document_validator import Issue, Severity, validate

__version__ = "0.1.0"

__all__ = [
    "Document",
    "Element",
    "ElementKind",
    "FountainParser",
    "IntExt",
    "Issue",
    "Scene",
    "Severity",
    "ToolContext",
    "ToolResult",
    "execute_tool",
    "parse",
    "serialize",
    "tool_definitions",
    "validate",
]
