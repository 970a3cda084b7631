"""Fountain lexer, parser, document model and serializer."""

from scriptforge.parser.fountain_parser import (
    FountainParser,
    normalize_newlines,
    parse,
)
from scriptforge.parser.models import Document, Element, ElementKind, IntExt, Scene
from scriptforge.parser.serializer import FountainSerializer, serialize

__all__ = [
    "Document",
    "Element",
    "ElementKind",
    "FountainParser",
    "FountainSerializer",
    "IntExt",
    "Scene",
    "normalize_newlines",
    "parse",
    "serialize",
]
