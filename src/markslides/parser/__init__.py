"""Parser package."""

from .base import (
    Chapter,
    Element,
    Footnote,
    Link,
    Presentation,
    Slide,
)
from .block_parser import ParseCounters, Parser, ParserState
from .inline_parser import parse_inline, resolve_nodes
from .line import LineKind, MarkdownLine, classify
from .nodes import Node, NodeKind
from .resolver import resolve_presentation

__all__ = [
    "Chapter",
    "Element",
    "Footnote",
    "LineKind",
    "Link",
    "MarkdownLine",
    "Node",
    "NodeKind",
    "ParseCounters",
    "Parser",
    "ParserState",
    "Presentation",
    "Slide",
    "classify",
    "parse_inline",
    "resolve_nodes",
    "resolve_presentation",
]
