"""markslides: compile a line-oriented Markdown dialect into slide presentations."""

from .exceptions import (
    MarkdownSyntaxError,
    MarkslidesError,
    MissingFileError,
    ParseError,
    RenderError,
    StructuralError,
)
from .parser import Parser, Presentation, parse_inline, resolve_presentation
from .renderer import BaseRenderer, HTMLRenderer, render_presentation

__version__ = "0.1.0"

__all__ = [
    "BaseRenderer",
    "HTMLRenderer",
    "MarkdownSyntaxError",
    "MarkslidesError",
    "MissingFileError",
    "ParseError",
    "Parser",
    "Presentation",
    "RenderError",
    "StructuralError",
    "parse_inline",
    "render_presentation",
    "resolve_presentation",
    "__version__",
]
