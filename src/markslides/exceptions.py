"""Exceptions raised while compiling Markdown presentations.

Hierarchy
---------
- MarkslidesError (base)

  - ParseError (fatal for the file being parsed)
    - MarkdownSyntaxError (no construct accepted a line)
    - StructuralError (slide before chapter, content before slide)
    - MissingFileError (include directive points nowhere)

  - RenderError (raised by renderers)
"""

from __future__ import annotations


class MarkslidesError(Exception):
    """Base class for all markslides errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ParseError(MarkslidesError):
    """A line of input could not be turned into document structure.

    Parse errors are never recovered from: the file being parsed is abandoned.
    """

    def __init__(
        self,
        message: str,
        *,
        file_name: str = "",
        line_number: int = 0,
        line: str = "",
        state: str = "",
    ) -> None:
        super().__init__(message)
        self.file_name = file_name
        self.line_number = line_number
        self.line = line
        self.state = state

    def __str__(self) -> str:
        location = f"{self.file_name or '<input>'}:{self.line_number}"
        detail = f" [state={self.state}]" if self.state else ""
        return f"{location}: {self.message}{detail} {self.line!r}"


class MarkdownSyntaxError(ParseError):
    """No line construct or fallback matcher accepted the line."""


class StructuralError(ParseError):
    """The document outline is broken, e.g. a slide outside any chapter."""


class MissingFileError(ParseError):
    """An include directive references a file that does not exist."""

    def __init__(
        self,
        message: str,
        *,
        path: str,
        file_name: str = "",
        line_number: int = 0,
        line: str = "",
        state: str = "",
    ) -> None:
        super().__init__(message, file_name=file_name, line_number=line_number, line=line, state=state)
        self.path = path


class RenderError(MarkslidesError):
    """A renderer could not produce output for the document."""
