"""Line classifier: stateless tests and extractors over one raw input line.

Every function takes the raw line (without its line terminator) and returns
``None`` when the construct does not match. ``classify`` bundles all
predicates into a set of :class:`LineKind` values; the block parser decides
which of them applies in its current state.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple

from .base import Alignment, LineActionKind


class LineKind(str, Enum):
    CODE_INCLUDE = "code_include"
    MULTIPLE_CHOICE = "multiple_choice"
    SEPARATOR = "separator"
    VERTICAL_SPACE = "vertical_space"
    CHAPTER_TITLE = "chapter_title"
    SLIDE_TITLE = "slide_title"
    FENCED_CODE_START = "fenced_code_start"
    FENCED_CODE_END = "fenced_code_end"
    SCRIPT_START = "script_start"
    SCRIPT_END = "script_end"
    EQUATION_START = "equation_start"
    EQUATION_END = "equation_end"
    UML_START = "uml_start"
    UML_END = "uml_end"
    MATCHING_QUESTION_START = "matching_question_start"
    MATCHING_QUESTION = "matching_question"
    OL1 = "ol1"
    OL2 = "ol2"
    OL3 = "ol3"
    UL1 = "ul1"
    UL2 = "ul2"
    UL3 = "ul3"
    SOURCE = "source"
    QUOTE = "quote"
    QUOTE_SOURCE = "quote_source"
    IMPORTANT = "important"
    QUESTION = "question"
    BOX = "box"
    TABLE_ROW = "table_row"
    TABLE_SEPARATOR = "table_separator"
    SPACE_COMMENT = "space_comment"
    INPUT_QUESTION = "input_question"
    COMMENT = "comment"
    HTML = "html"
    IMAGE = "image"
    HEADING = "heading"
    LINE_ACTION = "line_action"
    FOOTNOTE_DEF = "footnote_def"
    LINK_DEF = "link_def"
    EMPTY = "empty"
    NORMAL = "normal"


class FenceStart(NamedTuple):
    language: str
    order: int
    caption: str | None


class ListMatch(NamedTuple):
    ordered: bool
    level: int
    content: str
    number: int


class ChoiceMatch(NamedTuple):
    correct: bool
    inline: bool
    text: str


class IncludeMatch(NamedTuple):
    path: str
    order: int
    language: str


class UmlStart(NamedTuple):
    width_slide: str | None
    width_plain: str | None


class ImageMatch(NamedTuple):
    location: str
    alt: str
    title: str
    width_slide: str | None
    width_plain: str | None


class LinkDef(NamedTuple):
    key: str
    target: str
    title: str | None


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_COMMENT_RE = re.compile(r"^<!--(.*)-->$")
_SPACE_COMMENT_RE = re.compile(r"<!-- Spacing: ([0-9]*) -->")
_INPUT_QUESTION_RE = re.compile(r"<!-- INPUT:?(.*?)-->")
_SOURCE_RE = re.compile(r"^ {4}[^*\-]")
_TABLE_ROW_RE = re.compile(r"^\|(.*)\| *$")
_TABLE_SEPARATOR_RE = re.compile(r"^\| *:?-{2,}:? *\|.*")
_QUOTE_RE = re.compile(r"^> (.*)$")
_QUOTE_SOURCE_RE = re.compile(r"^>> (.*)$")
_IMPORTANT_RE = re.compile(r"^>! (.*)$")
_QUESTION_RE = re.compile(r"^>\? (.*)$")
_BOX_RE = re.compile(r"^>: (.*)$")
_MULTIPLE_CHOICE_RE = re.compile(r"^( {2}[*\-] |)\[([ Xx*])\](\.?) (.*)")
_MATCHING_START_RE = re.compile(r'<!-- SHUFFLE type="(.*)" -->')
_MATCHING_RE = re.compile(r"^\*(.*)->(.*)$")
_FENCE_START_RE = re.compile(r"^```([a-zA-Z0-9]*)(?:\[([1-9])\])?(?:\{(.*?)\})?")
_UML_START_RE = re.compile(r"^@startuml(?:\[(.*?)\](?:\[(.*?)\])?)?$")
_SEPARATOR_RE = re.compile(r"^---.*")
_UL_RE = {level: re.compile(rf"^ {{{2 * level}}}[*\-] (.*)") for level in (1, 2, 3)}
_OL_RE = {level: re.compile(rf"^ {{{2 * level}}}([0-9]+)\. (.*)") for level in (1, 2, 3)}
_SLIDE_TITLE_RE = re.compile(r"^ *## (.*)")
_CHAPTER_TITLE_RE = re.compile(r"^ *# (.*)")
_HEADING_RE = re.compile(r"^(#{3,5}) (.*)")
_FOOTNOTE_DEF_RE = re.compile(r"^\[\^(.+?)\]: (.*)")
_LINK_DEF_RE = re.compile(r'^\[([^\]^][^\]]*)\]: (\S+)(?: "(.*)")?\s*$')

_INCLUDE_RES = (
    re.compile(r'^!INCLUDESRC(?:\[([0-9]*?)\])? "(.*?)"(?: (.*?))?$'),
    re.compile(r'^<!-- include_src(?:\[([0-9]*?)\])?: "(.*?)"(?: (.*?))? -->$'),
)

# Most specific first; a title and a second width must win over shorter forms.
_IMAGE_RES = (
    re.compile(r'!\[(.*)\]\((.*) "(.*)"\)/(.*)//(.*)/'),
    re.compile(r'!\[(.*)\]\((.*) "(.*)"\)/(.*?)/'),
    re.compile(r"!\[(.*)\]\((.*)\)/(.*)//(.*)/"),
    re.compile(r"!\[(.*)\]\((.*?)\)/(.*?)/"),
    re.compile(r'!\[(.*)\]\((.*) "(.*)"\)'),
    re.compile(r"!\[(.*)\]\((.*)\)"),
)
_IMAGE_WIDTH_COMMENT_RE = re.compile(r"<!-- */(.*?)/(?:/(.*?)/)? *-->\s*$")

# Longer names first so ``((Button-With-Log))`` never reads as ``((Button))``.
_LINE_ACTIONS = (
    (re.compile(r"\(\(Link-Previous\)\)"), LineActionKind.LINK_PREVIOUS),
    (re.compile(r"\(\(Live-CSS (.*)\)\)"), LineActionKind.LIVE_CSS),
    (re.compile(r"\(\(Live-Preview-Float\)\)"), LineActionKind.LIVE_PREVIEW_FLOAT),
    (re.compile(r"\(\(Live-Preview\)\)"), LineActionKind.LIVE_PREVIEW),
    (re.compile(r"\(\(Button-With-Log-Pre\)\)"), LineActionKind.BUTTON_WITH_LOG_PRE),
    (re.compile(r"\(\(Button-With-Log\)\)"), LineActionKind.BUTTON_WITH_LOG),
    (re.compile(r"\(\(Button\)\)"), LineActionKind.BUTTON),
)


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------

def is_empty(line: str) -> bool:
    return not line.strip()


def is_normal(line: str) -> bool:
    """Line starts with a non-whitespace character (plain text class)."""
    return bool(line) and not line[0].isspace()


def comment(line: str) -> str | None:
    m = _COMMENT_RE.match(line.strip())
    return m.group(1).strip() if m else None


def space_comment(line: str) -> int | None:
    m = _SPACE_COMMENT_RE.search(line.strip())
    if not m:
        return None
    return int(m.group(1) or 0)


def input_question(line: str) -> list[str] | None:
    m = _INPUT_QUESTION_RE.search(line)
    if not m:
        return None
    return [v.strip() for v in m.group(1).split("|") if v.strip()]


def is_vertical_space(line: str) -> bool:
    return line.strip() == "<br>"


def source(line: str) -> str | None:
    """Content of a four-space-indented code line."""
    if _SOURCE_RE.match(line):
        return line[4:]
    return None


def strip_code_prefix(line: str) -> str:
    return line[4:] if len(line) > 4 else line


def is_table_row(line: str) -> bool:
    return bool(_TABLE_ROW_RE.match(line))


def is_table_separator(line: str) -> bool:
    return bool(_TABLE_SEPARATOR_RE.match(line.strip()))


def table_cells(line: str) -> list[str]:
    """Split a table row into raw cells; ``\\|`` stays a literal pipe."""
    body = line.strip()
    if body.startswith("|"):
        body = body[1:]
    if body.endswith("|") and not body.endswith("\\|"):
        body = body[:-1]
    cells = re.split(r"(?<!\\)\|", body)
    return [c.replace("\\|", "|") for c in cells]


def header_alignment(cell: str) -> Alignment:
    """Alignment of a header cell derived from its padding."""
    if re.match(r"^ {2,}.*\S.* {2,}$", cell):
        return Alignment.CENTER
    if re.match(r"^ {2,}.*\S.* ?$", cell):
        return Alignment.RIGHT
    return Alignment.LEFT


def separator_alignments(line: str) -> list[Alignment | None]:
    """Alignments given by ``:--``/``--:``/``:-:`` markers; ``None`` if unmarked."""
    result: list[Alignment | None] = []
    for cell in table_cells(line):
        cell = cell.strip()
        if cell.startswith(":") and cell.endswith(":"):
            result.append(Alignment.CENTER)
        elif cell.endswith(":"):
            result.append(Alignment.RIGHT)
        elif cell.startswith(":"):
            result.append(Alignment.LEFT)
        else:
            result.append(None)
    return result


def quote(line: str) -> str | None:
    m = _QUOTE_RE.match(line)
    return m.group(1) if m else None


def quote_source(line: str) -> str | None:
    m = _QUOTE_SOURCE_RE.match(line)
    return m.group(1) if m else None


def important(line: str) -> str | None:
    m = _IMPORTANT_RE.match(line)
    return m.group(1) if m else None


def question(line: str) -> str | None:
    m = _QUESTION_RE.match(line)
    return m.group(1) if m else None


def box(line: str) -> str | None:
    m = _BOX_RE.match(line)
    return m.group(1) if m else None


def multiple_choice(line: str) -> ChoiceMatch | None:
    m = _MULTIPLE_CHOICE_RE.match(line)
    if not m:
        return None
    return ChoiceMatch(correct=m.group(2) != " ", inline=m.group(3) == ".", text=m.group(4))


def matching_question_start(line: str) -> str | None:
    m = _MATCHING_START_RE.search(line)
    return m.group(1) if m else None


def matching_question(line: str) -> tuple[str, str] | None:
    m = _MATCHING_RE.match(line.strip())
    if not m:
        return None
    return m.group(1).strip(), m.group(2).strip()


def fenced_code_start(line: str) -> FenceStart | None:
    m = _FENCE_START_RE.match(line.strip())
    if not m:
        return None
    order = int(m.group(2)) if m.group(2) else 0
    return FenceStart(m.group(1), order, m.group(3))


def is_fenced_code_end(line: str) -> bool:
    return line.strip() == "```"


def is_skipped(line: str) -> bool:
    return "--skip--" in line


def is_script_start(line: str) -> bool:
    return line.strip() == "<script>"


def is_script_end(line: str) -> bool:
    return line.strip() == "</script>"


def is_equation_start(line: str) -> bool:
    return line.strip() == "\\["


def is_equation_end(line: str) -> bool:
    return line.strip() == "\\]"


def is_separator(line: str) -> bool:
    return bool(_SEPARATOR_RE.match(line))


def list_item(line: str) -> ListMatch | None:
    """Ordered or unordered list item at level 1 to 3."""
    for level, pattern in _OL_RE.items():
        m = pattern.match(line)
        if m:
            return ListMatch(True, level, m.group(2), int(m.group(1)))
    for level, pattern in _UL_RE.items():
        m = pattern.match(line)
        if m:
            return ListMatch(False, level, m.group(1), 1)
    return None


def slide_title(line: str) -> str | None:
    m = _SLIDE_TITLE_RE.match(line)
    if not m:
        return None
    return m.group(1).replace("#", "").replace("--skip--", "").strip()


def chapter_title(line: str) -> str | None:
    m = _CHAPTER_TITLE_RE.match(line)
    if not m:
        return None
    return m.group(1).replace("#", "").strip()


def uml_start(line: str) -> UmlStart | None:
    m = _UML_START_RE.match(line.strip())
    if not m:
        return None
    width_slide = m.group(1)
    width_plain = m.group(2) if m.group(2) is not None else width_slide
    return UmlStart(width_slide, width_plain)


def is_uml_end(line: str) -> bool:
    return line.strip() == "@enduml"


def code_include(line: str) -> IncludeMatch | None:
    for pattern in _INCLUDE_RES:
        m = pattern.match(line.strip())
        if m:
            return IncludeMatch(m.group(2), int(m.group(1) or 0), m.group(3) or "")
    return None


def heading(line: str) -> tuple[int, str] | None:
    """Level 3 to 5 heading inside a slide."""
    m = _HEADING_RE.match(line)
    if not m:
        return None
    return len(m.group(1)), m.group(2).replace("#", "").strip()


def line_action(line: str) -> tuple[LineActionKind, str | None] | None:
    for pattern, kind in _LINE_ACTIONS:
        m = pattern.search(line)
        if m:
            fragment = m.group(1) if pattern.groups else None
            return kind, fragment
    return None


def image(line: str) -> ImageMatch | None:
    widths: tuple[str | None, str | None] = (None, None)
    wm = _IMAGE_WIDTH_COMMENT_RE.search(line)
    if wm and "![" in line[: wm.start()]:
        widths = (wm.group(1), wm.group(2))
        line = line[: wm.start()].rstrip()

    for index, pattern in enumerate(_IMAGE_RES):
        m = pattern.search(line)
        if not m:
            continue
        groups = m.groups()
        alt, location = groups[0], groups[1]
        titled = index in (0, 1, 4)
        title = groups[2] if titled else alt
        rest = groups[3:] if titled else groups[2:]
        width_slide = rest[0] if len(rest) > 0 else widths[0]
        width_plain = rest[1] if len(rest) > 1 else widths[1]
        return ImageMatch(location.strip(), alt, title, width_slide, width_plain)
    return None


def footnote_def(line: str) -> tuple[str, str] | None:
    m = _FOOTNOTE_DEF_RE.match(line)
    return (m.group(1), m.group(2)) if m else None


def link_def(line: str) -> LinkDef | None:
    m = _LINK_DEF_RE.match(line)
    return LinkDef(m.group(1), m.group(2), m.group(3)) if m else None


def is_html(line: str) -> bool:
    return line.startswith("<")


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

_PREDICATES = (
    (LineKind.CODE_INCLUDE, code_include),
    (LineKind.MULTIPLE_CHOICE, multiple_choice),
    (LineKind.SEPARATOR, is_separator),
    (LineKind.VERTICAL_SPACE, is_vertical_space),
    (LineKind.CHAPTER_TITLE, chapter_title),
    (LineKind.SLIDE_TITLE, slide_title),
    (LineKind.FENCED_CODE_START, fenced_code_start),
    (LineKind.FENCED_CODE_END, is_fenced_code_end),
    (LineKind.SCRIPT_START, is_script_start),
    (LineKind.SCRIPT_END, is_script_end),
    (LineKind.EQUATION_START, is_equation_start),
    (LineKind.EQUATION_END, is_equation_end),
    (LineKind.UML_START, uml_start),
    (LineKind.UML_END, is_uml_end),
    (LineKind.MATCHING_QUESTION_START, matching_question_start),
    (LineKind.MATCHING_QUESTION, matching_question),
    (LineKind.SOURCE, source),
    (LineKind.QUOTE, quote),
    (LineKind.QUOTE_SOURCE, quote_source),
    (LineKind.IMPORTANT, important),
    (LineKind.QUESTION, question),
    (LineKind.BOX, box),
    (LineKind.TABLE_ROW, is_table_row),
    (LineKind.TABLE_SEPARATOR, is_table_separator),
    (LineKind.SPACE_COMMENT, space_comment),
    (LineKind.INPUT_QUESTION, input_question),
    (LineKind.COMMENT, comment),
    (LineKind.HTML, is_html),
    (LineKind.IMAGE, image),
    (LineKind.HEADING, heading),
    (LineKind.LINE_ACTION, line_action),
    (LineKind.FOOTNOTE_DEF, footnote_def),
    (LineKind.LINK_DEF, link_def),
    (LineKind.EMPTY, is_empty),
    (LineKind.NORMAL, is_normal),
)

_LIST_KINDS = {
    (True, 1): LineKind.OL1,
    (True, 2): LineKind.OL2,
    (True, 3): LineKind.OL3,
    (False, 1): LineKind.UL1,
    (False, 2): LineKind.UL2,
    (False, 3): LineKind.UL3,
}


def classify(line: str) -> frozenset[LineKind]:
    """Return every construct the line matches, independent of parser state."""
    kinds = set()
    for kind, predicate in _PREDICATES:
        result = predicate(line)
        if result is not None and result is not False:
            kinds.add(kind)
    item = list_item(line)
    if item is not None:
        kinds.add(_LIST_KINDS[(item.ordered, item.level)])
    return frozenset(kinds)


class MarkdownLine:
    """One input line together with its 1-based number and classification."""

    __slots__ = ("string", "number", "kinds")

    def __init__(self, string: str, number: int = 0) -> None:
        self.string = string.rstrip("\r\n")
        self.number = number
        self.kinds = classify(self.string)

    def __contains__(self, kind: LineKind) -> bool:
        return kind in self.kinds

    def __repr__(self) -> str:
        return f"MarkdownLine({self.number}, {self.string!r})"
