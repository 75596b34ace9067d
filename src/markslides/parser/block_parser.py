"""Block-level parser turning Markdown lines into the presentation document model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Iterable, TypeVar

from ..exceptions import MarkdownSyntaxError, MissingFileError, ParseError, StructuralError
from . import line as ml
from .base import (
    HTML,
    UML,
    BlockElement,
    Box,
    Chapter,
    Comment,
    Element,
    Equation,
    Footnote,
    Heading,
    Image,
    Important,
    InlineText,
    InputQuestion,
    LineAction,
    Link,
    ListElement,
    MatchingQuestions,
    MultipleChoice,
    MultipleChoiceQuestions,
    OrderedList,
    Presentation,
    Question,
    Quote,
    Script,
    Slide,
    Source,
    Table,
    Text,
    UnorderedList,
    VerticalSpace,
)
from .line import LineKind, MarkdownLine

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ParserState(str, Enum):
    NORMAL = "NORMAL"
    CODE = "CODE"
    CODE_FENCED = "CODE_FENCED"
    SCRIPT = "SCRIPT"
    EQUATION = "EQUATION"
    UML = "UML"
    TABLE = "TABLE"
    QUOTE = "QUOTE"
    IMPORTANT = "IMPORTANT"
    QUESTION = "QUESTION"
    BOX = "BOX"
    MATCHING_QUESTION = "MATCHING_QUESTION"
    UL1 = "UL1"
    UL2 = "UL2"
    UL3 = "UL3"
    OL1 = "OL1"
    OL2 = "OL2"
    OL3 = "OL3"


# Verbatim states and the only line kind that ends them.
_VERBATIM_END = {
    ParserState.CODE_FENCED: LineKind.FENCED_CODE_END,
    ParserState.SCRIPT: LineKind.SCRIPT_END,
    ParserState.EQUATION: LineKind.EQUATION_END,
    ParserState.UML: LineKind.UML_END,
}

_LIST_STATES = {
    (True, 1): ParserState.OL1,
    (True, 2): ParserState.OL2,
    (True, 3): ParserState.OL3,
    (False, 1): ParserState.UL1,
    (False, 2): ParserState.UL2,
    (False, 3): ParserState.UL3,
}

_CALLOUTS = (
    (LineKind.IMPORTANT, ml.important, Important, ParserState.IMPORTANT),
    (LineKind.QUESTION, ml.question, Question, ParserState.QUESTION),
    (LineKind.BOX, ml.box, Box, ParserState.BOX),
)


@dataclass(slots=True)
class ParseCounters:
    """Running counters carried from one parsed file to the next."""

    chapter: int = 0
    slide: int = 0


@dataclass(slots=True)
class ParseContext:
    """Mutable state of one ``parse_lines`` run."""

    presentation: Presentation
    file_name: str
    language: str
    counters: ParseCounters
    lines: list[str] = field(default_factory=list)
    base_dir: Path | None = None
    state: ParserState = ParserState.NORMAL
    chapter: Chapter | None = None
    slide: Slide | None = None
    # Open speaker-notes container; elements go here instead of the slide.
    comment: Comment | None = None
    # (level, list) pairs from the outermost open list to the innermost.
    list_path: list[tuple[int, ListElement]] = field(default_factory=list)
    table_aligned: bool = False
    line: MarkdownLine | None = None
    index: int = 0

    @property
    def line_id(self) -> str:
        return f"id_{self.counters.chapter}_{self.index + 1}"

    def error(self, cls: type[ParseError], message: str, **kwargs: object) -> ParseError:
        return cls(
            message,
            file_name=self.file_name,
            line_number=self.index + 1,
            line=self.line.string if self.line else "",
            state=self.state.value,
            **kwargs,
        )

    def require_chapter(self) -> Chapter:
        if self.chapter is None:
            raise self.error(StructuralError, "content before the first chapter heading")
        return self.chapter

    def require_slide(self) -> Slide:
        if self.slide is None:
            raise self.error(StructuralError, "content before the first slide heading")
        return self.slide

    def add(self, element: Element) -> None:
        if self.comment is not None:
            self.comment.add(element)
        else:
            self.require_slide().add(element)

    def current_element(self) -> Element | None:
        if self.comment is not None:
            return self.comment.elements[-1] if self.comment.elements else None
        return self.require_slide().current_element

    def current_block(self) -> BlockElement:
        element = self.current_element()
        if not isinstance(element, BlockElement):
            raise self.error(StructuralError, "verbatim line outside a code block")
        return element

    def expect(self, value: T | None, construct: str) -> T:
        """Return an extractor result, raising for a line that only looked like ``construct``."""
        if value is None:
            raise self.error(MarkdownSyntaxError, f"malformed {construct}")
        return value


def _read_lines(path: Path) -> list[str]:
    """Read ``path`` as lines split on ``\\n`` only.

    ``str.splitlines`` would also break on U+2028, form feeds and friends,
    which are ordinary characters inside a Markdown line.
    """
    text = path.read_text(encoding="utf-8")
    if not text:
        return []
    if text.endswith("\n"):
        text = text[:-1]
    return [raw.rstrip("\r") for raw in text.split("\n")]


class Parser:
    """Parse Markdown presentation files into a :class:`Presentation`.

    A single parser is meant to be used for all files of one presentation;
    chapter and slide counters continue from one call to the next.
    """

    def __init__(self, front_matter: int = 0) -> None:
        self._counters = ParseCounters(chapter=0, slide=front_matter)

    @property
    def counters(self) -> ParseCounters:
        return replace(self._counters)

    def parse(self, input_path: Path | str, default_language: str, presentation: Presentation) -> Presentation:
        input_path = Path(input_path)
        if not input_path.is_file():
            raise MissingFileError(f"input file not found: {input_path}", path=str(input_path), file_name=str(input_path))
        return self.parse_lines(
            _read_lines(input_path),
            str(input_path),
            default_language,
            presentation,
            base_dir=input_path.parent,
        )

    def parse_lines(
        self,
        lines: Iterable[str],
        file_name: str,
        default_language: str,
        presentation: Presentation,
        *,
        base_dir: Path | None = None,
    ) -> Presentation:
        """Parse ``lines`` into ``presentation``.

        Errors abort the whole file: counters are only advanced when the file
        was parsed completely, and chapters or comments the failed file added
        are removed from ``presentation`` again.
        """
        ctx = ParseContext(
            presentation=presentation,
            file_name=file_name,
            language=default_language,
            counters=replace(self._counters),
            lines=[raw.rstrip("\r\n") for raw in lines],
            base_dir=base_dir,
        )
        chapter_count = len(presentation.chapters)
        comment_count = len(presentation.comments)

        try:
            for index, raw in enumerate(ctx.lines):
                ctx.index = index
                ctx.line = MarkdownLine(raw, index + 1)
                _dispatch(ctx, ctx.line)
        except ParseError:
            del presentation.chapters[chapter_count:]
            del presentation.comments[comment_count:]
            raise

        self._counters = ctx.counters
        return presentation


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _dispatch(ctx: ParseContext, line: MarkdownLine) -> None:
    state = ctx.state

    end_kind = _VERBATIM_END.get(state)
    if end_kind is not None:
        if end_kind in line:
            ctx.state = ParserState.NORMAL
        else:
            ctx.current_block().append(line.string)
        return

    if state is ParserState.MATCHING_QUESTION and LineKind.MATCHING_QUESTION not in line:
        ctx.state = state = ParserState.NORMAL

    code = state is ParserState.CODE
    item = ml.list_item(line.string)

    if LineKind.CODE_INCLUDE in line and not code:
        _code_include(ctx, line)
    elif LineKind.MULTIPLE_CHOICE in line:
        _multiple_choice(ctx, line)
    elif LineKind.SEPARATOR in line and not code:
        _separator(ctx)
    elif LineKind.VERTICAL_SPACE in line and not code:
        ctx.add(VerticalSpace())
        ctx.state = ParserState.NORMAL
    elif LineKind.CHAPTER_TITLE in line and not code:
        _chapter_title(ctx, line)
    elif LineKind.SLIDE_TITLE in line and not code:
        _slide_title(ctx, line)
    elif LineKind.FENCED_CODE_START in line:
        _fenced_code_start(ctx, line)
    elif LineKind.SCRIPT_START in line and not code:
        ctx.add(Script())
        ctx.state = ParserState.SCRIPT
    elif LineKind.EQUATION_START in line and not code:
        ctx.add(Equation())
        ctx.state = ParserState.EQUATION
    elif LineKind.UML_START in line and not code:
        _uml_start(ctx, line)
    elif state is ParserState.MATCHING_QUESTION:
        _matching_question(ctx, line)
    elif LineKind.MATCHING_QUESTION_START in line and not code:
        ctx.add(MatchingQuestions(shuffle=ml.matching_question_start(line.string) or "question"))
        ctx.state = ParserState.MATCHING_QUESTION
    elif item is not None and code and item.level > 1:
        # Code lines starting with ``*`` or ``-`` look like nested bullets.
        ctx.current_block().append(ml.strip_code_prefix(line.string))
    elif item is not None:
        _list_item(ctx, item)
    elif LineKind.SOURCE in line and LineKind.EMPTY not in line and not code:
        source = Source(language=ctx.language)
        source.append(ml.strip_code_prefix(line.string))
        ctx.add(source)
        ctx.state = ParserState.CODE
    elif LineKind.SOURCE in line and LineKind.EMPTY not in line:
        ctx.current_block().append(ml.strip_code_prefix(line.string))
    elif code and LineKind.EMPTY in line:
        _source_lookahead(ctx)
    elif LineKind.QUOTE in line or LineKind.QUOTE_SOURCE in line:
        _quote(ctx, line)
    elif any(kind in line for kind, *_ in _CALLOUTS):
        _callout(ctx, line)
    elif LineKind.TABLE_ROW in line:
        _table(ctx, line)
    elif LineKind.SPACE_COMMENT in line:
        _space_comment(ctx, line)
    elif LineKind.INPUT_QUESTION in line:
        ctx.add(InputQuestion(values=ml.input_question(line.string) or []))
        ctx.state = ParserState.NORMAL
    elif LineKind.COMMENT in line:
        ctx.presentation.comments.append(ml.comment(line.string) or "")
    else:
        _inline(ctx, line)


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------

def _chapter_title(ctx: ParseContext, line: MarkdownLine) -> None:
    ctx.counters.chapter += 1
    ctx.counters.slide += 1
    chapter = Chapter(ml.chapter_title(line.string) or "", id=f"chap_{ctx.counters.chapter}")
    ctx.presentation.add(chapter)
    ctx.chapter = chapter
    ctx.slide = None
    ctx.comment = None
    ctx.list_path = []
    ctx.state = ParserState.NORMAL
    logger.debug("Chapter %s opened: %s", chapter.id, chapter.title)


def _slide_title(ctx: ParseContext, line: MarkdownLine) -> None:
    if ctx.chapter is None:
        raise ctx.error(StructuralError, "slide heading before any chapter heading")

    # Hidden slides still use up a number so later ids stay stable.
    ctx.counters.slide += 1
    slide = Slide(
        id=f"slide_id_{ctx.counters.chapter}_{ctx.counters.slide}",
        title=ml.slide_title(line.string) or "",
        number=ctx.counters.slide,
        skip=ml.is_skipped(line.string),
    )
    ctx.chapter.add_slide(slide)
    ctx.slide = slide
    ctx.comment = None
    ctx.list_path = []
    ctx.state = ParserState.NORMAL
    logger.debug("Slide %s opened: %s%s", slide.id, slide.title, " (skipped)" if slide.skip else "")


def _separator(ctx: ParseContext) -> None:
    if ctx.comment is not None:
        ctx.comment = None
    else:
        comment = Comment()
        ctx.require_slide().add(comment)
        ctx.comment = comment
    ctx.list_path = []
    ctx.state = ParserState.NORMAL


# ---------------------------------------------------------------------------
# Code blocks
# ---------------------------------------------------------------------------

def _fenced_code_start(ctx: ParseContext, line: MarkdownLine) -> None:
    fence = ctx.expect(ml.fenced_code_start(line.string), "code fence")
    ctx.add(Source(language=fence.language or ctx.language, caption=fence.caption, order=fence.order))
    # Each animation step takes a slide number of its own.
    ctx.counters.slide += fence.order
    ctx.state = ParserState.CODE_FENCED


def _code_include(ctx: ParseContext, line: MarkdownLine) -> None:
    include = ctx.expect(ml.code_include(line.string), "include directive")
    path = Path(include.path)
    if not path.is_absolute() and ctx.base_dir is not None:
        path = ctx.base_dir / path
    if not path.is_file():
        raise ctx.error(MissingFileError, f"included file not found: {include.path}", path=str(path))

    source = Source(language=include.language or ctx.language, order=include.order)
    for included in _read_lines(path):
        source.append(included)
    ctx.add(source)
    ctx.counters.slide += include.order
    ctx.state = ParserState.NORMAL
    logger.debug("Included %s (%d bytes) into %s", path, len(source.content), ctx.file_name)


def _source_lookahead(ctx: ParseContext) -> None:
    """Keep a blank line inside indented code only if more code follows."""
    for raw in ctx.lines[ctx.index + 1:]:
        if ml.source(raw) is not None and not ml.is_empty(raw):
            ctx.current_block().append("")
            return
        if ml.is_normal(raw):
            break
    ctx.state = ParserState.NORMAL


def _uml_start(ctx: ParseContext, line: MarkdownLine) -> None:
    widths = ctx.expect(ml.uml_start(line.string), "UML start")
    ctx.add(
        UML(
            picture_name=f"uml_{ctx.line_id}",
            width_slide=widths.width_slide,
            width_plain=widths.width_plain,
        )
    )
    ctx.state = ParserState.UML


# ---------------------------------------------------------------------------
# Lists, quotes, tables, quizzes
# ---------------------------------------------------------------------------

def _new_list(item: ml.ListMatch) -> ListElement:
    return OrderedList(start=item.number) if item.ordered else UnorderedList()


def _list_item(ctx: ParseContext, item: ml.ListMatch) -> None:
    path = ctx.list_path if ctx.state in _LIST_STATES.values() else []

    while path and path[-1][0] > item.level:
        path.pop()

    if path and path[-1][0] == item.level and isinstance(path[-1][1], OrderedList) == item.ordered:
        current = path[-1][1]
    else:
        if path and path[-1][0] == item.level:
            path.pop()
        current = _new_list(item)
        if path:
            path[-1][1].add(current)
        else:
            ctx.add(current)
        path.append((item.level, current))

    current.append(item.content)
    ctx.list_path = path
    ctx.state = _LIST_STATES[(item.ordered, item.level)]


def _quote(ctx: ParseContext, line: MarkdownLine) -> None:
    source = ml.quote_source(line.string)
    current = ctx.current_element()

    if ctx.state is ParserState.QUOTE and isinstance(current, Quote):
        if source is not None:
            current.source = InlineText(source)
        else:
            current.append(ml.quote(line.string) or "")
        return

    if source is not None:
        ctx.add(Quote(source=InlineText(source)))
    else:
        ctx.add(Quote(content=ml.quote(line.string) or ""))
    ctx.state = ParserState.QUOTE


def _callout(ctx: ParseContext, line: MarkdownLine) -> None:
    for kind, extract, cls, state in _CALLOUTS:
        if kind not in line:
            continue
        text = extract(line.string) or ""
        current = ctx.current_element()
        if ctx.state is state and isinstance(current, cls):
            current.append(text)
        else:
            ctx.add(cls(content=text))
            ctx.state = state
        return


def _table(ctx: ParseContext, line: MarkdownLine) -> None:
    current = ctx.current_element()

    if ctx.state is not ParserState.TABLE or not isinstance(current, Table):
        table = Table()
        for cell in ml.table_cells(line.string):
            table.add_header(cell.strip(), ml.header_alignment(cell))
        ctx.add(table)
        ctx.table_aligned = False
        ctx.state = ParserState.TABLE
        return

    if LineKind.TABLE_SEPARATOR in line:
        if not ctx.table_aligned and not current.rows:
            for header, alignment in zip(current.headers, ml.separator_alignments(line.string)):
                if alignment is not None:
                    header.alignment = alignment
            ctx.table_aligned = True
        else:
            current.add_separator()
        return

    current.add_row([cell.strip() for cell in ml.table_cells(line.string)])


def _multiple_choice(ctx: ParseContext, line: MarkdownLine) -> None:
    choice = ctx.expect(ml.multiple_choice(line.string), "multiple choice")
    group = ctx.current_element()
    if not isinstance(group, MultipleChoiceQuestions):
        group = MultipleChoiceQuestions(inline=choice.inline)
        ctx.add(group)
    group.add(MultipleChoice(content=choice.text, correct=choice.correct))
    ctx.state = ParserState.NORMAL


def _matching_question(ctx: ParseContext, line: MarkdownLine) -> None:
    left, right = ctx.expect(ml.matching_question(line.string), "matching question")
    group = ctx.current_element()
    if not isinstance(group, MatchingQuestions):
        raise ctx.error(StructuralError, "matching question outside a matching block")
    group.add(left, right)


def _space_comment(ctx: ParseContext, line: MarkdownLine) -> None:
    spacing = ml.space_comment(line.string) or 0
    if ctx.comment is not None:
        ctx.comment.spacing = spacing
    else:
        ctx.presentation.comments.append(ml.comment(line.string) or "")


# ---------------------------------------------------------------------------
# Single-line elements
# ---------------------------------------------------------------------------

def _inline(ctx: ParseContext, line: MarkdownLine) -> None:
    string = line.string

    if LineKind.HTML in line:
        ctx.add(HTML(content=string))
    elif LineKind.LINE_ACTION in line:
        action, fragment = ctx.expect(ml.line_action(string), "line action")
        ctx.add(LineAction(action=action, line_id=ctx.line_id, fragment=fragment))
    elif LineKind.HEADING in line:
        level, title = ctx.expect(ml.heading(string), "heading")
        ctx.add(Heading(content=title, level=level))
    elif LineKind.IMAGE in line:
        image = ctx.expect(ml.image(string), "image")
        ctx.add(Image(**image._asdict()))
    elif LineKind.FOOTNOTE_DEF in line:
        key, text = ctx.expect(ml.footnote_def(string), "footnote definition")
        ctx.require_slide().footnotes.append(Footnote(key, text))
    elif LineKind.LINK_DEF in line:
        link = ctx.expect(ml.link_def(string), "link definition")
        ctx.require_chapter().links.append(Link(link.key, link.target, link.title))
    elif LineKind.NORMAL in line:
        ctx.add(Text(content=string))
    elif LineKind.EMPTY in line:
        if ctx.state not in _LIST_STATES.values():
            ctx.state = ParserState.NORMAL
        return
    else:
        raise ctx.error(MarkdownSyntaxError, "unrecognized line")

    ctx.state = ParserState.NORMAL
