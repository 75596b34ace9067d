"""Document model (presentation -> chapters -> slides -> elements)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Protocol

from .nodes import Node


class Alignment(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class LineActionKind(str, Enum):
    BUTTON = "button"
    BUTTON_WITH_LOG = "button_with_log"
    BUTTON_WITH_LOG_PRE = "button_with_log_pre"
    LINK_PREVIOUS = "link_previous"
    LIVE_CSS = "live_css"
    LIVE_PREVIEW = "live_preview"
    LIVE_PREVIEW_FLOAT = "live_preview_float"


class InlineContent(Protocol):
    """Anything carrying raw inline text and, after the second pass, its nodes."""

    content: str
    nodes: list[Node] | None


@dataclass(slots=True)
class InlineText:
    """Inline text that is not an element by itself (table cells, quote sources, ...)."""

    content: str = ""
    nodes: list[Node] | None = None


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Element:
    order: int = 0

    def leaves(self) -> Iterator[InlineContent]:
        """Yield every piece of inline text owned by this element, depth first."""
        return iter(())

    def digest(self) -> str:
        return ""


@dataclass(slots=True)
class LeafElement(Element):
    """Element holding text for the inline parser."""

    content: str = ""
    nodes: list[Node] | None = None

    def append(self, line: str) -> None:
        self.content = f"{self.content}\n{line}" if self.content else line

    def leaves(self) -> Iterator[InlineContent]:
        yield self

    def digest(self) -> str:
        return self.content


@dataclass(slots=True)
class Text(LeafElement):
    pass


@dataclass(slots=True)
class Heading(LeafElement):
    level: int = 3

    @property
    def title(self) -> str:
        return self.content


@dataclass(slots=True)
class ListItem(LeafElement):
    pass


@dataclass(slots=True)
class ListElement(Element):
    entries: list[ListItem | ListElement] = field(default_factory=list)

    def append(self, content: str) -> ListItem:
        item = ListItem(content=content)
        self.entries.append(item)
        return item

    def add(self, sublist: ListElement) -> None:
        self.entries.append(sublist)

    def leaves(self) -> Iterator[InlineContent]:
        for entry in self.entries:
            yield from entry.leaves()

    def digest(self) -> str:
        return " ".join(entry.digest() for entry in self.entries)


@dataclass(slots=True)
class UnorderedList(ListElement):
    pass


@dataclass(slots=True)
class OrderedList(ListElement):
    start: int = 1


@dataclass(slots=True)
class Quote(LeafElement):
    source: InlineText | None = None

    def leaves(self) -> Iterator[InlineContent]:
        yield self
        if self.source is not None:
            yield self.source


@dataclass(slots=True)
class Important(LeafElement):
    pass


@dataclass(slots=True)
class Question(LeafElement):
    pass


@dataclass(slots=True)
class Box(LeafElement):
    pass


@dataclass(slots=True)
class BlockElement(Element):
    """Element whose lines are stored verbatim and never inline-parsed."""

    content: str = ""

    def append(self, line: str) -> None:
        self.content += line + "\n"

    def digest(self) -> str:
        return self.content


@dataclass(slots=True)
class Source(BlockElement):
    language: str = ""
    caption: str | None = None


@dataclass(slots=True)
class Script(BlockElement):
    pass


@dataclass(slots=True)
class Equation(BlockElement):
    pass


@dataclass(slots=True)
class HTML(BlockElement):
    pass


@dataclass(slots=True)
class UML(BlockElement):
    picture_name: str = ""
    width_slide: str | None = None
    width_plain: str | None = None


@dataclass(slots=True)
class VerticalSpace(Element):
    pass


@dataclass(slots=True)
class Image(Element):
    location: str = ""
    alt: str = ""
    title: str = ""
    width_slide: str | None = None
    width_plain: str | None = None


@dataclass(slots=True)
class LineAction(Element):
    """Interactive line (buttons, live previews) tied to its source line id."""

    action: LineActionKind = LineActionKind.BUTTON
    line_id: str = ""
    fragment: str | None = None


@dataclass(slots=True)
class TableHeader:
    content: str = ""
    alignment: Alignment = Alignment.LEFT
    nodes: list[Node] | None = None


@dataclass(slots=True)
class Table(Element):
    headers: list[TableHeader] = field(default_factory=list)
    # ``None`` marks a separator row.
    rows: list[list[InlineText] | None] = field(default_factory=list)

    def add_header(self, name: str, alignment: Alignment = Alignment.LEFT) -> None:
        self.headers.append(TableHeader(content=name, alignment=alignment))

    def add_row(self, cells: list[str]) -> None:
        self.rows.append([InlineText(content=c) for c in cells])

    def add_separator(self) -> None:
        self.rows.append(None)

    @property
    def alignments(self) -> list[Alignment]:
        return [h.alignment for h in self.headers]

    def leaves(self) -> Iterator[InlineContent]:
        yield from self.headers
        for row in self.rows:
            if row is not None:
                yield from row

    def digest(self) -> str:
        return " ".join(leaf.content for leaf in self.leaves())


@dataclass(slots=True)
class MultipleChoice(LeafElement):
    correct: bool = False


@dataclass(slots=True)
class MultipleChoiceQuestions(Element):
    questions: list[MultipleChoice] = field(default_factory=list)
    inline: bool = False

    def add(self, question: MultipleChoice) -> None:
        self.questions.append(question)

    @property
    def number_correct(self) -> int:
        return sum(1 for q in self.questions if q.correct)

    def percentages(self) -> tuple[float, float]:
        """Share of the score per correct and per wrong answer, in percent."""
        correct = self.number_correct
        wrong = len(self.questions) - correct
        p_correct = round(100.0 / correct, 5) if correct else 0.0
        p_wrong = round(100.0 / wrong, 5) if wrong else 0.0
        return p_correct, p_wrong

    def leaves(self) -> Iterator[InlineContent]:
        yield from self.questions


@dataclass(slots=True)
class MatchingQuestion(Element):
    left: InlineText = field(default_factory=InlineText)
    right: InlineText = field(default_factory=InlineText)

    def leaves(self) -> Iterator[InlineContent]:
        yield self.left
        yield self.right


@dataclass(slots=True)
class MatchingQuestions(Element):
    questions: list[MatchingQuestion] = field(default_factory=list)
    shuffle: str = "question"

    def add(self, left: str, right: str) -> None:
        self.questions.append(MatchingQuestion(left=InlineText(left), right=InlineText(right)))

    def leaves(self) -> Iterator[InlineContent]:
        for question in self.questions:
            yield from question.leaves()


@dataclass(slots=True)
class InputQuestion(Element):
    values: list[str] = field(default_factory=list)


@dataclass(slots=True)
class Comment(Element):
    """Speaker notes of a slide, opened and closed by ``---`` lines."""

    elements: list[Element] = field(default_factory=list)
    spacing: int = 0

    def add(self, element: Element) -> None:
        self.elements.append(element)

    def leaves(self) -> Iterator[InlineContent]:
        for element in self.elements:
            yield from element.leaves()

    def digest(self) -> str:
        return " ".join(e.digest() for e in self.elements)


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=False)
class Footnote:
    key: str
    content: str
    nodes: list[Node] | None = None

    @property
    def text(self) -> str:
        return self.content

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Footnote):
            return NotImplemented
        return self.key == other.key and self.content == other.content

    def __hash__(self) -> int:
        return hash((self.key, self.content))


@dataclass(slots=True)
class Link:
    """Reference-style link definition ``[key]: target "title"``."""

    key: str
    target: str
    title: str | None = None


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Slide:
    id: str
    title: str
    number: int
    skip: bool = False
    elements: list[Element] = field(default_factory=list)
    footnotes: list[Footnote] = field(default_factory=list)

    def add(self, element: Element) -> None:
        self.elements.append(element)

    @property
    def current_element(self) -> Element | None:
        return self.elements[-1] if self.elements else None

    @property
    def max_order(self) -> int:
        return max((e.order for e in self.elements), default=0)

    @property
    def animated(self) -> bool:
        return self.max_order > 0

    @property
    def contains_code(self) -> bool:
        return any(isinstance(e, Source) for e in self.elements)

    def leaves(self) -> Iterator[InlineContent]:
        for element in self.elements:
            yield from element.leaves()

    def digest(self) -> str:
        return " ".join(e.digest() for e in self.elements)


@dataclass(slots=True)
class Chapter:
    title: str
    id: str = ""
    slides: list[Slide] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    def add_slide(self, slide: Slide) -> None:
        self.slides.append(slide)

    @property
    def page_number(self) -> int:
        """Page of the chapter title, i.e. the page before its first slide."""
        return self.slides[0].number - 1 if self.slides else 0

    def digest(self) -> str:
        return " ".join(s.digest() for s in self.slides)


@dataclass(slots=True)
class TocEntry:
    id: str
    name: str
    entries: list[TocEntry] = field(default_factory=list)

    def add(self, entry_id: str, name: str) -> TocEntry:
        entry = TocEntry(entry_id, name)
        self.entries.append(entry)
        return entry


@dataclass(slots=True)
class TOC:
    entries: list[TocEntry] = field(default_factory=list)

    def add(self, entry_id: str, name: str) -> TocEntry:
        entry = TocEntry(entry_id, name)
        self.entries.append(entry)
        return entry

    def add_sub_entry(self, parent_id: str, entry_id: str, name: str) -> TocEntry:
        for parent in self.entries:
            if parent.id == parent_id:
                return parent.add(entry_id, name)
        raise KeyError(f"TOC parent must exist: {parent_id}")


@dataclass(slots=True)
class Presentation:
    slide_language: str = "en"
    title1: str = ""
    title2: str = ""
    section_number: str = ""
    section_name: str = ""
    copyright: str = ""
    author: str = ""
    default_language: str = ""
    description: str = ""
    term: str = ""
    create_index: bool = False
    bibliography: str | None = None
    chapters: list[Chapter] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    toc: TOC = field(default_factory=TOC)

    def add(self, chapter: Chapter) -> None:
        self.chapters.append(chapter)

    def build_toc(self) -> TOC:
        """Rebuild the table of contents; call after all chapters were parsed."""
        self.toc = TOC()
        for chapter in self.chapters:
            self.toc.add(chapter.id, chapter.title)
            for slide in chapter.slides:
                if not slide.skip:
                    self.toc.add_sub_entry(chapter.id, slide.id, slide.title)
        return self.toc

    def digest(self, length: int) -> str:
        """Plain-text summary of the first ``length`` characters of content."""
        raw = " ".join(chapter.digest() for chapter in self.chapters)
        raw = raw.replace("\n", "").replace("_", "").replace("*", "")
        return re.sub(r" {2,}", " ", raw).strip()[:length]
