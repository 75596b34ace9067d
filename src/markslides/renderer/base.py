"""Renderer contract and the walker that drives a renderer over a presentation."""

from __future__ import annotations

from typing import Protocol, Sequence

from markslides.parser.base import (
    HTML,
    TOC,
    UML,
    Alignment,
    Box,
    Chapter,
    Comment,
    Element,
    Equation,
    Heading,
    Image,
    Important,
    InlineContent,
    InputQuestion,
    LineAction,
    LineActionKind,
    ListElement,
    MatchingQuestions,
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
    VerticalSpace,
)
from markslides.parser.nodes import Node, text


class Renderer(Protocol):
    """Operations a renderer offers, called in document order.

    Every container gets exactly one start/end pair. Inline content is handed
    over as resolved node lists.
    """

    handles_animation: bool

    def presentation_start(self, presentation: Presentation) -> None: ...
    def presentation_end(self, presentation: Presentation) -> None: ...
    def toc(self, toc: TOC) -> None: ...
    def chapter_start(self, chapter: Chapter) -> None: ...
    def chapter_end(self, chapter: Chapter) -> None: ...
    def slide_start(self, slide: Slide, step: int) -> None: ...
    def slide_end(self, slide: Slide, step: int) -> None: ...
    def comment_start(self, spacing: int) -> None: ...
    def comment_end(self) -> None: ...

    def heading(self, level: int, nodes: list[Node]) -> None: ...
    def text(self, nodes: list[Node]) -> None: ...
    def ul_start(self) -> None: ...
    def ul_item(self, nodes: list[Node]) -> None: ...
    def ul_end(self) -> None: ...
    def ol_start(self, start: int) -> None: ...
    def ol_item(self, nodes: list[Node]) -> None: ...
    def ol_end(self) -> None: ...
    def quote(self, nodes: list[Node], source: list[Node] | None) -> None: ...
    def important(self, nodes: list[Node]) -> None: ...
    def question(self, nodes: list[Node]) -> None: ...
    def box(self, nodes: list[Node]) -> None: ...

    def table_start(self, alignments: Sequence[Alignment]) -> None: ...
    def table_header(self, cells: list[list[Node]], alignments: Sequence[Alignment]) -> None: ...
    def table_row(self, cells: list[list[Node]], alignments: Sequence[Alignment]) -> None: ...
    def table_separator(self, columns: int) -> None: ...
    def table_end(self) -> None: ...

    def code_start(self, language: str, caption: str | None) -> None: ...
    def code(self, content: str) -> None: ...
    def code_end(self, caption: str | None) -> None: ...
    def image(
        self,
        location: str,
        alt: str,
        title: str,
        width_slide: str | None,
        width_plain: str | None,
    ) -> None: ...
    def uml(self, picture_name: str, content: str, width_slide: str | None, width_plain: str | None) -> None: ...
    def equation(self, content: str) -> None: ...
    def html(self, content: str) -> None: ...
    def script(self, content: str) -> None: ...
    def vertical_space(self) -> None: ...

    def multiple_choice_start(self, group: MultipleChoiceQuestions) -> None: ...
    def multiple_choice_item(self, nodes: list[Node], correct: bool) -> None: ...
    def multiple_choice_end(self, group: MultipleChoiceQuestions) -> None: ...
    def matching_question_start(self, shuffle: str) -> None: ...
    def matching_question_item(self, left: list[Node], right: list[Node]) -> None: ...
    def matching_question_end(self, shuffle: str) -> None: ...
    def input_question(self, values: list[str]) -> None: ...

    def button(self, line_id: str) -> None: ...
    def button_with_log(self, line_id: str) -> None: ...
    def button_with_log_pre(self, line_id: str) -> None: ...
    def link_previous(self, line_id: str) -> None: ...
    def live_css(self, line_id: str, fragment: str) -> None: ...
    def live_preview(self, line_id: str) -> None: ...
    def live_preview_float(self, line_id: str) -> None: ...


class BaseRenderer(Renderer):
    """Renderer that ignores everything; subclass and override what you need."""

    handles_animation = False


def inline_nodes(leaf: InlineContent) -> list[Node]:
    """Resolved nodes of ``leaf``, or its raw content as a single text node."""
    if leaf.nodes is not None:
        return leaf.nodes
    return [text(leaf.content)] if leaf.content else []


def render_presentation(presentation: Presentation, renderer: Renderer) -> None:
    renderer.presentation_start(presentation)
    if presentation.toc.entries:
        renderer.toc(presentation.toc)

    for chapter in presentation.chapters:
        renderer.chapter_start(chapter)
        for slide in chapter.slides:
            if slide.skip:
                continue
            if renderer.handles_animation and slide.animated:
                for step in range(slide.max_order + 1):
                    render_slide(slide, renderer, step)
            else:
                render_slide(slide, renderer, slide.max_order)
        renderer.chapter_end(chapter)

    renderer.presentation_end(presentation)


def render_slide(slide: Slide, renderer: Renderer, step: int) -> None:
    renderer.slide_start(slide, step)
    for element in slide.elements:
        if element.order <= step:
            render_element(element, renderer)
    renderer.slide_end(slide, step)


_LINE_ACTIONS = {
    LineActionKind.BUTTON: "button",
    LineActionKind.BUTTON_WITH_LOG: "button_with_log",
    LineActionKind.BUTTON_WITH_LOG_PRE: "button_with_log_pre",
    LineActionKind.LINK_PREVIOUS: "link_previous",
    LineActionKind.LIVE_PREVIEW: "live_preview",
    LineActionKind.LIVE_PREVIEW_FLOAT: "live_preview_float",
}


def render_element(element: Element, renderer: Renderer) -> None:
    if isinstance(element, Text):
        renderer.text(inline_nodes(element))
    elif isinstance(element, Heading):
        renderer.heading(element.level, inline_nodes(element))
    elif isinstance(element, ListElement):
        _render_list(element, renderer)
    elif isinstance(element, Quote):
        source = inline_nodes(element.source) if element.source is not None else None
        renderer.quote(inline_nodes(element), source)
    elif isinstance(element, Important):
        renderer.important(inline_nodes(element))
    elif isinstance(element, Question):
        renderer.question(inline_nodes(element))
    elif isinstance(element, Box):
        renderer.box(inline_nodes(element))
    elif isinstance(element, Table):
        _render_table(element, renderer)
    elif isinstance(element, Source):
        renderer.code_start(element.language, element.caption)
        renderer.code(element.content)
        renderer.code_end(element.caption)
    elif isinstance(element, UML):
        renderer.uml(element.picture_name, element.content, element.width_slide, element.width_plain)
    elif isinstance(element, Equation):
        renderer.equation(element.content)
    elif isinstance(element, Script):
        renderer.script(element.content)
    elif isinstance(element, HTML):
        renderer.html(element.content)
    elif isinstance(element, Image):
        renderer.image(element.location, element.alt, element.title, element.width_slide, element.width_plain)
    elif isinstance(element, VerticalSpace):
        renderer.vertical_space()
    elif isinstance(element, Comment):
        renderer.comment_start(element.spacing)
        for child in element.elements:
            render_element(child, renderer)
        renderer.comment_end()
    elif isinstance(element, MultipleChoiceQuestions):
        renderer.multiple_choice_start(element)
        for choice in element.questions:
            renderer.multiple_choice_item(inline_nodes(choice), choice.correct)
        renderer.multiple_choice_end(element)
    elif isinstance(element, MatchingQuestions):
        renderer.matching_question_start(element.shuffle)
        for pair in element.questions:
            renderer.matching_question_item(inline_nodes(pair.left), inline_nodes(pair.right))
        renderer.matching_question_end(element.shuffle)
    elif isinstance(element, InputQuestion):
        renderer.input_question(element.values)
    elif isinstance(element, LineAction):
        if element.action is LineActionKind.LIVE_CSS:
            renderer.live_css(element.line_id, element.fragment or "")
        else:
            getattr(renderer, _LINE_ACTIONS[element.action])(element.line_id)


def _render_list(element: ListElement, renderer: Renderer) -> None:
    ordered = isinstance(element, OrderedList)
    if ordered:
        renderer.ol_start(element.start)
    else:
        renderer.ul_start()

    for entry in element.entries:
        if isinstance(entry, ListElement):
            _render_list(entry, renderer)
        elif ordered:
            renderer.ol_item(inline_nodes(entry))
        else:
            renderer.ul_item(inline_nodes(entry))

    if ordered:
        renderer.ol_end()
    else:
        renderer.ul_end()


def _render_table(table: Table, renderer: Renderer) -> None:
    alignments = table.alignments
    renderer.table_start(alignments)
    renderer.table_header([inline_nodes(h) for h in table.headers], alignments)
    for row in table.rows:
        if row is None:
            renderer.table_separator(len(table.headers))
        else:
            renderer.table_row([inline_nodes(cell) for cell in row], alignments)
    renderer.table_end()
