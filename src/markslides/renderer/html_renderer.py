"""Render a resolved presentation into a self-contained HTML slide page."""

from __future__ import annotations

import html
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader

from markslides.exceptions import RenderError
from markslides.parser.base import (
    TOC,
    Alignment,
    Chapter,
    Footnote,
    MultipleChoiceQuestions,
    Presentation,
    Slide,
)
from markslides.parser.nodes import Node, NodeKind

from .base import BaseRenderer, render_presentation

# Opening and closing quotation marks per slide language.
_QUOTES = {
    "de": ("„", "“"),
    "en": ("“", "”"),
    "fr": ("« ", " »"),
}

_LABELS = {
    "de": {"toc": "Inhalt", "run": "Ausführen", "preview": "Vorschau", "previous": "Vorheriges Beispiel"},
    "en": {"toc": "Contents", "run": "Run", "preview": "Preview", "previous": "Previous example"},
}

_SIMPLE_TAGS = {
    NodeKind.STRONG: "strong",
    NodeKind.EMPHASIS: "em",
    NodeKind.SUBSCRIPT: "sub",
    NodeKind.SUPERSCRIPT: "sup",
    NodeKind.DELETED: "del",
    NodeKind.UNDERLINE: "u",
}


@dataclass(slots=True)
class RenderedSlide:
    id: str
    title: str
    number: int
    step: int
    html: str
    footnotes: list[dict] = field(default_factory=list)


@dataclass(slots=True)
class RenderedChapter:
    id: str
    title: str
    page_number: int
    slides: list[RenderedSlide] = field(default_factory=list)


class HTMLRenderer(BaseRenderer):
    """Reference renderer writing one ``<section>`` per slide into a jinja2 page."""

    def __init__(self, template_path: Path | None = None, *, animate: bool = False) -> None:
        if template_path is None:
            template_path = Path(__file__).resolve().parent.parent / "template" / "presentation.html"

        loader = FileSystemLoader(str(template_path.parent))
        self._env = Environment(loader=loader, autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self._template_name = template_path.name
        self.handles_animation = animate
        self._reset("en")

    def _reset(self, language: str) -> None:
        self._language = language
        self._chapters: list[RenderedChapter] = []
        self._toc: list[dict] = []
        self._parts: list[str] = []
        self._slide: Slide | None = None
        self._footnotes: list[Footnote] = []

    def render(self, presentation: Presentation) -> str:
        if not _is_resolved(presentation):
            raise RenderError("presentation has unresolved inline content; run resolve_presentation() first")

        self._reset(presentation.slide_language if presentation.slide_language in _LABELS else "en")
        render_presentation(presentation, self)

        template = self._env.get_template(self._template_name)
        return template.render(
            language=self._language,
            labels=_LABELS[self._language],
            page_title=presentation.title1 or "Presentation",
            title1=presentation.title1,
            title2=presentation.title2,
            section_number=presentation.section_number,
            section_name=presentation.section_name,
            author=presentation.author,
            copyright=presentation.copyright,
            description=presentation.description,
            term=presentation.term,
            toc_items=self._toc,
            chapters=[asdict(c) for c in self._chapters],
        )

    # -- outline ---------------------------------------------------------

    def toc(self, toc: TOC) -> None:
        self._toc = [
            {
                "id": entry.id,
                "name": entry.name,
                "entries": [{"id": sub.id, "name": sub.name} for sub in entry.entries],
            }
            for entry in toc.entries
        ]

    def chapter_start(self, chapter: Chapter) -> None:
        self._chapters.append(RenderedChapter(chapter.id, chapter.title, chapter.page_number))

    def slide_start(self, slide: Slide, step: int) -> None:
        if not self._chapters:
            raise RenderError(f"slide {slide.id} rendered outside a chapter")
        self._slide = slide
        self._parts = []
        self._footnotes = []

    def slide_end(self, slide: Slide, step: int) -> None:
        footnotes = [
            {"number": i + 1, "html": self._render_nodes(fn.nodes or [])}
            for i, fn in enumerate(self._footnotes)
        ]
        self._chapters[-1].slides.append(
            RenderedSlide(slide.id, slide.title, slide.number, step, "\n".join(self._parts), footnotes)
        )
        self._slide = None

    def comment_start(self, spacing: int) -> None:
        style = f' style="margin-top: {spacing}em"' if spacing else ""
        self._parts.append(f'<aside class="notes"{style}>')

    def comment_end(self) -> None:
        self._parts.append("</aside>")

    # -- text blocks -----------------------------------------------------

    def heading(self, level: int, nodes: list[Node]) -> None:
        self._parts.append(f"<h{level}>{self._render_nodes(nodes)}</h{level}>")

    def text(self, nodes: list[Node]) -> None:
        self._parts.append(f"<p>{self._render_nodes(nodes)}</p>")

    def ul_start(self) -> None:
        self._parts.append("<ul>")

    def ul_item(self, nodes: list[Node]) -> None:
        self._parts.append(f"<li>{self._render_nodes(nodes)}</li>")

    def ul_end(self) -> None:
        self._parts.append("</ul>")

    def ol_start(self, start: int) -> None:
        self._parts.append(f'<ol start="{start}">' if start != 1 else "<ol>")

    ol_item = ul_item

    def ol_end(self) -> None:
        self._parts.append("</ol>")

    def quote(self, nodes: list[Node], source: list[Node] | None) -> None:
        cite = f"<footer>{self._render_nodes(source)}</footer>" if source else ""
        self._parts.append(f"<blockquote>{self._render_nodes(nodes)}{cite}</blockquote>")

    def important(self, nodes: list[Node]) -> None:
        self._parts.append(f'<div class="important">{self._render_nodes(nodes)}</div>')

    def question(self, nodes: list[Node]) -> None:
        self._parts.append(f'<div class="question">{self._render_nodes(nodes)}</div>')

    def box(self, nodes: list[Node]) -> None:
        self._parts.append(f'<div class="box">{self._render_nodes(nodes)}</div>')

    # -- tables ----------------------------------------------------------

    def table_start(self, alignments: Sequence[Alignment]) -> None:
        self._parts.append('<table class="slide-table">')

    def table_header(self, cells: list[list[Node]], alignments: Sequence[Alignment]) -> None:
        row = "".join(
            f'<th style="text-align: {alignment.value}">{self._render_nodes(cell)}</th>'
            for cell, alignment in zip(cells, alignments)
        )
        self._parts.append(f"<thead><tr>{row}</tr></thead><tbody>")

    def table_row(self, cells: list[list[Node]], alignments: Sequence[Alignment]) -> None:
        padded = list(alignments) + [Alignment.LEFT] * max(0, len(cells) - len(alignments))
        row = "".join(
            f'<td style="text-align: {alignment.value}">{self._render_nodes(cell)}</td>'
            for cell, alignment in zip(cells, padded)
        )
        self._parts.append(f"<tr>{row}</tr>")

    def table_separator(self, columns: int) -> None:
        self._parts.append(f'<tr class="separator"><td colspan="{columns}"></td></tr>')

    def table_end(self) -> None:
        self._parts.append("</tbody></table>")

    # -- verbatim blocks -------------------------------------------------

    def code_start(self, language: str, caption: str | None) -> None:
        self._parts.append(f'<pre><code class="language-{html.escape(language)}">')

    def code(self, content: str) -> None:
        self._parts.append(html.escape(content.rstrip("\n")))

    def code_end(self, caption: str | None) -> None:
        self._parts.append("</code></pre>")
        if caption:
            self._parts.append(f'<div class="caption">{html.escape(caption)}</div>')

    def image(
        self,
        location: str,
        alt: str,
        title: str,
        width_slide: str | None,
        width_plain: str | None,
    ) -> None:
        style = f' style="width: {html.escape(width_slide)}"' if width_slide else ""
        self._parts.append(
            f'<figure><img src="{html.escape(location)}" alt="{html.escape(alt)}" '
            f'title="{html.escape(title)}"{style} />'
            f"<figcaption>{html.escape(title)}</figcaption></figure>"
        )

    def uml(self, picture_name: str, content: str, width_slide: str | None, width_plain: str | None) -> None:
        self.image(f"{picture_name}.svg", picture_name, "", width_slide, width_plain)

    def equation(self, content: str) -> None:
        self._parts.append(f'<div class="equation">\\[{html.escape(content.strip())}\\]</div>')

    def html(self, content: str) -> None:
        self._parts.append(content)

    def script(self, content: str) -> None:
        self._parts.append(f"<script>\n{content}</script>")

    def vertical_space(self) -> None:
        self._parts.append("<br>")

    # -- quizzes ---------------------------------------------------------

    def multiple_choice_start(self, group: MultipleChoiceQuestions) -> None:
        correct, wrong = group.percentages()
        inline = " inline" if group.inline else ""
        self._parts.append(
            f'<form class="multiple-choice{inline}" data-correct="{correct}" data-wrong="{wrong}">'
        )

    def multiple_choice_item(self, nodes: list[Node], correct: bool) -> None:
        self._parts.append(
            f'<label><input type="checkbox" data-correct="{"true" if correct else "false"}" /> '
            f"{self._render_nodes(nodes)}</label>"
        )

    def multiple_choice_end(self, group: MultipleChoiceQuestions) -> None:
        self._parts.append("</form>")

    def matching_question_start(self, shuffle: str) -> None:
        self._parts.append(f'<table class="matching" data-shuffle="{html.escape(shuffle)}">')

    def matching_question_item(self, left: list[Node], right: list[Node]) -> None:
        self._parts.append(f"<tr><td>{self._render_nodes(left)}</td><td>{self._render_nodes(right)}</td></tr>")

    def matching_question_end(self, shuffle: str) -> None:
        self._parts.append("</table>")

    def input_question(self, values: list[str]) -> None:
        answers = html.escape("|".join(values))
        self._parts.append(f'<input type="text" class="input-question" data-values="{answers}" />')

    # -- line actions ----------------------------------------------------

    def _button(self, css_class: str, line_id: str, label: str, fragment: str | None = None) -> None:
        data = f' data-fragment="{html.escape(fragment)}"' if fragment else ""
        self._parts.append(
            f'<button class="{css_class}" data-line="{html.escape(line_id)}"{data}>'
            f"{html.escape(_LABELS[self._language][label])}</button>"
        )

    def button(self, line_id: str) -> None:
        self._button("button", line_id, "run")

    def button_with_log(self, line_id: str) -> None:
        self._button("button-with-log", line_id, "run")

    def button_with_log_pre(self, line_id: str) -> None:
        self._button("button-with-log-pre", line_id, "run")

    def link_previous(self, line_id: str) -> None:
        self._button("link-previous", line_id, "previous")

    def live_css(self, line_id: str, fragment: str) -> None:
        self._button("live-css", line_id, "preview", fragment)

    def live_preview(self, line_id: str) -> None:
        self._button("live-preview", line_id, "preview")

    def live_preview_float(self, line_id: str) -> None:
        self._button("live-preview-float", line_id, "preview")

    # -- inline ----------------------------------------------------------

    def _render_nodes(self, nodes: list[Node]) -> str:
        return "".join(self._render_node(node) for node in nodes)

    def _render_node(self, node: Node) -> str:
        kind = node.kind
        if kind in (NodeKind.TEXT, NodeKind.UNPARSED):
            return html.escape(node.content)
        if kind is NodeKind.CODE:
            return f"<code>{html.escape(node.content)}</code>"
        if kind is NodeKind.HTML:
            return node.content
        if kind is NodeKind.NEWLINE:
            return "<br>"
        if kind is NodeKind.FORMULA:
            return f'<span class="formula">\\({html.escape(node.content)}\\)</span>'
        if kind is NodeKind.CITATION:
            return f'<span class="citation">[{html.escape(node.content)}]</span>'

        inner = self._render_nodes(node.children) if node.children else html.escape(node.content)
        if kind is NodeKind.LINK:
            title = f' title="{html.escape(node.title)}"' if node.title else ""
            return f'<a href="{html.escape(node.target or "")}"{title}>{inner}</a>'
        if kind is NodeKind.QUOTED:
            opening, closing = _QUOTES.get(self._language, _QUOTES["en"])
            return f"{opening}{inner}{closing}"
        if kind is NodeKind.FOOTNOTE:
            return self._render_footnote_ref(node)

        tag = _SIMPLE_TAGS.get(kind)
        if tag is None:
            raise RenderError(f"cannot render inline node of kind {kind.value}")
        return f"<{tag}>{inner}</{tag}>"

    def _render_footnote_ref(self, node: Node) -> str:
        footnote = self._lookup_footnote(node)
        if footnote not in self._footnotes:
            self._footnotes.append(footnote)
        number = self._footnotes.index(footnote) + 1
        slide_id = self._slide.id if self._slide else "slide"
        return (
            f'<sup class="footnote-ref"><a href="#{slide_id}-fn-{number}" '
            f'title="{html.escape(node.plain_text())}">[{number}]</a></sup>'
        )

    def _lookup_footnote(self, node: Node) -> Footnote:
        if self._slide is not None:
            for footnote in self._slide.footnotes:
                if footnote.key == node.target or footnote.content == node.content:
                    return footnote
        return Footnote(node.target or node.content, node.content, node.children)


def _is_resolved(presentation: Presentation) -> bool:
    for chapter in presentation.chapters:
        for slide in chapter.slides:
            if any(fn.nodes is None for fn in slide.footnotes):
                return False
            if any(leaf.nodes is None for leaf in slide.leaves()):
                return False
    return True
