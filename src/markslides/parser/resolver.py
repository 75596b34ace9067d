"""Second pass: inline reference links and footnotes, then parse inline markup."""

from __future__ import annotations

import logging
import re

from .base import Chapter, Footnote, InlineContent, Link, Presentation, Slide
from .inline_parser import parse_inline

logger = logging.getLogger(__name__)

_REF_LINK_RE = re.compile(r"\[([^\]]*)\] ?\[([^\]^][^\]]*)\]")
_REF_FOOTNOTE_RE = re.compile(r"\[\^([^\]]+)\]")


def resolve_presentation(presentation: Presentation) -> Presentation:
    """Attach inline node trees to every text-bearing part of the presentation."""
    for chapter in presentation.chapters:
        resolve_chapter(chapter)
    return presentation


def resolve_chapter(chapter: Chapter) -> None:
    links = {link.key: link for link in chapter.links}
    for slide in chapter.slides:
        resolve_slide(slide, links)
    logger.debug("Resolved chapter %s (%d slides)", chapter.id, len(chapter.slides))


def resolve_slide(slide: Slide, links: dict[str, Link]) -> None:
    for footnote in slide.footnotes:
        footnote.nodes = parse_inline(footnote.content, slide.footnotes)

    footnotes = {fn.key: fn for fn in slide.footnotes}
    for leaf in slide.leaves():
        _resolve_leaf(leaf, links, footnotes, slide)


def substitute_references(content: str, links: dict[str, Link], footnotes: dict[str, Footnote]) -> str:
    """Rewrite ``[label][key]`` and ``[^key]`` into their inline forms.

    Unknown keys are left as they are.
    """

    def link_inline(m: re.Match[str]) -> str:
        link = links.get(m.group(2))
        if link is None:
            logger.debug("Unresolved link reference [%s]", m.group(2))
            return m.group(0)
        if link.title:
            return f'[{m.group(1)}]({link.target} "{link.title}")'
        return f"[{m.group(1)}]({link.target})"

    def footnote_inline(m: re.Match[str]) -> str:
        footnote = footnotes.get(m.group(1))
        if footnote is None:
            logger.debug("Unresolved footnote reference [^%s]", m.group(1))
            return m.group(0)
        return f"[^{footnote.content}]"

    content = _REF_LINK_RE.sub(link_inline, content)
    return _REF_FOOTNOTE_RE.sub(footnote_inline, content)


def _resolve_leaf(
    leaf: InlineContent,
    links: dict[str, Link],
    footnotes: dict[str, Footnote],
    slide: Slide,
) -> None:
    content = substitute_references(leaf.content, links, footnotes)
    leaf.nodes = parse_inline(content, slide.footnotes)
