"""Tests for the second pass (reference substitution + inline parsing).

Covers:
- Footnote references resolved against the slide's footnotes
- Reference-style links resolved against the chapter's links
- Unknown references left untouched
- Every leaf (lists, tables, quotes, quizzes, notes) gets nodes
"""

from __future__ import annotations

from markslides.parser import Parser, resolve_presentation
from markslides.parser.base import Footnote, Link, Presentation
from markslides.parser.nodes import NodeKind
from markslides.parser.resolver import substitute_references


def _resolved(md: str) -> Presentation:
    presentation = Presentation()
    Parser().parse_lines(md.splitlines(), "test.md", "java", presentation)
    return resolve_presentation(presentation)


# ---------------------------------------------------------------------------
# Substitution
# ---------------------------------------------------------------------------

def test_substitute_reference_link_with_title() -> None:
    links = {"docs": Link("docs", "https://example.org", "Docs")}
    result = substitute_references("See [the docs][docs].", links, {})
    assert result == 'See [the docs](https://example.org "Docs").'


def test_substitute_reference_link_with_space() -> None:
    links = {"docs": Link("docs", "https://example.org")}
    assert substitute_references("[here] [docs]", links, {}) == "[here](https://example.org)"


def test_substitute_footnote_key_with_text() -> None:
    footnotes = {"1": Footnote("1", "Note text")}
    assert substitute_references("word[^1]", {}, footnotes) == "word[^Note text]"


def test_unknown_references_are_kept() -> None:
    assert substitute_references("[x][missing] and [^9]", {}, {}) == "[x][missing] and [^9]"


# ---------------------------------------------------------------------------
# Presentation pass
# ---------------------------------------------------------------------------

def test_footnote_reference_resolves_to_footnote_node() -> None:
    md = """# A
## S
word[^1]
[^1]: Note text
"""
    slide = _resolved(md).chapters[0].slides[0]
    (text,) = slide.elements

    assert text.nodes is not None
    word, footnote = text.nodes
    assert word.kind is NodeKind.TEXT
    assert word.content == "word"
    assert footnote.kind is NodeKind.FOOTNOTE
    assert footnote.target == "1"
    assert footnote.plain_text() == "Note text"
    assert slide.footnotes[0].nodes is not None
    assert slide.footnotes[0].nodes[0].content == "Note text"


def test_footnote_with_markup_resolves_to_footnote_node() -> None:
    md = """# A
## S
word[^1] here
[^1]: see *this* note
"""
    slide = _resolved(md).chapters[0].slides[0]
    (text,) = slide.elements

    assert text.nodes is not None
    assert [n.kind for n in text.nodes] == [NodeKind.TEXT, NodeKind.FOOTNOTE, NodeKind.TEXT]
    footnote = text.nodes[1]
    assert footnote.target == "1"
    assert footnote.plain_text() == "see this note"
    assert [n.kind for n in footnote.children] == [NodeKind.TEXT, NodeKind.EMPHASIS, NodeKind.TEXT]
    assert slide.footnotes[0].nodes is not None
    assert slide.footnotes[0].nodes[1].kind is NodeKind.EMPHASIS


def test_reference_link_resolves_to_link_node() -> None:
    md = """# A
## S
See [the docs][docs] now
[docs]: https://example.org "Docs"
"""
    (text,) = _resolved(md).chapters[0].slides[0].elements

    assert text.nodes is not None
    before, link, after = text.nodes
    assert before.content == "See "
    assert link.kind is NodeKind.LINK
    assert link.target == "https://example.org"
    assert link.title == "Docs"
    assert link.plain_text() == "the docs"
    assert after.content == " now"


def test_links_are_scoped_to_their_chapter() -> None:
    md = """# A
## S
[docs]: https://example.org
# B
## T
See [x][docs]
"""
    presentation = _resolved(md)
    (text,) = presentation.chapters[1].slides[0].elements
    assert text.nodes is not None
    assert [n.kind for n in text.nodes] == [NodeKind.TEXT]
    assert text.nodes[0].content == "See [x][docs]"


def test_all_leaves_receive_nodes() -> None:
    md = """# A
## S
  * **one**
    * _two_
| H | I |
| a | b |
> quoted
>> Source
[X] yes
[ ] no
---
note
---
"""
    slide = _resolved(md).chapters[0].slides[0]
    leaves = list(slide.leaves())

    assert leaves
    assert all(leaf.nodes is not None for leaf in leaves)
    items = slide.elements[0]
    assert items.entries[0].nodes[0].kind is NodeKind.STRONG
    assert items.entries[1].entries[0].nodes[0].kind is NodeKind.EMPHASIS
