"""Tests for the inline markup parser.

Covers:
- Single spans of every kind between word boundaries
- Flanking rules for ``*`` and ``_``
- Code spans, HTML and links protecting their content
- Nesting, sub/superscript, formulas, citations, line breaks
- Footnote references with and without known footnotes
- Idempotence on resolved trees
"""

from __future__ import annotations

import pytest

from markslides.parser.base import Footnote
from markslides.parser.inline_parser import parse_inline, resolve_nodes
from markslides.parser.nodes import Node, NodeKind


def _kinds(nodes: list[Node]) -> list[NodeKind]:
    return [n.kind for n in nodes]


# ---------------------------------------------------------------------------
# Single spans
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("markup", "kind", "inner"),
    [
        ("**bold**", NodeKind.STRONG, "bold"),
        ("__bold__", NodeKind.STRONG, "bold"),
        ("*em*", NodeKind.EMPHASIS, "em"),
        ("_em_", NodeKind.EMPHASIS, "em"),
        ("`code`", NodeKind.CODE, "code"),
        ("~~strike~~", NodeKind.DELETED, "strike"),
        ("~under~", NodeKind.UNDERLINE, "under"),
        ("[text](url)", NodeKind.LINK, "text"),
    ],
)
def test_single_span_between_words(markup: str, kind: NodeKind, inner: str) -> None:
    nodes = parse_inline(f"a {markup} b")

    assert _kinds(nodes) == [NodeKind.TEXT, kind, NodeKind.TEXT]
    assert nodes[0].content == "a "
    assert nodes[1].plain_text() == inner
    assert nodes[2].content == " b"


def test_empty_content() -> None:
    assert parse_inline("") == []


def test_plain_text_is_one_node() -> None:
    assert parse_inline("just words") == [Node(NodeKind.TEXT, "just words")]


# ---------------------------------------------------------------------------
# Flanking
# ---------------------------------------------------------------------------

def test_space_adjacent_delimiters_stay_literal() -> None:
    assert parse_inline("* not emphasis *") == [Node(NodeKind.TEXT, "* not emphasis *")]


def test_digits_do_not_block_asterisk_emphasis() -> None:
    nodes = parse_inline("5*6*78")

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.EMPHASIS, NodeKind.TEXT]
    assert nodes[1].plain_text() == "6"
    assert nodes[1].marker == "*"


def test_intraword_underscores_stay_literal() -> None:
    assert parse_inline("snake_case_name") == [Node(NodeKind.TEXT, "snake_case_name")]


def test_underscore_emphasis_inside_punctuation() -> None:
    nodes = parse_inline("(_em_)")
    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.EMPHASIS, NodeKind.TEXT]
    assert nodes[1].plain_text() == "em"


def test_emphasis_nested_in_strong() -> None:
    (strong,) = parse_inline("**a *b* c**")

    assert strong.kind is NodeKind.STRONG
    assert _kinds(strong.children) == [NodeKind.TEXT, NodeKind.EMPHASIS, NodeKind.TEXT]
    assert strong.children[1].plain_text() == "b"
    assert strong.plain_text() == "a b c"


# ---------------------------------------------------------------------------
# Protected spans
# ---------------------------------------------------------------------------

def test_code_span_is_opaque() -> None:
    assert parse_inline("`*x*`") == [Node(NodeKind.CODE, "*x*")]


def test_code_span_with_longer_fence() -> None:
    assert parse_inline("`` a`b ``") == [Node(NodeKind.CODE, "a`b")]


def test_inline_html_is_opaque() -> None:
    nodes = parse_inline('x <span class="k">*a*</span> y')

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.HTML, NodeKind.TEXT]
    assert nodes[1].content == '<span class="k">*a*</span>'


def test_link_with_title() -> None:
    (link,) = parse_inline('[site](http://x.org "Home")')

    assert link.kind is NodeKind.LINK
    assert link.target == "http://x.org"
    assert link.title == "Home"
    assert link.plain_text() == "site"


def test_angle_bracket_link_escapes_spaces() -> None:
    (link,) = parse_inline("[a](<my file.html>)")
    assert link.target == "my%20file.html"


def test_link_text_is_parsed() -> None:
    (link,) = parse_inline("[**bold** text](u)")
    assert _kinds(link.children) == [NodeKind.STRONG, NodeKind.TEXT]


def test_quoted_text() -> None:
    nodes = parse_inline('say "hello world" now')

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.QUOTED, NodeKind.TEXT]
    assert nodes[1].plain_text() == "hello world"


# ---------------------------------------------------------------------------
# Other spans
# ---------------------------------------------------------------------------

def test_subscript_and_superscript() -> None:
    nodes = parse_inline("x_1 and y^2")

    assert _kinds(nodes) == [
        NodeKind.TEXT,
        NodeKind.SUBSCRIPT,
        NodeKind.TEXT,
        NodeKind.SUPERSCRIPT,
    ]
    assert [n.content for n in nodes] == ["x", "1", " and y", "2"]


def test_formula() -> None:
    nodes = parse_inline(r"see \[x^2\] here")

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.FORMULA, NodeKind.TEXT]
    assert nodes[1].content == "x^2"


def test_citation() -> None:
    nodes = parse_inline("see [[Knuth84]]")
    assert nodes == [Node(NodeKind.TEXT, "see "), Node(NodeKind.CITATION, "Knuth84")]


def test_line_break() -> None:
    nodes = parse_inline("a<br>b")
    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.NEWLINE, NodeKind.TEXT]


# ---------------------------------------------------------------------------
# Footnotes
# ---------------------------------------------------------------------------

def test_any_footnote_marker_without_known_footnotes() -> None:
    nodes = parse_inline("word[^note]")

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.FOOTNOTE]
    assert nodes[1].plain_text() == "note"
    assert nodes[1].target is None


def test_known_footnote_carries_its_key() -> None:
    footnotes = [Footnote("1", "Note text")]
    nodes = parse_inline("word[^Note text]", footnotes)

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.FOOTNOTE]
    assert nodes[1].target == "1"
    assert nodes[1].plain_text() == "Note text"


def test_unknown_footnote_text_stays_literal() -> None:
    footnotes = [Footnote("1", "Note text")]
    assert parse_inline("word[^other]", footnotes) == [Node(NodeKind.TEXT, "word[^other]")]


def test_markup_inside_known_footnote_keeps_the_marker_whole() -> None:
    footnotes = [Footnote("1", "see *this* note")]
    nodes = parse_inline("a[^see *this* note] b", footnotes)

    assert _kinds(nodes) == [NodeKind.TEXT, NodeKind.FOOTNOTE, NodeKind.TEXT]
    footnote = nodes[1]
    assert footnote.target == "1"
    assert _kinds(footnote.children) == [NodeKind.TEXT, NodeKind.EMPHASIS, NodeKind.TEXT]
    assert footnote.plain_text() == "see this note"


def test_markup_around_known_footnote_still_applies() -> None:
    nodes = parse_inline("*see[^Note]*", [Footnote("1", "Note")])

    assert _kinds(nodes) == [NodeKind.EMPHASIS]
    word, footnote = nodes[0].children
    assert word.content == "see"
    assert footnote.kind is NodeKind.FOOTNOTE
    assert footnote.target == "1"


# ---------------------------------------------------------------------------
# Idempotence
# ---------------------------------------------------------------------------

def test_resolving_a_resolved_tree_is_a_no_op() -> None:
    nodes = parse_inline("**a** and *b* with `c`")

    assert resolve_nodes(nodes) is nodes
    assert resolve_nodes(list(nodes)) == nodes
