"""Inline markup parser producing :class:`~markslides.parser.nodes.Node` trees.

Span matchers are tried in priority order on every unparsed run. The first
matcher that finds its construct anywhere in the run splits it into
``before``, the matched node and ``after``; the pieces are parsed again in the
next pass until nothing unparsed is left.

Known limits: delimiter runs of three or more ``*``/``_`` stay literal, and an
emphasis span cannot enclose a complete strong span (the strong span is split
out first).
"""

from __future__ import annotations

import re
import string
import unicodedata
from dataclasses import replace
from typing import Callable, Optional, Sequence, Tuple

from .base import Footnote
from .nodes import CONTAINER_KINDS, Node, NodeKind, is_resolved, unparsed

Match = Optional[Tuple[int, int, Node]]
Matcher = Callable[[str, Optional[Sequence[Footnote]]], Match]


def parse_inline(content: str, footnotes: Sequence[Footnote] | None = None) -> list[Node]:
    """Parse ``content`` into inline nodes.

    When ``footnotes`` is given, ``[^text]`` only becomes a footnote reference
    if ``text`` is the text of one of them; otherwise any ``[^...]`` does.
    A known marker is never cut apart by other markup; the footnote text is
    parsed as the footnote node's children.
    """
    if not content:
        return []
    return resolve_nodes([unparsed(content)], footnotes)


def resolve_nodes(nodes: list[Node], footnotes: Sequence[Footnote] | None = None) -> list[Node]:
    """Expand unparsed runs until the tree is fully resolved.

    A resolved tree is returned unchanged.
    """
    while not is_resolved(nodes):
        nodes = _expand(nodes, footnotes)
    return nodes


def _expand(nodes: list[Node], footnotes: Sequence[Footnote] | None) -> list[Node]:
    result: list[Node] = []
    for node in nodes:
        if node.unparsed:
            result.extend(_split(node.content, footnotes))
        elif not is_resolved(node.children):
            result.append(replace(node, children=_expand(node.children, footnotes)))
        else:
            result.append(node)
    return result


def _split(text: str, footnotes: Sequence[Footnote] | None) -> list[Node]:
    markers = _footnote_markers(text, footnotes) if footnotes else []
    for matcher in _MATCHERS:
        found = matcher(text, footnotes)
        if found is None:
            continue
        start, end, node = found
        # A span that cuts through a known footnote marker loses to the marker.
        for marker in markers:
            if start < marker[1] and end > marker[0] and not (start <= marker[0] and end >= marker[1]):
                start, end, node = marker
                break
        if node.kind in CONTAINER_KINDS and node.content and not node.children:
            node.children = [unparsed(node.content)]
        parts: list[Node] = []
        if start > 0:
            parts.append(unparsed(text[:start]))
        parts.append(node)
        if end < len(text):
            parts.append(unparsed(text[end:]))
        return parts
    return [Node(NodeKind.TEXT, text)]


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

_BACKTICKS_RE = re.compile(r"`+")


def _match_code(text: str, footnotes: Sequence[Footnote] | None) -> Match:
    pos = 0
    while True:
        opening = _BACKTICKS_RE.search(text, pos)
        if opening is None:
            return None
        fence = opening.group(0)
        closing = re.compile(rf"(?<!`){fence}(?!`)").search(text, opening.end())
        if closing is not None:
            inner = text[opening.end():closing.start()].replace("\n", " ")
            if len(inner) > 1 and inner.startswith(" ") and inner.endswith(" ") and inner.strip(" "):
                inner = inner[1:-1]
            return opening.start(), closing.end(), Node(NodeKind.CODE, inner)
        pos = opening.end()


_HTML_RE = re.compile(r"<([A-Za-z][A-Za-z0-9]*)(?:\s[^<>]*)?>.*?</\1\s*>", re.DOTALL)


def _match_html(text: str, footnotes: Sequence[Footnote] | None) -> Match:
    m = _HTML_RE.search(text)
    if m is None:
        return None
    return m.start(), m.end(), Node(NodeKind.HTML, m.group(0))


_LINK_TEXT = r"(?P<text>(?:[^\[\]]|\[[^\[\]]*\])*)"
_LINK_TITLE = r"""(?: ["'(](?P<title>.*?)["')])?"""
_LINK_RES = (
    re.compile(rf"\[{_LINK_TEXT}\]\(<(?P<url>[^>]*)>{_LINK_TITLE}\)"),
    re.compile(rf"\[{_LINK_TEXT}\]\((?P<url>\S*?){_LINK_TITLE}\)"),
)


def _match_link(text: str, footnotes: Sequence[Footnote] | None) -> Match:
    found = [m for m in (pattern.search(text) for pattern in _LINK_RES) if m is not None]
    if not found:
        return None
    m = min(found, key=lambda match: match.start())
    node = Node(
        NodeKind.LINK,
        m.group("text"),
        target=m.group("url").replace(" ", "%20"),
        title=m.group("title"),
    )
    return m.start(), m.end(), node


def _regex_matcher(pattern: str, kind: NodeKind, flags: int = 0) -> Matcher:
    compiled = re.compile(pattern, flags)

    def matcher(text: str, footnotes: Sequence[Footnote] | None) -> Match:
        m = compiled.search(text)
        if m is None:
            return None
        return m.start(), m.end(), Node(kind, m.group(1))

    return matcher


_match_quoted = _regex_matcher(r'"(\S(?:[^"]*?\S)?)"', NodeKind.QUOTED)
_match_formula = _regex_matcher(r"\\\[(.*?)\\\]", NodeKind.FORMULA, re.DOTALL)
_match_deleted = _regex_matcher(r"~~(.+?)~~", NodeKind.DELETED)
_match_underline = _regex_matcher(r"~(.+?)~", NodeKind.UNDERLINE)
_match_citation = _regex_matcher(r"\[\[(.+?)\]\]", NodeKind.CITATION)


def _match_newline(text: str, footnotes: Sequence[Footnote] | None) -> Match:
    pos = text.find("<br>")
    if pos < 0:
        return None
    return pos, pos + 4, Node(NodeKind.NEWLINE)


# Boundary characters around short sub/superscripts; start and end count too.
_SCRIPT_BOUNDARY = r"\s(*<,.;:!>\-"
_SCRIPT_RES = (
    (
        re.compile(rf"(?<![^{_SCRIPT_BOUNDARY}])[A-Za-z0-9]{{1,4}}(_)([A-Za-z0-9]{{1,5}})(?![^{_SCRIPT_BOUNDARY}])"),
        NodeKind.SUBSCRIPT,
    ),
    (
        re.compile(rf"(?<![^{_SCRIPT_BOUNDARY}])[A-Za-z0-9]{{1,4}}(\^)([A-Za-z0-9]{{1,5}})(?![^{_SCRIPT_BOUNDARY}])"),
        NodeKind.SUPERSCRIPT,
    ),
)


def _match_script(text: str, footnotes: Sequence[Footnote] | None) -> Match:
    best: Match = None
    for pattern, kind in _SCRIPT_RES:
        m = pattern.search(text)
        if m is not None and (best is None or m.start(1) < best[0]):
            best = (m.start(1), m.end(2), Node(kind, m.group(2)))
    return best


_FOOTNOTE_RE = re.compile(r"\[\^(.+?)\]")


def _match_footnote(text: str, footnotes: Sequence[Footnote] | None) -> Match:
    if footnotes is None:
        m = _FOOTNOTE_RE.search(text)
        if m is None:
            return None
        return m.start(), m.end(), Node(NodeKind.FOOTNOTE, m.group(1))

    markers = _footnote_markers(text, footnotes)
    return markers[0] if markers else None


def _footnote_markers(text: str, footnotes: Sequence[Footnote]) -> list[tuple[int, int, Node]]:
    """Every ``[^text]`` marker of a known footnote in ``text``, leftmost first."""
    markers: list[tuple[int, int, Node]] = []
    for footnote in footnotes:
        marker = f"[^{footnote.content}]"
        pos = text.find(marker)
        while pos >= 0:
            node = Node(NodeKind.FOOTNOTE, footnote.content, target=footnote.key)
            markers.append((pos, pos + len(marker), node))
            pos = text.find(marker, pos + len(marker))
    return sorted(markers, key=lambda marker: marker[0])


# ---------------------------------------------------------------------------
# Emphasis
# ---------------------------------------------------------------------------

def _is_punctuation(char: str) -> bool:
    return char in string.punctuation or unicodedata.category(char)[0] in ("P", "S")


def _flanking(text: str, start: int, end: int) -> tuple[bool, bool, bool, bool]:
    """Return (left_flanking, right_flanking, preceded_by_punct, followed_by_punct)."""
    before = text[start - 1] if start > 0 else " "
    after = text[end] if end < len(text) else " "
    before_space = before.isspace()
    after_space = after.isspace()
    before_punct = _is_punctuation(before)
    after_punct = _is_punctuation(after)
    left = not after_space and (not after_punct or before_space or before_punct)
    right = not before_space and (not before_punct or after_space or after_punct)
    return left, right, before_punct, after_punct


def _can_open(text: str, start: int, end: int, char: str) -> bool:
    left, right, before_punct, _ = _flanking(text, start, end)
    if char == "*":
        return left
    return left and (not right or before_punct)


def _can_close(text: str, start: int, end: int, char: str) -> bool:
    left, right, _, after_punct = _flanking(text, start, end)
    if char == "*":
        return right
    return right and (not left or after_punct)


def _emphasis_matcher(char: str, length: int, kind: NodeKind) -> Matcher:
    runs_re = re.compile(rf"{re.escape(char)}+")

    def matcher(text: str, footnotes: Sequence[Footnote] | None) -> Match:
        runs = [(m.start(), m.end()) for m in runs_re.finditer(text) if m.end() - m.start() == length]
        for i, (open_start, open_end) in enumerate(runs):
            if not _can_open(text, open_start, open_end, char):
                continue
            for close_start, close_end in runs[i + 1:]:
                if close_start > open_end and _can_close(text, close_start, close_end, char):
                    inner = text[open_end:close_start]
                    return open_start, close_end, Node(kind, inner, marker=char * length)
        return None

    return matcher


_MATCHERS: tuple[Matcher, ...] = (
    _match_code,
    _match_html,
    _match_link,
    _match_quoted,
    _emphasis_matcher("*", 2, NodeKind.STRONG),
    _emphasis_matcher("_", 2, NodeKind.STRONG),
    _emphasis_matcher("*", 1, NodeKind.EMPHASIS),
    _emphasis_matcher("_", 1, NodeKind.EMPHASIS),
    _match_formula,
    _match_script,
    _match_deleted,
    _match_underline,
    _match_citation,
    _match_newline,
    _match_footnote,
)
