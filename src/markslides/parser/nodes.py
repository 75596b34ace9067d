"""Inline node tree attached to every text-bearing element after the second pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(str, Enum):
    UNPARSED = "unparsed"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    LINK = "link"
    QUOTED = "quoted"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    FORMULA = "formula"
    SUBSCRIPT = "subscript"
    SUPERSCRIPT = "superscript"
    DELETED = "deleted"
    UNDERLINE = "underline"
    CITATION = "citation"
    NEWLINE = "newline"
    FOOTNOTE = "footnote"


# Spans whose inner text is itself inline markup.
CONTAINER_KINDS = frozenset(
    {
        NodeKind.LINK,
        NodeKind.QUOTED,
        NodeKind.STRONG,
        NodeKind.EMPHASIS,
        NodeKind.DELETED,
        NodeKind.UNDERLINE,
        NodeKind.FOOTNOTE,
    }
)


@dataclass(slots=True)
class Node:
    """One inline node.

    ``content`` holds the literal text for leaves (text, code, formula, ...).
    Container spans keep their parsed ``children`` instead; the raw inner text
    is only kept in ``content`` until the span is resolved.
    ``marker`` records the delimiter used (``*``/``_``, ``**``/``__``).
    """

    kind: NodeKind
    content: str = ""
    children: list[Node] = field(default_factory=list)
    target: str | None = None
    title: str | None = None
    marker: str = ""

    @property
    def unparsed(self) -> bool:
        return self.kind is NodeKind.UNPARSED

    def plain_text(self) -> str:
        """Return the text of this node without any markup."""
        if self.kind is NodeKind.NEWLINE:
            return "\n"
        if self.children:
            return "".join(child.plain_text() for child in self.children)
        return self.content


def text(content: str) -> Node:
    return Node(NodeKind.TEXT, content)


def unparsed(content: str) -> Node:
    return Node(NodeKind.UNPARSED, content)


def is_resolved(nodes: list[Node]) -> bool:
    """True when no node in the tree still awaits inline parsing."""
    return all(not n.unparsed and is_resolved(n.children) for n in nodes)


def plain_text(nodes: list[Node]) -> str:
    return "".join(n.plain_text() for n in nodes)
