"""
Ink Parse Tree
==============

Node types produced by the Ink parser and consumed by the text selector and
tag scanner. The set of node kinds is closed: every node carries a NodeKind
and consumers match on it.

Layout of a parsed line: all nodes of one source line are siblings inside
the enclosing container (story, knot, stitch, include, choice or
conditional), followed by an end-of-line Text node whose value is "\\n". A
tag ``#id:abc`` becomes the sibling triple TAG(start) / TEXT("id:abc") / TAG(end).

Conditionals and alternatives (``{cond: a|b}``, ``{&a|b}``, multi-line
``{ ... }`` blocks) are not code: their branch text is ordinary text inside a
CONDITIONAL container, and only the condition itself is a CODE node.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional


class NodeKind(Enum):
    """All node kinds the parser can emit."""
    STORY = "story"
    INCLUDE = "include"
    KNOT = "knot"
    STITCH = "stitch"
    CHOICE = "choice"
    CONDITIONAL = "conditional"
    TEXT = "text"
    TAG = "tag"
    CODE = "code"
    DIVERT = "divert"
    GLUE = "glue"


class CodeKind(Enum):
    """Flavours of code construct whose text is computed at runtime."""
    VARIABLE_ASSIGNMENT = "variable_assignment"
    STRING_EXPRESSION = "string_expression"
    INLINE_LOGIC = "inline_logic"


CONTAINER_KINDS = frozenset({
    NodeKind.STORY,
    NodeKind.INCLUDE,
    NodeKind.KNOT,
    NodeKind.STITCH,
    NodeKind.CHOICE,
    NodeKind.CONDITIONAL,
    NodeKind.CODE,
})

# Containers whose names contribute to a generated identifier prefix.
SCOPE_KINDS = frozenset({NodeKind.KNOT, NodeKind.STITCH})


@dataclass
class DebugMetadata:
    """Source position of a node.

    Lines are 1-based. Character numbers are 1-based columns; ``end_char`` is
    the column just past the last character, so ``end_char - 1`` is the
    0-based string index immediately after the node's text.
    """
    file_name: str
    start_line: int
    end_line: int
    start_char: int
    end_char: int

    @property
    def file_id(self) -> str:
        return Path(self.file_name).stem


@dataclass(eq=False)
class InkNode:
    """A node of the parsed tree.

    ``name`` is set for knots, stitches, includes and diverts; ``text`` for
    text nodes; ``is_start`` for tag markers; ``code_kind`` for code nodes.
    Nodes compare by identity so sibling scans can locate themselves.
    """
    kind: NodeKind
    metadata: Optional[DebugMetadata] = None
    name: str = ""
    text: str = ""
    is_start: bool = False
    code_kind: Optional[CodeKind] = None
    children: List["InkNode"] = field(default_factory=list)
    parent: Optional["InkNode"] = field(default=None, repr=False)

    def add(self, child: "InkNode") -> "InkNode":
        if self.kind not in CONTAINER_KINDS:
            raise ValueError(f"{self.kind.value} nodes cannot hold children")
        child.parent = self
        self.children.append(child)
        return child

    @property
    def ancestry(self) -> List["InkNode"]:
        """Enclosing nodes ordered outer to inner."""
        chain = []
        node = self.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    @property
    def is_end_of_line(self) -> bool:
        return self.kind is NodeKind.TEXT and self.text == "\n"

    def walk(self) -> Iterator["InkNode"]:
        """Depth-first, document-order traversal including this node."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, kind: NodeKind) -> Iterator["InkNode"]:
        return (node for node in self.walk() if node.kind is kind)


def make_text(text: str, metadata: Optional[DebugMetadata] = None) -> InkNode:
    return InkNode(NodeKind.TEXT, metadata=metadata, text=text)


def make_tag(is_start: bool, metadata: Optional[DebugMetadata] = None) -> InkNode:
    return InkNode(NodeKind.TAG, metadata=metadata, is_start=is_start)


def make_code(code_kind: CodeKind, metadata: Optional[DebugMetadata] = None) -> InkNode:
    return InkNode(NodeKind.CODE, metadata=metadata, code_kind=code_kind)
