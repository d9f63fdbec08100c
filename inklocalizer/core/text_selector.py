"""
Text Selector
=============

Walks a parsed story and picks the text nodes that can be localized.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from inklocalizer.core.exceptions import MultiSpanPerLineError
from inklocalizer.core.ink_nodes import InkNode, NodeKind
from inklocalizer.core.tag_scanner import find_existing_id, is_annotation_text, is_code_text


@dataclass
class LocalizableSpan:
    """One line of localizable text and where its ID tag belongs."""
    text: str
    file_name: str
    file_id: str
    line_number: int
    insert_offset: int  # 0-based index just past the text on its line
    ancestry: List[InkNode] = field(default_factory=list, repr=False)
    node: Optional[InkNode] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_node(cls, node: InkNode) -> "LocalizableSpan":
        meta = node.metadata
        return cls(
            text=node.text,
            file_name=meta.file_name,
            file_id=meta.file_id,
            line_number=meta.start_line,
            insert_offset=meta.end_char - 1,
            ancestry=node.ancestry,
            node=node,
        )

    def find_existing_id(self) -> Optional[str]:
        if self.node is None:
            return None
        return find_existing_id(self.node)


def is_text_valid(text: InkNode) -> bool:
    if not text.text.strip():
        return False
    if is_annotation_text(text):
        return False
    if is_code_text(text):
        return False
    return True


class TextSelector:
    """
    Selects localizable spans story by story.

    A file id (file name without extension) is processed once per run: text
    from a file that an earlier story already pulled in through INCLUDE is
    skipped.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.files_visited: Set[str] = set()

    def select(self, story: InkNode) -> List[LocalizableSpan]:
        new_files_visited: Set[str] = set()
        spans = self._find_localizable_text(story, new_files_visited)
        self.files_visited.update(new_files_visited)
        self.logger.debug(f"{story.name}: {len(spans)} localizable spans")
        return spans

    def _find_localizable_text(self, story: InkNode, new_files_visited: Set[str]) -> List[LocalizableSpan]:
        spans: List[LocalizableSpan] = []
        last_line: Optional[Tuple[str, int]] = None

        for text in story.find_all(NodeKind.TEXT):
            if text.metadata is None or not is_text_valid(text):
                continue

            file_id = text.metadata.file_id
            if file_id in self.files_visited:
                continue
            new_files_visited.add(file_id)

            line_key = (text.metadata.file_name, text.metadata.start_line)
            if line_key == last_line:
                raise MultiSpanPerLineError(file_id, text.metadata.start_line)
            last_line = line_key

            spans.append(LocalizableSpan.from_node(text))
        return spans
