"""
Tag Scanner
===========

Finds ``#id:`` annotations that follow a text node on its line, and
classifies text nodes that are themselves annotation or code text.
"""

from typing import List, Optional

from inklocalizer.core.ink_nodes import InkNode, NodeKind

TAG_LOC = "id:"


def get_tags_after_text(text: InkNode) -> List[str]:
    """Tag values between the text and the end of its line, trimmed."""
    tags: List[str] = []
    if text.parent is None:
        return tags

    after_text = False
    in_tag = 0
    for sibling in text.parent.children:
        # Skip until we reach the text we care about.
        if sibling is text:
            after_text = True
            continue
        if not after_text:
            continue

        if sibling.is_end_of_line:
            break

        if sibling.kind is NodeKind.TAG:
            in_tag += 1 if sibling.is_start else -1
            continue

        if in_tag > 0 and sibling.kind is NodeKind.TEXT:
            tags.append(sibling.text.strip())
    return tags


def find_existing_id(text: InkNode) -> Optional[str]:
    """Return the identifier of the first ``#id:`` tag after the text, if any.

    A bare ``#id:`` placeholder counts as no identifier.
    """
    for tag in get_tags_after_text(text):
        if tag.startswith(TAG_LOC):
            return tag[len(TAG_LOC):].strip() or None
    return None


def is_annotation_text(text: InkNode) -> bool:
    """True when an unclosed tag start precedes the text among its siblings."""
    if text.parent is None:
        return False

    in_tag = 0
    for sibling in text.parent.children:
        if sibling is text:
            break
        if sibling.kind is NodeKind.TAG:
            in_tag += 1 if sibling.is_start else -1
    return in_tag > 0


def is_code_text(text: InkNode) -> bool:
    """True when the text sits inside an assignment, string expression or inline logic."""
    return any(node.kind is NodeKind.CODE for node in text.ancestry)
