from pathlib import Path

import pytest

from inklocalizer.core.ink_nodes import NodeKind
from inklocalizer.core.ink_parser import InkParser
from inklocalizer.core.tag_scanner import (
    find_existing_id,
    get_tags_after_text,
    is_annotation_text,
    is_code_text,
)


def _first_text(content: str, tmp_path: Path):
    story = InkParser(tmp_path).parse_string(content, "scene.ink")
    return next(story.find_all(NodeKind.TEXT)), story


@pytest.mark.parametrize("content,expected", [
    ("Hello #id:scene_AB12\n", "scene_AB12"),
    ("Hello #mood:sad #id:scene_Knot_X9Z1 #loud\n", "scene_Knot_X9Z1"),
    ("Hello #id: spaced_id \n", "spaced_id"),
    ("Hello #mood:sad\n", None),
    ("Hello\n", None),
    ("Hello #id:\n", None),
])
def test_find_existing_id(tmp_path: Path, content, expected):
    text, _ = _first_text(content, tmp_path)
    assert find_existing_id(text) == expected


def test_scan_stops_at_end_of_line(tmp_path: Path):
    text, _ = _first_text("Hello\n#id:next_line_tag\n", tmp_path)
    assert get_tags_after_text(text) == []
    assert find_existing_id(text) is None


def test_first_id_tag_wins(tmp_path: Path):
    text, _ = _first_text("Hello #id:first #id:second\n", tmp_path)
    assert get_tags_after_text(text) == ["id:first", "id:second"]
    assert find_existing_id(text) == "first"


def test_annotation_text_detected(tmp_path: Path):
    _, story = _first_text("Hello #speaker Bob\n", tmp_path)
    texts = [t for t in story.find_all(NodeKind.TEXT) if not t.is_end_of_line]
    hello, tag_body = texts
    assert not is_annotation_text(hello)
    assert is_annotation_text(tag_body)


def test_code_text_detected(tmp_path: Path):
    story = InkParser(tmp_path).parse_string('~ line = "Not for you"\nFor you {x}\n', "scene.ink")
    texts = [t for t in story.find_all(NodeKind.TEXT) if not t.is_end_of_line]
    assigned, visible, inline = texts
    assert assigned.text == "Not for you" and is_code_text(assigned)
    assert visible.text == "For you" and not is_code_text(visible)
    assert inline.text == "x" and is_code_text(inline)
