from pathlib import Path

import pytest

from inklocalizer.core.exceptions import InkParseError
from inklocalizer.core.ink_nodes import CodeKind, NodeKind
from inklocalizer.core.ink_parser import InkParser


def _texts(story):
    return [n for n in story.find_all(NodeKind.TEXT) if not n.is_end_of_line]


def test_plain_line_positions(tmp_path: Path):
    story = InkParser(tmp_path).parse_string("Hello world\n", "myfile.ink")
    children = story.children
    assert [c.kind for c in children] == [NodeKind.TEXT, NodeKind.TEXT]
    text, eol = children
    assert text.text == "Hello world"
    assert text.metadata.start_line == 1
    assert text.metadata.start_char == 1
    assert text.metadata.end_char == 12
    assert text.metadata.file_id == "myfile"
    assert eol.is_end_of_line


def test_knot_and_stitch_nesting(tmp_path: Path):
    content = """=== Start ===
= Intro
Hello there
=== function helper(x) ===
Inside function
"""
    story = InkParser(tmp_path).parse_string(content, "chapter1.ink")
    texts = _texts(story)
    assert [t.text for t in texts] == ["Hello there", "Inside function"]

    scopes = [(n.kind, n.name) for n in texts[0].ancestry if n.kind in (NodeKind.KNOT, NodeKind.STITCH)]
    assert scopes == [(NodeKind.KNOT, "Start"), (NodeKind.STITCH, "Intro")]
    assert [n.name for n in texts[1].ancestry if n.kind is NodeKind.KNOT] == ["helper"]


def test_tags_become_marker_triples(tmp_path: Path):
    story = InkParser(tmp_path).parse_string("Hello #id:abc_1 #mood\n", "f.ink")
    kinds = [c.kind for c in story.children]
    assert kinds == [
        NodeKind.TEXT,
        NodeKind.TAG, NodeKind.TEXT, NodeKind.TAG,
        NodeKind.TAG, NodeKind.TEXT, NodeKind.TAG,
        NodeKind.TEXT,
    ]
    assert story.children[1].is_start and not story.children[3].is_start
    assert story.children[2].text.strip() == "id:abc_1"
    assert story.children[5].text.strip() == "mood"


def test_logic_and_declarations_are_code(tmp_path: Path):
    content = 'VAR greeting = "Hi"\n~ name = "Bob"\n~ shuffle()\n'
    story = InkParser(tmp_path).parse_string(content, "f.ink")
    codes = [n for n in story.children if n.kind is NodeKind.CODE]
    assert [c.code_kind for c in codes] == [
        CodeKind.VARIABLE_ASSIGNMENT, CodeKind.VARIABLE_ASSIGNMENT, CodeKind.INLINE_LOGIC
    ]
    literals = [t.text for t in story.find_all(NodeKind.TEXT)]
    assert literals == ["Hi", "Bob"]
    assert codes[0].children[0].code_kind is CodeKind.STRING_EXPRESSION


def test_inline_logic_splits_text(tmp_path: Path):
    story = InkParser(tmp_path).parse_string("You have {gold} coins\n", "f.ink")
    kinds = [c.kind for c in story.children]
    assert kinds == [NodeKind.TEXT, NodeKind.CODE, NodeKind.TEXT, NodeKind.TEXT]
    assert story.children[0].text == "You have"
    assert story.children[1].children[0].text == "gold"


def test_choice_brackets_divert_and_label(tmp_path: Path):
    story = InkParser(tmp_path).parse_string("* (opt) [Go north] -> north\n", "f.ink")
    choice = story.children[0]
    assert choice.kind is NodeKind.CHOICE
    kinds = [c.kind for c in choice.children]
    assert kinds == [NodeKind.TEXT, NodeKind.DIVERT, NodeKind.TEXT]
    text = choice.children[0]
    assert text.text == "Go north"
    # insert index points at the closing bracket
    assert "* (opt) [Go north] -> north"[text.metadata.end_char - 1] == "]"
    assert choice.children[1].name == "north"


def test_gather_and_glue(tmp_path: Path):
    story = InkParser(tmp_path).parse_string("- Together again <>\n", "f.ink")
    assert [c.kind for c in story.children] == [NodeKind.TEXT, NodeKind.GLUE, NodeKind.TEXT]
    assert story.children[0].text == "Together again"


def test_comments_are_ignored_and_columns_kept(tmp_path: Path):
    content = "Hello world // note\n/* block\nstill comment */\nAfter\n"
    story = InkParser(tmp_path).parse_string(content, "f.ink")
    texts = _texts(story)
    assert [t.text for t in texts] == ["Hello world", "After"]
    assert texts[0].metadata.end_char == 12
    assert texts[1].metadata.start_line == 4


def test_escaped_hash_is_text(tmp_path: Path):
    story = InkParser(tmp_path).parse_string("Price \\#1\n", "f.ink")
    texts = _texts(story)
    assert [t.text for t in texts] == ["Price #1"]
    assert texts[0].metadata.end_char == 10
    assert not any(n.kind is NodeKind.TAG for n in story.walk())


def test_include_resolved_against_root(tmp_path: Path):
    (tmp_path / "parts").mkdir()
    (tmp_path / "parts" / "extra.ink").write_text("=== side ===\nExtra line\n", encoding="utf-8")
    main = tmp_path / "main.ink"
    main.write_text("INCLUDE parts/extra.ink\nMain line\n", encoding="utf-8")

    story = InkParser(tmp_path).parse_file(main)
    include = story.children[0]
    assert include.kind is NodeKind.INCLUDE
    texts = _texts(story)
    assert [t.text for t in texts] == ["Extra line", "Main line"]
    assert texts[0].metadata.file_id == "extra"
    assert texts[1].metadata.file_id == "main"


@pytest.mark.parametrize("content,message", [
    ("Hello {unclosed\n", "unmatched '{'"),
    ("Hello } there\n", "unmatched '}'"),
    ("=== ===\n", "knot header"),
    ("= 1bad\n", "stitch header"),
    ("/* never closed\n", "unterminated block comment"),
])
def test_parse_errors(tmp_path: Path, content, message):
    with pytest.raises(InkParseError) as exc_info:
        InkParser(tmp_path).parse_string(content, "broken.ink")
    assert message in str(exc_info.value)
    assert "broken.ink" in str(exc_info.value)


def test_missing_and_circular_includes(tmp_path: Path):
    missing = tmp_path / "missing.ink"
    missing.write_text("INCLUDE nowhere.ink\n", encoding="utf-8")
    with pytest.raises(InkParseError, match="Failed to load"):
        InkParser(tmp_path).parse_file(missing)

    (tmp_path / "a.ink").write_text("INCLUDE b.ink\n", encoding="utf-8")
    (tmp_path / "b.ink").write_text("INCLUDE a.ink\n", encoding="utf-8")
    with pytest.raises(InkParseError, match="circular"):
        InkParser(tmp_path).parse_file(tmp_path / "a.ink")


def _branch_texts(story):
    return [(t.text, t.parent.kind) for t in _texts(story) if t.parent.kind is not NodeKind.CODE]


def test_multiline_conditional_block(tmp_path: Path):
    content = """=== Start ===
{ visited:
  - Welcome back.
  - else: Hello stranger.
}
Bye now
"""
    story = InkParser(tmp_path).parse_string(content, "scene.ink")
    knot = story.children[0]
    block = knot.children[0]
    assert block.kind is NodeKind.CONDITIONAL

    conditions = [c.children[0].text for c in block.children if c.kind is NodeKind.CODE]
    assert conditions == ["visited", "else"]
    assert _branch_texts(story) == [
        ("Welcome back.", NodeKind.CONDITIONAL),
        ("Hello stranger.", NodeKind.CONDITIONAL),
        ("Bye now", NodeKind.KNOT),
    ]
    lines = {t.text: t.metadata.start_line for t in _texts(story)}
    assert lines["Hello stranger."] == 4 and lines["Bye now"] == 6


def test_multiline_sequence_block(tmp_path: Path):
    content = "{ stopping:\n  - First visit: welcome.\n  - Again?\n}\n"
    story = InkParser(tmp_path).parse_string(content, "scene.ink")
    block = story.children[0]
    assert block.kind is NodeKind.CONDITIONAL and block.name == "stopping"
    # sequence branches carry no condition, so the colon stays in the text
    assert [t.text for t in _texts(story)] == ["First visit: welcome.", "Again?"]
    assert not any(n.kind is NodeKind.CODE for n in story.walk())


def test_block_branches_with_own_conditions(tmp_path: Path):
    content = "{\n  - gold > 10: You are rich.\n  - Bob says: hi\n}\n"
    story = InkParser(tmp_path).parse_string(content, "scene.ink")
    conditions = [n.children[0].text for n in story.find_all(NodeKind.CODE)]
    assert conditions == ["gold > 10"]
    assert [t.text for t in _texts(story) if t.parent.kind is not NodeKind.CODE] == [
        "You are rich.", "Bob says: hi"
    ]


def test_unclosed_block_is_reported(tmp_path: Path):
    with pytest.raises(InkParseError, match="unterminated '\\{' block"):
        InkParser(tmp_path).parse_string("{ visited:\n  - Hi\n=== Next ===\n", "broken.ink")


@pytest.mark.parametrize("content,branches,code", [
    ("{visited: Welcome back}\n", ["Welcome back"], ["visited"]),
    ("{gold > 5: Rich|Poor}\n", ["Rich", "Poor"], ["gold > 5"]),
    ("{&Hi|Hello}\n", ["Hi", "Hello"], []),
    ("{~Left|Right}\n", ["Left", "Right"], []),
    ("{a || b}\n", [], ["a || b"]),
    ("{name}\n", [], ["name"]),
])
def test_inline_conditionals_and_alternatives(tmp_path: Path, content, branches, code):
    story = InkParser(tmp_path).parse_string(content, "f.ink")
    texts = _texts(story)
    assert [t.text for t in texts if t.parent.kind is NodeKind.CONDITIONAL] == branches
    assert [t.text.strip() for t in texts if t.parent.kind is NodeKind.CODE] == code
