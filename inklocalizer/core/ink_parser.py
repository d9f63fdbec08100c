# -*- coding: utf-8 -*-
"""
Ink Script Parser
=================

Parses Ink narrative scripts (*.ink) into the node tree defined in
ink_nodes. This is a line-oriented parser: it recognises the structure that
matters for localization and does not evaluate Ink.

Recognised per line:
1. Structure: ``=== knot ===``, ``= stitch``, ``INCLUDE file.ink``
2. Code: ``VAR``/``CONST``/``LIST`` declarations and ``~`` logic lines
3. Weave: choices (``*``/``+``), gathers (``-``) and plain content lines
4. Blocks: multi-line ``{ cond: ... }`` conditionals, ``{ stopping: ... }``
   sequences and their ``- branch:`` lines
5. Inline: tags (``#``), ``{...}`` logic, conditionals and alternatives,
   diverts (``->``), glue (``<>``), escapes (``\\``), and ``//`` / ``/* */``
   comments
"""

import re
import logging
from pathlib import Path
from typing import List, Optional, Set, Tuple

from inklocalizer.core.exceptions import InkParseError
from inklocalizer.core.ink_nodes import (
    CodeKind,
    DebugMetadata,
    InkNode,
    NodeKind,
    make_code,
    make_tag,
    make_text,
)
from inklocalizer.utils.encoding import read_text_safely, split_lines

# {&a|b} cycle, {~a|b} shuffle, {!a|b} once-only
SEQUENCE_MARKERS = "&~!"
SEQUENCE_KEYWORDS = frozenset({
    "stopping", "cycle", "shuffle", "once", "shuffle once", "shuffle stopping",
})


def mask_comments(line: str, in_block: bool) -> Tuple[str, bool]:
    """Blank out comment characters, keeping every column in place."""
    out = []
    i = 0
    length = len(line)
    while i < length:
        if in_block:
            if line.startswith('*/', i):
                out.append('  ')
                in_block = False
                i += 2
            else:
                out.append(' ')
                i += 1
            continue
        if line[i] == '\\' and i + 1 < length:
            out.append(line[i:i + 2])
            i += 2
            continue
        if line.startswith('//', i):
            out.append(' ' * (length - i))
            break
        if line.startswith('/*', i):
            out.append('  ')
            in_block = True
            i += 2
            continue
        out.append(line[i])
        i += 1
    return ''.join(out), in_block


def mask_lines(lines: List[str]) -> List[str]:
    """Comment-masked copies of ``lines``, carrying block comments across lines."""
    masked = []
    in_block = False
    for line in lines:
        text, in_block = mask_comments(line, in_block)
        masked.append(text)
    return masked


class InkParser:
    """
    Parses Ink files below a root directory.

    INCLUDE paths are resolved against ``root_dir``; the process working
    directory is never consulted.

        === start ===
        = intro
        Hello world #id:chapter1_start_intro_AB12
        * [Leave] -> END
    """

    def __init__(self, root_dir: Path):
        self.logger = logging.getLogger(__name__)
        self.root_dir = Path(root_dir)

        # === knot === / == function name(args) ==
        self._knot_re = re.compile(
            r'^={2,}\s*(?:function\s+)?([A-Za-z_]\w*)\s*(?:\([^)]*\))?\s*=*$'
        )
        self._knot_marker_re = re.compile(r'^={2,}')
        # = stitch
        self._stitch_re = re.compile(r'^=\s*([A-Za-z_]\w*)\s*(?:\([^)]*\))?$')
        self._include_re = re.compile(r'^INCLUDE\s+(.+?)$')
        self._declaration_re = re.compile(r'^(?:VAR|CONST|LIST)\b')
        self._external_re = re.compile(r'^EXTERNAL\b')
        self._todo_re = re.compile(r'^TODO\b')
        # ~ x = ..., ~ temp x = ..., ~ x += ...
        self._assignment_re = re.compile(r'^~\s*(?:temp\s+)?[A-Za-z_][\w.]*\s*(?:[-+*/]?=)(?!=)')
        self._choice_re = re.compile(r'^((?:[*+]\s*)+)')
        self._gather_re = re.compile(r'^((?:-(?!>)\s*)+)')
        self._label_re = re.compile(r'^\(\s*[A-Za-z_]\w*\s*\)\s*')
        self._string_literal_re = re.compile(r'"((?:[^"\\]|\\.)*)"')
        self._divert_target_re = re.compile(r'(?:->)*\s*([A-Za-z_][\w.]*)?(\([^)]*\))?')
        # "- cond: text" inside a block
        self._branch_condition_re = re.compile(r'([^:"{}|#]+?)\s*:(?!:)')
        self._simple_condition_re = re.compile(r'(?:not\s+)?[\w.]+(?:\([^)]*\))?')
        self._operator_re = re.compile(r'[<>=!&+*/%?]|\b(?:and|or|not|has|hasnt)\b')

    def parse_file(self, file_path: Path) -> InkNode:
        """Parse one Ink file (and everything it includes) into a story tree."""
        path = Path(file_path).resolve()
        story = InkNode(NodeKind.STORY, name=str(path))
        self._parse_into(story, path, include_stack=set())
        return story

    def parse_string(self, content: str, file_name: str) -> InkNode:
        """Parse in-memory Ink content attributed to ``file_name``."""
        story = InkNode(NodeKind.STORY, name=file_name)
        self._parse_lines(story, split_lines(content), file_name, include_stack={file_name})
        return story

    def _parse_into(self, container: InkNode, path: Path, include_stack: Set[str]) -> None:
        key = str(path)
        if key in include_stack:
            raise InkParseError(f"circular INCLUDE of {path.name}", key)

        content = read_text_safely(path)
        if content is None:
            raise InkParseError(f'Failed to load ink file "{path}".', key)

        self.logger.debug(f"Parsing: {path}")
        self._parse_lines(container, split_lines(content), key, include_stack | {key})

    def _parse_lines(self, top: InkNode, lines: List[str], file_name: str, include_stack: Set[str]) -> None:
        current = top
        current_knot: Optional[InkNode] = None
        # open multi-line { ... } blocks, innermost last
        blocks: List[InkNode] = []
        in_block_comment = False

        for index, raw_line in enumerate(lines):
            line_no = index + 1
            line, in_block_comment = mask_comments(raw_line, in_block_comment)
            stripped = line.strip()
            if not stripped:
                continue
            indent = len(line) - len(line.lstrip())

            if self._todo_re.match(stripped) or self._external_re.match(stripped):
                continue

            include_match = self._include_re.match(stripped)
            if include_match:
                include_name = include_match.group(1)
                include = InkNode(NodeKind.INCLUDE, name=include_name,
                                  metadata=self._meta(file_name, line_no, indent, len(line.rstrip())))
                top.add(include)
                self._parse_into(include, (self.root_dir / include_name).resolve(), include_stack)
                continue

            if self._knot_marker_re.match(stripped):
                self._check_blocks_closed(blocks, file_name)
                knot_match = self._knot_re.match(stripped)
                if not knot_match:
                    raise InkParseError("knot header without a valid name", file_name, line_no)
                current_knot = InkNode(NodeKind.KNOT, name=knot_match.group(1),
                                       metadata=self._meta(file_name, line_no, indent, len(line.rstrip())))
                top.add(current_knot)
                current = current_knot
                continue

            if stripped.startswith('=') and not stripped.startswith('=='):
                self._check_blocks_closed(blocks, file_name)
                stitch_match = self._stitch_re.match(stripped)
                if not stitch_match:
                    raise InkParseError("stitch header without a valid name", file_name, line_no)
                stitch = InkNode(NodeKind.STITCH, name=stitch_match.group(1),
                                 metadata=self._meta(file_name, line_no, indent, len(line.rstrip())))
                (current_knot or top).add(stitch)
                current = stitch
                continue

            container = blocks[-1] if blocks else current

            if self._declaration_re.match(stripped):
                self._parse_code_line(container, line, CodeKind.VARIABLE_ASSIGNMENT, file_name, line_no)
                continue

            if stripped.startswith('~'):
                kind = CodeKind.VARIABLE_ASSIGNMENT if self._assignment_re.match(stripped) else CodeKind.INLINE_LOGIC
                self._parse_code_line(container, line, kind, file_name, line_no)
                continue

            start = indent
            target = container
            allow_brackets = False
            emitted = 0

            if blocks and stripped.startswith('}'):
                blocks.pop()
                start += 1
                target = blocks[-1] if blocks else current
            elif stripped.startswith('{') and self._find_closing_brace(line, indent, len(line)) < 0:
                blocks.append(self._open_block(line, indent, container, file_name, line_no))
                continue
            elif blocks and stripped.startswith('-') and not stripped.startswith('->'):
                start, emitted = self._parse_branch_marker(line, indent, blocks[-1], file_name, line_no)
            else:
                choice_match = self._choice_re.match(stripped)
                gather_match = None if choice_match else self._gather_re.match(stripped)
                if choice_match:
                    start += choice_match.end()
                    target = container.add(InkNode(NodeKind.CHOICE,
                                                   metadata=self._meta(file_name, line_no, indent, len(line.rstrip()))))
                    allow_brackets = True
                elif gather_match:
                    start += gather_match.end()

                if choice_match or gather_match:
                    label_match = self._label_re.match(line[start:])
                    if label_match:
                        start += label_match.end()

            emitted += self._parse_inline(line, start, target, file_name, line_no, allow_brackets)
            if emitted:
                self._end_line(target, line, file_name, line_no)

        if in_block_comment:
            raise InkParseError("unterminated block comment", file_name, len(lines))
        self._check_blocks_closed(blocks, file_name)

    @staticmethod
    def _check_blocks_closed(blocks: List[InkNode], file_name: str) -> None:
        if blocks:
            raise InkParseError("unterminated '{' block", file_name, blocks[-1].metadata.start_line)

    def _end_line(self, container: InkNode, line: str, file_name: str, line_no: int) -> None:
        end = len(line.rstrip())
        container.add(make_text("\n", self._meta(file_name, line_no, end, end)))

    def _open_block(self, line: str, brace: int, container: InkNode, file_name: str, line_no: int) -> InkNode:
        """Start a multi-line ``{ ... }`` block. The header holds a condition, a sequence keyword or nothing."""
        end = len(line.rstrip())
        block = container.add(InkNode(NodeKind.CONDITIONAL, metadata=self._meta(file_name, line_no, brace, end)))
        header = self._split_top_level(line, brace + 1, end, ':')
        if len(header) == 1:
            # bare "{": each branch carries its own condition
            return block

        cond_start, cond_end = header[0]
        condition = ' '.join(line[cond_start:cond_end].split())
        if condition in SEQUENCE_KEYWORDS:
            block.name = condition
        else:
            self._add_condition(block, line, cond_start, cond_end, file_name, line_no)

        emitted = self._parse_inline(line, cond_end + 1, block, file_name, line_no, False, end)
        if emitted:
            self._end_line(block, line, file_name, line_no)
        return block

    def _parse_branch_marker(self, line: str, indent: int, block: InkNode,
                             file_name: str, line_no: int) -> Tuple[int, int]:
        """Skip a ``-`` branch marker and its condition. Returns (content start, nodes added)."""
        start = indent + 1
        while start < len(line) and line[start].isspace():
            start += 1
        if block.name in SEQUENCE_KEYWORDS:
            return start, 0

        match = self._branch_condition_re.match(line, start)
        if match and self._is_condition(match.group(1)):
            self._add_condition(block, line, match.start(1), match.end(1), file_name, line_no)
            return match.end(), 1
        return start, 0

    def _is_condition(self, candidate: str) -> bool:
        candidate = candidate.strip()
        return bool(self._simple_condition_re.fullmatch(candidate) or self._operator_re.search(candidate))

    def _add_condition(self, container: InkNode, line: str, start: int, end: int,
                       file_name: str, line_no: int) -> None:
        code = container.add(make_code(CodeKind.INLINE_LOGIC, self._meta(file_name, line_no, start, end)))
        code.add(make_text(line[start:end].strip(), self._meta(file_name, line_no, start, end)))

    def _parse_code_line(self, container: InkNode, line: str, kind: CodeKind, file_name: str, line_no: int) -> None:
        """Logic and declarations: string literals become code text, never content."""
        indent = len(line) - len(line.lstrip())
        code = container.add(make_code(kind, self._meta(file_name, line_no, indent, len(line.rstrip()))))
        for literal in self._string_literal_re.finditer(line):
            expression = code.add(make_code(CodeKind.STRING_EXPRESSION,
                                            self._meta(file_name, line_no, literal.start(), literal.end())))
            expression.add(make_text(self._unescape_string(literal.group(1)),
                                     self._meta(file_name, line_no, literal.start(1), literal.end(1))))

    def _parse_inline(self, line: str, start: int, container: InkNode, file_name: str,
                      line_no: int, allow_brackets: bool, end: Optional[int] = None) -> int:
        """Tokenise weave content in ``line[start:end]`` into ``container``. Returns the number of nodes added."""
        # (value, start index, end index) per source character or escape pair
        buffer: List[Tuple[str, int, int]] = []
        added = 0

        def flush() -> None:
            nonlocal added
            node = self._text_from_buffer(buffer, file_name, line_no)
            buffer.clear()
            if node is not None:
                container.add(node)
                added += 1

        i = start
        length = len(line) if end is None else end
        while i < length:
            ch = line[i]

            if ch == '\\':
                if i + 1 < length:
                    buffer.append((line[i + 1], i, i + 2))
                i += 2
                continue

            if ch == '#':
                flush()
                i = self._parse_tag(line, i + 1, container, file_name, line_no, allow_brackets, length)
                added += 3
                continue

            if ch == '{':
                flush()
                close = self._find_closing_brace(line, i, length)
                if close < 0:
                    raise InkParseError("unmatched '{'", file_name, line_no)
                self._parse_brace(line, i, close, container, file_name, line_no, allow_brackets)
                added += 1
                i = close + 1
                continue

            if ch == '}':
                raise InkParseError("unmatched '}'", file_name, line_no)

            if line.startswith('->', i):
                flush()
                target_match = self._divert_target_re.match(line, i, length)
                target = target_match.group(1) or ""
                divert_end = max(target_match.end(), i + 2)
                container.add(InkNode(NodeKind.DIVERT, name=target,
                                      metadata=self._meta(file_name, line_no, i, divert_end)))
                added += 1
                i = divert_end
                continue

            if line.startswith('<>', i):
                flush()
                container.add(InkNode(NodeKind.GLUE, metadata=self._meta(file_name, line_no, i, i + 2)))
                added += 1
                i += 2
                continue

            if allow_brackets and ch in '[]':
                flush()
                i += 1
                continue

            buffer.append((ch, i, i + 1))
            i += 1

        flush()
        return added

    def _parse_brace(self, line: str, open_index: int, close: int, container: InkNode,
                     file_name: str, line_no: int, allow_brackets: bool) -> None:
        """
        Inline ``{...}``.

        ``{cond: a|b}`` and ``{&a|b}`` / ``{a|b}`` become a CONDITIONAL node
        whose branches are ordinary content; anything else (``{name}``,
        ``{x + 1}``) is inline logic.
        """
        meta = self._meta(file_name, line_no, open_index, close + 1)
        body_start = open_index + 1
        while body_start < close and line[body_start].isspace():
            body_start += 1

        if body_start < close and line[body_start] in SEQUENCE_MARKERS:
            block = container.add(InkNode(NodeKind.CONDITIONAL, name=line[body_start], metadata=meta))
            branches = self._split_top_level(line, body_start + 1, close, '|')
        else:
            bars = self._split_top_level(line, body_start, close, '|')
            colons = self._split_top_level(line, body_start, bars[0][1], ':')
            if len(colons) > 1:
                block = container.add(InkNode(NodeKind.CONDITIONAL, metadata=meta))
                cond_start, cond_end = colons[0]
                self._add_condition(block, line, cond_start, cond_end, file_name, line_no)
                branches = self._split_top_level(line, cond_end + 1, close, '|')
            elif len(bars) > 1:
                block = container.add(InkNode(NodeKind.CONDITIONAL, metadata=meta))
                branches = bars
            else:
                code = container.add(make_code(CodeKind.INLINE_LOGIC, meta))
                code.add(make_text(line[open_index + 1:close], self._meta(file_name, line_no, open_index + 1, close)))
                return

        for branch_start, branch_end in branches:
            self._parse_inline(line, branch_start, block, file_name, line_no, allow_brackets, branch_end)

    @staticmethod
    def _split_top_level(line: str, start: int, end: int, sep: str) -> List[Tuple[int, int]]:
        """[start, end) ranges of ``line[start:end]`` split on ``sep`` outside braces and strings."""
        parts: List[Tuple[int, int]] = []
        depth = 0
        in_string = False
        part_start = start
        i = start
        while i < end:
            ch = line[i]
            if ch == '\\':
                i += 2
                continue
            if ch == '"':
                in_string = not in_string
            elif not in_string:
                if ch == '{':
                    depth += 1
                elif ch == '}':
                    depth -= 1
                elif ch == sep and depth == 0:
                    # "||" is the or operator, not a branch separator
                    if sep == '|' and line.startswith('||', i):
                        i += 2
                        continue
                    parts.append((part_start, i))
                    part_start = i + 1
            i += 1
        parts.append((part_start, end))
        return parts

    def _parse_tag(self, line: str, i: int, container: InkNode, file_name: str,
                   line_no: int, allow_brackets: bool, end: int) -> int:
        """Emit TAG(start) / TEXT / TAG(end) for a tag body starting at ``i``; return the next index."""
        container.add(make_tag(True, self._meta(file_name, line_no, i - 1, i)))
        body_start = i
        while i < end:
            if line[i] == '#' or (allow_brackets and line[i] == ']'):
                break
            if line[i] == '\\':
                i += 1
            i += 1
        i = min(i, end)
        container.add(make_text(self._unescape_string(line[body_start:i]), self._meta(file_name, line_no, body_start, i)))
        container.add(make_tag(False, self._meta(file_name, line_no, i, i)))
        return i

    @staticmethod
    def _find_closing_brace(line: str, open_index: int, end: int) -> int:
        depth = 0
        i = open_index
        while i < end:
            ch = line[i]
            if ch == '\\':
                i += 2
                continue
            if ch == '{':
                depth += 1
            elif ch == '}':
                depth -= 1
                if depth == 0:
                    return i
            i += 1
        return -1

    def _text_from_buffer(self, buffer: List[Tuple[str, int, int]], file_name: str, line_no: int) -> Optional[InkNode]:
        """Build a text node from buffered characters, trimming surrounding whitespace."""
        first = 0
        last = len(buffer) - 1
        while first <= last and buffer[first][0].isspace():
            first += 1
        while last >= first and buffer[last][0].isspace():
            last -= 1
        if first > last:
            return None
        value = ''.join(ch for ch, _, _ in buffer[first:last + 1])
        return make_text(value, self._meta(file_name, line_no, buffer[first][1], buffer[last][2]))

    @staticmethod
    def _meta(file_name: str, line_no: int, start_index: int, end_index: int) -> DebugMetadata:
        """Metadata from 0-based [start, end) indexes into the line."""
        return DebugMetadata(
            file_name=file_name,
            start_line=line_no,
            end_line=line_no,
            start_char=start_index + 1,
            end_char=end_index + 1,
        )

    @staticmethod
    def _unescape_string(text: str) -> str:
        """Drop Ink escape backslashes (\\# -> #, \\\\ -> \\)."""
        if not text:
            return text
        return re.sub(r'\\(.)', r'\1', text)
