# -*- coding: utf-8 -*-
"""
Tag Inserter
============

Writes ``#id:`` tags back into Ink source files, touching only the lines
that received a new identifier.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from inklocalizer.core.exceptions import TagInsertError
from inklocalizer.core.ink_parser import mask_lines
from inklocalizer.core.tag_scanner import TAG_LOC
from inklocalizer.core.text_selector import LocalizableSpan
from inklocalizer.utils.encoding import decode_bytes_with_encoding, has_trailing_newline, split_lines

TAG_PREFIX = f"#{TAG_LOC}"
# Replaces stale ids and bare "#id:" placeholders alike.
TAG_RE = re.compile(re.escape(TAG_PREFIX) + r"[A-Za-z0-9_]*")
DEBUG_SUFFIX = ".txt"


@dataclass
class PendingInsert:
    """A span waiting for its new ID to be written to disk."""
    span: LocalizableSpan
    loc_id: str


def insert_tag_in_line(line: str, insert_offset: int, loc_id: str, masked_line: Optional[str] = None) -> str:
    """Return ``line`` with ``#id:<loc_id>`` placed after the span ending at ``insert_offset``.

    ``masked_line`` is the line with comments blanked out; tags found only in
    comments are left alone.
    """
    new_tag = f"{TAG_PREFIX}{loc_id}"
    matches = list(TAG_RE.finditer(line if masked_line is None else masked_line))
    if matches:
        # Already tagged (stale id or placeholder): swap the tag, leave the rest alone.
        for match in reversed(matches):
            line = line[:match.start()] + new_tag + line[match.end():]
        return line

    if insert_offset < 0 or insert_offset > len(line):
        raise ValueError(f"insert position {insert_offset} is outside a line of {len(line)} characters")

    # Pad between the previous word and any following tag or comment.
    if insert_offset > 0 and not line[insert_offset - 1].isspace():
        new_tag = f" {new_tag}"
    if insert_offset < len(line) and line[insert_offset] in "#/":
        new_tag += " "

    return line[:insert_offset] + new_tag + line[insert_offset:]


class TagInserter:
    """Applies queued tag inserts to Ink files, one file at a time."""

    def __init__(self, debug_retag_files: bool = False):
        self.logger = logging.getLogger(__name__)
        self.debug_retag_files = debug_retag_files

    def insert_tags_to_files(self, files_tags_to_insert: Dict[str, List[PendingInsert]]) -> List[TagInsertError]:
        """
        Patch every file with pending inserts.

        A file that fails is reported and skipped; the remaining files are still
        patched. Returns the failures.
        """
        failures: List[TagInsertError] = []
        for file_name, work_list in files_tags_to_insert.items():
            if not work_list:
                continue

            self.logger.info(f"Updating IDs in file: {file_name}")
            try:
                self.insert_tags_to_file(Path(file_name), work_list)
            except TagInsertError as e:
                self.logger.error(str(e))
                failures.append(e)
        return failures

    def insert_tags_to_file(self, file_path: Path, work_list: List[PendingInsert]) -> Path:
        """Patch one file in place (or its debug sibling). Returns the path written."""
        try:
            raw = file_path.read_bytes()
        except OSError as e:
            raise TagInsertError(str(file_path), str(e)) from e

        content, encoding = decode_bytes_with_encoding(raw)
        lines = split_lines(content)
        masked = mask_lines(lines)

        for item in work_list:
            line_index = item.span.line_number - 1
            if not 0 <= line_index < len(lines):
                raise TagInsertError(str(file_path), "line no longer exists",
                                     item.span.line_number, item.loc_id)
            try:
                lines[line_index] = insert_tag_in_line(lines[line_index], item.span.insert_offset, item.loc_id,
                                                       masked[line_index])
            except ValueError as e:
                raise TagInsertError(str(file_path), str(e), item.span.line_number, item.loc_id) from e

        output = "\n".join(lines)
        if has_trailing_newline(content):
            output += "\n"

        output_path = file_path
        if self.debug_retag_files:
            output_path = file_path.with_name(file_path.name + DEBUG_SUFFIX)

        # Same encoding (and BOM) the file was read with; encode before truncating the target.
        try:
            data = output.encode(encoding)
        except UnicodeError as e:
            raise TagInsertError(str(output_path), f"cannot re-encode as {encoding}: {e}") from e
        try:
            output_path.write_bytes(data)
        except OSError as e:
            raise TagInsertError(str(output_path), str(e)) from e

        self.logger.debug(f"Wrote {len(work_list)} tags to {output_path}")
        return output_path
