"""
Encoding helpers that read Ink sources without crashing on bad bytes.
"""

from __future__ import annotations

import re
import chardet
from pathlib import Path
from typing import List, Optional, Tuple

UTF8_BOM = b"\xef\xbb\xbf"

# Same terminators for the parser and the tag inserter, so line numbers agree.
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def decode_bytes_with_encoding(raw: bytes, preferred: Tuple[str, ...] = ("utf-8-sig", "utf-8")) -> Tuple[str, str]:
    """
    Decode raw file content with tolerant fallbacks:
    - try preferred encodings first
    - then chardet detection with errors='replace'
    Returns (text, encoding) so a rewrite can use the same encoding.
    """
    for enc in preferred:
        try:
            text = raw.decode(enc)
        except UnicodeDecodeError:
            continue
        if enc == "utf-8-sig" and not raw.startswith(UTF8_BOM):
            enc = "utf-8"
        return text, enc

    detected = chardet.detect(raw)
    enc = detected.get("encoding") or "utf-8"
    try:
        return raw.decode(enc, errors="replace"), enc
    except LookupError:
        return raw.decode("utf-8", errors="replace"), "utf-8"


def decode_bytes(raw: bytes, preferred: Tuple[str, ...] = ("utf-8-sig", "utf-8")) -> str:
    return decode_bytes_with_encoding(raw, preferred)[0]


def read_text_safely(path: Path, preferred: Tuple[str, ...] = ("utf-8-sig", "utf-8")) -> Optional[str]:
    """
    Read file as text using decode_bytes.
    Returns None on I/O failure.
    """
    try:
        raw = path.read_bytes()
    except OSError:
        return None
    return decode_bytes(raw, preferred)


def split_lines(text: str) -> List[str]:
    """Split on CRLF, CR or LF. A trailing terminator does not add an empty line."""
    if not text:
        return []
    lines = LINE_BREAK_RE.split(text)
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def has_trailing_newline(text: str) -> bool:
    return text.endswith("\n") or text.endswith("\r")
