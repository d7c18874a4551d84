from __future__ import annotations
import re
from typing import List, Sequence, Union

from .hashing import HASH_ALPHABET

"""
Text helpers shared by the edit applier: payload splitting, echo stripping
and leading-indent restoration.
"""

Payload = Union[str, Sequence[str]]

HASHLINE_PREFIX_RE = re.compile(r"^\s*(?:>>>|>>)?\s*[0-9]+\s*#\s*[" + HASH_ALPHABET + r"]{2}\|")
DIFF_PLUS_RE = re.compile(r"^\+(?!\+)")
_LEADING_WS = re.compile(r"^\s*")
_WHITESPACE = re.compile(r"\s+")


def leading_whitespace(text: str) -> str:
    if not text:
        return ""
    return _LEADING_WS.match(text).group(0)


def strip_all_whitespace(text: str) -> str:
    return _WHITESPACE.sub("", text)


def equals_ignoring_whitespace(a: str, b: str) -> bool:
    if a == b:
        return True
    return strip_all_whitespace(a) == strip_all_whitespace(b)


def strip_line_prefixes(lines: List[str]) -> List[str]:
    """Remove LINE#ID| or diff '+' prefixes copied from tool output.

    Only fires when at least half of the non-empty lines carry the prefix.
    """
    non_empty = 0
    hash_prefixed = 0
    plus_prefixed = 0
    for line in lines:
        if not line:
            continue
        non_empty += 1
        if HASHLINE_PREFIX_RE.match(line):
            hash_prefixed += 1
        if DIFF_PLUS_RE.match(line):
            plus_prefixed += 1
    if non_empty == 0:
        return lines

    if hash_prefixed > 0 and hash_prefixed * 2 >= non_empty:
        return [HASHLINE_PREFIX_RE.sub("", line, count=1) for line in lines]
    if plus_prefixed > 0 and plus_prefixed * 2 >= non_empty:
        return [DIFF_PLUS_RE.sub("", line, count=1) for line in lines]
    return lines


def to_new_lines(payload: Payload) -> List[str]:
    if payload is None:
        return []
    if isinstance(payload, str):
        return strip_line_prefixes(payload.split("\n"))
    return strip_line_prefixes(list(payload))


def restore_leading_indent(template_line: str, line: str) -> str:
    if not line:
        return line
    indent = leading_whitespace(template_line)
    if not indent or leading_whitespace(line):
        return line
    if template_line.strip() == line.strip():
        return line
    return f"{indent}{line}"


def strip_insert_anchor_echo(anchor_line: str, new_lines: List[str]) -> List[str]:
    """Drop a first line that just repeats the anchor an append goes after."""
    if len(new_lines) <= 1:
        return new_lines
    if equals_ignoring_whitespace(new_lines[0], anchor_line):
        return new_lines[1:]
    return new_lines


def strip_insert_before_echo(anchor_line: str, new_lines: List[str]) -> List[str]:
    """Drop a last line that just repeats the anchor a prepend goes before."""
    if len(new_lines) <= 1:
        return new_lines
    if equals_ignoring_whitespace(new_lines[-1], anchor_line):
        return new_lines[:-1]
    return new_lines


def strip_range_boundary_echo(lines: Sequence[str], start_line: int, end_line: int, new_lines: List[str]) -> List[str]:
    """Drop echoes of the lines just outside [start_line, end_line].

    Only applies when the replacement grew beyond the replaced range, i.e.
    when the extra lines are likely to be copied context.
    """
    replaced = end_line - start_line + 1
    if len(new_lines) <= 1 or len(new_lines) <= replaced:
        return new_lines

    out = list(new_lines)
    before_idx = start_line - 2
    if before_idx >= 0 and equals_ignoring_whitespace(out[0], lines[before_idx]):
        out = out[1:]
    after_idx = end_line
    if after_idx < len(lines) and out and equals_ignoring_whitespace(out[-1], lines[after_idx]):
        out = out[:-1]
    return out
