from __future__ import annotations
import re
from typing import List

import xxhash

"""
Line hashing for LINE#ID anchors.

Each line is tagged as `{line_number}#{hash}|{content}` where the hash is two
symbols from HASH_ALPHABET. The hash is xxHash32 of the line with all
whitespace removed, reduced to one byte. Lines without any letter or digit
(blank lines, lone braces) are seeded with their line number so that
identical punctuation lines in different places get different codes.
"""

HASH_ALPHABET = "ZPMQVRWSNKTXJBYH"

# 256 two-symbol codes: high nibble, low nibble
HASH_DICT = [f"{HASH_ALPHABET[i >> 4]}{HASH_ALPHABET[i & 0x0F]}" for i in range(256)]

_WHITESPACE = re.compile(r"\s+")


def _has_significant_chars(text: str) -> bool:
    return any(ch.isalnum() for ch in text)


def compute_line_hash(line_number: int, content: str) -> str:
    normalized = _WHITESPACE.sub("", content.replace("\r", ""))
    seed = 0 if _has_significant_chars(normalized) else line_number
    digest = xxhash.xxh32(normalized.encode("utf-8"), seed=seed).intdigest()
    return HASH_DICT[digest % 256]


def format_hash_line(line_number: int, content: str) -> str:
    return f"{line_number}#{compute_line_hash(line_number, content)}|{content}"


def format_hash_lines(content: str, start_line: int = 1) -> str:
    """Annotate every line of `content` with its LINE#ID prefix."""
    lines: List[str] = content.split("\n")
    return "\n".join(format_hash_line(start_line + i, line) for i, line in enumerate(lines))
