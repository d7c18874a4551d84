from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import InvalidLineRefFormat, LineOutOfRange, StaleLineReference
from .hashing import HASH_ALPHABET, compute_line_hash

"""
Parsing and validation of `N` / `N#HH` line references.

References are always checked against the snapshot the batch was submitted
for, never against lines produced by earlier edits in the same batch.
"""

LINE_REF_PATTERN = re.compile(r"^([0-9]+)(?:#([" + HASH_ALPHABET + r"]{2}))?$")
STALE_CONTEXT_LINES = 2


@dataclass(frozen=True)
class LineRef:
    line: int  # 1-indexed
    hash: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.line}#{self.hash}" if self.hash else str(self.line)


def parse_line_ref(ref: str) -> LineRef:
    if not isinstance(ref, str):
        raise InvalidLineRefFormat(str(ref))
    match = LINE_REF_PATTERN.match(ref.strip())
    if not match:
        raise InvalidLineRefFormat(ref)
    return LineRef(line=int(match.group(1)), hash=match.group(2))


def _stale_context(lines: Sequence[str], line: int) -> List[str]:
    lo = max(1, line - STALE_CONTEXT_LINES)
    hi = min(len(lines), line + STALE_CONTEXT_LINES)
    out = []
    for n in range(lo, hi + 1):
        content = lines[n - 1]
        marker = ">>> " if n == line else "    "
        out.append(f"{marker}{n}#{compute_line_hash(n, content)}|{content}")
    return out


def validate_line_ref(lines: Sequence[str], ref: str, require_hash: bool = False) -> LineRef:
    parsed = parse_line_ref(ref)
    if require_hash and parsed.hash is None:
        raise InvalidLineRefFormat(ref, "A hash is required: use the LINE#ID shown by the read tool")
    if parsed.line < 1 or parsed.line > len(lines):
        raise LineOutOfRange(ref, parsed.line, len(lines))
    if parsed.hash is not None:
        actual = compute_line_hash(parsed.line, lines[parsed.line - 1])
        if actual != parsed.hash:
            raise StaleLineReference(
                ref, parsed.line, parsed.hash, actual, _stale_context(lines, parsed.line)
            )
    return parsed


def validate_line_refs(lines: Sequence[str], refs: Iterable[str], require_hash: bool = False) -> None:
    for ref in refs:
        validate_line_ref(lines, ref, require_hash=require_hash)
