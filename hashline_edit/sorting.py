from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .edits import AppendEdit, HashlineEdit, PrependEdit, ReplaceEdit
from .errors import InvalidRange, OverlappingRangeEdits
from .normalization import to_new_lines
from .validation import parse_line_ref

"""
Batch preprocessing: deduplication, reference collection, overlap detection
and bottom-up ordering.
"""

# replace-type edits at an anchor run before insertions there
EDIT_PRECEDENCE = {"replace": 0, "append": 1, "prepend": 2}


@dataclass
class DedupeResult:
    edits: List[HashlineEdit]
    deduplicated_edits: int
    positions: List[int]  # 1-based batch position of each surviving edit


def get_edit_line_number(edit: HashlineEdit) -> float:
    if isinstance(edit, ReplaceEdit):
        return parse_line_ref(edit.end or edit.pos).line
    if isinstance(edit, (AppendEdit, PrependEdit)):
        return parse_line_ref(edit.pos).line if edit.pos else -math.inf
    raise TypeError(f"unsupported edit type: {type(edit).__name__}")


def collect_line_refs(edits: Sequence[HashlineEdit]) -> List[str]:
    refs: List[str] = []
    for edit in edits:
        if isinstance(edit, ReplaceEdit):
            refs.append(edit.pos)
            if edit.end:
                refs.append(edit.end)
        elif edit.pos:
            refs.append(edit.pos)
    return refs


def detect_overlapping_ranges(edits: Sequence[HashlineEdit], positions: Optional[Sequence[int]] = None) -> None:
    """Raise OverlappingRangeEdits if two ranged replaces touch or overlap,
    or InvalidRange if one of them runs backwards.

    Edits are reported by `positions` (1-based batch positions), defaulting
    to their 1-based position in `edits`.
    """
    if positions is None:
        positions = range(1, len(edits) + 1)
    ranges: List[Tuple[int, int, int]] = []
    for idx, edit in enumerate(edits):
        if not isinstance(edit, ReplaceEdit) or not edit.end:
            continue
        start = parse_line_ref(edit.pos).line
        end = parse_line_ref(edit.end).line
        if start > end:
            raise InvalidRange(start, end)
        ranges.append((start, end, positions[idx]))
    if len(ranges) < 2:
        return

    ranges.sort(key=lambda r: (r[0], r[1]))
    for prev, curr in zip(ranges, ranges[1:]):
        if curr[0] <= prev[1]:
            raise OverlappingRangeEdits(prev[2], (prev[0], prev[1]), curr[2], (curr[0], curr[1]))


def _normalize_payload(payload) -> str:
    return "\n".join(to_new_lines(payload))


def build_dedupe_key(edit: HashlineEdit) -> str:
    end = edit.end if isinstance(edit, ReplaceEdit) else None
    return f"{edit.op}|{edit.pos or ''}|{end or ''}|{_normalize_payload(edit.lines)}"


def dedupe_edits(edits: Sequence[HashlineEdit]) -> DedupeResult:
    seen = set()
    deduped: List[HashlineEdit] = []
    positions: List[int] = []
    dropped = 0
    for position, edit in enumerate(edits, start=1):
        key = build_dedupe_key(edit)
        if key in seen:
            dropped += 1
            continue
        seen.add(key)
        deduped.append(edit)
        positions.append(position)
    return DedupeResult(edits=deduped, deduplicated_edits=dropped, positions=positions)


def sort_edits(edits: Sequence[HashlineEdit]) -> List[HashlineEdit]:
    """Order edits bottom-up; `sorted` is stable so batch order breaks ties."""
    return sorted(edits, key=lambda e: (-get_edit_line_number(e), EDIT_PRECEDENCE[e.op]))
