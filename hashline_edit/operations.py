"""Apply hashline edits to in-memory file content.

``apply_hashline_edits_with_report`` is the entry point: it deduplicates the
batch, validates every reference against the submitted snapshot, rejects
overlapping ranges, then applies edits bottom-up so earlier splices never
shift a line number a later edit still needs. Every step builds a new list;
the snapshot used for validation is never mutated.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .autocorrect import autocorrect_replacement_lines
from .config import EditSettings
from .edits import AppendEdit, HashlineEdit, PrependEdit, ReplaceEdit, parse_edits
from .errors import EmptyInsertText, InvalidRange
from .normalization import (
    Payload,
    restore_leading_indent,
    strip_insert_anchor_echo,
    strip_insert_before_echo,
    strip_range_boundary_echo,
    to_new_lines,
)
from .sorting import collect_line_refs, dedupe_edits, detect_overlapping_ranges, sort_edits
from .validation import parse_line_ref, validate_line_ref, validate_line_refs

logger = logging.getLogger(__name__)


@dataclass
class ApplyReport:
    content: str
    noop_edits: int = 0
    deduplicated_edits: int = 0


def _correct(original: List[str], replacement: List[str], autocorrect: bool) -> List[str]:
    if not autocorrect:
        return replacement
    return autocorrect_replacement_lines(original, replacement)


def _indent_first(template: str, lines: List[str]) -> List[str]:
    if not lines:
        return lines
    return [restore_leading_indent(template, lines[0])] + lines[1:]


def apply_set_line(lines: Sequence[str], anchor: str, new_text: Payload,
                   validate: bool = True, autocorrect: bool = True) -> List[str]:
    if validate:
        validate_line_ref(lines, anchor)
    line = parse_line_ref(anchor).line
    original = lines[line - 1] if line - 1 < len(lines) else ""
    corrected = _correct([original], to_new_lines(new_text), autocorrect)
    return list(lines[:line - 1]) + _indent_first(original, corrected) + list(lines[line:])


def apply_replace_lines(lines: Sequence[str], start_anchor: str, end_anchor: str, new_text: Payload,
                        validate: bool = True, autocorrect: bool = True) -> List[str]:
    if validate:
        validate_line_ref(lines, start_anchor)
        validate_line_ref(lines, end_anchor)
    start = parse_line_ref(start_anchor).line
    end = parse_line_ref(end_anchor).line
    if start > end:
        raise InvalidRange(start, end)

    original_range = list(lines[start - 1:end])
    stripped = strip_range_boundary_echo(lines, start, end, to_new_lines(new_text))
    corrected = _correct(original_range, stripped, autocorrect)
    template = lines[start - 1] if start - 1 < len(lines) else ""
    return list(lines[:start - 1]) + _indent_first(template, corrected) + list(lines[end:])


def apply_insert_after(lines: Sequence[str], anchor: str, text: Payload, validate: bool = True) -> List[str]:
    if validate:
        validate_line_ref(lines, anchor)
    line = parse_line_ref(anchor).line
    new_lines = strip_insert_anchor_echo(lines[line - 1], to_new_lines(text))
    if not new_lines:
        raise EmptyInsertText("append", anchor)
    return list(lines[:line]) + new_lines + list(lines[line:])


def apply_insert_before(lines: Sequence[str], anchor: str, text: Payload, validate: bool = True) -> List[str]:
    if validate:
        validate_line_ref(lines, anchor)
    line = parse_line_ref(anchor).line
    new_lines = strip_insert_before_echo(lines[line - 1], to_new_lines(text))
    if not new_lines:
        raise EmptyInsertText("prepend", anchor)
    return list(lines[:line - 1]) + new_lines + list(lines[line - 1:])


def _is_empty_file(lines: Sequence[str]) -> bool:
    return len(lines) == 1 and lines[0] == ""


def apply_append(lines: Sequence[str], text: Payload) -> List[str]:
    normalized = to_new_lines(text)
    if not normalized:
        raise EmptyInsertText("append")
    if _is_empty_file(lines):
        return normalized
    return list(lines) + normalized


def apply_prepend(lines: Sequence[str], text: Payload) -> List[str]:
    normalized = to_new_lines(text)
    if not normalized:
        raise EmptyInsertText("prepend")
    if _is_empty_file(lines):
        return normalized
    return normalized + list(lines)


def _apply_one(lines: List[str], edit: HashlineEdit, autocorrect: bool) -> List[str]:
    # references were validated up front against the submitted snapshot
    if isinstance(edit, ReplaceEdit):
        if edit.end:
            return apply_replace_lines(lines, edit.pos, edit.end, edit.lines, validate=False, autocorrect=autocorrect)
        return apply_set_line(lines, edit.pos, edit.lines, validate=False, autocorrect=autocorrect)
    if isinstance(edit, AppendEdit):
        if edit.pos:
            return apply_insert_after(lines, edit.pos, edit.lines, validate=False)
        return apply_append(lines, edit.lines)
    if isinstance(edit, PrependEdit):
        if edit.pos:
            return apply_insert_before(lines, edit.pos, edit.lines, validate=False)
        return apply_prepend(lines, edit.lines)
    raise TypeError(f"unsupported edit type: {type(edit).__name__}")


def apply_hashline_edits_with_report(content: str, edits: Sequence[HashlineEdit],
                                     settings: Optional[EditSettings] = None) -> ApplyReport:
    """Apply `edits` to `content`. Host payload dicts are accepted as well as
    edit variants. Raises a HashlineError subclass before any change is made.
    """
    if not edits:
        return ApplyReport(content=content)
    settings = settings or EditSettings()
    edits = parse_edits(list(edits))

    deduped = dedupe_edits(edits)
    if deduped.deduplicated_edits:
        logger.debug(f"dropped {deduped.deduplicated_edits} duplicate edit(s)")
    ordered = sort_edits(deduped.edits)

    lines = [] if content == "" else content.split("\n")
    validate_line_refs(lines, collect_line_refs(ordered), require_hash=settings.require_hashes)
    detect_overlapping_ranges(deduped.edits, deduped.positions)

    noop_edits = 0
    for edit in ordered:
        candidate = _apply_one(lines, edit, settings.autocorrect)
        if candidate == lines:
            noop_edits += 1
            continue
        lines = candidate

    if noop_edits:
        logger.debug(f"{noop_edits} edit(s) left the content unchanged")
    return ApplyReport(
        content="\n".join(lines),
        noop_edits=noop_edits,
        deduplicated_edits=deduped.deduplicated_edits,
    )


def apply_hashline_edits(content: str, edits: Sequence[HashlineEdit],
                         settings: Optional[EditSettings] = None) -> str:
    return apply_hashline_edits_with_report(content, edits, settings).content
