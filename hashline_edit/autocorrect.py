"""Heuristic repair of LLM-produced replacement lines.

The pipeline runs in a fixed order; each stage either returns a confident
rewrite or hands its input through untouched:

1. ``expand_single_line_merge``: the model collapsed several original lines
   into one; split it back at the original segment boundaries.
2. ``restore_old_wrapped_lines``: the model re-emitted an original line
   wrapped over several lines; put the single original line back.
3. ``restore_indent_for_paired_replacement``: 1:1 replacements whose lines
   lost their indentation inherit it from the line they replace.
"""
from __future__ import annotations
import logging
import re
from typing import Callable, Dict, List, Tuple

from .normalization import leading_whitespace, strip_all_whitespace

logger = logging.getLogger(__name__)

MIN_WRAP_SPAN = 2
MAX_WRAP_SPAN = 10
MIN_WRAP_CANONICAL_LENGTH = 6

_TRAILING_CONTINUATION = re.compile(r"(?:&&|\|\||\?\?|\?|:|=|,|\+|-|\*|/|\.|\()\s*$")
_SEMICOLON_BOUNDARY = re.compile(r";\s+")

Transform = Callable[[List[str], List[str]], List[str]]


def strip_trailing_continuation_tokens(text: str) -> str:
    return _TRAILING_CONTINUATION.sub("", text, count=1)


def _reindent(original_lines: List[str], pieces: List[str]) -> List[str]:
    # pieces split out of one merged line take the indentation of the line they replace
    return [leading_whitespace(original) + piece for original, piece in zip(original_lines, pieces)]


def semicolon_split_fallback(merged: str, original_lines: List[str], replacement_lines: List[str]) -> List[str]:
    pieces = _SEMICOLON_BOUNDARY.split(merged)
    split = []
    for idx, piece in enumerate(pieces):
        if idx < len(pieces) - 1 and not piece.endswith(";"):
            piece = f"{piece};"
        piece = piece.strip()
        if piece:
            split.append(piece)
    if len(split) != len(original_lines):
        return replacement_lines
    return _reindent(original_lines, split)


def expand_single_line_merge(original_lines: List[str], replacement_lines: List[str]) -> List[str]:
    if len(replacement_lines) != 1 or len(original_lines) <= 1:
        return replacement_lines
    merged = replacement_lines[0]
    parts = [line.strip() for line in original_lines if line.strip()]
    if len(parts) != len(original_lines):
        return replacement_lines

    indices: List[int] = []
    offset = 0
    for part in parts:
        idx = merged.find(part, offset)
        matched_len = len(part)
        if idx == -1:
            stripped = strip_trailing_continuation_tokens(part)
            if stripped != part:
                idx = merged.find(stripped, offset)
                if idx != -1:
                    matched_len = len(stripped)
        if idx == -1:
            return semicolon_split_fallback(merged, original_lines, replacement_lines)
        indices.append(idx)
        offset = idx + matched_len

    expanded: List[str] = []
    for i, start in enumerate(indices):
        end = indices[i + 1] if i + 1 < len(indices) else len(merged)
        candidate = merged[start:end].strip()
        if not candidate:
            return semicolon_split_fallback(merged, original_lines, replacement_lines)
        expanded.append(candidate)

    if len(expanded) != len(original_lines):
        return semicolon_split_fallback(merged, original_lines, replacement_lines)
    logger.debug(f"expanded merged line into {len(expanded)} lines")
    return _reindent(original_lines, expanded)


def restore_old_wrapped_lines(original_lines: List[str], replacement_lines: List[str]) -> List[str]:
    if not original_lines or len(replacement_lines) < MIN_WRAP_SPAN:
        return replacement_lines

    # canonical form -> (original line, occurrences)
    canonical_to_original: Dict[str, Tuple[str, int]] = {}
    for line in original_lines:
        canonical = strip_all_whitespace(line)
        if canonical in canonical_to_original:
            first, count = canonical_to_original[canonical]
            canonical_to_original[canonical] = (first, count + 1)
        else:
            canonical_to_original[canonical] = (line, 1)

    candidate_counts: Dict[str, int] = {}
    candidates: Dict[str, Tuple[int, int, str]] = {}
    total = len(replacement_lines)
    for start in range(total):
        for length in range(MIN_WRAP_SPAN, MAX_WRAP_SPAN + 1):
            if start + length > total:
                break
            span = replacement_lines[start:start + length]
            if any(not line.strip() for line in span):
                continue
            canonical = strip_all_whitespace("".join(span))
            original = canonical_to_original.get(canonical)
            if original is None or original[1] != 1 or len(canonical) < MIN_WRAP_CANONICAL_LENGTH:
                continue
            candidate_counts[canonical] = candidate_counts.get(canonical, 0) + 1
            candidates[canonical] = (start, length, original[0])

    unique = [c for canonical, c in candidates.items() if candidate_counts[canonical] == 1]
    if not unique:
        return replacement_lines

    corrected = list(replacement_lines)
    for start, length, original_line in sorted(unique, key=lambda c: c[0], reverse=True):
        corrected[start:start + length] = [original_line]
    logger.debug(f"restored {len(unique)} wrapped line(s) to their original form")
    return corrected


def restore_indent_for_paired_replacement(original_lines: List[str], replacement_lines: List[str]) -> List[str]:
    if len(original_lines) != len(replacement_lines):
        return replacement_lines
    out = []
    for original, line in zip(original_lines, replacement_lines):
        if not line or leading_whitespace(line):
            out.append(line)
            continue
        indent = leading_whitespace(original)
        if not indent or original.strip() == line.strip():
            out.append(line)
            continue
        out.append(f"{indent}{line}")
    return out


AUTOCORRECT_PIPELINE: Tuple[Transform, ...] = (
    expand_single_line_merge,
    restore_old_wrapped_lines,
    restore_indent_for_paired_replacement,
)


def autocorrect_replacement_lines(original_lines: List[str], replacement_lines: List[str]) -> List[str]:
    lines = list(replacement_lines)
    for step in AUTOCORRECT_PIPELINE:
        lines = step(original_lines, lines)
    return lines
