"""Error taxonomy for hashline edits.

Every error is raised before the first mutation of a batch, so a failed call
never leaves a half-applied file behind.
"""
from __future__ import annotations
from typing import List, Optional


class HashlineError(ValueError):
    """Base class for all hashline edit failures."""


class InvalidLineRefFormat(HashlineError):
    def __init__(self, ref: str, reason: Optional[str] = None):
        self.ref = ref
        detail = reason or 'Expected format "{line_number}" or "{line_number}#{hash_id}"'
        super().__init__(f'Invalid line reference "{ref}". {detail}.')


class LineOutOfRange(HashlineError):
    def __init__(self, ref: str, line: int, total: int):
        self.ref = ref
        self.line = line
        self.total = total
        super().__init__(f"Line {line} does not exist (file has {total} lines) in reference \"{ref}\"")


class StaleLineReference(HashlineError):
    """The cited hash no longer matches the current line."""

    def __init__(self, ref: str, line: int, expected: str, actual: str, context: Optional[List[str]] = None):
        self.ref = ref
        self.line = line
        self.expected = expected
        self.actual = actual
        self.context = context or []
        message = (
            f"Line {line} has changed since last read: \"{ref}\" cites hash {expected}, "
            f"current hash is {actual}. Use the updated LINE#ID references below "
            f"(>>> marks the changed line)."
        )
        if self.context:
            message += "\n\n" + "\n".join(self.context)
        super().__init__(message)

    @property
    def remap(self) -> dict:
        return {f"{self.line}#{self.expected}": f"{self.line}#{self.actual}"}


class InvalidRange(HashlineError):
    def __init__(self, start: int, end: int):
        self.start = start
        self.end = end
        super().__init__(f"Invalid range: start line {start} cannot be greater than end line {end}")


class OverlappingRangeEdits(HashlineError):
    def __init__(self, first: int, first_span: tuple, second: int, second_span: tuple):
        self.first = first
        self.second = second
        self.first_span = first_span
        self.second_span = second_span
        super().__init__(
            f"Overlapping range edits detected: "
            f"edit {first} (lines {first_span[0]}-{first_span[1]}) overlaps with "
            f"edit {second} (lines {second_span[0]}-{second_span[1]}). "
            f"Use pos-only replace for single-line edits."
        )


class EmptyInsertText(HashlineError):
    def __init__(self, op: str, ref: Optional[str] = None):
        self.op = op
        self.ref = ref
        if ref:
            super().__init__(f"{op} (anchored) requires non-empty text for {ref}")
        else:
            super().__init__(f"{op} requires non-empty text")


class InvalidEditPayload(HashlineError):
    def __init__(self, index: int, reason: str):
        self.index = index
        super().__init__(f"edit {index}: {reason}")
