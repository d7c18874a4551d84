from .config import EditSettings, SETTINGS_PRESETS, load_settings
from .edits import AppendEdit, HashlineEdit, PrependEdit, ReplaceEdit, parse_edits
from .errors import (
    EmptyInsertText,
    HashlineError,
    InvalidEditPayload,
    InvalidLineRefFormat,
    InvalidRange,
    LineOutOfRange,
    OverlappingRangeEdits,
    StaleLineReference,
)
from .hashing import compute_line_hash, format_hash_lines
from .operations import ApplyReport, apply_hashline_edits, apply_hashline_edits_with_report
from .validation import LineRef, parse_line_ref, validate_line_ref, validate_line_refs

__all__ = [
    "EditSettings", "SETTINGS_PRESETS", "load_settings",
    "AppendEdit", "HashlineEdit", "PrependEdit", "ReplaceEdit", "parse_edits",
    "EmptyInsertText", "HashlineError", "InvalidEditPayload", "InvalidLineRefFormat",
    "InvalidRange", "LineOutOfRange", "OverlappingRangeEdits", "StaleLineReference",
    "compute_line_hash", "format_hash_lines",
    "ApplyReport", "apply_hashline_edits", "apply_hashline_edits_with_report",
    "LineRef", "parse_line_ref", "validate_line_ref", "validate_line_refs",
]
