from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Union

from ..config import EditSettings, load_settings
from ..diff_utils import count_line_diffs, generate_unified_diff
from ..edits import parse_edits
from ..operations import apply_hashline_edits_with_report
from .filesystem import _abs, _mark_read

"""
Tool: edit_file
Purpose: Apply hash-anchored edits (LINE#ID references from read_file) in one file.
Args:
{
  "path": "relative/file",
  "edits": [
     {"op": "replace", "pos": "42#VK", "lines": ["new line 1", "new line 2"]},
     {"op": "replace", "pos": "108#QZ", "end": "110#MP", "lines": "replacement"},
     {"op": "append", "pos": "12#XB", "lines": "inserted after line 12"},
     {"op": "prepend", "lines": "# first line of the file"}
  ],
  "dry_run": false
}
Notes:
- 1-based line indexing; every reference is checked against the current file
- a stale hash rejects the whole batch; re-read the file and retry
- edits are applied bottom-up, so all references use the numbering from the last read
"""

logger = logging.getLogger(__name__)


def edit_file(repo: str, path: str, edits: Union[str, List[Dict[str, Any]]], dry_run: bool = False,
              settings: Optional[EditSettings] = None) -> Dict[str, Any]:
    p = _abs(repo, path)
    if isinstance(edits, str):
        edits = json.loads(edits)
    batch = parse_edits(edits)

    with open(p, "r", encoding="utf-8") as f:
        original = f.read()
    # a final newline is not a line of its own; put it back after editing
    trailing_newline = original.endswith("\n")
    body = original[:-1] if trailing_newline else original

    report = apply_hashline_edits_with_report(body, batch, settings or load_settings())
    updated = report.content + ("\n" if trailing_newline and report.content else "")

    changed = updated != original
    if changed and not dry_run:
        with open(p, "w", encoding="utf-8") as f:
            f.write(updated)
        _mark_read(p)
        logger.debug(f"wrote {path} after {len(batch)} hashline edit(s)")

    counts = count_line_diffs(original, updated)
    return {
        "path": path,
        "changed": changed,
        "dry_run": dry_run,
        "edits": len(batch),
        "noop_edits": report.noop_edits,
        "deduplicated_edits": report.deduplicated_edits,
        "additions": counts["additions"],
        "deletions": counts["deletions"],
        "summary": summarize_report(len(batch), report.noop_edits, report.deduplicated_edits),
        "diff": generate_unified_diff(original, updated, path),
    }


def summarize_report(total: int, noop_edits: int, deduplicated_edits: int) -> str:
    parts = [f"{total} edit{'s' if total != 1 else ''}"]
    if noop_edits:
        parts.append(f"{noop_edits} {'was a no-op' if noop_edits == 1 else 'were no-ops'}")
    if deduplicated_edits:
        parts.append(f"{deduplicated_edits} duplicate{'s' if deduplicated_edits != 1 else ''} dropped")
    return ", ".join(parts)
