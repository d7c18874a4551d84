from __future__ import annotations
import difflib
from typing import Dict

from unidiff import PatchSet

"""
Reporting helpers for an applied edit: a unified diff of the whole file and
the number of added and removed lines.
"""


def _diff_lines(content: str):
    if content == "":
        return []
    return [line + "\n" for line in content.split("\n")]


def generate_unified_diff(old_content: str, new_content: str, file_path: str) -> str:
    diff = difflib.unified_diff(
        _diff_lines(old_content),
        _diff_lines(new_content),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
    )
    return "".join(diff)


def count_line_diffs(old_content: str, new_content: str) -> Dict[str, int]:
    diff = generate_unified_diff(old_content, new_content, "file")
    if not diff:
        return {"additions": 0, "deletions": 0}
    patch = PatchSet(diff.splitlines(True))
    return {"additions": patch.added, "deletions": patch.removed}
