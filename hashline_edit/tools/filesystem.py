from __future__ import annotations
import os
import time

"""
Tool: read_file
Description: Read a text file from the repository as numbered lines. The
registry annotates every line with its LINE#ID; cite those in edit_file.
Args: {"path": "relative/path", "offset": 1, "limit": 2000}

Tool: write_file
Description: Write/overwrite a text file in the repository. Use sparingly; prefer edit_file.
Args: {"path": "relative/path", "content": "string"}
"""

DEFAULT_READ_LIMIT = 2000
MAX_LINE_LENGTH = 2000
TRUNCATION_SUFFIX = "... (line truncated to 2000 chars)"

# Track recently-read files so overwrites require prior read (policy: read-before-write)
_RECENT_READS: dict[str, float] = {}
_READ_AGE_SEC = 1800  # 30 min

def _mark_read(abs_path: str) -> None:
    _RECENT_READS[abs_path] = time.time()

def _recently_read(abs_path: str) -> bool:
    t = _RECENT_READS.get(abs_path)
    return t is not None and (time.time() - t) <= _READ_AGE_SEC

def _abs(repo: str, path: str) -> str:
    root = os.path.abspath(repo)
    ap = os.path.abspath(os.path.join(root, path))
    if os.path.commonpath([root, ap]) != root:
        raise ValueError("Path escape not allowed")
    return ap


def file_lines(content: str) -> list[str]:
    """Split file text the way edit_file numbers it: a final newline is not a line."""
    if content.endswith("\n"):
        content = content[:-1]
    if content == "":
        return []
    return content.split("\n")


def read_file(repo: str, path: str, offset: int = 1, limit: int = DEFAULT_READ_LIMIT) -> str:
    ap = _abs(repo, path)
    with open(ap, "r", encoding="utf-8") as f:
        data = f.read()
    _mark_read(ap)

    lines = file_lines(data)
    start = max(1, int(offset))
    selected = lines[start - 1:start - 1 + max(0, int(limit))]
    body = []
    for n, line in enumerate(selected, start=start):
        if len(line) > MAX_LINE_LENGTH:
            line = line[:MAX_LINE_LENGTH] + TRUNCATION_SUFFIX
        body.append(f"{n}: {line}")

    last = start + len(selected) - 1
    if last < len(lines):
        footer = f"(File has more lines. Use 'offset' to read beyond line {last})"
    else:
        footer = f"(End of file - total {len(lines)} lines)"
    return "\n".join([f"<path>{path}</path>", "<content>", *body, "", footer, "</content>"])


def write_file(repo: str, path: str, content: str) -> str:
    abspath = _abs(repo, path)
    exists = os.path.exists(abspath)
    # Overwrite requires prior read (safety)
    if exists and not _recently_read(abspath):
        return "ERROR: write denied; file must be read immediately before overwrite"
    os.makedirs(os.path.dirname(abspath), exist_ok=True)
    with open(abspath, "w", encoding="utf-8") as f:
        f.write(content)
    return f"WROTE: {path} ({len(content)} bytes)"
