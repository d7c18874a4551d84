"""Annotate read-tool output with LINE#ID tags.

A read tool prints numbered lines (``12: text`` or ``12| text``), optionally
wrapped in a ``<content>`` or ``<file>`` block. Each numbered content line is
rewritten to ``12#VK|text`` so the agent can cite it in a hashline edit.
Lines outside the block, and anything after the first line that is not a
numbered line, are left alone. Lines the read tool truncated are never
hashed: their hash would not match the file.
"""
from __future__ import annotations
import os
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .hashing import format_hash_line

WRITE_SUCCESS_MARKER = "File written successfully."
LINE_TRUNCATION_SUFFIX = "... (line truncated to 2000 chars)"

COLON_READ_LINE = re.compile(r"^\s*(\d+): ?(.*)$")
PIPE_READ_LINE = re.compile(r"^\s*(\d+)\| ?(.*)$")

CONTENT_OPEN_TAG = "<content>"
CONTENT_CLOSE_TAG = "</content>"
FILE_OPEN_TAG = "<file>"
FILE_CLOSE_TAG = "</file>"


@dataclass
class ContentBlock:
    prefix: List[str]
    content_lines: List[str]
    suffix: List[str]


def parse_read_line(line: str) -> Optional[Tuple[int, str]]:
    match = COLON_READ_LINE.match(line) or PIPE_READ_LINE.match(line)
    if not match:
        return None
    return int(match.group(1)), match.group(2)


def is_text_file(output: str) -> bool:
    first = output.split("\n", 1)[0]
    return parse_read_line(first) is not None


def transform_line(line: str) -> str:
    parsed = parse_read_line(line)
    if parsed is None:
        return line
    number, content = parsed
    if content.endswith(LINE_TRUNCATION_SUFFIX):
        return line
    return format_hash_line(number, content)


def _find_open(lines: List[str], tag: str) -> int:
    for idx, line in enumerate(lines):
        if line.startswith(tag):
            return idx
    return -1


def _find_close(lines: List[str], tag: str) -> int:
    try:
        return lines.index(tag)
    except ValueError:
        return -1


def extract_content_block(output: str) -> Optional[ContentBlock]:
    lines = output.split("\n")
    content_start = _find_open(lines, CONTENT_OPEN_TAG)
    if content_start != -1:
        start, end, tag = content_start, _find_close(lines, CONTENT_CLOSE_TAG), CONTENT_OPEN_TAG
    else:
        start, end, tag = _find_open(lines, FILE_OPEN_TAG), _find_close(lines, FILE_CLOSE_TAG), FILE_OPEN_TAG
    if start == -1 or end == -1 or end <= start:
        return None

    open_line = lines[start]
    if open_line != tag:
        # inline first line: "<content>1: first line"
        return ContentBlock(
            prefix=lines[:start] + [tag],
            content_lines=[open_line[len(tag):]] + lines[start + 1:end],
            suffix=lines[end:],
        )
    return ContentBlock(prefix=lines[:start + 1], content_lines=lines[start + 1:end], suffix=lines[end:])


def _transform_numbered(lines: List[str]) -> List[str]:
    result: List[str] = []
    for idx, line in enumerate(lines):
        if parse_read_line(line) is None:
            return result + lines[idx:]
        result.append(transform_line(line))
    return result


def transform_read_output(output: str) -> str:
    if not output:
        return output
    block = extract_content_block(output)
    if block is not None:
        if not block.content_lines or not is_text_file(block.content_lines[0]):
            return output
        return "\n".join(block.prefix + _transform_numbered(block.content_lines) + block.suffix)

    lines = output.split("\n")
    if not is_text_file(lines[0]):
        return output
    return "\n".join(_transform_numbered(lines))


def summarize_write_output(output: str, content: Optional[str]) -> str:
    """Replace a successful write tool's output with a one-line summary.

    `content` is the text now on disk, or None if it could not be read.
    """
    if output.startswith(WRITE_SUCCESS_MARKER):
        return output
    lowered = output.lower()
    if lowered.startswith("error") or "failed" in lowered:
        return output
    if content is None:
        return output
    line_count = 0 if content == "" else len(content.split("\n"))
    return f"{WRITE_SUCCESS_MARKER} {line_count} lines written."


def extract_file_path(metadata: Any) -> Optional[str]:
    if not isinstance(metadata, dict):
        return None
    for key in ("filepath", "filePath", "path", "file"):
        candidate = metadata.get(key)
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def _read_text(path: str) -> Optional[str]:
    if not os.path.isfile(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def enhance_tool_output(tool: str, output: Any, metadata: Any = None) -> Any:
    """Post-process a tool result: hash read output, summarise writes."""
    if not isinstance(output, str):
        return output
    name = tool.lower()
    if name in ("read", "read_file"):
        return transform_read_output(output)
    if name in ("write", "write_file"):
        path = extract_file_path(metadata)
        if not path:
            return output
        return summarize_write_output(output, _read_text(path))
    return output
