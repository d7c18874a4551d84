from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .errors import InvalidEditPayload

"""
Edit variants accepted by the hashline engine.

Host payload shape (one dict per edit):
{
  "op": "replace" | "append" | "prepend",
  "pos": "12#VK",        # required for replace, optional otherwise
  "end": "15#QZ",        # replace only; makes the replace an inclusive range
  "lines": "text" | ["line", "line"]
}
"""

Lines = Union[str, Tuple[str, ...]]


def _freeze(lines: Union[str, Sequence[str], None]) -> Lines:
    if lines is None:
        return ()
    if isinstance(lines, str):
        return lines
    return tuple(lines)


@dataclass(frozen=True)
class ReplaceEdit:
    pos: str
    lines: Lines = ()
    end: Optional[str] = None
    op: str = field(default="replace", init=False)

    def __post_init__(self):
        object.__setattr__(self, "lines", _freeze(self.lines))


@dataclass(frozen=True)
class AppendEdit:
    lines: Lines
    pos: Optional[str] = None
    op: str = field(default="append", init=False)

    def __post_init__(self):
        object.__setattr__(self, "lines", _freeze(self.lines))


@dataclass(frozen=True)
class PrependEdit:
    lines: Lines
    pos: Optional[str] = None
    op: str = field(default="prepend", init=False)

    def __post_init__(self):
        object.__setattr__(self, "lines", _freeze(self.lines))


HashlineEdit = Union[ReplaceEdit, AppendEdit, PrependEdit]

EDIT_OPS = ("replace", "append", "prepend")


def _check_lines(index: int, value: Any, allow_none: bool) -> None:
    if value is None:
        if allow_none:
            return
        raise InvalidEditPayload(index, "'lines' is required")
    if isinstance(value, str):
        return
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return
    raise InvalidEditPayload(index, "'lines' must be a string or a list of strings")


def _check_ref(index: int, name: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise InvalidEditPayload(index, f"'{name}' must be a LINE#ID string")


def parse_edit(data: Dict[str, Any], index: int = 1) -> HashlineEdit:
    """Build an edit variant from a host payload dict. `index` is 1-based."""
    if isinstance(data, (ReplaceEdit, AppendEdit, PrependEdit)):
        return data
    if not isinstance(data, dict):
        raise InvalidEditPayload(index, "edit must be an object")
    op = data.get("op")
    if op not in EDIT_OPS:
        raise InvalidEditPayload(index, f"unknown op {op!r}; expected one of {', '.join(EDIT_OPS)}")
    pos = data.get("pos") or None
    end = data.get("end") or None
    _check_ref(index, "pos", pos)
    _check_ref(index, "end", end)

    if op == "replace":
        if pos is None:
            raise InvalidEditPayload(index, "replace requires 'pos'")
        _check_lines(index, data.get("lines"), allow_none=True)
        return ReplaceEdit(pos=pos, end=end, lines=data.get("lines"))

    if end is not None:
        raise InvalidEditPayload(index, f"{op} does not accept 'end'")
    _check_lines(index, data.get("lines"), allow_none=False)
    if op == "append":
        return AppendEdit(pos=pos, lines=data["lines"])
    return PrependEdit(pos=pos, lines=data["lines"])


def parse_edits(data: Sequence[Dict[str, Any]]) -> List[HashlineEdit]:
    if not isinstance(data, (list, tuple)):
        raise InvalidEditPayload(0, "edits must be a list")
    return [parse_edit(item, i + 1) for i, item in enumerate(data)]
