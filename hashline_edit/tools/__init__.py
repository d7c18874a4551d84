from __future__ import annotations
from typing import Dict, Any, Callable
import json as _json
import logging
from .filesystem import _abs, read_file, write_file
from .line_edit import edit_file
from ..read_enhancer import enhance_tool_output

ToolFn = Callable[[Dict[str, Any]], Any]

logger = logging.getLogger(__name__)

class ToolRegistry:
    def __init__(self, repo: str):
        self.repo = repo
        self._tools: dict[str, ToolFn] = {
            "read_file": lambda a: read_file(self.repo, **a),
            "write_file": lambda a: write_file(self.repo, **a),
            "edit_file": lambda a: edit_file(self.repo, **a),
        }

    def names(self) -> list[str]:
        return sorted(self._tools)

    def _metadata(self, args: Dict[str, Any]) -> Dict[str, Any]:
        path = args.get("path")
        if not isinstance(path, str):
            return {}
        return {"path": _abs(self.repo, path)}

    def dispatch(self, tool: str, args: Dict[str, Any]) -> str:
        if tool not in self._tools:
            return _json.dumps({"status":"error","tool":tool,"error":"unknown tool"})
        args = args or {}
        try:
            out = self._tools[tool](args)
            # read output gets LINE#ID tags, write output a line-count summary
            out = enhance_tool_output(tool, out, self._metadata(args))
            if isinstance(out, (dict, list)):
                return _json.dumps({"status":"ok","tool":tool,"data":out})
            if isinstance(out, str) and out.startswith("ERROR:"):
                return _json.dumps({"status":"error","tool":tool,"error":out[len("ERROR:"):].strip()})
            return _json.dumps({"status":"ok","tool":tool,"output":str(out)})
        except Exception as e:
            logger.debug(f"{tool} failed: {type(e).__name__}: {e}")
            return _json.dumps({"status":"error","tool":tool,"error":f"{type(e).__name__}: {e}"})
