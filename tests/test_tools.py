#!/usr/bin/env python3
"""
Tests for the agent-facing layer: read output enhancement, the filesystem
and edit_file tools, the tool registry and the hashline CLI.
"""

import pytest
import os
import json
import tempfile
import shutil

# Add parent directory to path for imports
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from typer.testing import CliRunner

from hashline_edit.cli import app
from hashline_edit.diff_utils import count_line_diffs, generate_unified_diff
from hashline_edit.hashing import HASH_DICT, compute_line_hash, format_hash_line
from hashline_edit.read_enhancer import (
    LINE_TRUNCATION_SUFFIX,
    enhance_tool_output,
    extract_file_path,
    summarize_write_output,
    transform_read_output,
)
from hashline_edit.tools import ToolRegistry
from hashline_edit.tools.filesystem import file_lines, read_file
from hashline_edit.tools.line_edit import edit_file, summarize_report


def write(path, content):
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def read(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def stale_ref(n, content):
    actual = compute_line_hash(n, content)
    return f"{n}#{next(code for code in HASH_DICT if code != actual)}"


class TestReadEnhancer:
    """Test LINE#ID annotation of read output."""

    def test_content_block(self):
        output = "\n".join([
            "<path>src/a.py</path>",
            "<content>",
            "1: import os",
            "2:     return x",
            "",
            "(End of file - total 2 lines)",
            "</content>",
        ])
        lines = transform_read_output(output).split("\n")
        assert lines[0] == "<path>src/a.py</path>"
        assert lines[2] == format_hash_line(1, "import os")
        assert lines[3] == format_hash_line(2, "    return x")
        assert lines[5] == "(End of file - total 2 lines)"
        assert lines[6] == "</content>"

    def test_inline_content_tag(self):
        output = "<content>1: first\n2: second\n</content>"
        assert transform_read_output(output).split("\n") == [
            "<content>",
            format_hash_line(1, "first"),
            format_hash_line(2, "second"),
            "</content>",
        ]

    def test_file_block(self):
        output = "<file>\n00001| const x = 1\n</file>"
        assert transform_read_output(output).split("\n")[1] == format_hash_line(1, "const x = 1")

    def test_plain_numbered_output(self):
        assert transform_read_output("1: a\n2| b") == "\n".join([
            format_hash_line(1, "a"),
            format_hash_line(2, "b"),
        ])

    def test_truncated_line_is_not_hashed(self):
        truncated = "1: " + "x" * 20 + LINE_TRUNCATION_SUFFIX
        assert transform_read_output(f"{truncated}\n2: y").split("\n") == [truncated, format_hash_line(2, "y")]

    def test_non_text_output_untouched(self):
        assert transform_read_output("Binary file, cannot display") == "Binary file, cannot display"
        assert transform_read_output("<content>\n(no lines)\n</content>") == "<content>\n(no lines)\n</content>"
        assert transform_read_output("") == ""

    def test_write_summary(self):
        assert summarize_write_output("WROTE: a.txt (3 bytes)", "a\nb") == "File written successfully. 2 lines written."
        assert summarize_write_output("ok", "") == "File written successfully. 0 lines written."
        done = "File written successfully. 99 lines written."
        assert summarize_write_output(done, "x") == done
        assert summarize_write_output("Error: permission denied", "x") == "Error: permission denied"
        assert summarize_write_output("WROTE: a.txt", None) == "WROTE: a.txt"

    def test_extract_file_path(self):
        assert extract_file_path({"filePath": "/tmp/x"}) == "/tmp/x"
        assert extract_file_path({"path": ""}) is None
        assert extract_file_path("nope") is None

    def test_other_tools_pass_through(self):
        assert enhance_tool_output("grep", "1: match") == "1: match"
        assert enhance_tool_output("read", {"not": "text"}) == {"not": "text"}


class TestDiffUtils:
    """Test diff reporting."""

    def test_unified_diff_and_counts(self):
        diff = generate_unified_diff("a\nb\nc", "a\nB\nc\nd", "f.txt")
        assert diff.startswith("--- a/f.txt\n+++ b/f.txt\n")
        assert "-b\n" in diff
        assert "+B\n" in diff
        assert count_line_diffs("a\nb\nc", "a\nB\nc\nd") == {"additions": 2, "deletions": 1}

    def test_no_changes(self):
        assert generate_unified_diff("same", "same", "f.txt") == ""
        assert count_line_diffs("same", "same") == {"additions": 0, "deletions": 0}


class TestFilesystemTools:
    """Test numbered reads and line splitting."""

    @pytest.fixture
    def temp_repo(self):
        """Create a temporary repository for testing."""
        temp_dir = tempfile.mkdtemp()
        yield temp_dir
        shutil.rmtree(temp_dir)

    def test_file_lines(self):
        assert file_lines("a\nb\n") == ["a", "b"]
        assert file_lines("a\nb") == ["a", "b"]
        assert file_lines("\n") == []
        assert file_lines("") == []

    def test_read_file(self, temp_repo):
        write(os.path.join(temp_repo, "f.txt"), "one\ntwo\nthree\n")
        out = read_file(temp_repo, "f.txt").split("\n")
        assert out[:5] == ["<path>f.txt</path>", "<content>", "1: one", "2: two", "3: three"]
        assert "(End of file - total 3 lines)" in out

    def test_read_file_window(self, temp_repo):
        write(os.path.join(temp_repo, "f.txt"), "one\ntwo\nthree\n")
        out = read_file(temp_repo, "f.txt", offset=2, limit=1)
        assert "2: two" in out
        assert "1: one" not in out
        assert "(File has more lines. Use 'offset' to read beyond line 2)" in out

    def test_path_escape(self, temp_repo):
        with pytest.raises(ValueError):
            read_file(temp_repo, "../outside.txt")

    def test_sibling_directory_is_outside_repo(self, temp_repo):
        sibling = temp_repo + "-evil"
        os.makedirs(sibling)
        try:
            write(os.path.join(sibling, "x.txt"), "secret\n")
            with pytest.raises(ValueError):
                read_file(temp_repo, f"../{os.path.basename(sibling)}/x.txt")
        finally:
            shutil.rmtree(sibling)


class TestEditFileTool:
    """Test the edit_file tool end to end on disk."""

    @pytest.fixture
    def temp_repo(self):
        """Create a temporary repository with a small source file."""
        temp_dir = tempfile.mkdtemp()
        write(os.path.join(temp_dir, "app.py"), "def main():\n    print('hi')\n    return 0\n")
        yield temp_dir
        shutil.rmtree(temp_dir)

    def ref(self, n, content):
        return f"{n}#{compute_line_hash(n, content)}"

    def test_edit_preserves_trailing_newline(self, temp_repo):
        edits = [{"op": "replace", "pos": self.ref(2, "    print('hi')"), "lines": "print('bye')"}]
        result = edit_file(temp_repo, "app.py", edits)
        assert result["changed"]
        assert result["additions"] == 1
        assert result["deletions"] == 1
        assert result["summary"] == "1 edit"
        assert read(os.path.join(temp_repo, "app.py")) == "def main():\n    print('bye')\n    return 0\n"

    def test_edits_as_json_string(self, temp_repo):
        edits = json.dumps([{"op": "append", "pos": self.ref(3, "    return 0"), "lines": ["", "main()"]}])
        edit_file(temp_repo, "app.py", edits)
        assert read(os.path.join(temp_repo, "app.py")).endswith("    return 0\n\nmain()\n")

    def test_dry_run_leaves_file(self, temp_repo):
        edits = [{"op": "prepend", "lines": "import sys"}]
        result = edit_file(temp_repo, "app.py", edits, dry_run=True)
        assert result["changed"]
        assert result["dry_run"]
        assert "+import sys" in result["diff"]
        assert read(os.path.join(temp_repo, "app.py")).startswith("def main():")

    def test_noop_report(self, temp_repo):
        edits = [{"op": "replace", "pos": self.ref(1, "def main():"), "lines": "def main():"}]
        result = edit_file(temp_repo, "app.py", edits)
        assert not result["changed"]
        assert result["noop_edits"] == 1
        assert result["diff"] == ""
        assert result["summary"] == "1 edit, 1 was a no-op"

    def test_summarize_report(self):
        assert summarize_report(3, 2, 1) == "3 edits, 2 were no-ops, 1 duplicate dropped"


class TestToolRegistry:
    """Test tool dispatch and result envelopes."""

    @pytest.fixture
    def temp_repo(self):
        """Create a temporary repository for testing."""
        temp_dir = tempfile.mkdtemp()
        write(os.path.join(temp_dir, "notes.txt"), "alpha\nbeta\n")
        yield temp_dir
        shutil.rmtree(temp_dir)

    def test_tool_names(self, temp_repo):
        assert ToolRegistry(temp_repo).names() == ["edit_file", "read_file", "write_file"]

    def test_read_is_hashed(self, temp_repo):
        registry = ToolRegistry(temp_repo)
        result = json.loads(registry.dispatch("read_file", {"path": "notes.txt"}))
        assert result["status"] == "ok"
        assert format_hash_line(1, "alpha") in result["output"]
        assert format_hash_line(2, "beta") in result["output"]

    def test_read_then_edit(self, temp_repo):
        registry = ToolRegistry(temp_repo)
        registry.dispatch("read_file", {"path": "notes.txt"})
        edits = [{"op": "replace", "pos": f"2#{compute_line_hash(2, 'beta')}", "lines": "gamma"}]
        result = json.loads(registry.dispatch("edit_file", {"path": "notes.txt", "edits": edits}))
        assert result["status"] == "ok"
        assert result["data"]["changed"]
        assert read(os.path.join(temp_repo, "notes.txt")) == "alpha\ngamma\n"

    def test_stale_edit_is_rejected(self, temp_repo):
        registry = ToolRegistry(temp_repo)
        edits = [{"op": "replace", "pos": stale_ref(2, "beta"), "lines": "gamma"}]
        result = json.loads(registry.dispatch("edit_file", {"path": "notes.txt", "edits": edits}))
        assert result["status"] == "error"
        assert result["error"].startswith("StaleLineReference:")
        assert read(os.path.join(temp_repo, "notes.txt")) == "alpha\nbeta\n"

    def test_new_file_write_is_summarized(self, temp_repo):
        registry = ToolRegistry(temp_repo)
        result = json.loads(registry.dispatch("write_file", {"path": "new.txt", "content": "x\ny"}))
        assert result["status"] == "ok"
        assert result["output"] == "File written successfully. 2 lines written."

    def test_overwrite_without_read_is_denied(self, temp_repo):
        registry = ToolRegistry(temp_repo)
        result = json.loads(registry.dispatch("write_file", {"path": "notes.txt", "content": "x"}))
        assert result["status"] == "error"
        assert "write denied" in result["error"]

    def test_unknown_tool(self, temp_repo):
        result = json.loads(ToolRegistry(temp_repo).dispatch("unknown_tool", {}))
        assert result["status"] == "error"
        assert "unknown tool" in result["error"]


class TestCli:
    """Test the hashline command line."""

    @pytest.fixture
    def temp_repo(self):
        temp_dir = tempfile.mkdtemp()
        write(os.path.join(temp_dir, "f.txt"), "a\nb\nc\n")
        yield temp_dir
        shutil.rmtree(temp_dir)

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def edits_file(self, repo, edits):
        path = os.path.join(repo, "edits.json")
        write(path, json.dumps(edits))
        return path

    def test_show(self, runner, temp_repo):
        result = runner.invoke(app, ["show", os.path.join(temp_repo, "f.txt")])
        assert result.exit_code == 0
        assert result.output.splitlines() == [format_hash_line(n, c) for n, c in enumerate("abc", start=1)]

    def test_show_rejects_start_before_first_line(self, runner, temp_repo):
        result = runner.invoke(app, ["show", os.path.join(temp_repo, "f.txt"), "--start", "0"])
        assert result.exit_code == 1
        assert "--start must be 1 or greater" in result.output

    def test_apply(self, runner, temp_repo):
        target = os.path.join(temp_repo, "f.txt")
        edits = self.edits_file(temp_repo, [{"op": "replace", "pos": f"2#{compute_line_hash(2, 'b')}", "lines": "B"}])
        result = runner.invoke(app, ["apply", target, edits])
        assert result.exit_code == 0
        assert "Updated" in result.output
        assert read(target) == "a\nB\nc\n"

    def test_apply_from_stdin_dry_run(self, runner, temp_repo):
        target = os.path.join(temp_repo, "f.txt")
        payload = json.dumps({"edits": [{"op": "append", "lines": "d"}]})
        result = runner.invoke(app, ["apply", target, "-", "--dry-run"], input=payload)
        assert result.exit_code == 0
        assert "Would update" in result.output
        assert "+d" in result.output
        assert read(target) == "a\nb\nc\n"

    def test_apply_stale(self, runner, temp_repo):
        target = os.path.join(temp_repo, "f.txt")
        edits = self.edits_file(temp_repo, [{"op": "replace", "pos": stale_ref(2, "b"), "lines": "B"}])
        result = runner.invoke(app, ["apply", target, edits])
        assert result.exit_code == 1
        assert "has changed since last read" in result.output
        assert read(target) == "a\nb\nc\n"

    def test_apply_strict_rejects_bare_numbers(self, runner, temp_repo):
        target = os.path.join(temp_repo, "f.txt")
        edits = self.edits_file(temp_repo, [{"op": "replace", "pos": "2", "lines": "B"}])
        result = runner.invoke(app, ["apply", target, edits, "--strict"])
        assert result.exit_code == 1
        assert read(target) == "a\nb\nc\n"

    def test_diff(self, runner, temp_repo):
        new = os.path.join(temp_repo, "g.txt")
        write(new, "a\nB\nc\n")
        result = runner.invoke(app, ["diff", os.path.join(temp_repo, "f.txt"), new])
        assert result.exit_code == 0
        assert "+1 -1" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
