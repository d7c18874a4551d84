from __future__ import annotations
import json
import os
import sys
import typer
from dataclasses import replace
from rich.console import Console
from rich.markup import escape
from dotenv import load_dotenv
from .config import SETTINGS_PRESETS, load_settings
from .diff_utils import count_line_diffs, generate_unified_diff
from .errors import HashlineError
from .hashing import format_hash_line
from .logging_setup import configure_logging
from .tools.filesystem import file_lines
from .tools.line_edit import edit_file

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(add_completion=False, help="Hash-anchored line editing.")
console = Console(highlight=False, soft_wrap=True)


def _fail(message: str) -> None:
    console.print(f"[red]error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def _read(path: str) -> str:
    if not os.path.isfile(path):
        _fail(f"no such file: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


@app.command()
def show(path: str = typer.Argument(..., help="File to print with LINE#ID tags"),
         start: int = typer.Option(1, help="First line to show (1-based)"),
         limit: int = typer.Option(0, help="Maximum lines to show, 0 for all")):
    if start < 1:
        _fail(f"--start must be 1 or greater, got {start}")
    lines = file_lines(_read(path))
    selected = lines[start - 1:] if limit <= 0 else lines[start - 1:start - 1 + limit]
    for n, line in enumerate(selected, start=start):
        console.print(format_hash_line(n, line), markup=False)


@app.command()
def apply(path: str = typer.Argument(..., help="File to edit"),
          edits: str = typer.Argument(..., help="JSON file with the edit list, or '-' for stdin"),
          dry_run: bool = typer.Option(False, help="Show the diff without writing the file"),
          preset: str = typer.Option(None, help=f"Settings preset ({', '.join(SETTINGS_PRESETS)})"),
          strict: bool = typer.Option(False, help="Reject line references without a hash"),
          no_autocorrect: bool = typer.Option(False, help="Apply replacement text exactly as given"),
          debug: bool = typer.Option(False, help="Enable debug logging")):
    configure_logging(debug)
    raw = sys.stdin.read() if edits == "-" else _read(edits)
    try:
        batch = json.loads(raw)
    except json.JSONDecodeError as e:
        _fail(f"edits are not valid JSON: {e}")
    if isinstance(batch, dict):
        batch = batch.get("edits", [])

    try:
        settings = load_settings(preset)
    except ValueError as e:
        _fail(str(e))
    if strict:
        settings = replace(settings, require_hashes=True)
    if no_autocorrect:
        settings = replace(settings, autocorrect=False)

    abspath = os.path.abspath(path)
    if not os.path.isfile(abspath):
        _fail(f"no such file: {path}")
    try:
        result = edit_file(os.path.dirname(abspath), os.path.basename(abspath), batch,
                           dry_run=dry_run, settings=settings)
    except HashlineError as e:
        _fail(str(e))

    if result["diff"]:
        console.print(result["diff"].rstrip("\n"), markup=False)
    verb = "Would update" if dry_run else "Updated"
    if not result["changed"]:
        verb = "Unchanged"
    console.print(f"[bold]{verb}[/bold] {escape(path)}  +{result['additions']} -{result['deletions']}  "
                  f"({result['summary']})")


@app.command()
def diff(old: str = typer.Argument(..., help="Original file"),
         new: str = typer.Argument(..., help="Updated file")):
    old_content, new_content = _read(old), _read(new)
    text = generate_unified_diff(old_content, new_content, os.path.basename(new))
    if text:
        console.print(text.rstrip("\n"), markup=False)
    counts = count_line_diffs(old_content, new_content)
    console.print(f"+{counts['additions']} -{counts['deletions']}")


def main():
    app()

if __name__ == "__main__":
    main()
