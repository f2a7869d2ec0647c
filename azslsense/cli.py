"""Command-line interface for the AZSL analysis core."""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from azslsense import __version__
from azslsense.config import ConfigError, load_settings
from azslsense.document import Position, Severity
from azslsense.logging import configure_logging
from azslsense.workspace import AzslWorkspace


def _add_point_command(sub, name: str, help_text: str) -> None:
    p = sub.add_parser(name, help=help_text)
    p.add_argument("file", type=Path, help="AZSL source file")
    p.add_argument("line", type=int, help="0-based line")
    p.add_argument("col", type=int, help="0-based column")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="azslsense",
        description="Symbol index, validation and lookups for AZSL shader sources",
    )
    parser.add_argument("--root", type=Path, default=None,
                        help="Corpus root to index (overrides configured gem path)")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity (stderr)")
    parser.add_argument("--version", action="version", version=f"azslsense {__version__}")

    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("index", help="Index a corpus and print its counters")
    p.add_argument("corpus", type=Path, nargs="?", default=None, help="Corpus root")

    p = sub.add_parser("validate", help="Print diagnostics for a file")
    p.add_argument("file", type=Path, help="AZSL source file")
    p.add_argument("--json", action="store_true", help="Emit diagnostics as JSON")

    _add_point_command(sub, "hover", "Show hover documentation at a position")
    _add_point_command(sub, "definition", "Show where the symbol at a position is defined")
    _add_point_command(sub, "complete", "List completions at a position")

    p = sub.add_parser("builtin", help="Print the documentation page of a built-in name")
    p.add_argument("name", help="Built-in name, e.g. Texture2D")
    return parser


def _open(workspace: AzslWorkspace, path: Path):
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)
    text = path.read_text(encoding="utf-8", errors="replace")
    return workspace.open_document(str(path.resolve()), text)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.command == "index" and args.corpus is not None:
        overrides["gem_path"] = str(args.corpus)
    elif args.root is not None:
        overrides["gem_path"] = str(args.root)
    try:
        settings = load_settings(args.config, **overrides)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")

    # --- Built-in documentation needs no index ---
    if args.command == "builtin":
        print(AzslWorkspace(settings).render_builtin_document(args.name))
        return

    workspace = AzslWorkspace(settings)
    stats = workspace.startup()

    if args.command == "index":
        if settings.root_path is None:
            print("Error: no corpus root given", file=sys.stderr)
            sys.exit(1)
        for key, value in asdict(stats).items():
            print(f"{key}: {value}")
        return

    document = _open(workspace, args.file)

    if args.command == "validate":
        diagnostics = workspace.validate(document)
        if args.json:
            print(json.dumps([
                {
                    "line": d.range.start.line,
                    "start": d.range.start.character,
                    "end": d.range.end.character,
                    "severity": d.severity.value,
                    "code": d.code,
                    "message": d.message,
                }
                for d in diagnostics
            ], indent=2))
        else:
            for d in diagnostics:
                print(f"{args.file}:{d.range.start.line + 1}:{d.range.start.character + 1}: "
                      f"{d.severity.value}: {d.message}")
        if any(d.severity is Severity.ERROR for d in diagnostics):
            sys.exit(1)
        return

    position = Position(args.line, args.col)
    if args.command == "hover":
        hover = workspace.provide_hover(document, position)
        if hover is None:
            print("No hover information.", file=sys.stderr)
            sys.exit(1)
        print(hover.contents)
    elif args.command == "definition":
        location = workspace.provide_definition(document, position)
        if location is None:
            print("No definition found.", file=sys.stderr)
            sys.exit(1)
        print(f"{location.uri}:{location.line + 1}:{location.column + 1}")
    elif args.command == "complete":
        for item in sorted(workspace.provide_completions(document, position),
                           key=lambda i: i.sort_text or i.label):
            print(f"{item.label}\t{item.kind.value}")


if __name__ == "__main__":
    main()
