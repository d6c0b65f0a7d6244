"""
CLI runner for the trailing spaces engine.

This module provides the command-line entry point: it loads the
configuration, scans the given files for trailing whitespace, and reports
or deletes what it finds.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from .config import configure_logging, find_config_file, load_config
from .document import TextDocument
from .errors import TrailingSpacesError
from .finder import build_pattern
from .session import TrailingSpaces
from .types import Region

ENGINE_VERSION = "0.9.0"


def region_to_json(document: TextDocument, region: Region) -> Dict[str, Any]:
    """Serialise a region with both offsets and 0-based line/column positions."""
    start = document.position_at(region.start)
    end = document.position_at(region.end)
    return {
        "start": region.start,
        "end": region.end,
        "start_line": start.line,
        "start_col": start.character,
        "end_line": end.line,
        "end_col": end.character,
    }


def process_file(path: str, session: TrailingSpaces, language_id: str, fix: bool = False,
                 modified_only: bool = False, snapshot: Optional[str] = None) -> Dict[str, Any]:
    """
    Scan one file, optionally rewriting it without its trailing spaces.

    Returns:
        Dict with the file name, its regions and whether it was rewritten
    """
    document = TextDocument.from_path(path, language_id)
    if snapshot is not None:
        session.set_snapshot(document, snapshot)

    regions = session.ranges_to_delete(document, modified_only)
    result = {
        "file": path,
        "regions": [region_to_json(document, region) for region in regions],
        "fixed": False,
    }

    if fix and regions:
        deletion = session.delete(document, modified_only)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(deletion.text)
        session.mark_saved(document.with_text(deletion.text))
        result["fixed"] = True

    return result


def format_output(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format output according to specified format."""
    total = sum(len(result["regions"]) for result in results)

    if format_type == "json":
        output = {
            "engine_version": ENGINE_VERSION,
            "files_scanned": len(results),
            "regions_found": total,
            "files": results,
        }
        return json.dumps(output, indent=2)

    elif format_type == "pretty":
        lines = [f"Scanned {len(results)} files", f"Found {total} trailing space regions", ""]
        for result in results:
            if not result["regions"]:
                continue
            suffix = " (fixed)" if result["fixed"] else ""
            lines.append(f"{result['file']}{suffix}")
            for region in result["regions"]:
                width = region["end"] - region["start"]
                lines.append(f"  {region['start_line'] + 1}:{region['start_col'] + 1}: {width} trailing whitespace character(s)")
            lines.append("")
        return "\n".join(lines).rstrip() + "\n"

    else:
        raise ValueError(f"Unknown format: {format_type}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trailing-spaces",
        description="Find and delete trailing whitespace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  trailing-spaces --paths app.py README.md --format pretty
  trailing-spaces --paths app.py --fix
  trailing-spaces --paths app.py --fix --modified-only --snapshot app.py.orig
        """
    )

    parser.add_argument(
        "--paths",
        nargs="+",
        required=True,
        help="Files to scan"
    )

    parser.add_argument(
        "--config",
        help="Path to configuration file (default: nearest .trailing-spaces.yml)"
    )

    parser.add_argument(
        "--regexp",
        help="Override the whitespace pattern (default from config: [ \\t]+)"
    )

    empty_lines = parser.add_mutually_exclusive_group()
    empty_lines.add_argument(
        "--include-empty-lines",
        dest="include_empty_lines",
        action="store_true",
        default=None,
        help="Also match lines made only of whitespace"
    )
    empty_lines.add_argument(
        "--no-include-empty-lines",
        dest="include_empty_lines",
        action="store_false",
        help="Never match lines made only of whitespace"
    )

    parser.add_argument(
        "--language",
        default="plaintext",
        help="Language identifier of the files, checked against syntaxIgnore"
    )

    parser.add_argument(
        "--fix",
        action="store_true",
        help="Delete trailing spaces in place"
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if trailing spaces are found"
    )

    parser.add_argument(
        "--modified-only",
        action="store_true",
        help="Only consider lines modified relative to --snapshot"
    )

    parser.add_argument(
        "--snapshot",
        help="Earlier version of the (single) file, used with --modified-only"
    )

    parser.add_argument(
        "--format",
        choices=["json", "pretty"],
        default="pretty",
        help="Output format"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.modified_only and not args.snapshot:
        parser.error("--modified-only requires --snapshot")
    if args.snapshot and len(args.paths) != 1:
        parser.error("--snapshot can only be used with a single path")

    config_path = args.config or find_config_file(args.paths[0])

    try:
        settings = load_config(config_path)
        if args.regexp is not None:
            settings = settings.replace(regexp=args.regexp)
        if args.include_empty_lines is not None:
            settings = settings.replace(include_empty_lines=args.include_empty_lines)
        logger = configure_logging("log" if args.verbose else settings.log_level, sys.stderr)
        # Fail once up front instead of once per file
        build_pattern(settings)
    except TrailingSpacesError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger.debug(f"Using config: {config_path or 'defaults'}")

    snapshot = None
    if args.snapshot:
        try:
            with open(args.snapshot, "r", encoding="utf-8", newline="") as f:
                snapshot = f.read()
        except OSError as e:
            print(f"Error: could not read snapshot {args.snapshot}: {e}", file=sys.stderr)
            return 2

    session = TrailingSpaces(settings, logger=logger)
    results = []
    for path in args.paths:
        try:
            results.append(process_file(path, session, args.language, args.fix, args.modified_only, snapshot))
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: could not process {path}: {e}", file=sys.stderr)
            return 2

    print(format_output(results, args.format), end="" if args.format == "pretty" else "\n")

    if args.check and any(result["regions"] for result in results):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
