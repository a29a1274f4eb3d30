#!/usr/bin/env python3
"""
Named Invoke CLI

Scans a Rust project for Tauri commands and generates an `invoke.d.ts`
declaration that restricts `invoke()` to the command names that exist.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Set

from config import GeneratorConfig, load_cargo_metadata, load_config, resolve_project_root
from exporters.declaration_exporter import DECLARATION_FILENAME, EMPTY_POLICIES, render_declaration
from registry.errors import NamedInvokeError
from scanner.builder import BuildResult, build_report
from scanner.discovery import DEFAULT_EXCLUDE_DIRS, get_relative_path


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="named-invoke",
        description=f"Generate {DECLARATION_FILENAME} for the Tauri commands of a Rust project.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  named-invoke ui                          # Write ui/invoke.d.ts for the current project
  named-invoke ui --root src-tauri         # Scan another project root
  named-invoke ui --source src/main.rs     # Scan only the given files
  named-invoke --stdout                    # Print the declaration instead of writing it
  named-invoke ui --cargo-rerun            # Also print cargo:rerun-if-changed lines
  named-invoke ui --empty error            # Fail when no command is found
        """,
    )

    # Positional arguments
    parser.add_argument(
        "output",
        nargs="?",
        default=None,
        help="Output directory, relative to the project root (default: from configuration)",
    )

    # Scanning options
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Project root (default: $CARGO_MANIFEST_DIR, then the current directory)",
    )

    parser.add_argument(
        "--source",
        nargs="+",
        default=None,
        help="Explicit source files or directories to scan, relative to the project root",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (.yaml, .yml, .json or .toml)",
    )

    parser.add_argument(
        "--include-ext",
        nargs="+",
        default=None,
        help="File extensions to scan (default: .rs)",
    )

    parser.add_argument(
        "--exclude-dir",
        nargs="+",
        default=None,
        help="Directory names to exclude, in addition to the defaults",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of extraction threads (default: 1)",
    )

    # Output options
    parser.add_argument(
        "--empty",
        choices=EMPTY_POLICIES,
        default=None,
        help="What to do when no command is found: emit a 'never' union or fail (default: never)",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the declaration to stdout instead of writing the file",
    )

    parser.add_argument(
        "--cargo-rerun",
        action="store_true",
        help="Print cargo:rerun-if-changed=<file> for every scanned file",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="List discovered commands and where they are declared",
    )

    return parser.parse_args(args)


def load_settings(parsed, root: Path) -> GeneratorConfig:
    """Combine Cargo metadata, the config file and CLI flags, in that order."""
    config = load_cargo_metadata(root)
    if parsed.config:
        config_path = Path(parsed.config)
        if not config_path.is_absolute():
            config_path = root / config_path
        config = load_config(config_path, base=config)
    return config.merged({
        "output": parsed.output,
        "sources": parsed.source,
        "extensions": parsed.include_ext,
        "exclude_dirs": parsed.exclude_dir,
        "empty_policy": parsed.empty,
        "workers": parsed.workers,
        "cargo_rerun": parsed.cargo_rerun,
    })


def report(result: BuildResult, root: Path) -> None:
    """Print discovered commands with their first declaration site."""
    print(f"Scanned {len(result.files)} file(s), found {len(result.commands)} command(s)", file=sys.stderr)
    for name in result.commands:
        origin = result.commands.origin(name)
        if origin is None:
            print(f"  {name}", file=sys.stderr)
        else:
            location = get_relative_path(origin.path, root)
            print(f"  {name}  ({location}:{origin.line})", file=sys.stderr)


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    # Resolve paths
    root = resolve_project_root(parsed.root)
    if not root.is_dir():
        print(f"Error: '{root}' is not a directory", file=sys.stderr)
        return 1

    try:
        config = load_settings(parsed, root)
    except NamedInvokeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if parsed.stdout and config.cargo_rerun:
        print("Error: --stdout cannot be combined with cargo rerun output", file=sys.stderr)
        return 1

    if config.output is None and not parsed.stdout:
        print("Error: no output directory given (pass OUTPUT or set 'output' in the configuration)", file=sys.stderr)
        return 1

    # Prepare scanning options
    sources = [root / source for source in config.sources] or None

    extensions: Optional[Set[str]] = set(config.extensions) or None

    exclude_dirs: Optional[Set[str]] = None
    if config.exclude_dirs:
        exclude_dirs = set(config.exclude_dirs) | DEFAULT_EXCLUDE_DIRS

    # Build the declaration
    try:
        result = build_report(
            config.output or ".",
            sources=sources,
            root=root,
            empty_policy=config.empty_policy,
            workers=config.workers,
            extensions=extensions,
            exclude_dirs=exclude_dirs,
            write=not parsed.stdout,
        )
    except NamedInvokeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if config.cargo_rerun:
        for path in result.files:
            print(f"cargo:rerun-if-changed={path}")

    if parsed.verbose:
        report(result, root)

    if parsed.stdout:
        print(render_declaration(result.commands, config.empty_policy), end="")
    else:
        print(f"Declaration written to: {result.path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
