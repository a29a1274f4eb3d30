"""Pipeline that orchestrates scanning, aggregation and emission."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from config import resolve_project_root
from exporters.declaration_exporter import (
    DECLARATION_FILENAME,
    EMPTY_NEVER,
    render_declaration,
    write_declaration,
)
from registry.model import CommandSet, merge_commands
from .discovery import SourceFiles, SourceRoot
from .extractor import extract_file


@dataclass(frozen=True)
class BuildResult:
    """Outcome of a successful build."""

    path: Path
    commands: CommandSet
    files: List[Path]


def collect_commands(sources: Iterable[Path], workers: int = 1) -> CommandSet:
    """
    Extract commands from every file and merge them in file order.

    Args:
        sources: Source files in traversal order.
        workers: Number of extraction threads. Results are merged in the
                 order of ``sources`` regardless of completion order.

    Returns:
        CommandSet with names in first-seen order.
    """
    files = list(sources)
    if workers <= 1 or len(files) <= 1:
        per_file = [extract_file(path) for path in files]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            per_file = list(executor.map(extract_file, files))
    return merge_commands(per_file)


def build_report(
    output_directory: Union[str, Path],
    sources: Optional[SourceRoot] = None,
    root: Optional[Union[str, Path]] = None,
    *,
    empty_policy: str = EMPTY_NEVER,
    workers: int = 1,
    extensions: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
    write: bool = True,
) -> BuildResult:
    """
    Scan sources and write ``invoke.d.ts`` into the output directory.

    Args:
        output_directory: Directory for the declaration file. A relative
                          path is taken relative to the project root.
        sources: Explicit files/directories to scan (default: the project root).
        root: Project root (default: CARGO_MANIFEST_DIR, then the current directory).
        empty_policy: What to do when no command is found ("never" or "error").
        workers: Number of extraction threads.
        extensions: File extensions to scan.
        exclude_dirs: Directory names to skip while walking.
        write: If False, render only and leave the file system untouched.

    Returns:
        BuildResult describing the written declaration.

    Raises:
        NamedInvokeError: On any failure; nothing is written in that case.
    """
    project_root = resolve_project_root(root)
    output_path = Path(output_directory)
    if not output_path.is_absolute():
        output_path = project_root / output_path

    files = list(SourceFiles(
        sources if sources is not None else project_root,
        extensions=extensions,
        exclude_dirs=exclude_dirs,
    ))
    commands = collect_commands(files, workers=workers)

    if write:
        path = write_declaration(commands, output_path, empty_policy=empty_policy)
    else:
        render_declaration(commands, empty_policy=empty_policy)
        path = output_path / DECLARATION_FILENAME

    return BuildResult(path=path, commands=commands, files=files)


def build(
    output_directory: Union[str, Path],
    sources: Optional[SourceRoot] = None,
    root: Optional[Union[str, Path]] = None,
    **options,
) -> Path:
    """
    Generate ``<output_directory>/invoke.d.ts`` from the commands in a Rust tree.

    Example:
        build("ui")  # writes <project root>/ui/invoke.d.ts

    Returns:
        Path of the written declaration file.
    """
    return build_report(output_directory, sources, root, **options).path
