"""File discovery utilities for scanning Rust source trees."""

from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Set, Union

from registry.errors import SourceAccessError, SourceNotFoundError


DEFAULT_EXTENSIONS = {".rs"}
DEFAULT_EXCLUDE_DIRS = {
    ".git", ".hg", ".svn",
    "target", "node_modules", "__pycache__",
    ".idea", ".vscode",
    "dist",
}

SourceRoot = Union[str, Path, Sequence[Union[str, Path]]]


def iter_source_files(
    root: SourceRoot,
    extensions: Optional[Set[str]] = None,
    exclude_dirs: Optional[Set[str]] = None,
) -> Iterator[Path]:
    """
    Iterate over source files below a root.

    Directories are walked recursively with entries in sorted order, so the
    sequence is identical for an unchanged tree. When ``root`` is a list,
    each entry (file or directory) is visited in the order given.

    Args:
        root: Directory, single file, or list of files and directories.
        extensions: File extensions to include. If None, uses DEFAULT_EXTENSIONS.
        exclude_dirs: Directory names to skip. If None, uses DEFAULT_EXCLUDE_DIRS.

    Yields:
        Path objects for matching files.

    Raises:
        SourceNotFoundError: If the root or a listed entry does not exist.
        SourceAccessError: If a directory cannot be listed.
    """
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS
    if exclude_dirs is None:
        exclude_dirs = DEFAULT_EXCLUDE_DIRS
    extensions = {ext.lower() for ext in extensions}

    def _walk(current: Path) -> Iterator[Path]:
        try:
            entries = sorted(current.iterdir())
        except PermissionError as e:
            raise SourceAccessError(current) from e
        except FileNotFoundError as e:
            raise SourceNotFoundError(current) from e

        for entry in entries:
            if entry.is_dir():
                if entry.is_symlink():
                    continue
                if entry.name in exclude_dirs:
                    continue
                # Glob patterns such as "*.egg-info"
                if any(entry.name.endswith(pat.lstrip("*")) for pat in exclude_dirs if pat.startswith("*")):
                    continue
                yield from _walk(entry)
            elif entry.is_file():
                if entry.suffix.lower() in extensions:
                    yield entry

    for entry in _root_entries(root):
        if not entry.exists():
            raise SourceNotFoundError(entry)
        if entry.is_dir():
            yield from _walk(entry)
        elif entry.suffix.lower() in extensions:
            yield entry


def _root_entries(root: SourceRoot) -> Iterable[Path]:
    if isinstance(root, (str, Path)):
        return [Path(root)]
    return [Path(entry) for entry in root]


class SourceFiles:
    """
    A restartable view of the source files below a root.

    Every iteration walks the tree again, so the object can be reused
    across runs. The root itself is checked eagerly.
    """

    def __init__(
        self,
        root: SourceRoot,
        extensions: Optional[Set[str]] = None,
        exclude_dirs: Optional[Set[str]] = None,
    ):
        self.root = root
        self.extensions = extensions
        self.exclude_dirs = exclude_dirs
        for entry in _root_entries(root):
            if not entry.exists():
                raise SourceNotFoundError(entry)

    def __iter__(self) -> Iterator[Path]:
        return iter_source_files(
            self.root,
            extensions=self.extensions,
            exclude_dirs=self.exclude_dirs,
        )


def get_relative_path(file_path: Path, root: Path) -> Path:
    """Get the path relative to root, handling edge cases."""
    try:
        return file_path.resolve().relative_to(root.resolve())
    except ValueError:
        return file_path
