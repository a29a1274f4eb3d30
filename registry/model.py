"""Data model for discovered Tauri commands."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

CommandName = str


@dataclass(frozen=True)
class SourceFile:
    """A Rust source file, read once."""

    path: Path
    text: str


@dataclass(frozen=True)
class CommandDeclaration:
    """A single marker occurrence and the function it annotates."""

    name: CommandName
    path: Path
    line: int


class CommandSet:
    """
    An ordered, duplicate-free collection of command names.

    Names keep the position of their first insertion; adding a name that
    is already present is a no-op. The declaration site of the first
    occurrence is remembered when one is supplied.
    """

    def __init__(self, names: Optional[Iterable[CommandName]] = None):
        self._names: List[CommandName] = []
        self._origins: Dict[CommandName, Optional[CommandDeclaration]] = {}
        if names is not None:
            self.extend(names)

    @property
    def names(self) -> List[CommandName]:
        """Return the command names in first-seen order."""
        return list(self._names)

    def add(self, name: CommandName, origin: Optional[CommandDeclaration] = None) -> bool:
        """
        Append a name unless it is already present.

        Returns:
            True if the name was new, False if it was a duplicate.
        """
        if name in self._origins:
            return False
        self._names.append(name)
        self._origins[name] = origin
        return True

    def extend(self, names: Iterable[CommandName]) -> None:
        for name in names:
            self.add(name)

    def add_declarations(self, declarations: Iterable[Union[CommandName, CommandDeclaration]]) -> None:
        """Add every declaration's name, keeping the first origin of each."""
        for item in declarations:
            if isinstance(item, CommandDeclaration):
                self.add(item.name, item)
            else:
                self.add(item)

    def origin(self, name: CommandName) -> Optional[CommandDeclaration]:
        """Get where a name was first declared, if known."""
        return self._origins.get(name)

    def __iter__(self) -> Iterator[CommandName]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._origins

    def __bool__(self) -> bool:
        return bool(self._names)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CommandSet):
            return self._names == other._names
        return NotImplemented

    def __repr__(self) -> str:
        return f"CommandSet({self._names!r})"


def merge_commands(
    per_file: Iterable[Iterable[Union[CommandName, CommandDeclaration]]],
) -> CommandSet:
    """
    Merge per-file sequences into one CommandSet.

    Sequences must be supplied in file traversal order; names are kept at
    their first occurrence and later duplicates are dropped. Items may be
    plain names or CommandDeclaration records.
    """
    commands = CommandSet()
    for sequence in per_file:
        commands.add_declarations(sequence)
    return commands
