"""Exception hierarchy for declaration generation failures."""

import errno
from pathlib import Path
from typing import Optional, Union


class NamedInvokeError(Exception):
    """Base class for every error raised while generating the declaration."""


class SourceNotFoundError(NamedInvokeError, FileNotFoundError):
    """A source root or an explicitly listed source file does not exist."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(errno.ENOENT, "Source path does not exist", str(path))


class SourceAccessError(NamedInvokeError, PermissionError):
    """A source directory or file could not be read."""

    def __init__(self, path: Union[str, Path], reason: str = "Permission denied"):
        super().__init__(errno.EACCES, reason, str(path))


class ExtractionError(NamedInvokeError):
    """
    A source file could not be turned into command names.

    Raised for malformed markers and undecodable files. Always fatal for
    the whole run so that the declaration never silently drops a command.
    """

    def __init__(self, message: str, path: Optional[Path] = None, line: Optional[int] = None):
        self.message = message
        self.path = path
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        if self.line is None:
            return f"{self.path}: {self.message}"
        return f"{self.path}:{self.line}: {self.message}"


class TokenizeError(ExtractionError):
    """The lexer hit an unterminated literal or comment."""


class EmptyCommandSetError(NamedInvokeError):
    """No commands were found and the empty policy forbids an empty union."""


class DeclarationWriteError(NamedInvokeError, OSError):
    """The declaration file or its directory could not be written."""


class ConfigError(NamedInvokeError):
    """A configuration file or option is invalid."""
