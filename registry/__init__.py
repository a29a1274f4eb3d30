"""Command registry model and error types."""

from .errors import (
    NamedInvokeError,
    SourceNotFoundError,
    SourceAccessError,
    ExtractionError,
    TokenizeError,
    EmptyCommandSetError,
    DeclarationWriteError,
    ConfigError,
)
from .model import CommandName, SourceFile, CommandDeclaration, CommandSet, merge_commands

__all__ = [
    "NamedInvokeError",
    "SourceNotFoundError",
    "SourceAccessError",
    "ExtractionError",
    "TokenizeError",
    "EmptyCommandSetError",
    "DeclarationWriteError",
    "ConfigError",
    "CommandName",
    "SourceFile",
    "CommandDeclaration",
    "CommandSet",
    "merge_commands",
]
