"""Scanner module for source discovery and command extraction."""

from .discovery import iter_source_files, SourceFiles
from .tokenizer import tokenize, significant_tokens
from .extractor import read_source_file, iter_command_declarations, extract_commands
from .builder import collect_commands, build_report, build, BuildResult

__all__ = [
    "iter_source_files",
    "SourceFiles",
    "tokenize",
    "significant_tokens",
    "read_source_file",
    "iter_command_declarations",
    "extract_commands",
    "collect_commands",
    "build_report",
    "build",
    "BuildResult",
]
