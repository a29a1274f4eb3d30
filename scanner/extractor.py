"""Extraction of Tauri command names from Rust source files."""

from pathlib import Path
from typing import Iterator, List, Sequence

from registry.errors import ExtractionError, SourceAccessError, SourceNotFoundError
from registry.model import CommandDeclaration, CommandName, SourceFile
from .tokenizer import IDENT, PUNCT, STRING, Token, significant_tokens


MARKER_NAME = "command"
MARKER_NAMESPACE = "tauri"

# Qualifiers that may sit between the attributes and the `fn` keyword
FUNCTION_QUALIFIERS = {"async", "const", "unsafe", "default"}

_OPENING = {"(": ")", "[": "]", "{": "}"}


def read_source_file(path: Path) -> SourceFile:
    """
    Read a source file as UTF-8.

    Raises:
        SourceNotFoundError: If the file vanished.
        SourceAccessError: If the file cannot be read.
        ExtractionError: If the content is not valid UTF-8.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError as e:
        raise SourceNotFoundError(path) from e
    except OSError as e:
        raise SourceAccessError(path, e.strerror or "Cannot read file") from e

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ExtractionError(f"not valid UTF-8 ({e.reason} at byte {e.start})", path) from e

    return SourceFile(path=path, text=text)


def iter_command_declarations(source: SourceFile) -> Iterator[CommandDeclaration]:
    """
    Yield every function annotated with a command marker, in source order.

    Both ``#[command]`` and ``#[tauri::command]`` are recognised, with or
    without an argument list. Marker text inside comments or literals is
    never matched because only real tokens are inspected.

    Raises:
        ExtractionError: If a marker is not followed by a function declaration.
    """
    tokens = significant_tokens(source.text, source.path)
    i = 0
    while i < len(tokens):
        if not _is_outer_attribute(tokens, i):
            i += 1
            continue

        close = _matching_close(tokens, i + 1, source.path)
        if not _is_marker(tokens[i + 2:close]):
            i = close + 1
            continue

        name_index = _function_name_index(tokens, close + 1, source.path, tokens[i].line)
        name_token = tokens[name_index]
        yield CommandDeclaration(
            name=_identifier(name_token),
            path=source.path,
            line=name_token.line,
        )
        i = name_index + 1


def extract_commands(source: SourceFile) -> List[CommandName]:
    """Return the command names declared in one source file, in source order."""
    return [declaration.name for declaration in iter_command_declarations(source)]


def extract_file(path: Path) -> List[CommandDeclaration]:
    """Read a file and return its command declarations."""
    return list(iter_command_declarations(read_source_file(path)))


def _is_outer_attribute(tokens: Sequence[Token], i: int) -> bool:
    return (
        _is_punct(tokens[i], "#")
        and i + 1 < len(tokens)
        and _is_punct(tokens[i + 1], "[")
    )


def _is_marker(body: Sequence[Token]) -> bool:
    """Check whether an attribute body names the command marker."""
    segments: List[str] = []
    expect_ident = True
    index = 0
    if body and _is_punct(body[0], "::"):
        index = 1

    while index < len(body):
        token = body[index]
        if expect_ident and token.kind == IDENT:
            segments.append(token.value)
        elif not expect_ident and _is_punct(token, "::"):
            pass
        else:
            break
        expect_ident = not expect_ident
        index += 1

    if expect_ident:
        return False

    *namespace, name = segments
    if name != MARKER_NAME:
        return False
    if index == len(body):
        return namespace in ([], [MARKER_NAMESPACE])
    # Only the qualified path may carry arguments; a bare `command(...)` is
    # a helper attribute of other derives, such as clap's.
    return namespace == [MARKER_NAMESPACE] and _is_punct(body[index], "(")


def _function_name_index(tokens: Sequence[Token], i: int, path: Path, marker_line: int) -> int:
    """
    Skip attributes, visibility and qualifiers after a marker.

    Returns:
        Index of the function's name token.
    """
    while i < len(tokens):
        token = tokens[i]
        if _is_outer_attribute(tokens, i):
            i = _matching_close(tokens, i + 1, path) + 1
        elif _is_keyword(token, "pub"):
            i += 1
            if i < len(tokens) and _is_punct(tokens[i], "("):
                i = _matching_close(tokens, i, path) + 1
        elif token.kind == IDENT and token.value in FUNCTION_QUALIFIERS:
            i += 1
        elif _is_keyword(token, "extern"):
            i += 1
            if i < len(tokens) and tokens[i].kind == STRING:
                i += 1
        elif _is_keyword(token, "fn"):
            if i + 1 < len(tokens) and tokens[i + 1].kind == IDENT:
                return i + 1
            break
        else:
            break

    raise ExtractionError("command attribute is not followed by a function declaration", path, marker_line)


def _matching_close(tokens: Sequence[Token], i: int, path: Path) -> int:
    """Return the index of the bracket closing the one at ``i``."""
    stack = []
    for index in range(i, len(tokens)):
        token = tokens[index]
        if token.kind != PUNCT:
            continue
        if token.value in _OPENING:
            stack.append(_OPENING[token.value])
        elif stack and token.value == stack[-1]:
            stack.pop()
            if not stack:
                return index
    raise ExtractionError(f"unbalanced '{tokens[i].value}'", path, tokens[i].line)


def _identifier(token: Token) -> CommandName:
    if token.value.startswith("r#"):
        return token.value[2:]
    return token.value


def _is_punct(token: Token, value: str) -> bool:
    return token.kind == PUNCT and token.value == value


def _is_keyword(token: Token, value: str) -> bool:
    return token.kind == IDENT and token.value == value
