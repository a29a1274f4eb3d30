"""
A small Rust lexer.

Only as much of the language is recognised as is needed to tell code apart
from comments and literals: identifiers, lifetimes, char and string
literals (including raw and byte forms), numbers, punctuation and comments.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from registry.errors import TokenizeError


IDENT = "ident"
LIFETIME = "lifetime"
CHAR = "char"
STRING = "string"
NUMBER = "number"
PUNCT = "punct"
COMMENT = "comment"

_WHITESPACE = re.compile(r"\s+")
_IDENT = re.compile(r"[^\W\d]\w*")
_RAW_IDENT = re.compile(r"r#[^\W\d]\w*")
_NUMBER = re.compile(r"\d\w*(?:\.\d\w*)?")
_RAW_STRING_START = re.compile(r'(?:b|c)?r(#*)"')
_STRING = re.compile(r'(?:b|c)?"(?:[^"\\]|\\.)*"', re.S)
_CHAR = re.compile(r"b?'(?:[^'\\\n]|\\[^\n][^'\n]*)'")
_LIFETIME = re.compile(r"'[^\W\d]\w*")
_BLOCK_COMMENT_DELIMITER = re.compile(r"/\*|\*/")
_PUNCT = re.compile(r"::|->|=>|.", re.S)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int


def tokenize(text: str, path: Optional[Path] = None) -> Iterator[Token]:
    """
    Split Rust source text into tokens.

    Whitespace is dropped; comments are kept as COMMENT tokens. Raw
    identifiers keep their ``r#`` prefix.

    Raises:
        TokenizeError: On an unterminated literal or block comment.
    """
    pos = 0
    line = 1
    end_of_text = len(text)

    while pos < end_of_text:
        m = _WHITESPACE.match(text, pos)
        if m:
            line += m.group().count("\n")
            pos = m.end()
            continue

        ch = text[pos]
        nxt = text[pos + 1] if pos + 1 < end_of_text else ""

        if ch == "/" and nxt == "/":
            end = text.find("\n", pos)
            if end == -1:
                end = end_of_text
            yield Token(COMMENT, text[pos:end], line)
            pos = end
            continue

        if ch == "/" and nxt == "*":
            end = _block_comment_end(text, pos)
            if end == -1:
                raise TokenizeError("unterminated block comment", path, line)
            value = text[pos:end]
            yield Token(COMMENT, value, line)
            line += value.count("\n")
            pos = end
            continue

        m = _RAW_STRING_START.match(text, pos)
        if m:
            terminator = '"' + m.group(1)
            close = text.find(terminator, m.end())
            if close == -1:
                raise TokenizeError("unterminated raw string literal", path, line)
            end = close + len(terminator)
            value = text[pos:end]
            yield Token(STRING, value, line)
            line += value.count("\n")
            pos = end
            continue

        m = _RAW_IDENT.match(text, pos)
        if m:
            yield Token(IDENT, m.group(), line)
            pos = m.end()
            continue

        if ch == '"' or (ch in "bc" and nxt == '"'):
            m = _STRING.match(text, pos)
            if not m:
                raise TokenizeError("unterminated string literal", path, line)
            yield Token(STRING, m.group(), line)
            line += m.group().count("\n")
            pos = m.end()
            continue

        if ch == "'" or (ch == "b" and nxt == "'"):
            m = _CHAR.match(text, pos)
            if m:
                yield Token(CHAR, m.group(), line)
                pos = m.end()
                continue
            m = _LIFETIME.match(text, pos)
            if m:
                yield Token(LIFETIME, m.group(), line)
                pos = m.end()
                continue
            raise TokenizeError("unterminated character literal", path, line)

        m = _IDENT.match(text, pos)
        if m:
            yield Token(IDENT, m.group(), line)
            pos = m.end()
            continue

        m = _NUMBER.match(text, pos)
        if m:
            yield Token(NUMBER, m.group(), line)
            pos = m.end()
            continue

        m = _PUNCT.match(text, pos)
        yield Token(PUNCT, m.group(), line)
        pos = m.end()


def significant_tokens(text: str, path: Optional[Path] = None) -> List[Token]:
    """Tokenize and drop comments, including doc comments."""
    return [token for token in tokenize(text, path) if token.kind != COMMENT]


def _block_comment_end(text: str, pos: int) -> int:
    """Return the index just past a (possibly nested) block comment, or -1."""
    depth = 0
    for m in _BLOCK_COMMENT_DELIMITER.finditer(text, pos):
        if m.group() == "/*":
            depth += 1
        else:
            depth -= 1
            if depth == 0:
                return m.end()
    return -1
