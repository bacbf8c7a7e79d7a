"""Tokenizer pre-check.

Runs the lexer alone, before any other check, so lexical faults surface as
``COMPILE_ERROR`` with the tokenizer's own "... starting line N" phrasing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from lark.exceptions import UnexpectedCharacters

from .grammar import iter_tokens
from .scope import DiagnosticScope

LOGGER = logging.getLogger(__name__)

STARTING_LINE_RE = re.compile(r"(.*)\s*starting\s*line\s*([0-9]+)\s*$", re.IGNORECASE | re.DOTALL)
STRING_QUOTES = {"'", '"', "`"}


@dataclass(frozen=True)
class TokenReport:
    message: str
    line: int = 0


def token_test_report(content: str) -> TokenReport | None:
    """Tokenize ``content`` with reporting suppressed; return the lexer's own error."""
    error: UnexpectedCharacters | None = None
    with DiagnosticScope(suppress=True) as scope:
        try:
            for _ in iter_tokens(content):
                pass
        except UnexpectedCharacters as exc:
            error = exc
    for captured in scope.captured:
        LOGGER.debug("tokenizer warning: %s", captured.message)
    if error is None:
        return None

    message, line = split_line_suffix(_describe_lexical_error(content, error))
    return TokenReport(message=message, line=line)


def split_line_suffix(message: str) -> tuple[str, int]:
    """Split ``"<text> starting line <N>"`` into text and line; line is 0 if absent."""
    match = STARTING_LINE_RE.match(message)
    if match is None or not match.group(2):
        return message, 0
    return match.group(1).strip(), int(match.group(2))


def _describe_lexical_error(content: str, error: UnexpectedCharacters) -> str:
    pos = getattr(error, "pos_in_stream", None)
    if isinstance(pos, int) and 0 <= pos < len(content):
        char = content[pos]
    else:
        pos = None
        char = str(getattr(error, "char", "") or "")[:1]
    line = getattr(error, "line", 0) or 0

    if char == "/" and pos is not None and content.startswith("/*", pos):
        return f"Unterminated comment starting line {line}"
    if char in STRING_QUOTES:
        return f"Unterminated string starting line {line}"
    if char:
        return f"Unexpected character in input: '{char}' (ASCII={ord(char)}) starting line {line}"
    return f"Unexpected end of input starting line {line}"
