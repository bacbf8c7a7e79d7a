"""Namespace and use declaration checks."""

from __future__ import annotations

import re
from typing import Iterator

from .errors import ErrorKind, normalize
from .source import blank_strings, find_line

# Group use (``use A\{B, C};``), aliases and closure ``use (...)`` never match.
DECLARATION_RE = re.compile(
    r"(?<![\w$\\])(?P<keyword>namespace|use)\s+(?P<path>\\?[^\s;{}(),]+)\s*;",
    re.IGNORECASE,
)
PATH_RE = re.compile(r"^\\?[A-Za-z_][A-Za-z0-9_]*(?:\\[A-Za-z_][A-Za-z0-9_]*)*$")
LEADING_DECLARE_RE = re.compile(
    r"^(?P<tag><\?php)(?P<space>\s*)declare\s*\([^)]*\)\s*;",
    re.IGNORECASE,
)


def find_declarations(content: str) -> Iterator[re.Match[str]]:
    return DECLARATION_RE.finditer(content)


def is_valid_path(path: str) -> bool:
    return PATH_RE.match(path) is not None


def validate_declarations(stripped: str, original: str, file: str | None) -> None:
    """Reject the first declaration whose path breaks the namespace grammar.

    Matching runs on the comment-stripped copy with string bodies blanked, so
    text such as ``"use 2FA;"`` is never read as a declaration. The reported
    line is looked up in the original text.
    """
    for match in find_declarations(blank_strings(stripped)):
        if is_valid_path(match.group("path")):
            continue
        declaration = match.group(0)
        raise normalize(
            ErrorKind.PARSE,
            f"Error syntax on: `{declaration}`",
            file,
            find_line(original, declaration),
        )


def neutralize_declarations(content: str) -> str:
    """Reduce ``namespace x;`` / ``use x;`` to the bare keyword statement."""
    return DECLARATION_RE.sub(_bare_keyword, content)


def strip_leading_declare(content: str) -> str:
    """Drop a ``declare(...)`` directive that directly follows the open tag."""
    return LEADING_DECLARE_RE.sub(_without_declare, content, count=1)


def _bare_keyword(match: re.Match[str]) -> str:
    return match.group("keyword") + ";" + "\n" * match.group(0).count("\n")


def _without_declare(match: re.Match[str]) -> str:
    directive = match.string[match.end("space") : match.end()]
    return match.group("tag") + match.group("space") + "\n" * directive.count("\n")
