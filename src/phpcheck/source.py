from __future__ import annotations

import re

from .errors import ErrorKind, normalize

OPEN_TAG = "<?php"
CLOSE_TAG = "?>"

STRING_PATTERN = r"""(?:'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")"""
STRING_RE = re.compile(STRING_PATTERN, re.DOTALL)

# Quoted strings are matched first and kept, so "http://..." survives.
COMMENT_RE = re.compile(
    rf"(?P<string>{STRING_PATTERN})"
    r"|(?P<block>/\*.*?\*/)"
    r"|(?P<line>(?://|\#(?!\[))(?:(?!\?>)[^\r\n])*)",
    re.DOTALL,
)


def check_open_tag(content: str, file: str | None) -> None:
    if content[: len(OPEN_TAG)].lower() != OPEN_TAG:
        raise normalize(
            ErrorKind.TAG,
            "Invalid open tag that not start with <?php or maybe contains white space",
            file,
            1,
        )


def check_trailing_buffer(content: str, stripped: str, file: str | None) -> None:
    """Reject bytes after a final closing tag.

    The stripped copy decides whether the source ends with ``?>``; the raw
    content must then end with exactly that tag. The reported position is the
    offset of the last ``?>`` plus one.
    """
    if stripped.rstrip()[-len(CLOSE_TAG) :] != CLOSE_TAG:
        return
    if content[-len(CLOSE_TAG) :] == CLOSE_TAG:
        return
    raise normalize(
        ErrorKind.BUFFER,
        "File content buffer on after closing php tag",
        file,
        content.rfind(CLOSE_TAG) + 1,
    )


def strip_comments(content: str) -> str:
    """Remove block and line comments from a copy of ``content``.

    Block comments are replaced by the newlines they spanned so later line
    lookups stay close to the original. This is a regex pre-filter, not a
    lexer: heredocs and inline HTML are scanned as if they were code.
    """
    return COMMENT_RE.sub(_replace_comment, content)


def blank_strings(content: str) -> str:
    """Empty every quoted string body, keeping its quotes and newlines."""
    return STRING_RE.sub(_blank_string, content)


def find_line(content: str, needle: str) -> int:
    """1-based number of the first line containing ``needle``; 0 when absent."""
    if not needle:
        return 0
    for number, line in enumerate(content.splitlines(), start=1):
        if needle in line:
            return number
    offset = content.find(needle)
    if offset < 0:
        return 0
    return content.count("\n", 0, offset) + 1


def _blank_string(match: re.Match[str]) -> str:
    literal = match.group(0)
    return literal[0] + "\n" * literal.count("\n") + literal[-1]


def _replace_comment(match: re.Match[str]) -> str:
    if match.group("string") is not None:
        return match.group("string")
    if match.group("block") is not None:
        return "\n" * match.group("block").count("\n")
    return ""
