"""Compile-only evaluation of PHP source.

The source is parsed against the block grammar and discarded; nothing is
ever executed. Failures are reported the way PHP phrases parse errors.
"""

from __future__ import annotations

from lark import Token
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from .errors import CompileFailure
from .grammar import php_parser

_TOKEN_LABELS = {
    "VARIABLE": "variable",
    "NUMBER": "number",
    "SQ_STRING": "single-quoted string",
    "DQ_STRING": "double-quoted string",
    "BACKTICK": "backtick string",
    "HEREDOC": "heredoc",
    "NAME": "identifier",
}
_MAX_SNIPPET = 30


def compile_only(code: str) -> None:
    try:
        php_parser().parse(code)
    except UnexpectedInput as exc:
        raise CompileFailure(_describe(code, exc), _line_of(code, exc)) from exc


def _describe(code: str, exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedToken):
        return f"syntax error, unexpected {_describe_token(exc.token)}"
    if isinstance(exc, UnexpectedCharacters):
        pos = getattr(exc, "pos_in_stream", None)
        char = code[pos] if isinstance(pos, int) and 0 <= pos < len(code) else exc.char
        return f"syntax error, unexpected character '{char}'"
    if isinstance(exc, UnexpectedEOF):
        return "syntax error, unexpected end of file"
    return "syntax error"


def _describe_token(token: Token) -> str:
    if token.type == "$END":
        return "end of file"
    value = str(token.value)
    if token.type == "INLINE_HTML":
        value = "?>"
    elif token.type == "OPEN_TAG":
        value = value.lower()
    snippet = value.splitlines()[0] if value else value
    if len(snippet) > _MAX_SNIPPET:
        snippet = snippet[:_MAX_SNIPPET] + "..."
    label = _TOKEN_LABELS.get(token.type, "token")
    return f'{label} "{snippet}"'


def _line_of(code: str, exc: UnexpectedInput) -> int:
    if isinstance(exc, UnexpectedEOF) or (
        isinstance(exc, UnexpectedToken) and exc.token.type == "$END"
    ):
        return code.count("\n") + 1
    line = getattr(exc, "line", 0)
    if isinstance(line, int) and line > 0:
        return line
    return 0
