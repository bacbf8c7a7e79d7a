from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterator

from lark import Lark, Token

GRAMMAR_PATH = Path(__file__).with_name("php.lark")


@lru_cache(maxsize=1)
def php_parser() -> Lark:
    grammar = GRAMMAR_PATH.read_text(encoding="utf-8")
    return Lark(grammar, parser="lalr", lexer="basic", start="start")


def iter_tokens(content: str) -> Iterator[Token]:
    """Yield the PHP token stream; raises ``lark.exceptions.UnexpectedCharacters``."""
    return php_parser().lex(content)
