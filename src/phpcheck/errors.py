"""Error taxonomy for PHP source checks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

DEFAULT_FILE_LABEL = "<string>"


class ErrorKind(IntEnum):
    """Failure kinds, valued after the PHP error constants they mirror."""

    TAG = 2048
    BUFFER = 2
    PARSE = 4
    COMPILE_ERROR = 64


@dataclass(frozen=True)
class Diagnostic:
    kind: ErrorKind
    message: str
    file: str
    line: int = 0

    def __post_init__(self) -> None:
        if self.line < 0:
            object.__setattr__(self, "line", 0)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.name,
            "code": int(self.kind),
            "message": self.message,
            "file": self.file,
            "line": self.line,
        }


class PhpCheckError(Exception):
    """Base exception for phpcheck."""


class BadSyntaxError(PhpCheckError):
    """Raised when a source is rejected; carries exactly one diagnostic."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic

    @property
    def kind(self) -> ErrorKind:
        return self.diagnostic.kind

    @property
    def message(self) -> str:
        return self.diagnostic.message

    @property
    def file(self) -> str:
        return self.diagnostic.file

    @property
    def line(self) -> int:
        return self.diagnostic.line

    def __str__(self) -> str:
        return f"{self.diagnostic.message} in {self.diagnostic.file} on line {self.diagnostic.line}"


class CheckTimeoutError(BadSyntaxError):
    """Raised when the external syntax checker does not finish in time."""


class CheckerUnavailable(PhpCheckError):
    """Raised by a syntax checker backend that cannot run at all."""


class CompileFailure(PhpCheckError):
    """Raised by the compile-only facility for source it cannot compile."""

    def __init__(self, message: str, line: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class ConfigError(ValueError):
    """Raised when checker configuration is invalid."""


def normalize(
    kind: ErrorKind,
    message: str,
    file: str | None,
    line: int | None = 0,
    *,
    timeout: bool = False,
) -> BadSyntaxError:
    """Build the exception every pipeline stage raises.

    Callers raise the result ``from`` the underlying error so the original
    stays reachable as ``__cause__``.
    """
    diagnostic = Diagnostic(
        kind=kind,
        message=message.strip(),
        file=file or DEFAULT_FILE_LABEL,
        line=int(line or 0),
    )
    if timeout:
        return CheckTimeoutError(diagnostic)
    return BadSyntaxError(diagnostic)
