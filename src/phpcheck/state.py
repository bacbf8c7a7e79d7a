from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CheckerConfig, load_config
from .errors import BadSyntaxError, Diagnostic, ErrorKind
from .evaluator import Evaluator

ValidationStatus = Literal["PENDING", "OK", "FAILED"]


@dataclass(frozen=True)
class SourceFile:
    path: Path

    def real_path(self) -> str:
        return os.path.realpath(self.path)

    def read_text(self) -> str:
        return Path(self.path).read_text(encoding="utf-8", errors="replace")


class FileValidationState:
    """Validation outcome of one source file, computed at most once."""

    def __init__(self, source: SourceFile, evaluator: Evaluator | None = None) -> None:
        self.source = source
        self.evaluator = evaluator or Evaluator(load_config())
        self.status: ValidationStatus = "PENDING"
        self.diagnostic: Diagnostic | None = None
        self._exception: BadSyntaxError | None = None
        self._content: str | None = None

    @classmethod
    def from_file(cls, path: str | Path, config: CheckerConfig | None = None) -> FileValidationState:
        return cls(SourceFile(Path(path)), Evaluator(config))

    @property
    def file(self) -> str:
        return self.source.real_path()

    @property
    def content(self) -> str:
        if self._content is None:
            self._content = self.source.read_text()
        return self._content

    def validate(self) -> FileValidationState:
        if self.status != "PENDING":
            return self
        content = self.content
        try:
            self.evaluator.check(content, self.file)
        except BadSyntaxError as exc:
            self._exception = exc
            self.diagnostic = exc.diagnostic
            self.status = "FAILED"
        else:
            self.status = "OK"
        return self

    def is_valid(self) -> bool:
        return self.validate().status == "OK"

    def get_status(self) -> str | ErrorKind:
        if self.status == "FAILED" and self.diagnostic is not None:
            return self.diagnostic.kind
        return self.status

    def get_exception(self) -> BadSyntaxError | None:
        return self.validate()._exception
