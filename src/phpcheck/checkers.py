"""Syntax checker backends.

``ExternalProcessChecker`` delegates to ``php -l`` and is authoritative when
it runs. ``SelfHostedChecker`` compiles a neutralized copy of the source
against the bundled grammar and is used when no interpreter can be spawned.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from lark.exceptions import UnexpectedInput

from .compiler import compile_only
from .config import CheckerConfig, DEFAULT_KNOWN_BINARY, DEFAULT_TIMEOUT_SECONDS
from .errors import CheckerUnavailable, CompileFailure, ErrorKind, normalize
from .grammar import iter_tokens
from .namespaces import neutralize_declarations, strip_leading_declare
from .source import CLOSE_TAG

LOGGER = logging.getLogger(__name__)

TEMP_PREFIX = "phpcheck_"
TEMP_SUFFIX = ".php"
LABEL_RE = re.compile(r"^[A-Za-z][A-Za-z ]*:\s+")
ON_LINE_RE = re.compile(r"on\s+line\s+(\d+)", re.IGNORECASE)
WRAPPER_HEAD = "<?php return true; if (0) { ?>"
WRAPPER_TAIL = "};"
REOPEN_RE = re.compile(r"<\?(?:php|=)$", re.IGNORECASE)


class SyntaxChecker(ABC):
    """Answers "is this content syntactically valid" without executing it."""

    @abstractmethod
    def check(self, content: str, file: str | None) -> bool:
        """Return True or raise ``BadSyntaxError``.

        Raise ``CheckerUnavailable`` when the backend cannot run at all.
        """


class ExternalProcessChecker(SyntaxChecker):
    def __init__(
        self,
        php_binary: str | None = None,
        known_binary: str = DEFAULT_KNOWN_BINARY,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        temp_dir: Path | None = None,
    ) -> None:
        self.php_binary = php_binary
        self.known_binary = known_binary
        self.timeout_seconds = timeout_seconds
        self.temp_dir = temp_dir

    @classmethod
    def from_config(cls, config: CheckerConfig) -> ExternalProcessChecker:
        return cls(
            php_binary=config.php_binary,
            known_binary=config.known_binary,
            timeout_seconds=config.timeout_seconds,
            temp_dir=config.temp_dir,
        )

    def candidates(self) -> list[str]:
        names: list[str] = []
        if os.name == "posix":
            names.append(self.php_binary or "php")
        elif self.php_binary:
            names.append(self.php_binary)
        names.append(self.known_binary)

        resolved: list[str] = []
        for name in names:
            found = shutil.which(name)
            if found and found not in resolved:
                resolved.append(found)
        return resolved

    def check(self, content: str, file: str | None) -> bool:
        binaries = self.candidates()
        if not binaries:
            raise CheckerUnavailable("no php interpreter found")

        temp_path = self._write_temp(content)
        try:
            return self._run_candidates(binaries, temp_path, file)
        finally:
            temp_path.unlink(missing_ok=True)
            LOGGER.debug("removed temp file %s", temp_path)

    def _write_temp(self, content: str) -> Path:
        try:
            fd, name = tempfile.mkstemp(
                prefix=TEMP_PREFIX,
                suffix=TEMP_SUFFIX,
                dir=str(self.temp_dir) if self.temp_dir else None,
            )
        except OSError as exc:
            raise CheckerUnavailable(f"cannot create temp file: {exc}") from exc
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise CheckerUnavailable(f"cannot write temp file: {exc}") from exc
        LOGGER.debug("wrote temp file %s", path)
        return path

    def _run_candidates(self, binaries: list[str], temp_path: Path, file: str | None) -> bool:
        output: str | None = None
        for binary in binaries:
            LOGGER.debug("running %s -l %s", binary, temp_path)
            try:
                result = subprocess.run(
                    [binary, "-l", str(temp_path)],
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                    timeout=self.timeout_seconds,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise normalize(
                    ErrorKind.PARSE,
                    f"Syntax check timed out after {self.timeout_seconds:g}s",
                    file,
                    0,
                    timeout=True,
                ) from exc
            except OSError as exc:
                LOGGER.debug("cannot spawn %s: %s", binary, exc)
                continue
            if result.returncode == 0:
                return True
            output = result.stdout or ""

        if output is None:
            raise CheckerUnavailable("no php interpreter could be started")
        message, line = parse_lint_output(output, str(temp_path))
        raise normalize(ErrorKind.PARSE, message, file, line)


def parse_lint_output(output: str, temp_path: str) -> tuple[str, int]:
    """Reduce ``php -l`` output to its first message and reported line."""
    first = next((line.strip() for line in output.splitlines() if line.strip()), "")
    if not first:
        return "Syntax check failed", 0

    match = ON_LINE_RE.search(first)
    line = int(match.group(1)) if match else 0

    message = LABEL_RE.sub("", first, count=1)
    location = re.compile(r"\s+in\s+" + re.escape(temp_path) + r"(?:\s+on\s+line\s+\d+)?")
    message = location.sub("", message)
    return message.strip(), line


class SelfHostedChecker(SyntaxChecker):
    """Compile-only check of the source wrapped in a never-taken branch."""

    def check(self, content: str, file: str | None) -> bool:
        try:
            compile_only(wrap_for_compile(content))
        except CompileFailure as exc:
            raise normalize(ErrorKind.PARSE, exc.message, file, exc.line) from exc
        return True


def wrap_for_compile(content: str) -> str:
    neutral = strip_leading_declare(neutralize_declarations(content))
    tail = WRAPPER_TAIL
    if ends_in_html(neutral):
        tail = "<?php\n" + tail
    return f"{WRAPPER_HEAD}{neutral}\n{tail}"


def ends_in_html(content: str) -> bool:
    """True when ``content`` leaves the lexer outside a PHP region."""
    last = None
    try:
        for token in iter_tokens(content):
            last = token
    except UnexpectedInput:
        return content.rstrip().endswith(CLOSE_TAG)
    if last is None or last.type != "INLINE_HTML":
        return False
    return REOPEN_RE.search(str(last.value)) is None
