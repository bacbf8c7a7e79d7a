"""Scoped suppression of process-wide diagnostic reporting.

Logging and warning filters are process-wide, so every scope holds a
re-entrant lock for its whole lifetime; concurrent validations queue up
instead of leaking one thread's suppression window into another.
"""

from __future__ import annotations

import logging
import threading
import warnings
from dataclasses import dataclass
from types import TracebackType
from typing import Any

_SCOPE_LOCK = threading.RLock()


@dataclass(frozen=True)
class DiagnosticSnapshot:
    logging_disable_level: int
    warning_filters: tuple[Any, ...]

    @classmethod
    def capture(cls) -> DiagnosticSnapshot:
        return cls(
            logging_disable_level=logging.root.manager.disable,
            warning_filters=tuple(warnings.filters),
        )


class DiagnosticScope:
    """Guard that snapshots reporting state on entry and restores it on exit.

    With ``suppress=True`` logging is disabled and warnings are recorded into
    ``captured`` instead of being shown. Nested scopes restore whatever their
    own entry captured, so the outermost exit always brings back the caller's
    configuration.
    """

    def __init__(self, suppress: bool = True) -> None:
        self.suppress = suppress
        self.snapshot: DiagnosticSnapshot | None = None
        self.captured: list[warnings.WarningMessage] = []
        self._catcher: warnings.catch_warnings | None = None

    def __enter__(self) -> DiagnosticScope:
        _SCOPE_LOCK.acquire()
        try:
            self.snapshot = DiagnosticSnapshot.capture()
            self._catcher = warnings.catch_warnings(record=self.suppress)
            recorded = self._catcher.__enter__()
            if self.suppress:
                warnings.simplefilter("always")
                self.captured = recorded if recorded is not None else []
                logging.disable(logging.CRITICAL)
        except BaseException:
            _SCOPE_LOCK.release()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if self.snapshot is not None:
                logging.disable(self.snapshot.logging_disable_level)
            if self._catcher is not None:
                self._catcher.__exit__(exc_type, exc, tb)
        finally:
            self._catcher = None
            _SCOPE_LOCK.release()
