from __future__ import annotations

import logging
import threading
import warnings

import pytest

from phpcheck.scope import _SCOPE_LOCK, DiagnosticScope


@pytest.fixture(autouse=True)
def _logging_enabled():
    previous = logging.root.manager.disable
    logging.disable(logging.NOTSET)
    yield
    logging.disable(previous)


def _lock_free_from_other_thread() -> bool:
    acquired: list[bool] = []

    def probe() -> None:
        got = _SCOPE_LOCK.acquire(timeout=1)
        acquired.append(got)
        if got:
            _SCOPE_LOCK.release()

    worker = threading.Thread(target=probe)
    worker.start()
    worker.join()
    return acquired == [True]


def test_scope_suppresses_and_restores() -> None:
    filters_before = list(warnings.filters)

    with DiagnosticScope(suppress=True) as scope:
        assert logging.root.manager.disable == logging.CRITICAL
        warnings.warn("quiet please", UserWarning)

    assert [str(item.message) for item in scope.captured] == ["quiet please"]
    assert logging.root.manager.disable == logging.NOTSET
    assert list(warnings.filters) == filters_before
    assert _lock_free_from_other_thread()


def test_scope_restores_on_exception() -> None:
    filters_before = list(warnings.filters)

    with pytest.raises(RuntimeError):
        with DiagnosticScope(suppress=True):
            raise RuntimeError("boom")

    assert logging.root.manager.disable == logging.NOTSET
    assert list(warnings.filters) == filters_before
    assert _lock_free_from_other_thread()


def test_nested_scopes_restore_what_they_captured() -> None:
    with DiagnosticScope(suppress=True):
        with DiagnosticScope(suppress=False) as inner:
            assert inner.snapshot is not None
            assert inner.snapshot.logging_disable_level == logging.CRITICAL
        assert logging.root.manager.disable == logging.CRITICAL

    assert logging.root.manager.disable == logging.NOTSET


def test_non_suppressing_scope_leaves_reporting_alone() -> None:
    with DiagnosticScope(suppress=False) as scope:
        assert logging.root.manager.disable == logging.NOTSET

    assert scope.captured == []
