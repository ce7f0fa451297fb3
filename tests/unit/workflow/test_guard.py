"""Tests for the global concurrency guard."""

from __future__ import annotations

import threading

import pytest

from approvalflow.core.exceptions import BusyError
from approvalflow.workflow.guard import ConcurrencyGuard


def test_releases_on_success():
    guard = ConcurrencyGuard(timeout=0.1)
    with guard.hold("submit", "a@x.com"):
        assert guard.locked
    assert not guard.locked


def test_releases_on_error():
    guard = ConcurrencyGuard(timeout=0.1)
    with pytest.raises(RuntimeError):
        with guard.hold("submit"):
            raise RuntimeError("boom")
    assert not guard.locked


def test_not_reentrant():
    guard = ConcurrencyGuard(timeout=0.05)
    with guard.hold("outer"):
        with pytest.raises(BusyError):
            with guard.hold("inner"):
                pass


def test_timeout_raises_busy_before_body_runs():
    guard = ConcurrencyGuard(timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def holder():
        with guard.hold("process_approval", "other@x.com"):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    ran = []
    try:
        with pytest.raises(BusyError) as exc_info:
            with guard.hold("submit", "a@x.com"):
                ran.append(True)
    finally:
        release.set()
        thread.join(5)

    assert ran == []
    assert exc_info.value.code == 1401
    assert "busy" in str(exc_info.value)
