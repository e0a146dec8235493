"""
Brief: Tests for daprlens.timer.RepeatingTimer.

Inputs:
  - None

Outputs:
  - None
"""

import threading

import pytest

from daprlens.timer import RepeatingTimer, schedule_repeating


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        RepeatingTimer(0, lambda: None)
    with pytest.raises(ValueError):
        RepeatingTimer(-5, lambda: None)


def test_callback_runs_repeatedly_until_cancelled():
    calls = []
    done = threading.Event()

    def callback():
        calls.append(1)
        if len(calls) >= 3:
            done.set()

    timer = schedule_repeating(10, callback)
    try:
        assert done.wait(5.0)
    finally:
        timer.cancel()
    assert timer.cancelled
    assert len(calls) >= 3


def test_callback_exception_does_not_stop_loop():
    calls = []
    done = threading.Event()

    def callback():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first tick fails")
        done.set()

    timer = schedule_repeating(10, callback)
    try:
        assert done.wait(5.0)
    finally:
        timer.cancel()


def test_cancel_before_first_tick_prevents_callback():
    calls = []
    timer = RepeatingTimer(60_000, lambda: calls.append(1)).start()
    timer.cancel()
    timer._thread.join(2.0)
    assert not timer._thread.is_alive()
    assert calls == []


def test_start_is_idempotent_while_running():
    timer = RepeatingTimer(60_000, lambda: None)
    timer.start()
    first = timer._thread
    assert timer.start() is timer
    assert timer._thread is first
    timer.cancel()
