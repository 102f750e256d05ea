"""Tests for the thread-backed scheduler."""

import threading
import time

from focusday.core.scheduler import TaskHandle, ThreadScheduler


class TestTaskHandle:
    def test_cancel(self):
        handle = TaskHandle("tick")
        assert handle.cancelled is False
        handle.cancel()
        assert handle.cancelled is True
        assert "cancelled" in repr(handle)

    def test_wait_returns_true_when_cancelled(self):
        handle = TaskHandle()
        handle.cancel()
        assert handle.wait(1) is True


class TestThreadScheduler:
    def test_call_later_fires(self):
        fired = threading.Event()
        ThreadScheduler().call_later(0.01, fired.set)
        assert fired.wait(2) is True

    def test_cancelled_call_later_never_fires(self):
        fired = threading.Event()
        handle = ThreadScheduler().call_later(0.2, fired.set)
        handle.cancel()
        assert fired.wait(0.5) is False

    def test_call_every_repeats_until_cancelled(self):
        calls = []
        enough = threading.Event()

        def _cb():
            calls.append(1)
            if len(calls) >= 3:
                enough.set()

        handle = ThreadScheduler().call_every(0.01, _cb)
        assert enough.wait(2) is True
        handle.cancel()
        time.sleep(0.05)
        settled = len(calls)
        time.sleep(0.1)
        assert len(calls) == settled

    def test_failing_callback_is_logged(self, caplog):
        done = threading.Event()

        def _boom():
            try:
                raise RuntimeError("boom")
            finally:
                done.set()

        ThreadScheduler().call_later(0.01, _boom, name="boom")
        assert done.wait(2) is True
        time.sleep(0.05)
        assert "Scheduled task boom failed" in caplog.text
