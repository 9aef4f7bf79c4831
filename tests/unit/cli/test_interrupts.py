"""Tests for Ctrl+C handling."""

import signal
import threading

import pytest

from mco.cli.interrupts import cancel_on_interrupt
from mco.executor.cancellation import CancellationToken


class TestCancelOnInterrupt:
    """Tests for cancel_on_interrupt."""

    def test_first_interrupt_cancels(self):
        token = CancellationToken()
        before = signal.getsignal(signal.SIGINT)

        with cancel_on_interrupt(token):
            handler = signal.getsignal(signal.SIGINT)
            handler(signal.SIGINT, None)
            assert token.is_cancelled

        assert signal.getsignal(signal.SIGINT) is before

    def test_second_interrupt_aborts(self):
        token = CancellationToken()
        with pytest.raises(KeyboardInterrupt):
            with cancel_on_interrupt(token):
                handler = signal.getsignal(signal.SIGINT)
                handler(signal.SIGINT, None)
                handler(signal.SIGINT, None)

    def test_noop_outside_main_thread(self):
        token = CancellationToken()
        before = signal.getsignal(signal.SIGINT)
        seen = []

        def worker():
            with cancel_on_interrupt(token):
                seen.append(signal.getsignal(signal.SIGINT))

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert seen == [before]
