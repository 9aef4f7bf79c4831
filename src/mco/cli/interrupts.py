"""Ctrl+C handling for long-running commands."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Generator
from contextlib import contextmanager

from mco.executor.cancellation import CancellationToken

logger = logging.getLogger(__name__)


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Generator[None, None, None]:
    """Cancel `token` on the first SIGINT while the block runs.

    A second SIGINT falls through to the previous handler. Outside the main
    thread signal handlers cannot be installed, so the block runs unguarded.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    old_handler = signal.getsignal(signal.SIGINT)

    def handler(signum, frame):
        if token.is_cancelled:
            signal.signal(signal.SIGINT, old_handler)
            raise KeyboardInterrupt
        logger.warning("Interrupt received, cancelling (press Ctrl+C again to abort)")
        token.cancel()

    signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, old_handler)
