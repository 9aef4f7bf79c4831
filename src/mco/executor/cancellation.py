"""Cooperative cancellation.

A CancellationToken is shared between the caller and a running job. The
job checks it at fixed checkpoints and registers callbacks (for example,
terminating the encoder process) that run the moment cancel() is called.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from mco.exceptions import CancellationError

logger = logging.getLogger(__name__)

CancelCallback = Callable[[], None]


class CancellationToken:
    """Thread-safe, idempotent cancellation flag with callbacks.

    Example:
        token = CancellationToken()
        unregister = token.on_cancellation(lambda: process.terminate())
        ...
        token.throw_if_cancelled()
        unregister()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._callbacks: list[CancelCallback] = []

    def cancel(self) -> None:
        """Request cancellation.

        Only the first call has an effect: it sets the flag and runs every
        registered callback. Callback exceptions are logged and swallowed so
        that one failing callback cannot stop the others.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            self._invoke(callback)

    @property
    def is_cancelled(self) -> bool:
        """True once cancel() has been called."""
        return self._event.is_set()

    def on_cancellation(self, callback: CancelCallback) -> Callable[[], None]:
        """Register a callback to run on cancellation.

        If the token is already cancelled the callback runs immediately.

        Returns:
            A function that unregisters the callback. Calling it after the
            callback has run is a no-op.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        self._invoke(callback)
        return lambda: None

    def throw_if_cancelled(self) -> None:
        """Raise CancellationError if cancellation was requested."""
        if self._event.is_set():
            raise CancellationError()

    def wait(self, timeout: float | None = None) -> bool:
        """Sleep up to `timeout` seconds, waking early on cancellation.

        Returns:
            True if the token is cancelled.
        """
        return self._event.wait(timeout)

    def child(self) -> CancellationToken:
        """Return a token that is cancelled whenever this one is.

        Cancelling the child does not affect the parent.
        """
        child = CancellationToken()
        unregister = self.on_cancellation(child.cancel)
        # Drop the parent's reference once the child is cancelled on its own.
        child.on_cancellation(unregister)
        return child

    def _unregister(self, callback: CancelCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    @staticmethod
    def _invoke(callback: CancelCallback) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Cancellation callback failed")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
