"""Cooperative cancellation for in-flight adapter calls."""

from __future__ import annotations

import threading
from typing import Callable, List


class CancelToken:
    """Caller-owned signal that aborts an adapter's network call.

    Adapters register a callback (typically ``session.close``) while their
    request is in flight; ``cancel()`` sets the flag and fires every callback
    still registered.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        with self._lock:
            fire_now = self._event.is_set()
            if not fire_now:
                self._callbacks.append(callback)
        if fire_now:
            callback()

        def _unregister() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _unregister

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)
