"""Cooperative cancellation for long scans."""

from __future__ import annotations

import threading


class CancellationToken:
    """
    Flag shared between the caller and a running scan.

    The scan checks the flag between rows and returns what it has collected
    so far once cancel() has been called.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()


def is_canceled(token: CancellationToken | None) -> bool:
    return token is not None and token.is_cancellation_requested
