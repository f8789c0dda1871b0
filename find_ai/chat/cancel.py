from __future__ import annotations

import threading

from ..errors import CancellationNotice


class CancelToken:
    """Abort signal for one streaming session. Once cancelled, stays cancelled."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = ""

    def cancel(self, reason: str = "cancelled by user") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationNotice(self.reason)
