"""
Process-wide cancellation signal.
"""

from __future__ import annotations

import threading
from typing import Optional

from .exceptions import OperationCanceled


class CancelToken:
    """Single-shot flag raised by interrupt handling and polled by the walk.

    Once :meth:`cancel` is called the token stays raised for the rest of the
    run; calling it again has no further effect.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def canceled(self) -> bool:
        return self._event.is_set()

    def raise_if_canceled(self) -> None:
        if self._event.is_set():
            raise OperationCanceled()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until canceled or *timeout* elapses; return the flag."""
        return self._event.wait(timeout)
