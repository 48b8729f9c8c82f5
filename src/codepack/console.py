"""
Interactive large-file policy.

Files above the size threshold are either always included, always excluded,
or confirmed with the user on the terminal. The prompt reads stdin through a
background thread so a pending answer can be abandoned as soon as the run is
canceled.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from typing import IO, Optional

from .cancel import CancelToken
from .exceptions import LargeFilePolicyError

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1

_EOF = None


def format_size(size: int) -> str:
    """Render *size* bytes as ``512 B``, ``500.0 KB``, ``1.5 MB`` and so on."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


class LineInput:
    """Cancellable line reader over a blocking text stream."""

    def __init__(self, stream: Optional[IO[str]] = None) -> None:
        self._stream = stream if stream is not None else sys.stdin
        self._lines: "queue.Queue[Optional[str]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _start(self) -> None:
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._pump, name="codepack-stdin", daemon=True
                )
                self._thread.start()

    def _pump(self) -> None:
        try:
            for line in iter(self._stream.readline, ""):
                self._lines.put(line)
        except (OSError, ValueError) as e:
            logger.debug("Input stream failed: %s", e)
        self._lines.put(_EOF)

    def readline(self, cancel: CancelToken) -> str:
        """Return the next line, raising ``OperationCanceled`` or ``EOFError``."""
        self._start()
        while True:
            cancel.raise_if_canceled()
            try:
                line = self._lines.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
            if line is _EOF:
                # Keep the marker so later reads see EOF too.
                self._lines.put(_EOF)
                raise EOFError("input closed")
            return line


class ConsolePolicy:
    """Decides whether oversized files are included."""

    def __init__(
        self,
        force_large: bool = False,
        skip_large: bool = False,
        line_input: Optional[LineInput] = None,
        out: Optional[IO[str]] = None,
    ) -> None:
        self.force_large = force_large
        self.skip_large = skip_large
        self._input = line_input if line_input is not None else LineInput()
        self._out = out if out is not None else sys.stderr

    def should_include(self, path: str, size: int, cancel: CancelToken) -> bool:
        if self.force_large:
            return True
        if self.skip_large:
            logger.debug("Skipping large file %s (%s)", path, format_size(size))
            return False

        cancel.raise_if_canceled()
        self._prompt(path, size)
        try:
            answer = self._input.readline(cancel)
        except EOFError as e:
            raise LargeFilePolicyError(
                f"no answer for large file '{path}': {e}"
            ) from e

        return answer.strip().lower() in ("y", "yes")

    def _prompt(self, path: str, size: int) -> None:
        self._out.write(
            f"\n[?] Large file detected: {path} ({format_size(size)})\n"
            "    Include this file? [y/N]: "
        )
        self._out.flush()
