"""
Output destinations for the packed document.

A sink accepts bytes through ``write`` (returning the number of bytes
accepted) and commits them on ``close``.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import pyperclip

from .cancel import CancelToken
from .exceptions import OutputError, ShortWriteError

logger = logging.getLogger(__name__)


class FileSink:
    """Buffered writer to a file on disk."""

    def __init__(self, path: Path) -> None:
        try:
            self.path = path.resolve()
        except (OSError, RuntimeError) as e:
            raise OutputError(f"Could not resolve output path '{path}': {e}") from e

        if not self.path.parent.exists():
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise OutputError(
                    f"Could not create directory '{self.path.parent}': {e}"
                ) from e

        try:
            self._fh = self.path.open("wb")
        except OSError as e:
            raise OutputError(f"Could not create output file '{self.path}': {e}") from e

    def write(self, data: bytes) -> int:
        try:
            return self._fh.write(data)
        except OSError as e:
            raise OutputError(f"Could not write to output file '{self.path}': {e}") from e

    def close(self) -> None:
        try:
            self._fh.close()
        except OSError as e:
            raise OutputError(f"Could not close output file '{self.path}': {e}") from e


class ClipboardSink:
    """Collects the document in memory and copies it to the clipboard on close.

    Nothing is copied when *cancel* has been raised by the time the sink is
    closed.
    """

    def __init__(self, cancel: Optional[CancelToken] = None) -> None:
        self._buffer = io.BytesIO()
        self._cancel = cancel

    def write(self, data: bytes) -> int:
        return self._buffer.write(data)

    def close(self) -> None:
        if self._cancel is not None:
            self._cancel.raise_if_canceled()
        text = self._buffer.getvalue().decode("utf-8", errors="replace")
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise OutputError(f"Could not copy to clipboard: {e}") from e
        logger.info("Copied %d characters to the clipboard", len(text))


class MultiSink:
    """Writes every chunk to each sink in turn."""

    def __init__(self, sinks: Sequence) -> None:
        self.sinks: List = list(sinks)

    def write(self, data: bytes) -> int:
        for sink in self.sinks:
            written = sink.write(data)
            if written != len(data):
                raise ShortWriteError(
                    f"short write: {written} of {len(data)} bytes accepted"
                )
        return len(data)

    def close(self) -> None:
        """Close all sinks, re-raising the first failure afterwards."""
        first_error: Optional[BaseException] = None
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.debug("Closing %r failed: %s", sink, e)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
