"""
Core logic for the codepack package: walk, filter, classify and emit.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .cancel import CancelToken
from .classify import LARGE_FILE_THRESHOLD, LOOKAHEAD, is_binary
from .exceptions import OutputError, ShortWriteError, StreamError
from .ignore import Ignorer
from .language import LanguageMapper

logger = logging.getLogger(__name__)

CHUNK_SIZE = 32 * 1024

BINARY_PLACEHOLDER = "(Binary file skipped)"


@dataclass(frozen=True)
class FileEntry:
    path: str  # relative to the scan root, "/"-separated
    abs_path: str
    is_dir: bool
    size: int
    is_symlink: bool
    mode: int = stat.S_IFREG


@dataclass
class PackStats:
    files_written: int = 0
    binary_placeholders: int = 0
    large_declined: int = 0
    bytes_written: int = 0


def _entry_for(dir_entry: os.DirEntry, rel_dir: str) -> Optional[FileEntry]:
    """Stat *dir_entry* without following links; ``None`` if it is gone or unreadable."""
    try:
        st = dir_entry.stat(follow_symlinks=False)
        is_symlink = dir_entry.is_symlink()
        is_dir = dir_entry.is_dir(follow_symlinks=False)
    except OSError as e:
        logger.debug("Skipping %s: %s", dir_entry.path, e)
        return None

    rel = f"{rel_dir}/{dir_entry.name}" if rel_dir else dir_entry.name
    return FileEntry(
        path=rel,
        abs_path=os.path.abspath(dir_entry.path),
        is_dir=is_dir,
        size=st.st_size,
        is_symlink=is_symlink,
        mode=st.st_mode,
    )


class Packer:
    """Streams every non-ignored file under *root* into *output*.

    *output* is any object with ``write(bytes) -> int``; closing it is the
    caller's job. *policy* must provide
    ``should_include(path, size, cancel) -> bool`` and is consulted for files
    larger than :data:`~codepack.classify.LARGE_FILE_THRESHOLD`.
    *output_file* names the on-disk destination, if any, so the walk never
    reads its own output.
    """

    def __init__(
        self,
        root: Path,
        ignorer: Ignorer,
        mapper: LanguageMapper,
        output,
        policy,
        output_file: Optional[Path] = None,
    ) -> None:
        self.root = Path(root)
        self.ignorer = ignorer
        self.mapper = mapper
        self.output = output
        self.policy = policy
        self.abs_output_path = (
            os.path.abspath(output_file) if output_file is not None else None
        )
        self.stats = PackStats()

    def execute(self, cancel: CancelToken) -> PackStats:
        """Walk the tree depth-first in name order.

        Raises ``OperationCanceled`` when *cancel* fires and a
        :class:`~codepack.exceptions.CodepackError` for fatal failures.
        """
        self.stats = PackStats()
        cancel.raise_if_canceled()
        self._walk_dir(str(self.root), "", cancel)
        return self.stats

    def _walk_dir(self, dir_path: str, rel_dir: str, cancel: CancelToken) -> None:
        try:
            with os.scandir(dir_path) as it:
                children = sorted(it, key=lambda d: d.name)
        except OSError as e:
            logger.debug("Could not read directory %s: %s", dir_path, e)
            return

        for child in children:
            cancel.raise_if_canceled()

            entry = _entry_for(child, rel_dir)
            if entry is None:
                continue

            if entry.is_dir:
                if self.ignorer.should_ignore(entry.path, True):
                    logger.debug("Pruned directory %s", entry.path)
                    continue
                self._walk_dir(child.path, entry.path, cancel)
                continue

            if entry.is_symlink:
                logger.debug("Skipping symlink %s", entry.path)
                continue

            if not stat.S_ISREG(entry.mode):
                logger.debug("Skipping special file %s", entry.path)
                continue

            if self.abs_output_path is not None and entry.abs_path == self.abs_output_path:
                logger.debug("Skipping output file %s", entry.path)
                continue

            if self.ignorer.should_ignore(entry.path, False):
                logger.debug("Ignored %s", entry.path)
                continue

            self._process_file(entry, cancel)

    def _process_file(self, entry: FileEntry, cancel: CancelToken) -> None:
        cancel.raise_if_canceled()
        try:
            fh = open(entry.abs_path, "rb")
        except OSError as e:
            logger.debug("Could not open %s: %s", entry.path, e)
            return

        with fh:
            try:
                head = fh.read(LOOKAHEAD)
            except OSError as e:
                logger.debug("Could not read %s: %s", entry.path, e)
                return

            if is_binary(head):
                self._write_text(f"\n## File: {entry.path}\n\n{BINARY_PLACEHOLDER}\n")
                self.stats.binary_placeholders += 1
                return

            if entry.size > LARGE_FILE_THRESHOLD:
                if not self.policy.should_include(entry.path, entry.size, cancel):
                    self.stats.large_declined += 1
                    return

            lang = self.mapper.language_for(entry.path)
            self._write_text(f"\n## File: {entry.path}\n\n```{lang}\n")
            self._copy(entry, head, fh, cancel)
            self._write_text("\n```\n")
            self.stats.files_written += 1

    def _copy(self, entry: FileEntry, head: bytes, fh: BinaryIO, cancel: CancelToken) -> None:
        """Write *head* and then the rest of *fh* in bounded chunks."""
        chunk = head
        while chunk:
            cancel.raise_if_canceled()
            self._write(chunk)
            self.stats.bytes_written += len(chunk)
            try:
                chunk = fh.read(CHUNK_SIZE)
            except OSError as e:
                raise StreamError(f"Could not read '{entry.path}' while writing it: {e}") from e

    def _write_text(self, text: str) -> None:
        # Undecodable file names carry lone surrogates.
        self._write(text.encode("utf-8", errors="replace"))

    def _write(self, data: bytes) -> None:
        try:
            written = self.output.write(data)
        except OSError as e:
            raise OutputError(f"Could not write output: {e}") from e
        if written != len(data):
            raise ShortWriteError(f"short write: {written} of {len(data)} bytes accepted")
