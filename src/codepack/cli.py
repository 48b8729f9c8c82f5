"""
CLI entrypoint for codepack package.
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import signal
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from . import __version__
from .cancel import CancelToken
from .config import DEFAULT_OUTPUT, Config
from .console import ConsolePolicy
from .core import Packer
from .exceptions import CodepackError, OperationCanceled
from .ignore import build_ignorer
from .language import LanguageMapper
from .logs import configure_logging
from .output import ClipboardSink, FileSink, MultiSink

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELED = 130


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="codepack",
        description="Pack a project's source files into one Markdown document.",
    )
    p.add_argument("-d", "--root", type=Path, default=Path("."), help="Target directory")
    p.add_argument(
        "-o",
        "--out",
        default=str(DEFAULT_OUTPUT),
        help=f"Output file (default: {DEFAULT_OUTPUT}; pass '' to disable)",
    )
    p.add_argument("-c", "--clipboard", action="store_true", help="Copy the result to the clipboard")
    p.add_argument(
        "-p",
        "--pattern",
        dest="patterns",
        action="append",
        default=[],
        help="Ignore pattern (repeatable)",
    )
    p.add_argument(
        "-i",
        "--ignore-file",
        dest="ignore_files",
        type=Path,
        action="append",
        default=[],
        help="File with extra ignore patterns, one per line (repeatable)",
    )
    p.add_argument("-m", "--language-map", type=Path, help="JSON extension-to-language table")
    p.add_argument("--force-large", action="store_true", help="Always include large files")
    p.add_argument("--skip-large", action="store_true", help="Always skip large files")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


@contextlib.contextmanager
def _interrupts(cancel: CancelToken) -> Iterator[None]:
    """Route SIGINT/SIGTERM into *cancel* for the duration of the block."""

    def _handler(signum, frame) -> None:
        cancel.cancel()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[sig] = signal.signal(sig, _handler)
        except ValueError:
            # Not on the main thread.
            pass
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _build_output(config: Config, cancel: CancelToken) -> MultiSink:
    sinks: List = []
    if config.output_file is not None:
        sinks.append(FileSink(config.output_file))
    if config.clipboard:
        sinks.append(ClipboardSink(cancel))
    return MultiSink(sinks)


def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = _parse_args(argv)
    configure_logging(ns.verbose)

    try:
        config = Config(
            root=ns.root,
            output_file=Path(ns.out) if ns.out else None,
            clipboard=ns.clipboard,
            patterns=ns.patterns,
            ignore_files=ns.ignore_files,
            language_map=ns.language_map,
            force_large=ns.force_large,
            skip_large=ns.skip_large,
            verbose=ns.verbose,
        )
        root = config.validate_root()
        mapper = LanguageMapper.load(config.language_map)
    except CodepackError as e:
        logger.error("Error: %s", e)
        return EXIT_ERROR

    cancel = CancelToken()
    ignorer = build_ignorer(root, config.patterns, config.ignore_files)

    try:
        output = _build_output(config, cancel)
    except CodepackError as e:
        logger.error("Error: %s", e)
        return EXIT_ERROR

    packer = Packer(
        root,
        ignorer,
        mapper,
        output,
        ConsolePolicy(force_large=config.force_large, skip_large=config.skip_large),
        output_file=config.output_file.resolve() if config.output_file else None,
    )

    status = EXIT_OK
    with _interrupts(cancel):
        logger.info("Packing code from %s …", root)
        try:
            stats = packer.execute(cancel)
        except OperationCanceled:
            logger.error("Operation canceled.")
            status = EXIT_CANCELED
        except CodepackError as e:
            logger.error("Error: %s", e)
            status = EXIT_ERROR
        else:
            logger.info(
                "Done. %d files written (%d bytes), %d binary, %d large files skipped.",
                stats.files_written,
                stats.bytes_written,
                stats.binary_placeholders,
                stats.large_declined,
            )
        finally:
            try:
                output.close()
            except OperationCanceled:
                # canceled runs leave the clipboard untouched
                pass
            except CodepackError as e:
                logger.error("Error closing output: %s", e)
                if status == EXIT_OK:
                    status = EXIT_ERROR

    return status


if __name__ == "__main__":
    raise SystemExit(main())
