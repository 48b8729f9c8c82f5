"""
Console logging for the codepack CLI.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

from colorama import Fore, Style, just_fix_windows_console

_LEVEL_COLORS = {
    logging.DEBUG: Style.DIM,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}


class ColorFormatter(logging.Formatter):
    """Prefixes records with ``[codepack]`` and colours them by level."""

    def __init__(self, use_color: bool = True) -> None:
        super().__init__("[codepack] %(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno)
        if self.use_color and color:
            return color + message + Style.RESET_ALL
        return message


def configure_logging(verbose: bool = False, stream: Optional[IO[str]] = None) -> logging.Logger:
    """Attach a single stderr handler to the ``codepack`` logger."""
    if stream is None:
        just_fix_windows_console()
        stream = sys.stderr

    logger = logging.getLogger("codepack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(use_color=stream.isatty()))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
