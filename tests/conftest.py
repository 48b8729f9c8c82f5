"""Pytest bootstrap and shared fixtures.

Makes ``import codepack`` resolve to ``src/`` when the package is not
installed, and resets the ``codepack`` logger between tests.
"""

from __future__ import annotations

import io
import logging
import sys
from pathlib import Path

import pytest

SRC_ROOT = str(Path(__file__).resolve().parent.parent / "src")

if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from codepack.cancel import CancelToken  # noqa: E402
from codepack.core import Packer  # noqa: E402
from codepack.ignore import build_ignorer  # noqa: E402
from codepack.language import LanguageMapper  # noqa: E402


class RecordingPolicy:
    """Large-file policy stub that records its calls."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.calls = []

    def should_include(self, path, size, cancel):
        self.calls.append((path, size))
        return self.answer


@pytest.fixture(autouse=True)
def _reset_codepack_logger():
    logger = logging.getLogger("codepack")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def policy():
    return RecordingPolicy()


@pytest.fixture
def pack(policy):
    """Run a pack over *root* and return the document as text."""

    def _pack(root: Path, patterns=(), output_file=None, cancel=None) -> str:
        out = io.BytesIO()
        packer = Packer(
            root,
            build_ignorer(root, list(patterns)),
            LanguageMapper.load(),
            out,
            policy,
            output_file=output_file,
        )
        packer.execute(cancel or CancelToken())
        return out.getvalue().decode("utf-8")

    return _pack
