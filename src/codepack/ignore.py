"""
Layered ignore rules.

Each ignore source (built-in defaults, ``-p`` patterns, an ignore file) is
compiled into a :class:`Matcher`; the :class:`Ignorer` consults every matcher
in registration order and the last rule that matches a path decides whether
the path is ignored.

Matching is a gitignore approximation: a pattern without ``/`` is globbed
against the base name, a pattern with ``/`` matches the full path exactly, as
a path suffix, or as a glob. ``**`` and root anchoring are not supported.
"""

from __future__ import annotations

import fnmatch
import functools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from pathspec.util import normalize_file

logger = logging.getLogger(__name__)

# Baseline rules, registered before every user-supplied source.
DEFAULT_PATTERNS: List[str] = [
    ".git/",
    ".svn/",
    ".hg/",
    "node_modules/",
    "__pycache__/",
    ".venv/",
    "venv/",
    ".mypy_cache/",
    ".pytest_cache/",
    ".idea/",
    ".vscode/",
    "*.pyc",
    ".env",
    ".DS_Store",
    "Thumbs.db",
]

LOCAL_IGNORE_FILE = ".code-packignore"
STANDARD_IGNORE_FILES: Tuple[str, ...] = (".gitignore", ".dockerignore")


@dataclass(frozen=True)
class Rule:
    pattern: str
    negate: bool = False
    dir_only: bool = False

    @classmethod
    def parse(cls, line: str) -> Optional["Rule"]:
        """Parse one ignore line; return ``None`` for blanks and comments."""
        pattern = line.strip()
        if not pattern or pattern.startswith("#"):
            return None

        negate = pattern.startswith("!")
        if negate:
            pattern = pattern[1:]

        dir_only = pattern.endswith("/")
        if dir_only:
            pattern = pattern[:-1]

        if not pattern:
            return None
        return cls(pattern=pattern, negate=negate, dir_only=dir_only)

    def matches(self, path: str, name: str, is_dir: bool) -> bool:
        if self.dir_only and not is_dir:
            return False

        if "/" not in self.pattern:
            return fnmatch.fnmatchcase(name, _shell_glob(self.pattern))

        pattern = self.pattern.lstrip("/")
        if path == pattern or path.endswith("/" + pattern):
            return True
        return _glob_path(pattern, path)


@functools.lru_cache(maxsize=None)
def _shell_glob(pattern: str) -> str:
    """Rewrite '[^...]' classes and backslash escapes into fnmatch syntax."""
    out = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\" and i + 1 < n:
            nxt = pattern[i + 1]
            out.append(f"[{nxt}]" if nxt in "*?[" else nxt)
            i += 2
        elif c == "[" and pattern[i + 1 : i + 2] == "^":
            out.append("[!")
            i += 2
        else:
            out.append(c)
            i += 1
    return "".join(out)


def _glob_path(pattern: str, path: str) -> bool:
    # "*" and "?" must not cross "/", so compare segment by segment.
    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    return all(
        fnmatch.fnmatchcase(part, _shell_glob(pat))
        for part, pat in zip(path_parts, pattern_parts)
    )


class Matcher:
    """Ordered rules compiled from a single ignore source."""

    def __init__(self, rules: Sequence[Rule], origin: str = "<patterns>") -> None:
        self.rules: Tuple[Rule, ...] = tuple(rules)
        self.origin = origin

    @classmethod
    def from_lines(cls, lines: Iterable[str], origin: str = "<patterns>") -> "Matcher":
        rules = [rule for rule in (Rule.parse(line) for line in lines) if rule is not None]
        return cls(rules, origin)

    @classmethod
    def from_file(cls, path: Path) -> "Matcher":
        with path.open("r", encoding="utf-8") as fh:
            return cls.from_lines(fh, origin=str(path))

    def match(self, path: str, is_dir: bool) -> Optional[bool]:
        """Return the polarity of the last matching rule, or ``None``.

        ``True`` means ignored, ``False`` means explicitly re-included.
        """
        path = normalize_file(path)
        name = path.rsplit("/", 1)[-1]

        result: Optional[bool] = None
        for rule in self.rules:
            if rule.matches(path, name, is_dir):
                result = not rule.negate
        return result

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"Matcher(origin={self.origin!r}, rules={len(self.rules)})"


class Ignorer:
    """Aggregates matchers; later sources override earlier ones."""

    def __init__(self, matchers: Iterable[Matcher] = ()) -> None:
        self.matchers: List[Matcher] = list(matchers)

    def add_matcher(self, matcher: Matcher) -> None:
        self.matchers.append(matcher)

    def load_defaults(self) -> None:
        self.add_matcher(Matcher.from_lines(DEFAULT_PATTERNS, origin="<defaults>"))

    def add_patterns(self, patterns: Sequence[str]) -> None:
        if patterns:
            self.add_matcher(Matcher.from_lines(patterns, origin="<command line>"))

    def load_ignore_file(self, path: Path) -> bool:
        """Register *path* as an ignore source.

        A missing file is not an error; ``False`` is returned instead. Other
        read failures propagate as :class:`OSError`.
        """
        try:
            matcher = Matcher.from_file(path)
        except FileNotFoundError:
            return False
        self.add_matcher(matcher)
        logger.debug("Loaded %d ignore rules from %s", len(matcher), path)
        return True

    def should_ignore(self, path: str, is_dir: bool) -> bool:
        ignored = False
        for matcher in self.matchers:
            result = matcher.match(path, is_dir)
            if result is not None:
                ignored = result
        return ignored


def build_ignorer(
    root: Path,
    patterns: Sequence[str] = (),
    ignore_files: Sequence[Path] = (),
) -> Ignorer:
    """Assemble the ignore engine in precedence order.

    Built-in defaults come first, then command-line *patterns*, then each of
    *ignore_files*, then ``.code-packignore``, ``.gitignore`` and
    ``.dockerignore`` from *root* when present.
    """
    ignorer = Ignorer()
    ignorer.load_defaults()
    ignorer.add_patterns(patterns)

    for path in ignore_files:
        try:
            if not ignorer.load_ignore_file(path):
                logger.warning("Ignore file '%s' does not exist, skipping", path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read ignore file '%s': %s", path, e)

    for name in (LOCAL_IGNORE_FILE,) + STANDARD_IGNORE_FILES:
        try:
            ignorer.load_ignore_file(root / name)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read ignore file '%s': %s", root / name, e)

    return ignorer
