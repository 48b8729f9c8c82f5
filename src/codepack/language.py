"""
Extension to language lookup used to tag fenced code blocks.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .exceptions import LanguageMapError

logger = logging.getLogger(__name__)

DEFAULT_TABLE_RESOURCE = "data/extension_to_language.json"


def extension(path: str) -> str:
    """Lower-cased extension of the base name, from its last dot.

    Dotfiles count as all extension: ``.bashrc`` maps to ``".bashrc"``.
    """
    name = Path(path).name
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


def _parse_table(text: str, source: str) -> Dict[str, List[str]]:
    """Decode a ``{".ext": ["name", "parent", ...]}`` JSON table."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise LanguageMapError(f"Malformed language table '{source}': {e}") from e

    if not isinstance(raw, dict):
        raise LanguageMapError(f"Language table '{source}' must be a JSON object")

    table: Dict[str, List[str]] = {}
    for ext, names in raw.items():
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise LanguageMapError(
                f"Language table '{source}': entry '{ext}' must be a list of strings"
            )
        table[ext.lower()] = list(names)
    return table


def load_default_table() -> Dict[str, List[str]]:
    try:
        text = (
            resources.files("codepack")
            .joinpath(DEFAULT_TABLE_RESOURCE)
            .read_text(encoding="utf-8")
        )
    except OSError as e:
        raise LanguageMapError(f"Could not read built-in language table: {e}") from e
    return _parse_table(text, "<built-in>")


def load_custom_table(path: Path) -> Dict[str, List[str]]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LanguageMapError(f"Could not read language table '{path}': {e}") from e
    return _parse_table(text, str(path))


class LanguageMapper:
    """Maps a file's extension to the language tag of its code fence."""

    def __init__(self, table: Mapping[str, List[str]]) -> None:
        self._table: Dict[str, List[str]] = dict(table)

    @classmethod
    def load(cls, custom_path: Optional[Path] = None) -> "LanguageMapper":
        """Build the built-in table, overridden key by key by *custom_path*."""
        table = load_default_table()
        if custom_path is not None:
            custom = load_custom_table(custom_path)
            table.update(custom)
            logger.debug("Loaded %d language entries from %s", len(custom), custom_path)
        return cls(table)

    def language_for(self, path: str) -> str:
        names = self._table.get(extension(path))
        if names:
            return names[0]
        return ""
