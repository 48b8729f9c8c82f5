"""
Startup configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .exceptions import ConfigError, InvalidRootError

DEFAULT_OUTPUT = Path("codebase.md")


@dataclass
class Config:
    root: Path = Path(".")
    output_file: Optional[Path] = DEFAULT_OUTPUT
    clipboard: bool = False
    patterns: List[str] = field(default_factory=list)
    ignore_files: List[Path] = field(default_factory=list)
    language_map: Optional[Path] = None
    force_large: bool = False
    skip_large: bool = False
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.output_file is not None and not str(self.output_file):
            self.output_file = None
        if self.force_large and self.skip_large:
            raise ConfigError("--force-large and --skip-large cannot be used together")
        if self.output_file is None and not self.clipboard:
            raise ConfigError("No output selected. Specify an output file with -o or use -c.")

    def validate_root(self) -> Path:
        """Resolve :attr:`root` and make sure it is a readable directory."""
        try:
            root = self.root.resolve()
        except (OSError, RuntimeError) as e:
            raise InvalidRootError(f"Could not resolve root path '{self.root}': {e}") from e
        if not root.exists():
            raise InvalidRootError(f"Root directory '{root}' does not exist")
        if not root.is_dir():
            raise InvalidRootError(f"Root path '{root}' is not a directory")
        return root
