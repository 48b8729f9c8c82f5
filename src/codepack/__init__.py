"""
Codepack - pack a source tree into one Markdown document for LLM ingestion.

This package walks a directory tree, filters entries through layered ignore
rules (built-in defaults, command-line patterns and ignore files,
``.code-packignore``, ``.gitignore`` and ``.dockerignore``), and streams every
remaining file into a single fenced-code bundle.
"""

__version__ = "0.2.0"
__author__ = "Codepack Team"
