"""Codebase indexer producing AI-readable context documents."""

__version__ = "0.1.0"
