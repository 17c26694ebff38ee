"""Main package for the metadata escaper.

This package contains:
- cli: CLI entry point for single values and CSV batches
- batch: pandas-based CSV annotation with escaped values and matchers
"""

__all__ = [
    "cli",
    "batch",
]
