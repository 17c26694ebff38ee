"""Core components of the metadata escaper.

- flags: Per-byte safety classification for headers, cookies, query strings and regexes
- transformer: Two-pass sizing/emission engine shared by every escaping context
- config: Configuration loading for the batch and CLI layers
"""

__all__ = [
    "flags",
    "transformer",
    "config",
]
