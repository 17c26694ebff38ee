"""Metadata escaper package.

Escapes arbitrary metadata values for safe transport in HTTP headers, cookie
values and query parameters, and builds literal or regex matchers that
recognise a value however it was escaped upstream.

Key modules:
- core.flags: Per-byte safety classification table
- core.transformer: Two-pass transformation engine and regex modes
- core.config: JSON configuration loading
- policies: Encoding rules for each transport context
- metadata: Public entry points and the matcher bundle

Usage:
    from escaper import escape_metadata, header_matcher_for_metadata
    from escaper.metadata import Context, build_matchers
"""

from .core.transformer import EscapingContractError
from .metadata import (
    Context,
    MetadataMatchers,
    build_matchers,
    cookie_matcher_for_metadata,
    escape_metadata,
    header_matcher_for_metadata,
    query_matcher_for_metadata,
    transform_for_context,
)

__all__ = [
    "Context",
    "EscapingContractError",
    "MetadataMatchers",
    "build_matchers",
    "cookie_matcher_for_metadata",
    "escape_metadata",
    "header_matcher_for_metadata",
    "query_matcher_for_metadata",
    "transform_for_context",
]
