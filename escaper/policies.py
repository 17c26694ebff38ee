"""Encoding policies for each metadata transport context.

Strategy, given that the proxy performs no escaping of generated headers and
that legal cookie values are much more restrictive than legal header values
(and legal query parameter values more restrictive still):

- Metadata values are always escaped to be legal cookie and query values.
- Header matchers match both the fully escaped value and a partially escaped
  (header-legal) value. They are plain literals unless some byte needs an
  alternation, in which case the whole matcher becomes a regex.
- Cookie matchers match the fully escaped value or a partially escaped
  (cookie-legal) value, and are always regexes.
- Query matchers match only the fully escaped value and are never regexes.

Examples:
    Value        Escaped       Header match       Cookie/Query match
    "simple"     "simple"      "simple"           "simple"
    "hdr;safe"   "hdr%3Bsafe"  "hdr(%3B|;)safe"   "hdr%3Bsafe"
    "un\\tsafe"   "un%09safe"   "un%09safe"        "un%09safe"
    "b=o\\th"     "b%3Do%09h"   "b(%3D|=)o%09h"    "b%3Do%09h"
"""
from __future__ import annotations

import logging
from typing import Tuple

from .core.flags import (
    is_cookie_safe,
    is_header_safe,
    is_query_safe,
    is_regex_safe,
    percent_encode,
)
from .core.transformer import (
    EncodingPolicy,
    EncodingType,
    EscapingContractError,
    RegexMode,
)

logger = logging.getLogger(__name__)

BACKSLASH = 0x5C


def _contract_failure(message: str) -> EscapingContractError:
    logger.debug("Contract violation: %s", message)
    return EscapingContractError(message)


def _alternation(b: int) -> bytes:
    """Regex matching either the percent-encoded or the literal form of ``b``."""
    literal = bytes((b,)) if is_regex_safe(b) else bytes((BACKSLASH, b))
    return b"(" + percent_encode(b) + b"|" + literal + b")"


def _alternation_length(b: int) -> int:
    return 7 if is_regex_safe(b) else 8


class MetadataEscapePolicy(EncodingPolicy):
    """Escapes values to be legal cookie and query parameter values.

    Cookie-legal values are also header-legal. '%' is escaped too, since it is
    the escape character for hex codes.
    """

    name = "metadata"
    default_mode = RegexMode.NO_ESCAPE

    def length(self, b: int, mode: RegexMode) -> Tuple[int, EncodingType]:
        if mode is not RegexMode.NO_ESCAPE:
            raise _contract_failure("metadata escaping does not support regex escaping")
        if not is_cookie_safe(b) or not is_query_safe(b):
            return 3, EncodingType.PERCENT_ENCODED
        return 1, EncodingType.NOT_ENCODED

    def replacement(self, b: int, escape_regex: bool) -> bytes:
        if escape_regex:
            raise _contract_failure("metadata escaping does not support regex escaping")
        if not is_cookie_safe(b) or not is_query_safe(b):
            return percent_encode(b)
        return bytes((b,))


class CookieMatcherPolicy(EncodingPolicy):
    """Builds regexes matching escaped metadata inside cookie values."""

    name = "cookie"
    default_mode = RegexMode.ALWAYS_ESCAPE

    def length(self, b: int, mode: RegexMode) -> Tuple[int, EncodingType]:
        if mode is not RegexMode.ALWAYS_ESCAPE:
            raise _contract_failure("cookie value escaping always performs regex escaping")
        if not is_cookie_safe(b):
            return 3, EncodingType.PERCENT_ENCODED
        if not is_query_safe(b):
            return _alternation_length(b), EncodingType.REGEX_ENCODED
        if not is_regex_safe(b):
            return 2, EncodingType.REGEX_ENCODED
        return 1, EncodingType.NOT_ENCODED

    def replacement(self, b: int, escape_regex: bool) -> bytes:
        if not escape_regex:
            raise _contract_failure("cookie value escaping always performs regex escaping")
        if not is_cookie_safe(b):
            return percent_encode(b)
        if not is_query_safe(b):
            return _alternation(b)
        if not is_regex_safe(b):
            return bytes((BACKSLASH, b))
        return bytes((b,))


class HeaderMatcherPolicy(EncodingPolicy):
    """Builds header value matchers, emitting a regex only when needed."""

    name = "header"
    default_mode = RegexMode.DYNAMIC_ESCAPE

    def length(self, b: int, mode: RegexMode) -> Tuple[int, EncodingType]:
        if mode is RegexMode.NO_ESCAPE:
            raise _contract_failure("header matchers may require regex escapes")
        if not is_header_safe(b):
            return 3, EncodingType.PERCENT_ENCODED
        if not is_cookie_safe(b) or not is_query_safe(b):
            return _alternation_length(b), EncodingType.REGEX_ENCODED
        if not is_regex_safe(b) and mode is RegexMode.ALWAYS_ESCAPE:
            return 2, EncodingType.REGEX_ENCODED
        return 1, EncodingType.NOT_ENCODED

    def replacement(self, b: int, escape_regex: bool) -> bytes:
        if not is_header_safe(b):
            return percent_encode(b)
        if not is_cookie_safe(b) or not is_query_safe(b):
            if not escape_regex:
                raise _contract_failure("header matcher regex output disabled, but required")
            return _alternation(b)
        # A lone period with nothing else escaped stays a plain literal; it is
        # only escaped once the matcher is a regex.
        if not is_regex_safe(b) and escape_regex:
            return bytes((BACKSLASH, b))
        return bytes((b,))


class QueryMatcherPolicy(EncodingPolicy):
    """Builds literal matchers for escaped metadata in query parameters."""

    name = "query"
    default_mode = RegexMode.NO_ESCAPE

    def length(self, b: int, mode: RegexMode) -> Tuple[int, EncodingType]:
        if mode is not RegexMode.NO_ESCAPE:
            raise _contract_failure("query matchers are never regexes")
        if not is_query_safe(b) or not is_cookie_safe(b):
            return 3, EncodingType.PERCENT_ENCODED
        return 1, EncodingType.NOT_ENCODED

    def replacement(self, b: int, escape_regex: bool) -> bytes:
        if escape_regex:
            raise _contract_failure("query matchers are never regexes")
        if not is_query_safe(b) or not is_cookie_safe(b):
            return percent_encode(b)
        return bytes((b,))


__all__ = [
    "MetadataEscapePolicy",
    "CookieMatcherPolicy",
    "HeaderMatcherPolicy",
    "QueryMatcherPolicy",
]
