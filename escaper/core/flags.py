"""Byte safety classification for metadata escaping.

Every possible byte value carries a set of four independent flags saying whether
it may appear unescaped in a header value, a cookie value, a query parameter
value, or literally inside a regular expression. The table is built once at
import time and never modified afterwards.
"""
from __future__ import annotations

import enum
import string
from typing import Tuple


class ByteFlags(enum.IntFlag):
    """Safety properties of a single byte value."""

    NONE = 0
    HEADER_SAFE = 1
    COOKIE_SAFE = 2
    QUERY_SAFE = 4
    REGEX_SAFE = 8

    SAFE = HEADER_SAFE | COOKIE_SAFE | QUERY_SAFE | REGEX_SAFE


# Bytes that are legal in headers but not in cookie values (RFC 6265 section 4.1).
# '%' is included because it is our own escape character.
COOKIE_UNSAFE_BYTES = b' "%,;\\~'

# Unreserved characters per RFC 3986 section 2.3
QUERY_SAFE_BYTES = (string.ascii_letters + string.digits + "-_.~").encode("ascii")

# Characters that must be backslash-escaped to match literally in a regex
REGEX_META_BYTES = b"\\.+*?()|[]{}^$"

HEX_DIGITS = b"0123456789ABCDEF"


def _build_byte_flags() -> Tuple[ByteFlags, ...]:
    """Compute the flags for all 256 byte values."""
    table = [ByteFlags.SAFE] * 0x100

    # Control characters and 8-bit bytes are not safe for headers, and
    # therefore not for cookies either.
    for b in list(range(0x00, 0x20)) + list(range(0x7F, 0x100)):
        table[b] &= ~(ByteFlags.HEADER_SAFE | ByteFlags.COOKIE_SAFE)

    for b in COOKIE_UNSAFE_BYTES:
        table[b] &= ~ByteFlags.COOKIE_SAFE

    for b in range(0x100):
        if b not in QUERY_SAFE_BYTES:
            table[b] &= ~ByteFlags.QUERY_SAFE

    for b in REGEX_META_BYTES:
        table[b] &= ~ByteFlags.REGEX_SAFE

    return tuple(ByteFlags(f) for f in table)


BYTE_FLAGS: Tuple[ByteFlags, ...] = _build_byte_flags()


def is_header_safe(b: int) -> bool:
    return bool(BYTE_FLAGS[b] & ByteFlags.HEADER_SAFE)


def is_cookie_safe(b: int) -> bool:
    return bool(BYTE_FLAGS[b] & ByteFlags.COOKIE_SAFE)


def is_query_safe(b: int) -> bool:
    return bool(BYTE_FLAGS[b] & ByteFlags.QUERY_SAFE)


def is_regex_safe(b: int) -> bool:
    return bool(BYTE_FLAGS[b] & ByteFlags.REGEX_SAFE)


def percent_encode(b: int) -> bytes:
    """Return the three-byte ``%XX`` form of a byte value."""
    return bytes((0x25, HEX_DIGITS[b >> 4], HEX_DIGITS[b & 0xF]))
