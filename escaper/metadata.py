"""Public entry points for escaping and matching metadata values.

Usage:
    from escaper import escape_metadata, header_matcher_for_metadata

    escape_metadata("hdr;safe")              # "hdr%3Bsafe"
    header_matcher_for_metadata("hdr;safe")  # ("hdr(%3B|;)safe", True)
"""
from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple, Union

from .core.transformer import Transformer, Value
from .policies import (
    CookieMatcherPolicy,
    HeaderMatcherPolicy,
    MetadataEscapePolicy,
    QueryMatcherPolicy,
)


class Context(enum.Enum):
    """Transport contexts a metadata value can be escaped or matched for."""

    METADATA = "metadata"
    HEADER = "header"
    COOKIE = "cookie"
    QUERY = "query"


METADATA_ESCAPER = Transformer(MetadataEscapePolicy())
HEADER_MATCHER = Transformer(HeaderMatcherPolicy())
COOKIE_MATCHER = Transformer(CookieMatcherPolicy())
QUERY_MATCHER = Transformer(QueryMatcherPolicy())

TRANSFORMERS: dict[Context, Transformer] = {
    Context.METADATA: METADATA_ESCAPER,
    Context.HEADER: HEADER_MATCHER,
    Context.COOKIE: COOKIE_MATCHER,
    Context.QUERY: QUERY_MATCHER,
}


def escape_metadata(value: Value) -> Value:
    """Escape a value to be safe as a cookie value (and therefore a header value)
    and as a query parameter value.

    See https://tools.ietf.org/html/rfc6265#section-4.1 and
    https://tools.ietf.org/html/rfc3986#section-2.3. Additionally escapes '%'
    because it is used as the escape character for hex codes.
    """
    escaped, _ = METADATA_ESCAPER.transform(value)
    return escaped


def header_matcher_for_metadata(value: Value) -> Tuple[Value, bool]:
    """Produce a header value matcher for escaped metadata.

    Returns:
        Tuple of (pattern, is_regex). The pattern is a plain literal unless
        the value contains bytes with more than one possible escaped form.
    """
    return HEADER_MATCHER.transform(value)


def cookie_matcher_for_metadata(value: Value) -> Value:
    """Produce a regex matching escaped metadata inside a cookie value.

    Regex metacharacters in the value are escaped with backslashes. The caller
    is responsible for matching the cookie name.
    """
    escaped, _ = COOKIE_MATCHER.transform(value)
    return escaped


def query_matcher_for_metadata(value: Value) -> Value:
    """Produce a literal matcher for escaped metadata in a query parameter value."""
    escaped, _ = QUERY_MATCHER.transform(value)
    return escaped


def transform_for_context(value: Value, context: Union[Context, str]) -> Tuple[Value, bool]:
    """Run the transformer for ``context`` (a Context or its name) over a value.

    Raises:
        ValueError: If ``context`` is not a known context name
    """
    return TRANSFORMERS[Context(context)].transform(value)


@dataclass(frozen=True)
class MetadataMatchers:
    """Every escaped form and matcher derived from one metadata value.

    Attributes:
        value: Original metadata value
        escaped: Literal escaped value, safe in headers and cookies
        header: Header value matcher
        header_is_regex: Whether ``header`` is a regular expression
        cookie: Cookie value matcher
        cookie_is_regex: Whether ``cookie`` is a regular expression (always True)
        query: Literal query parameter matcher
    """

    value: Value
    escaped: Value
    header: Value
    header_is_regex: bool
    cookie: Value
    cookie_is_regex: bool
    query: Value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_matchers(value: Value) -> MetadataMatchers:
    """Compute the escaped value and all matchers for ``value``."""
    header, header_is_regex = HEADER_MATCHER.transform(value)
    cookie, cookie_is_regex = COOKIE_MATCHER.transform(value)
    return MetadataMatchers(
        value=value,
        escaped=escape_metadata(value),
        header=header,
        header_is_regex=header_is_regex,
        cookie=cookie,
        cookie_is_regex=cookie_is_regex,
        query=query_matcher_for_metadata(value),
    )
