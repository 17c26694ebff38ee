"""Generic two-pass text transformer.

A transformer sizes its output in a first pass over the input bytes, asking its
policy how long each byte's encoding will be, then emits the encoded bytes in a
second pass. Policies running in dynamic mode start out assuming no regular
expression is needed; the first byte that requires regex syntax escalates the
run to always-escape and restarts the sizing pass, since bytes scanned earlier
may now need escaping too. The escalation happens at most once per call.
"""
from __future__ import annotations

import enum
import logging
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

Value = Union[str, bytes]


class RegexMode(enum.Enum):
    """Level of regex escaping required for a transformation run.

    NO_ESCAPE: the output is never a regex; no regex syntax is emitted and
        regex metacharacters are left alone.
    ALWAYS_ESCAPE: the output is always a regex; metacharacters are escaped.
    DYNAMIC_ESCAPE: metacharacters are escaped only if some other byte forces
        a regex pattern to be emitted.
    """

    NO_ESCAPE = "no_escape"
    ALWAYS_ESCAPE = "always_escape"
    DYNAMIC_ESCAPE = "dynamic_escape"


class EncodingType(enum.Enum):
    """How a single input byte is represented in the output."""

    NOT_ENCODED = "not_encoded"
    PERCENT_ENCODED = "percent_encoded"
    REGEX_ENCODED = "regex_encoded"


class EscapingContractError(RuntimeError):
    """A policy was invoked in a way it does not support.

    Signals a defect in the calling code, never bad input data.
    """


class EncodingPolicy:
    """Per-context byte encoding rules used by a Transformer.

    Subclasses implement ``length`` and ``replacement`` and must keep them in
    agreement: for any byte, ``len(replacement(b, escape_regex))`` equals the
    length ``length`` reports under the matching mode.
    """

    name: str = "base"
    default_mode: RegexMode = RegexMode.NO_ESCAPE

    def length(self, b: int, mode: RegexMode) -> Tuple[int, EncodingType]:
        """Return the encoded size of ``b`` and how it will be encoded."""
        raise NotImplementedError("Every policy must implement .length()")

    def replacement(self, b: int, escape_regex: bool) -> bytes:
        """Return the encoded form of ``b`` (possibly ``b`` itself)."""
        raise NotImplementedError("Every policy must implement .replacement()")


class Transformer:
    """Applies an EncodingPolicy to whole values."""

    __slots__ = ("_policy", "_mode")

    def __init__(self, policy: EncodingPolicy, mode: RegexMode | None = None) -> None:
        self._policy = policy
        self._mode = policy.default_mode if mode is None else mode

    @property
    def policy(self) -> EncodingPolicy:
        return self._policy

    @property
    def mode(self) -> RegexMode:
        return self._mode

    def __repr__(self) -> str:
        return f"Transformer(policy={self._policy.name!r}, mode={self._mode.name})"

    def transform(self, value: Value) -> Tuple[Value, bool]:
        """Transform ``value`` and report whether the result is a regex.

        ``str`` input is processed as its UTF-8 bytes and returned as ``str``;
        bytes that were decoded with the ``surrogateescape`` handler (as
        ``sys.argv`` and ``os.fsdecode`` produce) are restored before escaping.
        ``bytes`` input is returned as ``bytes``. Unchanged input is returned
        as-is.

        Args:
            value: Metadata value to transform

        Returns:
            Tuple of (output, is_regex)

        Raises:
            EscapingContractError: If the policy rejects the mode it is run in,
                or its length and replacement functions disagree
        """
        data = value.encode("utf-8", "surrogateescape") if isinstance(value, str) else bytes(value)

        mode, total, changed = self._size(data)

        # An unchanged value is a regex only if this transformer always emits
        # regexes. In dynamic mode no regex pattern turned out to be required.
        if not changed:
            return value, self._mode is RegexMode.ALWAYS_ESCAPE

        is_regex = mode is RegexMode.ALWAYS_ESCAPE
        result = self._emit(data, total, is_regex)

        if isinstance(value, str):
            return result.decode("ascii"), is_regex
        return bytes(result), is_regex

    def _size(self, data: bytes) -> Tuple[RegexMode, int, bool]:
        """Sizing pass; returns (final mode, output length, changed)."""
        mode = self._mode
        scan = self._scan(data, mode)
        if scan is None:
            # A regex is being emitted; rescan so that earlier regex
            # metacharacters are sized as escaped. An ALWAYS_ESCAPE scan never
            # escalates, so this happens at most once.
            mode = RegexMode.ALWAYS_ESCAPE
            scan = self._scan(data, mode)
        total, changed = scan
        return mode, total, changed

    def _scan(self, data: bytes, mode: RegexMode) -> Optional[Tuple[int, bool]]:
        """Return (output length, changed), or None if ``mode`` must escalate."""
        total = 0
        changed = False
        for b in data:
            n, encoding = self._policy.length(b, mode)
            if mode is RegexMode.DYNAMIC_ESCAPE and encoding is EncodingType.REGEX_ENCODED:
                logger.debug("%s: escalating to ALWAYS_ESCAPE at byte 0x%02x", self._policy.name, b)
                return None
            total += n
            if encoding is not EncodingType.NOT_ENCODED:
                changed = True
        return total, changed

    def _emit(self, data: bytes, total: int, is_regex: bool) -> bytearray:
        """Emission pass into a buffer of exactly ``total`` bytes."""
        result = bytearray(total)
        pos = 0
        for b in data:
            chunk = self._policy.replacement(b, is_regex)
            end = pos + len(chunk)
            if end > total:
                break
            result[pos:end] = chunk
            pos = end
        else:
            if pos == total:
                return result

        logger.debug("%s: sized %d bytes but emitted a different length", self._policy.name, total)
        raise EscapingContractError(
            f"{self._policy.name} policy length and replacement functions disagree"
        )
