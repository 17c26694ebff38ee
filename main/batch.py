"""Batch escaping of metadata values stored in CSV files.

Reads a CSV with one metadata value per row, adds one output column per
requested transport context, and writes the annotated table back out.

Output columns:
    escaped_value, header_matcher, header_is_regex, cookie_matcher,
    cookie_is_regex, query_matcher
"""
from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Optional, Sequence

import pandas as pd

from escaper.metadata import Context, transform_for_context

logger = logging.getLogger(__name__)

DEFAULT_VALUE_COL = "value"

# Output column for each context, plus its regex flag column (if any)
OUTPUT_COLUMNS = {
    Context.METADATA: ("escaped_value", None),
    Context.HEADER: ("header_matcher", "header_is_regex"),
    Context.COOKIE: ("cookie_matcher", "cookie_is_regex"),
    Context.QUERY: ("query_matcher", None),
}


def load_values_csv(csv_path: str, value_column: str = DEFAULT_VALUE_COL) -> pd.DataFrame:
    """Load a CSV of metadata values.

    All columns are read as strings so values such as "007" survive intact.

    Args:
        csv_path: Path to the CSV file
        value_column: Column holding the metadata values

    Returns:
        DataFrame with all columns preserved

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If the value column is missing
    """
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, na_values=[""])

    if value_column not in df.columns:
        raise ValueError(f"CSV missing required column: {value_column!r}")

    return df


def _is_empty(value: Any) -> bool:
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return True
    return str(value) == ""


def _resolve_contexts(contexts: Optional[Iterable[Any]]) -> list[Context]:
    if contexts is None:
        return list(Context)
    resolved: list[Context] = []
    for ctx in contexts:
        c = Context(ctx)
        if c not in resolved:
            resolved.append(c)
    return resolved


def annotate_values(
    df: pd.DataFrame,
    value_column: str = DEFAULT_VALUE_COL,
    contexts: Optional[Sequence[Any]] = None,
    include_regex_flags: bool = True,
    skip_empty: bool = True,
) -> pd.DataFrame:
    """Add escaped values and matchers for every row of ``df``.

    Args:
        df: Input DataFrame
        value_column: Column holding the metadata values
        contexts: Contexts (or context names) to produce; all when None
        include_regex_flags: Add header_is_regex/cookie_is_regex columns
        skip_empty: Leave outputs empty (NA) for empty or missing values
            instead of transforming them as empty strings

    Returns:
        New DataFrame with the output columns appended
    """
    if value_column not in df.columns:
        raise ValueError(f"DataFrame missing required column: {value_column!r}")

    out = df.copy()
    selected = _resolve_contexts(contexts)

    for ctx in selected:
        col, flag_col = OUTPUT_COLUMNS[ctx]
        keep_flags = bool(include_regex_flags and flag_col)
        patterns: list[Any] = []
        flags: list[Any] = []
        for raw in out[value_column]:
            if _is_empty(raw):
                if skip_empty:
                    patterns.append(pd.NA)
                    if keep_flags:
                        flags.append(pd.NA)
                    continue
                raw = ""
            pattern, is_regex = transform_for_context(str(raw), ctx)
            patterns.append(pattern)
            if keep_flags:
                flags.append(is_regex)

        out[col] = patterns
        if keep_flags:
            out[flag_col] = pd.array(flags, dtype="boolean")

    logger.debug("Annotated %d value(s) for contexts: %s", len(out), [c.value for c in selected])
    return out


def write_values_csv(df: pd.DataFrame, csv_path: Optional[str] = None) -> Optional[str]:
    """Write an annotated DataFrame as CSV.

    Args:
        df: DataFrame to write
        csv_path: Destination path; when None the CSV text is returned instead

    Returns:
        CSV text when ``csv_path`` is None, otherwise None
    """
    if csv_path is None:
        return df.to_csv(index=False)

    parent = os.path.dirname(os.path.abspath(csv_path))
    os.makedirs(parent, exist_ok=True)
    df.to_csv(csv_path, index=False)
    logger.info("Wrote %d row(s) to %s", len(df), csv_path)
    return None
