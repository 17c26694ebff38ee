"""Configuration management for the metadata escaper.

Handles loading and caching of the JSON configuration file with environment
variable support (ESCAPER_CONFIG_PATH). The escaping engine itself has no
settings; configuration only shapes the batch and CLI layers:
- General settings (log level)
- Batch CSV processing (value column, contexts to produce, flag columns)
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

_CONFIG_CACHE: Optional[Dict[str, Any]] = None

CONTEXT_NAMES = ["metadata", "header", "cookie", "query"]


def get_config(force_reload: bool = False) -> Dict[str, Any]:
    """Load project configuration JSON.

    Looks for the path in ESCAPER_CONFIG_PATH env var; falls back to 'config.json' in CWD.
    Caches the result unless force_reload is True.

    Returns:
        Configuration dictionary (empty dict if file not found or invalid)
    """
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None and not force_reload:
        return _CONFIG_CACHE

    path = os.environ.get("ESCAPER_CONFIG_PATH", "config.json")
    try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                _CONFIG_CACHE = json.load(f) or {}
        else:
            _CONFIG_CACHE = {}
    except (OSError, ValueError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        _CONFIG_CACHE = {}

    if not isinstance(_CONFIG_CACHE, dict):
        logger.error("Config in %s is not a JSON object; ignoring it", path)
        _CONFIG_CACHE = {}

    return _CONFIG_CACHE


def get_log_level() -> str:
    """Get the configured log level name (defaults to INFO)."""
    general = get_config().get("general", {}) or {}
    return str(general.get("log_level", "INFO")).upper()


def get_batch_config() -> Dict[str, Any]:
    """Get batch-processing configuration section.

    Returns:
        Batch configuration dictionary with defaults
    """
    cfg = get_config()
    batch = dict(cfg.get("batch", {}) or {})

    batch.setdefault("value_column", "value")
    batch.setdefault("skip_empty", True)
    batch.setdefault("include_regex_flags", True)
    batch["contexts"] = _normalize_contexts(batch.get("contexts"))

    return batch


def _normalize_contexts(contexts: Any) -> List[str]:
    """Validate a configured list of context names, preserving order.

    Unknown names are dropped with a warning; a missing or invalid value
    selects every context.
    """
    if contexts is None:
        return list(CONTEXT_NAMES)
    if isinstance(contexts, str):
        contexts = [contexts]
    if not isinstance(contexts, list):
        logger.warning("Ignoring invalid batch.contexts setting: %r", contexts)
        return list(CONTEXT_NAMES)

    result: List[str] = []
    for name in contexts:
        key = str(name).strip().lower()
        if key not in CONTEXT_NAMES:
            logger.warning("Unknown context in batch.contexts: %r", name)
            continue
        if key not in result:
            result.append(key)
    return result
