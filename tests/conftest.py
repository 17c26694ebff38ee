"""Pytest configuration and shared fixtures for metadata escaper tests."""
from __future__ import annotations

import json
import os
import shutil
import tempfile
from typing import Any, Dict, Generator

import pandas as pd
import pytest


# ============================================================================
# Path and Directory Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test files."""
    dirpath = tempfile.mkdtemp(prefix="escaper_test_")
    yield dirpath
    shutil.rmtree(dirpath, ignore_errors=True)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config() -> Dict[str, Any]:
    """Return a sample configuration dictionary."""
    return {
        "general": {
            "log_level": "DEBUG"
        },
        "batch": {
            "value_column": "metadata",
            "contexts": ["metadata", "header"],
            "skip_empty": True,
            "include_regex_flags": True
        }
    }


@pytest.fixture
def config_file(temp_dir: str, sample_config: Dict[str, Any]) -> str:
    """Create a temporary config file."""
    config_path = os.path.join(temp_dir, "config.json")
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(sample_config, f)
    return config_path


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Reset config cache before each test."""
    import escaper.core.config as config_module
    original_cache = config_module._CONFIG_CACHE
    config_module._CONFIG_CACHE = None
    yield
    config_module._CONFIG_CACHE = original_cache


@pytest.fixture(autouse=True)
def isolate_config_env(monkeypatch):
    """Restore ESCAPER_CONFIG_PATH after tests that run the CLI."""
    monkeypatch.delenv("ESCAPER_CONFIG_PATH", raising=False)


# ============================================================================
# Metadata Value Fixtures
# ============================================================================

# (value, escaped, header matcher, header is regex, cookie matcher, query matcher)
DOCUMENTED_CASES = [
    ("simple", "simple", "simple", False, "simple", "simple"),
    ("hdr;safe", "hdr%3Bsafe", "hdr(%3B|;)safe", True, "hdr%3Bsafe", "hdr%3Bsafe"),
    ("un\tsafe", "un%09safe", "un%09safe", False, "un%09safe", "un%09safe"),
    ("b=o\th", "b%3Do%09h", "b(%3D|=)o%09h", True, "b(%3D|=)o%09h", "b%3Do%09h"),
]


@pytest.fixture(params=DOCUMENTED_CASES, ids=[repr(c[0]) for c in DOCUMENTED_CASES])
def documented_case(request) -> tuple:
    """One documented value together with all of its expected outputs."""
    return request.param


@pytest.fixture
def sample_values_data() -> pd.DataFrame:
    """Return sample metadata values as a DataFrame."""
    return pd.DataFrame({
        "id": ["M001", "M002", "M003", "M004", "M005"],
        "value": ["simple", "hdr;safe", "b=o h", "", "v1.2"],
    })


@pytest.fixture
def sample_values_file(temp_dir: str, sample_values_data: pd.DataFrame) -> str:
    """Create a temporary CSV file with sample values."""
    csv_path = os.path.join(temp_dir, "values.csv")
    sample_values_data.to_csv(csv_path, index=False)
    return csv_path
