"""Unit tests for escaper.core.config module."""
from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

import escaper.core.config as config_module
from escaper.core.config import (
    CONTEXT_NAMES,
    get_batch_config,
    get_config,
    get_log_level,
)


def _write_config(temp_dir: str, data) -> str:
    path = os.path.join(temp_dir, "custom.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path


class TestGetConfig:
    """Tests for get_config function."""
    
    def test_loads_from_env_path(self, config_file: str):
        """Test loading config from ESCAPER_CONFIG_PATH environment variable."""
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": config_file}):
            result = get_config(force_reload=True)
            assert "batch" in result
    
    def test_returns_empty_dict_for_missing_file(self, temp_dir: str):
        """Test that missing file returns empty dict."""
        missing_path = os.path.join(temp_dir, "nonexistent.json")
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": missing_path}):
            assert get_config(force_reload=True) == {}
    
    def test_returns_empty_dict_for_invalid_json(self, temp_dir: str):
        """Test that a malformed file returns empty dict."""
        path = os.path.join(temp_dir, "broken.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": path}):
            assert get_config(force_reload=True) == {}
    
    def test_non_object_json_ignored(self, temp_dir: str):
        """Test that a JSON array is treated as an empty config."""
        path = _write_config(temp_dir, ["not", "an", "object"])
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": path}):
            assert get_config(force_reload=True) == {}
    
    def test_caches_result(self, config_file: str):
        """Test that config is cached."""
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": config_file}):
            result1 = get_config(force_reload=True)
            result2 = get_config()
            assert result1 is result2
    
    def test_force_reload(self, temp_dir: str):
        """Test that force_reload refreshes the cache."""
        path = _write_config(temp_dir, {"general": {"log_level": "INFO"}})
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": path}):
            get_config(force_reload=True)
            _write_config(temp_dir, {"general": {"log_level": "ERROR"}})
            assert get_config()["general"]["log_level"] == "INFO"
            assert get_config(force_reload=True)["general"]["log_level"] == "ERROR"


class TestGetLogLevel:
    """Tests for get_log_level function."""
    
    def test_from_config(self, config_file: str):
        """Test reading the configured level."""
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": config_file}):
            assert get_log_level() == "DEBUG"
    
    def test_default(self):
        """Test the default level."""
        with patch.object(config_module, "_CONFIG_CACHE", {}):
            assert get_log_level() == "INFO"
    
    def test_uppercased(self):
        """Test that lowercase names are normalized."""
        with patch.object(config_module, "_CONFIG_CACHE", {"general": {"log_level": "warning"}}):
            assert get_log_level() == "WARNING"


class TestGetBatchConfig:
    """Tests for get_batch_config function."""
    
    def test_defaults(self):
        """Test defaults when the batch section is absent."""
        with patch.object(config_module, "_CONFIG_CACHE", {}):
            batch = get_batch_config()
        assert batch["value_column"] == "value"
        assert batch["skip_empty"] is True
        assert batch["include_regex_flags"] is True
        assert batch["contexts"] == CONTEXT_NAMES
    
    def test_from_config(self, config_file: str):
        """Test reading configured batch settings."""
        with patch.dict(os.environ, {"ESCAPER_CONFIG_PATH": config_file}):
            batch = get_batch_config()
        assert batch["value_column"] == "metadata"
        assert batch["contexts"] == ["metadata", "header"]
    
    def test_unknown_contexts_dropped(self):
        """Test that unknown context names are dropped and order kept."""
        cfg = {"batch": {"contexts": ["Query", "body", "cookie", "query"]}}
        with patch.object(config_module, "_CONFIG_CACHE", cfg):
            assert get_batch_config()["contexts"] == ["query", "cookie"]
    
    def test_single_context_string(self):
        """Test that a single context name is accepted."""
        with patch.object(config_module, "_CONFIG_CACHE", {"batch": {"contexts": "header"}}):
            assert get_batch_config()["contexts"] == ["header"]
    
    def test_invalid_contexts_type(self):
        """Test that an invalid contexts value selects every context."""
        with patch.object(config_module, "_CONFIG_CACHE", {"batch": {"contexts": 42}}):
            assert get_batch_config()["contexts"] == CONTEXT_NAMES
    
    def test_does_not_mutate_cache(self):
        """Test that defaults are not written back into the cached config."""
        cfg = {"batch": {}}
        with patch.object(config_module, "_CONFIG_CACHE", cfg):
            get_batch_config()
        assert cfg == {"batch": {}}
