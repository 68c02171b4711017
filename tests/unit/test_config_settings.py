"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Unit tests for configuration loading and validation.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from tributary.config.settings import (
    TributaryConfig,
    get_default_config,
    get_default_config_path,
    load_config,
)
from tributary.exceptions import InvalidConfigurationError
from tributary.merkle.codec import normalize_address


class TestDefaults:
    """Test default configuration values."""

    def test_default_config_path(self):
        assert get_default_config_path() == os.path.expanduser("~/.tributary/config.yaml")

    def test_default_config(self):
        config = get_default_config()

        assert isinstance(config, TributaryConfig)
        assert config.storage.artifacts_dir.endswith("artifacts")
        assert config.storage.event_journal.endswith("events.jsonl")
        assert config.distribution.deployer == ""
        assert config.merkle.proof_cache_size == 1000
        assert config.logging.level == "INFO"
        assert config.logging.format == "console"
        assert config.performance.max_retries == 3

    def test_missing_file_returns_defaults(self, temp_dir: Path):
        config = load_config(str(temp_dir / "nonexistent.yaml"))
        assert config == get_default_config()

    def test_empty_file_returns_defaults(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("")

        assert load_config(str(path)) == get_default_config()


class TestLoadConfig:
    """Test loading configuration from YAML."""

    def test_load_sample_config(self, sample_config_path: Path, temp_dir: Path):
        config = load_config(str(sample_config_path))

        assert config.storage.artifacts_dir == f"{temp_dir}/artifacts"
        assert config.storage.event_journal == f"{temp_dir}/events.jsonl"
        assert config.distribution.deployer == normalize_address("0xd3")
        assert config.merkle.proof_cache_size == 64
        assert config.logging.format == "json"
        assert config.performance.max_retries == 2
        assert config.performance.retry_base_delay_s == 0.01

    def test_partial_config_uses_defaults(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("merkle:\n  proof_cache_size: 5\n")

        config = load_config(str(path))
        defaults = get_default_config()

        assert config.merkle.proof_cache_size == 5
        assert config.storage == defaults.storage
        assert config.logging == defaults.logging

    def test_unquoted_hex_address(self, temp_dir: Path):
        """YAML parses bare 0x literals as integers."""
        path = temp_dir / "config.yaml"
        path.write_text("distribution:\n  deployer: 0xa11ce\n  vault_account: 0x7a017\n")

        config = load_config(str(path))

        assert config.distribution.deployer == normalize_address("0xa11ce")
        assert config.distribution.vault_account == normalize_address("0x7a017")

    def test_env_var_expansion(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text(
            "storage:\n"
            "  artifacts_dir: ${TRIBUTARY_TEST_HOME}/artifacts\n"
            "distribution:\n"
            "  deployer: ${TRIBUTARY_TEST_DEPLOYER:0xd3}\n"
        )

        with patch.dict(os.environ, {"TRIBUTARY_TEST_HOME": str(temp_dir)}):
            config = load_config(str(path))

        assert config.storage.artifacts_dir == f"{temp_dir}/artifacts"
        assert config.distribution.deployer == normalize_address("0xd3")

    def test_env_var_overrides_default(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("distribution:\n  deployer: ${TRIBUTARY_TEST_DEPLOYER:0xd3}\n")

        with patch.dict(os.environ, {"TRIBUTARY_TEST_DEPLOYER": "0xb0b"}):
            config = load_config(str(path))

        assert config.distribution.deployer == normalize_address("0xb0b")


class TestInvalidConfig:
    """Test that malformed configuration is rejected."""

    def _load(self, temp_dir: Path, content: str):
        path = temp_dir / "config.yaml"
        path.write_text(content)
        return load_config(str(path))

    def test_malformed_yaml(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="parse YAML"):
            self._load(temp_dir, "storage: [unclosed\n")

    def test_top_level_not_mapping(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="mapping"):
            self._load(temp_dir, "- just\n- a list\n")

    def test_section_not_mapping(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="'merkle' section"):
            self._load(temp_dir, "merkle: 5\n")

    def test_unknown_key(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError):
            self._load(temp_dir, "merkle:\n  proof_cache: 5\n")

    def test_empty_storage_path(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="event_journal"):
            self._load(temp_dir, "storage:\n  event_journal: ''\n")

    def test_invalid_deployer(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="distribution.deployer"):
            self._load(temp_dir, "distribution:\n  deployer: not-an-address\n")

    def test_deployer_too_long(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="distribution.deployer"):
            self._load(temp_dir, f"distribution:\n  deployer: '0x{'1' * 65}'\n")

    def test_negative_cache_size(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="proof_cache_size"):
            self._load(temp_dir, "merkle:\n  proof_cache_size: -1\n")

    def test_invalid_log_level(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="logging level"):
            self._load(temp_dir, "logging:\n  level: CHATTY\n")

    def test_invalid_log_format(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="logging format"):
            self._load(temp_dir, "logging:\n  format: xml\n")

    def test_invalid_retries(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="max_retries"):
            self._load(temp_dir, "performance:\n  max_retries: 0\n")

    def test_invalid_retry_delay(self, temp_dir: Path):
        with pytest.raises(InvalidConfigurationError, match="retry_base_delay_s"):
            self._load(temp_dir, "performance:\n  retry_base_delay_s: 0\n")
