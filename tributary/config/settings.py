"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Configuration management for Tributary.

Loads YAML configuration from file with sensible defaults and validation.
Supports environment variable substitution using ${ENV_VAR} syntax.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from tributary.exceptions import EncodingError, InvalidConfigurationError
from tributary.logging_config import get_logger
from tributary.merkle.codec import normalize_address

logger = get_logger(__name__)


def _expand_env_vars(value: Any) -> Any:
    """
    Recursively expand environment variables in configuration values.

    Supports ${ENV_VAR} syntax with optional default values: ${ENV_VAR:default}

    Examples:
        "${TRIBUTARY_DEPLOYER}" -> value of TRIBUTARY_DEPLOYER env var
        "${TRIBUTARY_HOME:/var/lib/tributary}" -> env value or the default
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}:]+)(?::([^}]*))?\}'

        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class StorageConfig:
    """Storage configuration for file paths."""

    artifacts_dir: str
    event_journal: str


@dataclass
class DistributionConfig:
    """Ledger identities. Empty values mean "not configured"."""

    deployer: str = ""
    vault_account: str = ""  # Derived from deployer when empty


@dataclass
class MerkleConfig:
    """Merkle tree configuration."""

    proof_cache_size: int = 1000


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "console"  # "json" or "console"


@dataclass
class PerformanceConfig:
    """Persistence retry tuning."""

    max_retries: int = 3
    retry_base_delay_s: float = 0.1


@dataclass
class TributaryConfig:
    """Main Tributary configuration."""

    storage: StorageConfig
    distribution: DistributionConfig = field(default_factory=DistributionConfig)
    merkle: MerkleConfig = field(default_factory=MerkleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)


def get_default_config_path() -> str:
    """Get the default configuration file path."""
    return os.path.expanduser("~/.tributary/config.yaml")


def get_default_config() -> TributaryConfig:
    """
    Get default configuration with sensible defaults.

    Returns:
        TributaryConfig: Default configuration object
    """
    home_dir = os.path.expanduser("~/.tributary")

    storage = StorageConfig(
        artifacts_dir=os.path.join(home_dir, "artifacts"),
        event_journal=os.path.join(home_dir, "events.jsonl"),
    )

    return TributaryConfig(storage=storage)


def load_config(config_path: Optional[str] = None) -> TributaryConfig:
    """
    Load configuration from YAML file with validation.

    If config file is not found, returns default configuration.
    If config file is malformed or invalid, raises InvalidConfigurationError.

    Args:
        config_path: Path to configuration file. If None, uses default path.

    Returns:
        TributaryConfig: Loaded and validated configuration

    Raises:
        InvalidConfigurationError: If configuration is invalid or malformed
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = os.path.expanduser(config_path)

    if not os.path.exists(config_path):
        logger.info(f"Configuration file not found at {config_path}, using defaults")
        return get_default_config()

    try:
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f)
        logger.debug(f"Loaded configuration from {config_path}")
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to parse YAML configuration file '{config_path}': {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to read configuration file '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(
            f"Failed to read configuration file '{config_path}': {e}"
        ) from e

    if config_data is None:
        logger.info(f"Configuration file {config_path} is empty, using defaults")
        return get_default_config()

    if not isinstance(config_data, dict):
        raise InvalidConfigurationError(
            f"Invalid configuration in '{config_path}': top level must be a mapping"
        )

    config_data = _expand_env_vars(config_data)

    try:
        config = _build_config_from_dict(config_data)
        _validate_config(config)
    except InvalidConfigurationError as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}")
        raise InvalidConfigurationError(f"Invalid configuration in '{config_path}': {e}") from e
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid configuration in '{config_path}': {e}", exc_info=True)
        raise InvalidConfigurationError(f"Invalid configuration in '{config_path}': {e}") from e

    logger.info(f"Successfully loaded and validated configuration from {config_path}")
    return config


def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config_data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfigurationError(f"'{name}' section must be a mapping")
    return section


def _build_config_from_dict(config_data: Dict[str, Any]) -> TributaryConfig:
    """
    Build TributaryConfig from a parsed YAML dictionary, filling gaps with defaults.

    Raises:
        InvalidConfigurationError: If a section has the wrong shape
        TypeError: If a section carries unknown keys
    """
    defaults = get_default_config()

    storage_data = _section(config_data, "storage")
    storage = StorageConfig(
        artifacts_dir=storage_data.get("artifacts_dir", defaults.storage.artifacts_dir),
        event_journal=storage_data.get("event_journal", defaults.storage.event_journal),
    )

    distribution = DistributionConfig(**_section(config_data, "distribution"))
    merkle = MerkleConfig(**_section(config_data, "merkle"))
    logging = LoggingConfig(**_section(config_data, "logging"))
    performance = PerformanceConfig(**_section(config_data, "performance"))

    return TributaryConfig(
        storage=storage,
        distribution=distribution,
        merkle=merkle,
        logging=logging,
        performance=performance,
    )


def _validate_config(config: TributaryConfig) -> None:
    """
    Validate configuration values.

    Raises:
        InvalidConfigurationError: If configuration is invalid
    """
    if not config.storage.artifacts_dir:
        logger.error("Configuration validation failed: artifacts_dir path cannot be empty")
        raise InvalidConfigurationError("artifacts_dir path cannot be empty")
    if not config.storage.event_journal:
        logger.error("Configuration validation failed: event_journal path cannot be empty")
        raise InvalidConfigurationError("event_journal path cannot be empty")

    for name in ("deployer", "vault_account"):
        value = getattr(config.distribution, name)
        if not value:
            continue
        try:
            # YAML reads unquoted 0x... literals as integers
            if isinstance(value, int) and not isinstance(value, bool):
                value = value.to_bytes(32, "big")
            setattr(config.distribution, name, normalize_address(value))
        except (EncodingError, OverflowError) as e:
            raise InvalidConfigurationError(f"distribution.{name} is not a valid address: {e}") from e

    if config.merkle.proof_cache_size < 0:
        raise InvalidConfigurationError(
            f"proof_cache_size must be non-negative, got {config.merkle.proof_cache_size}"
        )

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.logging.level.upper() not in valid_log_levels:
        raise InvalidConfigurationError(
            f"logging level must be one of {valid_log_levels}, "
            f"got '{config.logging.level}'"
        )

    valid_formats = ["json", "console"]
    if config.logging.format not in valid_formats:
        raise InvalidConfigurationError(
            f"logging format must be one of {valid_formats}, got '{config.logging.format}'"
        )

    if config.performance.max_retries < 1:
        raise InvalidConfigurationError(
            f"max_retries must be at least 1, got {config.performance.max_retries}"
        )
    if config.performance.retry_base_delay_s <= 0:
        raise InvalidConfigurationError(
            f"retry_base_delay_s must be positive, got {config.performance.retry_base_delay_s}"
        )
