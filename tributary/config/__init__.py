"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Configuration management for Tributary.

Handles loading and validation of configuration files.
"""

from tributary.config.settings import (
    DistributionConfig,
    LoggingConfig,
    MerkleConfig,
    PerformanceConfig,
    StorageConfig,
    TributaryConfig,
    get_default_config,
    get_default_config_path,
    load_config,
)

__all__ = [
    "DistributionConfig",
    "LoggingConfig",
    "MerkleConfig",
    "PerformanceConfig",
    "StorageConfig",
    "TributaryConfig",
    "get_default_config",
    "get_default_config_path",
    "load_config",
]
