"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

CLI context for Tributary.

Carries the loaded configuration from the root command to subcommands.
"""

import os
from typing import Optional

import click

from tributary.config.settings import TributaryConfig, get_default_config


class CLIContext:
    """Context object for CLI commands."""

    def __init__(self):
        self.config: Optional[TributaryConfig] = None
        self.config_path: Optional[str] = None
        self.verbose = False

    def require_config(self) -> TributaryConfig:
        """Loaded configuration, or defaults when a subcommand runs standalone."""
        if self.config is None:
            self.config = get_default_config()
        return self.config

    def artifact_path(self, name: str) -> str:
        """Path of an artifact file under the configured artifacts directory."""
        return os.path.join(os.path.expanduser(self.require_config().storage.artifacts_dir), name)


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
