"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

CLI entry point for Tributary.

Provides the operator-side commands for building distribution trees,
extracting claim proofs and checking proofs against a root.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from tributary._version import __version__
from tributary.cli.context import CLIContext, pass_context
from tributary.config.settings import get_default_config_path, load_config
from tributary.exceptions import InvalidConfigurationError
from tributary.logging_config import get_logger, setup_logging


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Override the configured logging level',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output',
)
@click.version_option(version=__version__, prog_name='tributary')
@pass_context
def cli(ctx: CLIContext, config: Optional[Path], log_level: Optional[str], verbose: bool):
    """
    Tributary - cumulative Merkle distribution tooling.

    Builds distribution roots and claim proofs for publication to the
    distribution ledger.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None

    try:
        ctx.config = load_config(ctx.config_path)
    except InvalidConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    effective_log_level = log_level.upper() if log_level else ctx.config.logging.level
    log_file = Path(ctx.config.logging.file) if ctx.config.logging.file else None
    setup_logging(
        level=effective_log_level,
        log_file=log_file,
        json_format=ctx.config.logging.format == "json",
    )

    if verbose:
        logger = get_logger(__name__)
        logger.info(f"Loaded configuration from: {ctx.config_path or 'defaults'}")
        logger.info(f"Log level: {effective_log_level}")


from tributary.cli.merkle import merkle
cli.add_command(merkle)


if __name__ == '__main__':
    cli()
