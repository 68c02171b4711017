"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

CLI commands for Merkle distribution operations.

Provides commands for:
- Hashing a single leaf
- Building a distribution root and proof artifact from an entitlement list
- Extracting one beneficiary's claim proof from an artifact
- Verifying a claim proof against a root
"""

import json
import sys
from pathlib import Path

import click

from tributary.cli.context import CLIContext, pass_context
from tributary.exceptions import TributaryError
from tributary.logging_config import get_logger
from tributary.merkle.codec import hash_leaf, normalize_address
from tributary.merkle.distribution import DistributionTree, load_artifact, load_entitlements
from tributary.merkle.tree import decode_digest
from tributary.merkle.verifier import verify

logger = get_logger(__name__)

FORMATS = click.Choice(['table', 'json'], case_sensitive=False)


@click.group()
def merkle():
    """Merkle distribution roots and claim proofs."""
    pass


@merkle.command("hash-leaf")
@click.argument("address")
@click.argument("amount", type=int)
def hash_leaf_command(address, amount):
    """
    Print the leaf digest for ADDRESS and cumulative AMOUNT.

    Examples:

        tributary merkle hash-leaf 0xa11ce 500
    """
    try:
        click.echo("0x" + hash_leaf(address, amount).hex())
    except TributaryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@merkle.command("build")
@click.argument("entitlements", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    default=None,
    help="Artifact path (default: <artifacts_dir>/distribution.json)",
)
@click.option("--format", "-f", "output_format", type=FORMATS, default="table", help="Output format (default: table)")
@pass_context
def build(ctx: CLIContext, entitlements, output, output_format):
    """
    Build the distribution root and write every claim proof to an artifact.

    ENTITLEMENTS is a CSV file with an address,cumulative_amount header, or a
    JSON list/mapping of the same pairs.

    Examples:

        tributary merkle build entitlements.csv -o distribution.json

        tributary merkle build entitlements.json --format json
    """
    config = ctx.require_config()
    try:
        tree = DistributionTree.from_entitlements(
            load_entitlements(entitlements),
            proof_cache_size=config.merkle.proof_cache_size,
        )
        if output is None:
            output = ctx.artifact_path("distribution.json")
        path = tree.save(
            output,
            max_retries=config.performance.max_retries,
            base_delay=config.performance.retry_base_delay_s,
        )
    except TributaryError as e:
        click.echo(f"Error: {e}", err=True)
        logger.error(f"Failed to build distribution: {e}")
        sys.exit(1)

    root = "0x" + tree.root.hex()
    if output_format.lower() == 'json':
        click.echo(json.dumps({
            "root": root,
            "leaf_count": len(tree),
            "height": tree.tree.height,
            "artifact": str(path),
        }, indent=2))
    else:
        click.echo(f"Root:     {root}")
        click.echo(f"Leaves:   {len(tree)}")
        click.echo(f"Height:   {tree.tree.height}")
        click.echo(f"Artifact: {path}")


@merkle.command("proof")
@click.argument("artifact", type=click.Path(exists=True, dir_okay=False))
@click.argument("address")
@click.option("--format", "-f", "output_format", type=FORMATS, default="table", help="Output format (default: table)")
def proof(artifact, address, output_format):
    """
    Print the claim proof for ADDRESS from a saved ARTIFACT.

    Examples:

        tributary merkle proof distribution.json 0xa11ce --format json
    """
    try:
        claims = load_artifact(artifact)
        key = normalize_address(address)
    except TributaryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if key not in claims:
        click.echo(f"Error: {key} is not in {Path(artifact).name}", err=True)
        sys.exit(1)

    claim = claims[key]
    if output_format.lower() == 'json':
        click.echo(json.dumps(claim.to_dict(), indent=2))
        return

    click.echo(f"Beneficiary: {claim.beneficiary}")
    click.echo(f"Cumulative:  {claim.cumulative_amount}")
    click.echo(f"Leaf:        0x{claim.leaf.hex()}")
    click.echo(f"Root:        0x{claim.root.hex()}")
    click.echo(f"Proof ({len(claim.proof)} siblings):")
    for i, sibling in enumerate(claim.proof):
        click.echo(f"  {i:>3}  0x{sibling.hex()}")


@merkle.command("verify")
@click.argument("address")
@click.argument("amount", type=int)
@click.argument("root")
@click.argument("siblings", nargs=-1)
def verify_command(address, amount, root, siblings):
    """
    Check that ADDRESS with cumulative AMOUNT is included under ROOT.

    SIBLINGS are the proof digests in bottom-up order. Exits 0 when the proof
    verifies and 1 otherwise.

    Examples:

        tributary merkle verify 0xa11ce 500 0x5f...e1 0x9a...07 0x13...c2
    """
    try:
        leaf = hash_leaf(address, amount)
        root_digest = decode_digest(root)
        proof_digests = [decode_digest(s) for s in siblings]
    except (TributaryError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if verify(leaf, proof_digests, root_digest):
        click.echo("valid")
        return

    click.echo("invalid")
    sys.exit(1)
