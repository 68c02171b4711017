"""
Pytest configuration and shared fixtures for Tributary tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tributary.core.accounts import AccountBook
from tributary.core.distribution_ledger import DistributionLedger
from tributary.merkle.distribution import DistributionTree, Entitlement


DEPLOYER = "0xd3"
ALICE = "0xa11ce"
BOB = "0xb0b"
CAROL = "0xca201"
RELAYER = "0x5e1a7"


def create_test_config_content(temp_dir: Path, **overrides) -> str:
    """
    Generate test configuration YAML content.

    Args:
        temp_dir: Temporary directory for storage paths.
        **overrides: Values for the distribution section.

    Returns:
        YAML configuration content as string.
    """
    deployer = overrides.get("deployer", "'0x00000000000000000000000000000000000000000000000000000000000000d3'")
    return f"""
storage:
  artifacts_dir: {temp_dir}/artifacts
  event_journal: {temp_dir}/events.jsonl

distribution:
  deployer: {deployer}

merkle:
  proof_cache_size: 64

logging:
  level: INFO
  file: {temp_dir}/tributary.log
  format: json

performance:
  max_retries: 2
  retry_base_delay_s: 0.01
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_path(temp_dir: Path) -> Path:
    """Create a sample configuration file for testing."""
    config_path = temp_dir / "config.yaml"
    config_path.write_text(create_test_config_content(temp_dir))
    return config_path


@pytest.fixture
def book() -> AccountBook:
    """Account book with the deployer, Alice, Bob and a relayer registered."""
    book = AccountBook()
    for account in (DEPLOYER, ALICE, BOB, RELAYER):
        book.register(account)
    book.mint(DEPLOYER, 10_000)
    return book


@pytest.fixture
def ledger(book: AccountBook) -> DistributionLedger:
    """Initialized ledger with no root and an empty vault."""
    ledger = DistributionLedger(deployer=DEPLOYER, book=book)
    ledger.initialize(DEPLOYER)
    return ledger


@pytest.fixture
def make_tree():
    """Factory building a DistributionTree from (address, amount) pairs."""
    def _make_tree(*pairs):
        return DistributionTree.from_entitlements(
            [Entitlement.create(address, amount) for address, amount in pairs]
        )
    return _make_tree


@pytest.fixture
def publish(ledger: DistributionLedger, make_tree):
    """Build a tree over pairs and publish its root as the deployer."""
    def _publish(*pairs):
        tree = make_tree(*pairs)
        ledger.publish_root(DEPLOYER, tree.root)
        return tree
    return _publish
