"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Core components for Tributary.

This module contains the ledger-side primitives:
- Account book for the distributed asset
- Vault custody with capability-gated withdrawals
- Ledger notifications and the event journal
- The cumulative-claim distribution ledger
"""

from tributary.core.accounts import AccountBook
from tributary.core.vault import TransferCapability, VaultCustodian
from tributary.core.events import (
    AuthorityUpdated,
    Claimed,
    Deposited,
    EventLog,
    JsonlEventSink,
    LedgerEvent,
    RootUpdated,
    Withdrawn,
)
from tributary.core.distribution_ledger import (
    ClaimReceipt,
    DistributionLedger,
    DistributionState,
    LedgerPhase,
    derive_vault_account,
)

__all__ = [
    "AccountBook",
    "TransferCapability",
    "VaultCustodian",
    "AuthorityUpdated",
    "Claimed",
    "Deposited",
    "EventLog",
    "JsonlEventSink",
    "LedgerEvent",
    "RootUpdated",
    "Withdrawn",
    "ClaimReceipt",
    "DistributionLedger",
    "DistributionState",
    "LedgerPhase",
    "derive_vault_account",
]
