"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Tributary - Cumulative Merkle Distribution

Tributary pays out a pooled balance to beneficiaries against published Merkle
commitments of cumulative entitlements, settling only the unclaimed delta on
each claim.
"""

from tributary._version import __version__

__all__ = ["__version__"]
