"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Hash primitives shared by the Merkle builder and verifier.

The builder and the verifier must agree byte-for-byte on these functions:
- Leaves are hashed once with SHA-256
- Internal nodes are hashed with Keccak-256 (the pre-standard Keccak
  padding, not SHA3-256)
- Each child pair is ordered by byte value before concatenation

Changing any of these invalidates every published root.
"""

import hashlib

from Crypto.Hash import keccak

DIGEST_SIZE = 32


def sha256(data: bytes) -> bytes:
    """Leaf hash primitive."""
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """Internal-node hash primitive."""
    return keccak.new(digest_bits=256, data=data).digest()


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two child digests into their parent.

    The pair is sorted by byte value (smaller digest first) so the parent
    does not depend on which side each child sits on.

    Args:
        a: First child digest
        b: Second child digest

    Returns:
        Keccak-256 of the sorted concatenation
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def is_digest(value) -> bool:
    """Return True if value is a bytes-like digest of DIGEST_SIZE bytes."""
    return isinstance(value, (bytes, bytearray)) and len(value) == DIGEST_SIZE
