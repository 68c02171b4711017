"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Merkle proof verification for cumulative entitlement claims.

Verification recomputes the root from a leaf digest and its bottom-up
sibling digests using the same sorted-pair Keccak-256 rule as the builder.
It never raises: malformed input is reported as a failed verification.
"""

from typing import Sequence

from tributary.exceptions import EncodingError
from tributary.merkle.codec import Address, hash_leaf
from tributary.merkle.hashes import hash_pair, is_digest


def verify(leaf_digest: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    """
    Verify that leaf_digest is included under root.

    An empty proof verifies only when the leaf digest equals the root, which
    is the single-leaf tree case.

    Args:
        leaf_digest: 32-byte leaf digest
        proof: Bottom-up sibling digests
        root: Expected 32-byte root

    Returns:
        True if the recomputed root equals root, False otherwise
    """
    if not is_digest(leaf_digest) or not is_digest(root):
        return False
    try:
        siblings = list(proof)
    except TypeError:
        return False

    accumulator = bytes(leaf_digest)
    for sibling in siblings:
        if not is_digest(sibling):
            return False
        accumulator = hash_pair(accumulator, bytes(sibling))

    return accumulator == bytes(root)


def verify_claim(
    beneficiary: Address,
    cumulative_amount: int,
    proof: Sequence[bytes],
    root: bytes,
) -> bool:
    """
    Verify a (beneficiary, cumulative_amount) record against root.

    Returns False if the record cannot be encoded as a leaf.
    """
    try:
        leaf = hash_leaf(beneficiary, cumulative_amount)
    except EncodingError:
        return False
    return verify(leaf, proof, root)
