"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Merkle commitments for cumulative entitlements.

This package provides the leaf codec, tree construction, proof generation and
proof verification shared by the off-ledger builder and the ledger.
"""

from tributary.merkle.hashes import DIGEST_SIZE, hash_pair, keccak256, sha256
from tributary.merkle.codec import encode, encode_address, encode_u64, hash_leaf, normalize_address
from tributary.merkle.tree import MerkleProof, MerkleTree, MerkleTreeBuilder, build_levels, build_proof
from tributary.merkle.verifier import verify, verify_claim
from tributary.merkle.distribution import (
    ClaimProof,
    DistributionTree,
    Entitlement,
    load_artifact,
    load_entitlements,
)

__all__ = [
    "DIGEST_SIZE",
    "hash_pair",
    "keccak256",
    "sha256",
    "encode",
    "encode_address",
    "encode_u64",
    "hash_leaf",
    "normalize_address",
    "MerkleProof",
    "MerkleTree",
    "MerkleTreeBuilder",
    "build_levels",
    "build_proof",
    "verify",
    "verify_claim",
    "ClaimProof",
    "DistributionTree",
    "Entitlement",
    "load_artifact",
    "load_entitlements",
]
