"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Merkle tree construction for cumulative entitlement distributions.

This module builds a binary Merkle tree over leaf digests produced by the
leaf codec. It supports:
- Level construction with sorted-pair Keccak-256 internal nodes
- Self-pairing of the last node on odd-sized levels
- Bottom-up inclusion proof generation for any leaf
- Parallel level folding for large distributions
- Builder pattern for convenient tree construction

A single-leaf tree has the leaf digest itself as its root, with no internal
hashing round. The verifier treats an empty proof the same way.
"""

import concurrent.futures
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tributary.exceptions import EmptyInputError, ProofIndexError
from tributary.logging_config import get_logger, log_merkle_root_computation
from tributary.merkle.hashes import hash_pair

logger = get_logger(__name__)

# Levels at least this wide are folded on a thread pool
PARALLEL_THRESHOLD = 1024


def _pairs(level: Sequence[bytes]):
    for i in range(0, len(level), 2):
        a = level[i]
        b = level[i + 1] if i + 1 < len(level) else level[i]
        yield a, b


def _fold(level: Sequence[bytes], executor=None) -> List[bytes]:
    if executor is None:
        return [hash_pair(a, b) for a, b in _pairs(level)]
    return list(executor.map(lambda p: hash_pair(p[0], p[1]), _pairs(level)))


def build_levels(leaf_digests: Sequence[bytes], use_parallel: bool = True) -> List[List[bytes]]:
    """
    Build every level of the tree, leaves first.

    Args:
        leaf_digests: Ordered, non-empty sequence of 32-byte leaf digests
        use_parallel: Fold wide levels on a thread pool

    Returns:
        List of levels; levels[0] is the leaves and levels[-1] holds only the root

    Raises:
        EmptyInputError: If leaf_digests is empty
    """
    if not leaf_digests:
        raise EmptyInputError("Cannot build Merkle tree from empty leaves list")

    levels = [[bytes(d) for d in leaf_digests]]
    executor = None
    if use_parallel and len(leaf_digests) >= PARALLEL_THRESHOLD:
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=4)

    try:
        while len(levels[-1]) > 1:
            current = levels[-1]
            pool = executor if executor is not None and len(current) >= PARALLEL_THRESHOLD else None
            levels.append(_fold(current, pool))
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    return levels


def build_proof(levels: Sequence[Sequence[bytes]], leaf_index: int) -> List[bytes]:
    """
    Collect the sibling digests from a leaf up to, but excluding, the root.

    Args:
        levels: Output of build_levels
        leaf_index: Index of the leaf (0-based)

    Returns:
        Bottom-up list of sibling digests

    Raises:
        ProofIndexError: If leaf_index is out of range
    """
    leaf_count = len(levels[0]) if levels else 0
    if leaf_index < 0 or leaf_index >= leaf_count:
        raise ProofIndexError(f"Leaf index {leaf_index} out of range [0, {leaf_count})")

    proof = []
    index = leaf_index
    for height in range(len(levels) - 1):
        current = levels[height]
        if index % 2 == 0:
            sibling = index + 1 if index + 1 < len(current) else index
        else:
            sibling = index - 1
        proof.append(current[sibling])
        index //= 2

    return proof


@dataclass
class MerkleProof:
    """
    Proof that a leaf is included in a Merkle tree.

    Attributes:
        leaf_hash: Digest of the leaf being proven
        proof_hashes: Sibling digests from leaf to root (bottom-up)
        root_hash: Root the proof was generated against
        leaf_index: Position of the leaf in level 0
    """
    leaf_hash: bytes
    proof_hashes: List[bytes] = field(default_factory=list)
    root_hash: bytes = b""
    leaf_index: int = 0

    def verify(self, root: Optional[bytes] = None) -> bool:
        """Verify this proof against root (defaults to root_hash)."""
        from tributary.merkle.verifier import verify

        return verify(self.leaf_hash, self.proof_hashes, self.root_hash if root is None else root)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary with 0x-prefixed hex digests."""
        return {
            "leaf_index": self.leaf_index,
            "leaf": "0x" + self.leaf_hash.hex(),
            "proof": ["0x" + h.hex() for h in self.proof_hashes],
            "root": "0x" + self.root_hash.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MerkleProof":
        """Create MerkleProof from dictionary produced by to_dict."""
        return cls(
            leaf_hash=decode_digest(data["leaf"]),
            proof_hashes=[decode_digest(h) for h in data.get("proof", [])],
            root_hash=decode_digest(data["root"]),
            leaf_index=int(data.get("leaf_index", 0)),
        )


def decode_digest(value: str) -> bytes:
    """Decode a hex digest with or without 0x prefix."""
    if value[:2] in ("0x", "0X"):
        value = value[2:]
    return bytes.fromhex(value)


class MerkleTree:
    """
    Binary Merkle tree over pre-hashed leaves.

    Internal nodes are Keccak-256 over the byte-sorted concatenation of the
    two children. If a level has an odd number of nodes, the last node is
    paired with itself.

    Example:
        >>> leaves = [hash_leaf("0x1", 500), hash_leaf("0x2", 250)]
        >>> tree = MerkleTree(leaves)
        >>> proof = tree.generate_proof(0)
        >>> assert proof.verify()
    """

    # Proof cache size limit
    MAX_PROOF_CACHE_SIZE = 1000

    def __init__(
        self,
        leaf_digests: Sequence[bytes],
        use_parallel: bool = True,
        proof_cache_size: Optional[int] = None,
    ):
        """
        Build Merkle tree from leaf digests.

        Args:
            leaf_digests: Ordered leaf digests (already hashed by the leaf codec)
            use_parallel: Enable parallel folding for large trees (default: True)
            proof_cache_size: Maximum number of cached proofs

        Raises:
            EmptyInputError: If leaf_digests is empty
        """
        start = time.perf_counter()
        self.levels = build_levels(leaf_digests, use_parallel=use_parallel)
        self.leaves = self.levels[0]
        self.leaf_count = len(self.leaves)

        self._cache_limit = self.MAX_PROOF_CACHE_SIZE if proof_cache_size is None else proof_cache_size
        self._proof_cache: Dict[int, Tuple[bytes, ...]] = {}

        log_merkle_root_computation(
            logger,
            leaf_count=self.leaf_count,
            merkle_root=self.get_root().hex(),
            duration_ms=(time.perf_counter() - start) * 1000,
            height=self.height,
        )

    @property
    def height(self) -> int:
        """Number of hashing rounds between the leaves and the root."""
        return len(self.levels) - 1

    def get_root(self) -> bytes:
        """Get the Merkle root hash."""
        return self.levels[-1][0]

    def generate_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate Merkle proof for a leaf at the given index.

        Args:
            leaf_index: Index of the leaf (0-based)

        Returns:
            MerkleProof containing the bottom-up sibling digests

        Raises:
            ProofIndexError: If leaf_index is out of range
        """
        if leaf_index in self._proof_cache:
            proof_hashes = self._proof_cache[leaf_index]
        else:
            proof_hashes = tuple(build_proof(self.levels, leaf_index))
            if len(self._proof_cache) < self._cache_limit:
                self._proof_cache[leaf_index] = proof_hashes

        # Each call returns its own list.
        return MerkleProof(
            leaf_hash=self.leaves[leaf_index],
            proof_hashes=list(proof_hashes),
            root_hash=self.get_root(),
            leaf_index=leaf_index,
        )


class MerkleTreeBuilder:
    """
    Builder class for constructing Merkle trees from leaf digests.

    Example:
        >>> builder = MerkleTreeBuilder()
        >>> root = builder.build_tree(leaf_digests).get_root()
        >>> proof = builder.get_proof(0)
    """

    def __init__(self, proof_cache_size: Optional[int] = None):
        """Initialize the Merkle tree builder."""
        self._tree: Optional[MerkleTree] = None
        self._proof_cache_size = proof_cache_size

    def build_tree(self, leaf_digests: Sequence[bytes]) -> "MerkleTreeBuilder":
        """
        Build Merkle tree from leaf digests.

        Returns:
            Self for method chaining

        Raises:
            EmptyInputError: If leaf_digests is empty
        """
        self._tree = MerkleTree(leaf_digests, proof_cache_size=self._proof_cache_size)
        logger.debug(f"Built Merkle tree with {len(leaf_digests)} leaves")
        return self

    @property
    def tree(self) -> MerkleTree:
        if self._tree is None:
            raise RuntimeError("Tree has not been built yet. Call build_tree() first.")
        return self._tree

    def get_root(self) -> bytes:
        """
        Get the Merkle root hash.

        Raises:
            RuntimeError: If tree has not been built yet
        """
        return self.tree.get_root()

    def get_proof(self, leaf_index: int) -> MerkleProof:
        """
        Generate Merkle proof for the leaf at given index.

        Raises:
            RuntimeError: If tree has not been built yet
            ProofIndexError: If leaf_index is out of range
        """
        return self.tree.generate_proof(leaf_index)
