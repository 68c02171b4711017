"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Off-ledger distribution building.

The operator feeds the full list of cumulative entitlements through
DistributionTree to obtain the root to publish and one proof per
beneficiary. The result is saved as a JSON artifact that claimants (or
relayers acting for them) read their proofs from.
"""

import csv
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from tributary.core.retry import retry_write_operation
from tributary.exceptions import (
    BeneficiaryNotFoundError,
    DuplicateBeneficiaryError,
    FileReadError,
    FileWriteError,
    InvalidAmountError,
)
from tributary.logging_config import get_logger
from tributary.merkle.codec import Address, encode_u64, hash_leaf, normalize_address
from tributary.merkle.tree import MerkleTree, decode_digest

logger = get_logger(__name__)

ARTIFACT_VERSION = 1


@dataclass(frozen=True)
class Entitlement:
    """Cumulative amount owed to one beneficiary as of a root."""
    beneficiary: str
    cumulative_amount: int

    @classmethod
    def create(cls, beneficiary: Address, cumulative_amount: Any) -> "Entitlement":
        """Validate and normalize a raw (address, amount) pair."""
        amount = _parse_amount(cumulative_amount)
        encode_u64(amount)
        return cls(beneficiary=normalize_address(beneficiary), cumulative_amount=amount)

    @property
    def leaf(self) -> bytes:
        return hash_leaf(self.beneficiary, self.cumulative_amount)


@dataclass(frozen=True)
class ClaimProof:
    """Everything a claimant submits for one beneficiary."""
    beneficiary: str
    cumulative_amount: int
    leaf: bytes
    proof: List[bytes]
    root: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.beneficiary,
            "cumulative_amount": self.cumulative_amount,
            "leaf": "0x" + self.leaf.hex(),
            "proof": ["0x" + h.hex() for h in self.proof],
            "root": "0x" + self.root.hex(),
        }


def _parse_amount(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidAmountError(f"cumulative_amount must be an integer, got: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise InvalidAmountError(f"cumulative_amount must be an integer, got: {value!r}")


def _check_unique(entitlements: Iterable[Entitlement]) -> List[Entitlement]:
    seen = set()
    result = []
    for entitlement in entitlements:
        if entitlement.beneficiary in seen:
            raise DuplicateBeneficiaryError(f"duplicate beneficiary: {entitlement.beneficiary}")
        seen.add(entitlement.beneficiary)
        result.append(entitlement)
    return result


def load_entitlements(path: str) -> List[Entitlement]:
    """
    Load entitlements from a CSV or JSON file.

    CSV files need an ``address,cumulative_amount`` header. JSON files hold
    either a list of ``{"address": ..., "cumulative_amount": ...}`` objects or
    a single ``{address: amount}`` mapping. Order is preserved and determines
    leaf order.

    Raises:
        FileReadError: If the file cannot be read or parsed
        InvalidAddressError, InvalidAmountError: On a malformed row
        DuplicateBeneficiaryError: If a beneficiary appears twice
    """
    file_path = Path(path).expanduser()
    try:
        text = file_path.read_text()
    except OSError as e:
        logger.error(f"Failed to read entitlements from {file_path}: {e}", exc_info=True)
        raise FileReadError(f"Failed to read entitlements from {file_path}: {e}") from e

    if file_path.suffix.lower() == ".csv":
        rows = list(csv.DictReader(text.splitlines()))
        if rows and not {"address", "cumulative_amount"} <= set(rows[0].keys()):
            raise FileReadError(
                f"{file_path}: CSV header must contain address,cumulative_amount"
            )
        pairs = []
        for line_no, row in enumerate(rows, start=2):
            address, amount = row.get("address"), row.get("cumulative_amount")
            if address is None or amount is None:
                raise FileReadError(
                    f"{file_path}:{line_no}: row needs address and cumulative_amount"
                )
            pairs.append((address.strip(), amount))
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise FileReadError(f"Failed to parse entitlements JSON {file_path}: {e}") from e
        if isinstance(data, dict):
            pairs = list(data.items())
        elif isinstance(data, list):
            try:
                pairs = [(item["address"], item["cumulative_amount"]) for item in data]
            except (KeyError, TypeError) as e:
                raise FileReadError(
                    f"{file_path}: every entry needs address and cumulative_amount"
                ) from e
        else:
            raise FileReadError(f"{file_path}: expected a JSON list or object")

    entitlements = _check_unique(Entitlement.create(a, n) for a, n in pairs)
    logger.info(f"Loaded {len(entitlements)} entitlements from {file_path}")
    return entitlements


class DistributionTree:
    """
    Merkle tree over an ordered entitlement list, indexed by beneficiary.

    Example:
        >>> tree = DistributionTree.from_entitlements([
        ...     Entitlement.create("0xa11ce", 500),
        ...     Entitlement.create("0xb0b", 250),
        ... ])
        >>> claim = tree.proof_for("0xa11ce")
        >>> ledger.claim(claim.beneficiary, claim.cumulative_amount, claim.proof)
    """

    def __init__(self, entitlements: List[Entitlement], tree: MerkleTree):
        self.entitlements = entitlements
        self.tree = tree
        self._index = {e.beneficiary: i for i, e in enumerate(entitlements)}

    @classmethod
    def from_entitlements(
        cls,
        entitlements: Iterable[Entitlement],
        proof_cache_size: Optional[int] = None,
    ) -> "DistributionTree":
        """
        Build the tree in entitlement order.

        Raises:
            EmptyInputError: If there are no entitlements
            DuplicateBeneficiaryError: If a beneficiary appears twice
        """
        entitlements = _check_unique(entitlements)
        tree = MerkleTree([e.leaf for e in entitlements], proof_cache_size=proof_cache_size)
        return cls(entitlements, tree)

    @property
    def root(self) -> bytes:
        return self.tree.get_root()

    def __len__(self) -> int:
        return len(self.entitlements)

    def __contains__(self, beneficiary: Address) -> bool:
        return normalize_address(beneficiary) in self._index

    def proof_for(self, beneficiary: Address) -> ClaimProof:
        """
        Proof for one beneficiary.

        Raises:
            BeneficiaryNotFoundError: If beneficiary has no leaf in this tree
        """
        key = normalize_address(beneficiary)
        if key not in self._index:
            raise BeneficiaryNotFoundError(f"{key} is not in this distribution")

        index = self._index[key]
        entitlement = self.entitlements[index]
        merkle_proof = self.tree.generate_proof(index)
        return ClaimProof(
            beneficiary=key,
            cumulative_amount=entitlement.cumulative_amount,
            leaf=merkle_proof.leaf_hash,
            proof=list(merkle_proof.proof_hashes),
            root=merkle_proof.root_hash,
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable artifact: root plus one claim entry per beneficiary."""
        return {
            "version": ARTIFACT_VERSION,
            "root": "0x" + self.root.hex(),
            "leaf_count": len(self.entitlements),
            "claims": [self.proof_for(e.beneficiary).to_dict() for e in self.entitlements],
        }

    def save(self, path: str, max_retries: int = 3, base_delay: float = 0.1) -> Path:
        """
        Write the artifact atomically (temp file, fsync, rename).

        Raises:
            FileWriteError: If the artifact cannot be written
        """
        target = Path(path).expanduser()
        payload = json.dumps(self.to_dict(), indent=2)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, target)
            except OSError:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise

        try:
            retry_write_operation(_write, "save_distribution", max_retries=max_retries, base_delay=base_delay)
        except OSError as e:
            raise FileWriteError(f"Failed to write distribution artifact {target}: {e}") from e

        logger.info(f"Wrote distribution artifact with {len(self)} claims to {target}")
        return target


def load_artifact(path: str) -> Dict[str, ClaimProof]:
    """
    Load a saved artifact as a mapping of canonical address to ClaimProof.

    Raises:
        FileReadError: If the artifact cannot be read or is malformed
    """
    file_path = Path(path).expanduser()
    try:
        data = json.loads(file_path.read_text())
        root = decode_digest(data["root"])
        claims = {}
        for entry in data["claims"]:
            claim = ClaimProof(
                beneficiary=normalize_address(entry["address"]),
                cumulative_amount=int(entry["cumulative_amount"]),
                leaf=decode_digest(entry["leaf"]),
                proof=[decode_digest(h) for h in entry["proof"]],
                root=root,
            )
            claims[claim.beneficiary] = claim
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Failed to load distribution artifact {file_path}: {e}", exc_info=True)
        raise FileReadError(f"Failed to load distribution artifact {file_path}: {e}") from e

    return claims
