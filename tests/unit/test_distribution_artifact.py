"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Unit tests for entitlement loading and distribution artifacts.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from tributary.exceptions import (
    BeneficiaryNotFoundError,
    DuplicateBeneficiaryError,
    EmptyInputError,
    FileReadError,
    FileWriteError,
    InvalidAddressError,
    InvalidAmountError,
)
from tributary.merkle.codec import hash_leaf, normalize_address
from tributary.merkle.distribution import (
    ClaimProof,
    DistributionTree,
    Entitlement,
    load_artifact,
    load_entitlements,
)
from tributary.merkle.verifier import verify


class TestEntitlement:
    """Test Entitlement validation."""

    def test_create_normalizes(self):
        entitlement = Entitlement.create("0xA11CE", 500)

        assert entitlement.beneficiary == normalize_address("0xa11ce")
        assert entitlement.cumulative_amount == 500
        assert entitlement.leaf == hash_leaf("0xa11ce", 500)

    def test_create_parses_digit_strings(self):
        assert Entitlement.create("0xa11ce", " 42 ").cumulative_amount == 42

    @pytest.mark.parametrize("amount", ["-1", "1.5", "abc", 1.5, True, None])
    def test_create_rejects_bad_amounts(self, amount):
        with pytest.raises(InvalidAmountError):
            Entitlement.create("0xa11ce", amount)

    def test_create_rejects_overflow(self):
        with pytest.raises(InvalidAmountError):
            Entitlement.create("0xa11ce", 2 ** 64)

    def test_create_rejects_bad_address(self):
        with pytest.raises(InvalidAddressError):
            Entitlement.create("0xnothex", 1)


class TestLoadEntitlements:
    """Test CSV and JSON entitlement loading."""

    def test_load_csv(self, temp_dir: Path):
        path = temp_dir / "entitlements.csv"
        path.write_text("address,cumulative_amount\n0xa11ce,500\n0xb0b,250\n")

        entitlements = load_entitlements(str(path))

        assert [e.cumulative_amount for e in entitlements] == [500, 250]
        assert entitlements[1].beneficiary == normalize_address("0xb0b")

    def test_load_csv_bad_header(self, temp_dir: Path):
        path = temp_dir / "entitlements.csv"
        path.write_text("who,how_much\n0xa11ce,500\n")

        with pytest.raises(FileReadError, match="header"):
            load_entitlements(str(path))

    def test_load_csv_short_row(self, temp_dir: Path):
        path = temp_dir / "entitlements.csv"
        path.write_text("address,cumulative_amount\n0xa11ce,500\n0xb0b\n")

        with pytest.raises(FileReadError, match="row needs address"):
            load_entitlements(str(path))

    def test_load_json_list(self, temp_dir: Path):
        path = temp_dir / "entitlements.json"
        path.write_text(json.dumps([
            {"address": "0xa11ce", "cumulative_amount": 500},
            {"address": "0xb0b", "cumulative_amount": "250"},
        ]))

        entitlements = load_entitlements(str(path))
        assert [e.cumulative_amount for e in entitlements] == [500, 250]

    def test_load_json_mapping_preserves_order(self, temp_dir: Path):
        path = temp_dir / "entitlements.json"
        path.write_text('{"0xb0b": 250, "0xa11ce": 500}')

        entitlements = load_entitlements(str(path))
        assert entitlements[0].beneficiary == normalize_address("0xb0b")

    def test_load_json_missing_fields(self, temp_dir: Path):
        path = temp_dir / "entitlements.json"
        path.write_text(json.dumps([{"address": "0xa11ce"}]))

        with pytest.raises(FileReadError, match="cumulative_amount"):
            load_entitlements(str(path))

    def test_load_json_malformed(self, temp_dir: Path):
        path = temp_dir / "entitlements.json"
        path.write_text("{not json")

        with pytest.raises(FileReadError):
            load_entitlements(str(path))

    def test_load_json_scalar(self, temp_dir: Path):
        path = temp_dir / "entitlements.json"
        path.write_text("7")

        with pytest.raises(FileReadError, match="list or object"):
            load_entitlements(str(path))

    def test_load_missing_file(self, temp_dir: Path):
        with pytest.raises(FileReadError):
            load_entitlements(str(temp_dir / "missing.csv"))

    def test_duplicate_beneficiary(self, temp_dir: Path):
        """Duplicates are detected after normalization."""
        path = temp_dir / "entitlements.csv"
        path.write_text("address,cumulative_amount\n0xa11ce,500\n0x000A11CE,600\n")

        with pytest.raises(DuplicateBeneficiaryError):
            load_entitlements(str(path))


class TestDistributionTree:
    """Test DistributionTree construction and proof lookup."""

    def test_root_matches_every_proof(self, make_tree):
        tree = make_tree(("0xa11ce", 500), ("0xb0b", 250), ("0xca201", 75))

        for entitlement in tree.entitlements:
            claim = tree.proof_for(entitlement.beneficiary)
            assert claim.root == tree.root
            assert verify(claim.leaf, claim.proof, tree.root)

    def test_len_and_contains(self, make_tree):
        tree = make_tree(("0xa11ce", 500), ("0xb0b", 250))

        assert len(tree) == 2
        assert "0xA11CE" in tree
        assert "0xca201" not in tree

    def test_single_entitlement_root_is_leaf(self, make_tree):
        tree = make_tree(("0xa11ce", 500))

        assert tree.root == hash_leaf("0xa11ce", 500)
        assert tree.proof_for("0xa11ce").proof == []

    def test_unknown_beneficiary(self, make_tree):
        tree = make_tree(("0xa11ce", 500))
        with pytest.raises(BeneficiaryNotFoundError):
            tree.proof_for("0xb0b")

    def test_empty_rejected(self):
        with pytest.raises(EmptyInputError):
            DistributionTree.from_entitlements([])

    def test_duplicates_rejected(self):
        with pytest.raises(DuplicateBeneficiaryError):
            DistributionTree.from_entitlements([
                Entitlement.create("0xa11ce", 1),
                Entitlement.create("0xa11ce", 2),
            ])

    def test_to_dict(self, make_tree):
        tree = make_tree(("0xa11ce", 500), ("0xb0b", 250))
        data = tree.to_dict()

        assert data["version"] == 1
        assert data["root"] == "0x" + tree.root.hex()
        assert data["leaf_count"] == 2
        assert [c["address"] for c in data["claims"]] == [
            normalize_address("0xa11ce"),
            normalize_address("0xb0b"),
        ]


class TestArtifactPersistence:
    """Test saving and loading distribution artifacts."""

    def test_save_and_load(self, temp_dir: Path, make_tree):
        tree = make_tree(("0xa11ce", 500), ("0xb0b", 250), ("0xca201", 75))
        path = tree.save(str(temp_dir / "out" / "distribution.json"))

        assert path.exists()
        claims = load_artifact(str(path))

        assert set(claims) == {e.beneficiary for e in tree.entitlements}
        for entitlement in tree.entitlements:
            assert claims[entitlement.beneficiary] == tree.proof_for(entitlement.beneficiary)

    def test_save_leaves_no_temp_files(self, temp_dir: Path, make_tree):
        tree = make_tree(("0xa11ce", 500))
        tree.save(str(temp_dir / "distribution.json"))

        assert [p.name for p in temp_dir.iterdir()] == ["distribution.json"]

    def test_save_overwrites(self, temp_dir: Path, make_tree):
        path = temp_dir / "distribution.json"
        make_tree(("0xa11ce", 500)).save(str(path))
        second = make_tree(("0xa11ce", 900))
        second.save(str(path))

        data = json.loads(path.read_text())
        assert data["root"] == "0x" + second.root.hex()

    def test_save_retries_then_fails(self, temp_dir: Path, make_tree):
        tree = make_tree(("0xa11ce", 500))

        with patch("tributary.merkle.distribution.os.replace", side_effect=OSError("disk full")) as replace:
            with pytest.raises(FileWriteError, match="disk full"):
                tree.save(str(temp_dir / "distribution.json"), max_retries=2, base_delay=0.001)

        assert replace.call_count == 3
        assert list(temp_dir.iterdir()) == []

    def test_load_malformed_artifact(self, temp_dir: Path):
        path = temp_dir / "distribution.json"
        path.write_text(json.dumps({"root": "0x00", "claims": [{"address": "0xa11ce"}]}))

        with pytest.raises(FileReadError):
            load_artifact(str(path))

    def test_claim_proof_to_dict(self):
        claim = ClaimProof(
            beneficiary=normalize_address("0xa11ce"),
            cumulative_amount=5,
            leaf=b"\x01" * 32,
            proof=[b"\x02" * 32],
            root=b"\x03" * 32,
        )

        assert claim.to_dict() == {
            "address": normalize_address("0xa11ce"),
            "cumulative_amount": 5,
            "leaf": "0x" + "01" * 32,
            "proof": ["0x" + "02" * 32],
            "root": "0x" + "03" * 32,
        }
