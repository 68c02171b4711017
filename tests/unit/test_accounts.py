"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Unit tests for the AccountBook balance ledger.
"""

import pytest

from tributary.core.accounts import AccountBook
from tributary.exceptions import (
    AccountNotRegisteredError,
    InsufficientBalanceError,
    InvalidAmountError,
)
from tributary.merkle.codec import normalize_address


class TestAccountBook:
    """Test registration, minting and transfers."""

    def test_register_returns_canonical_key(self):
        book = AccountBook()
        assert book.register("0xA11CE") == normalize_address("0xa11ce")
        assert book.is_registered("0x0a11ce")

    def test_register_is_idempotent(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.mint("0xa11ce", 10)
        book.register("0xa11ce")

        assert book.balance_of("0xa11ce") == 10

    def test_unregistered_balance_is_zero(self):
        book = AccountBook()
        assert book.balance_of("0xa11ce") == 0
        assert not book.is_registered("0xa11ce")

    def test_mint_requires_registration(self):
        book = AccountBook()
        with pytest.raises(AccountNotRegisteredError):
            book.mint("0xa11ce", 10)

    def test_mint_overflow(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.mint("0xa11ce", 2 ** 64 - 1)

        with pytest.raises(InvalidAmountError, match="overflow"):
            book.mint("0xa11ce", 1)

    def test_transfer(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.register("0xb0b")
        book.mint("0xa11ce", 100)

        book.transfer("0xa11ce", "0xb0b", 40)

        assert book.balance_of("0xa11ce") == 60
        assert book.balance_of("0xb0b") == 40

    def test_transfer_insufficient_balance_leaves_book_unchanged(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.register("0xb0b")
        book.mint("0xa11ce", 10)

        with pytest.raises(InsufficientBalanceError):
            book.transfer("0xa11ce", "0xb0b", 11)

        assert book.balance_of("0xa11ce") == 10
        assert book.balance_of("0xb0b") == 0

    def test_transfer_to_unregistered_leaves_book_unchanged(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.mint("0xa11ce", 10)

        with pytest.raises(AccountNotRegisteredError):
            book.transfer("0xa11ce", "0xb0b", 5)

        assert book.balance_of("0xa11ce") == 10
        assert not book.is_registered("0xb0b")

    def test_transfer_rejects_negative_amount(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.register("0xb0b")

        with pytest.raises(InvalidAmountError):
            book.transfer("0xa11ce", "0xb0b", -1)

    def test_transfer_overflow_leaves_book_unchanged(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.register("0xb0b")
        book.mint("0xa11ce", 2 ** 64 - 1)
        book.mint("0xb0b", 2)

        with pytest.raises(InvalidAmountError, match="overflow"):
            book.transfer("0xb0b", "0xa11ce", 1)

        assert book.balance_of("0xa11ce") == 2 ** 64 - 1
        assert book.balance_of("0xb0b") == 2

    def test_transfer_to_self_at_max_balance(self):
        book = AccountBook()
        book.register("0xa11ce")
        book.mint("0xa11ce", 2 ** 64 - 1)

        book.transfer("0xa11ce", "0xa11ce", 5)

        assert book.balance_of("0xa11ce") == 2 ** 64 - 1

    def test_asset_name(self):
        assert AccountBook().asset == "coin"
        assert AccountBook(asset="token").asset == "token"
