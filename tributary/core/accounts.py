"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

In-process balance ledger for the distributed asset.

The AccountBook stands in for the chain's coin ledger: accounts must be
registered before they can hold the asset, and transfers move value between
registered accounts. Every transfer checks both sides before touching either
balance, so a failed transfer leaves the book unchanged.
"""

from typing import Dict

from tributary.exceptions import (
    AccountNotRegisteredError,
    InsufficientBalanceError,
    InvalidAmountError,
)
from tributary.logging_config import get_logger
from tributary.merkle.codec import Address, encode_u64, normalize_address

logger = get_logger(__name__)


class AccountBook:
    """
    Balances of a single fungible asset keyed by canonical address.

    Example:
        >>> book = AccountBook()
        >>> book.register("0xa11ce")
        >>> book.mint("0xa11ce", 1000)
        >>> book.balance_of("0xa11ce")
        1000
    """

    def __init__(self, asset: str = "coin"):
        self.asset = asset
        self._balances: Dict[str, int] = {}

    def register(self, account: Address) -> str:
        """
        Register an account to hold the asset. Registering twice is a no-op.

        Returns:
            Canonical address of the account
        """
        key = normalize_address(account)
        if key not in self._balances:
            self._balances[key] = 0
            logger.debug("account_registered", account=key, asset=self.asset)
        return key

    def is_registered(self, account: Address) -> bool:
        return normalize_address(account) in self._balances

    def balance_of(self, account: Address) -> int:
        """Balance of an account; unregistered accounts hold 0."""
        return self._balances.get(normalize_address(account), 0)

    def mint(self, account: Address, amount: int) -> None:
        """
        Credit newly created units to a registered account.

        Raises:
            AccountNotRegisteredError: If the account is not registered
            InvalidAmountError: If amount is not a u64
        """
        encode_u64(amount)
        key = self._require_registered(account)
        if self._balances[key] + amount > 2 ** 64 - 1:
            raise InvalidAmountError(f"balance of {key} would overflow u64")
        self._balances[key] += amount

    def transfer(self, sender: Address, recipient: Address, amount: int) -> None:
        """
        Move amount from sender to recipient.

        Raises:
            AccountNotRegisteredError: If either side is not registered
            InsufficientBalanceError: If the sender holds less than amount
            InvalidAmountError: If amount is not a u64 or the recipient's
                balance would overflow u64
        """
        encode_u64(amount)
        source = self._require_registered(sender)
        target = self._require_registered(recipient)

        if self._balances[source] < amount:
            raise InsufficientBalanceError(
                f"{source} holds {self._balances[source]}, cannot transfer {amount}"
            )
        if source != target and self._balances[target] + amount > 2 ** 64 - 1:
            raise InvalidAmountError(f"balance of {target} would overflow u64")

        self._balances[source] -= amount
        self._balances[target] += amount

    def _require_registered(self, account: Address) -> str:
        key = normalize_address(account)
        if key not in self._balances:
            raise AccountNotRegisteredError(f"account {key} is not registered for {self.asset}")
        return key
