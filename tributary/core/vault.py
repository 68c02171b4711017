"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Vault custody for the pooled distribution balance.

The vault is a dedicated account in the AccountBook. Anyone may deposit into
it; value only leaves it through withdraw(), which requires the transfer
capability minted together with the vault. The distribution ledger keeps that
capability private, so no other component can move vault funds.
"""

from typing import Tuple

from tributary.core.accounts import AccountBook
from tributary.exceptions import (
    AccountNotRegisteredError,
    CapabilityError,
    InsufficientBalanceError,
    InsufficientCallerFundsError,
    InsufficientVaultFundsError,
    ReceiverNotEligibleError,
)
from tributary.logging_config import get_logger, log_vault_movement
from tributary.merkle.codec import Address, encode_u64, normalize_address

logger = get_logger(__name__)


class TransferCapability:
    """
    Unforgeable token authorizing withdrawals from one vault.

    Capabilities compare by identity only; holding a different instance,
    even one created the same way, grants nothing.
    """

    __slots__ = ("_vault_account",)

    def __init__(self, vault_account: str):
        self._vault_account = vault_account

    def __repr__(self) -> str:
        return f"<TransferCapability vault={self._vault_account}>"


class VaultCustodian:
    """
    Owner of the pooled balance.

    Use VaultCustodian.create() to obtain the vault together with its
    capability.
    """

    def __init__(self, book: AccountBook, vault_account: Address, capability: TransferCapability):
        self._book = book
        self.account = book.register(vault_account)
        self._capability = capability

    @classmethod
    def create(cls, book: AccountBook, vault_account: Address) -> Tuple["VaultCustodian", TransferCapability]:
        """
        Create a vault account and mint its transfer capability.

        Returns:
            Tuple of (vault, capability)
        """
        account = normalize_address(vault_account)
        capability = TransferCapability(account)
        vault = cls(book, account, capability)
        logger.info("vault_created", vault_account=account, asset=book.asset)
        return vault, capability

    def balance(self) -> int:
        """Current pooled balance."""
        return self._book.balance_of(self.account)

    def can_receive(self, account: Address) -> bool:
        """Whether account can currently accept the asset. The vault never pays itself."""
        if normalize_address(account) == self.account:
            return False
        return self._book.is_registered(account)

    def deposit(self, depositor: Address, amount: int) -> int:
        """
        Move amount from depositor into the vault.

        Returns:
            Vault balance after the deposit

        Raises:
            InsufficientCallerFundsError: If the depositor cannot cover amount
            InvalidAmountError: If the vault balance would overflow u64
        """
        encode_u64(amount)
        depositor = normalize_address(depositor)
        if self._book.balance_of(depositor) < amount:
            raise InsufficientCallerFundsError(
                f"{depositor} holds {self._book.balance_of(depositor)}, cannot deposit {amount}"
            )

        try:
            self._book.transfer(depositor, self.account, amount)
        except (AccountNotRegisteredError, InsufficientBalanceError) as e:
            raise InsufficientCallerFundsError(str(e)) from e

        balance = self.balance()
        log_vault_movement(logger, "deposit", depositor, amount, balance)
        return balance

    def withdraw(self, capability: TransferCapability, recipient: Address, amount: int) -> int:
        """
        Move amount out of the vault to recipient.

        Returns:
            Vault balance after the withdrawal

        Raises:
            CapabilityError: If capability is not this vault's capability
            ReceiverNotEligibleError: If recipient cannot accept the asset
            InsufficientVaultFundsError: If the vault holds less than amount
        """
        if capability is not self._capability:
            raise CapabilityError("transfer capability does not match this vault")

        encode_u64(amount)
        recipient = normalize_address(recipient)
        if not self.can_receive(recipient):
            raise ReceiverNotEligibleError(f"{recipient} cannot accept {self._book.asset}")
        if self.balance() < amount:
            raise InsufficientVaultFundsError(
                f"vault holds {self.balance()}, cannot pay {amount}"
            )

        self._book.transfer(self.account, recipient, amount)

        balance = self.balance()
        log_vault_movement(logger, "withdraw", recipient, amount, balance)
        return balance
