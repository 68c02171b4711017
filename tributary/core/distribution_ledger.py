"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Cumulative-claim distribution ledger.

The DistributionLedger holds the published Merkle root, per-beneficiary
claimed totals, the authority identity and the aggregate claimed amount. It
settles claims by paying only the difference between a beneficiary's
entitled cumulative amount and what that beneficiary has already claimed.

Two identities are involved:
- the deployer, fixed at construction, may only run initialize()
- the authority, set to the deployer by initialize(), gates publish_root(),
  rotate_authority() and withdraw(); rotating it revokes the previous
  holder's rights immediately

Every operation validates before it mutates. An operation that raises leaves
the state, the vault and the event log exactly as they were.
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Union

from tributary.core.accounts import AccountBook
from tributary.core.events import (
    AuthorityUpdated,
    Claimed,
    Deposited,
    EventLog,
    JsonlEventSink,
    RootUpdated,
    Withdrawn,
)
from tributary.core.vault import TransferCapability, VaultCustodian
from tributary.exceptions import (
    AlreadyInitializedError,
    EncodingError,
    InsufficientVaultFundsError,
    InvalidConfigurationError,
    InvalidProofError,
    InvalidRootError,
    NotAuthorityError,
    NotDeployerError,
    NothingToClaimError,
    NotInitializedError,
    ReceiverNotEligibleError,
    TributaryError,
)
from tributary.logging_config import (
    get_logger,
    log_authority_rotation,
    log_claim_rejection,
    log_claim_settlement,
    log_merkle_verification,
    log_root_publication,
)
from tributary.merkle.codec import Address, encode_address, encode_u64, hash_leaf, normalize_address
from tributary.merkle.hashes import DIGEST_SIZE
from tributary.merkle.tree import decode_digest
from tributary.merkle.verifier import verify

logger = get_logger(__name__)

VAULT_SEED = b"tributary::vault"


def derive_vault_account(deployer: Address, seed: bytes = VAULT_SEED) -> str:
    """
    Derive the vault's account address from the deployer.

    The address is SHA3-256(deployer || seed || 0xFF), so each deployer gets
    one deterministic vault that no key controls.
    """
    digest = hashlib.sha3_256(encode_address(deployer) + seed + b"\xff").digest()
    return normalize_address(digest)


class LedgerPhase(str, Enum):
    """Lifecycle phase of a distribution ledger."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED_NO_ROOT = "initialized-no-root"
    ROOT_PUBLISHED = "root-published"


@dataclass
class DistributionState:
    """
    Mutable state of one distribution.

    Attributes:
        authority: Canonical address allowed to run privileged operations
        current_root: Published Merkle root, or None before the first publication
        claimed_totals: Cumulative amount already paid, per canonical beneficiary
        total_claimed: Sum of every settled payout
        initialized: Whether initialize() has run
    """
    authority: str = ""
    current_root: Optional[bytes] = None
    claimed_totals: Dict[str, int] = field(default_factory=dict)
    total_claimed: int = 0
    initialized: bool = False

    def get_claimed(self, beneficiary: Address) -> int:
        """Claimed total for beneficiary, 0 if it never claimed."""
        return self.claimed_totals.get(normalize_address(beneficiary), 0)


@dataclass(frozen=True)
class ClaimReceipt:
    """Outcome of a settled claim."""
    beneficiary: str
    payout: int
    cumulative_claimed: int


class DistributionLedger:
    """
    State machine for cumulative Merkle distributions.

    Example:
        >>> book = AccountBook()
        >>> ledger = DistributionLedger(deployer="0xd3", book=book)
        >>> ledger.initialize("0xd3")
        >>> ledger.publish_root("0xd3", tree.get_root())
        >>> receipt = ledger.claim("0xa11ce", 500, proof)
    """

    def __init__(
        self,
        deployer: Address,
        book: AccountBook,
        vault_account: Optional[Address] = None,
        state: Optional[DistributionState] = None,
        events: Optional[EventLog] = None,
    ):
        """
        Create an uninitialized ledger.

        Args:
            deployer: Identity allowed to run initialize()
            book: Balance ledger holding the distributed asset
            vault_account: Vault address (default: derived from deployer)
            state: State instance to operate on (default: fresh state)
            events: Event log to emit into (default: fresh log)
        """
        self.deployer = normalize_address(deployer)
        self.book = book
        self.vault_account = normalize_address(
            vault_account if vault_account is not None else derive_vault_account(self.deployer)
        )
        self.state = state if state is not None else DistributionState()
        self.events = events if events is not None else EventLog()

        self._vault: Optional[VaultCustodian] = None
        self._capability: Optional[TransferCapability] = None

    @classmethod
    def from_config(cls, config, book: AccountBook, journal: bool = True) -> "DistributionLedger":
        """
        Create a ledger from the ``distribution`` and ``storage`` config sections.

        Args:
            config: TributaryConfig
            book: Balance ledger holding the distributed asset
            journal: Append events to storage.event_journal

        Raises:
            InvalidConfigurationError: If no deployer is configured
        """
        if not config.distribution.deployer:
            raise InvalidConfigurationError("distribution.deployer must be set")

        ledger = cls(
            deployer=config.distribution.deployer,
            book=book,
            vault_account=config.distribution.vault_account or None,
        )
        if journal:
            ledger.events.subscribe(JsonlEventSink(config.storage.event_journal))
        return ledger

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> LedgerPhase:
        if not self.state.initialized:
            return LedgerPhase.UNINITIALIZED
        if self.state.current_root is None:
            return LedgerPhase.INITIALIZED_NO_ROOT
        return LedgerPhase.ROOT_PUBLISHED

    @property
    def current_root(self) -> Optional[bytes]:
        return self.state.current_root

    @property
    def authority(self) -> str:
        return self.state.authority

    @property
    def total_claimed(self) -> int:
        return self.state.total_claimed

    @property
    def vault_balance(self) -> int:
        return self._require_vault().balance()

    def get_claimed(self, beneficiary: Address) -> int:
        """Claimed total for beneficiary (0 if never claimed)."""
        return self.state.get_claimed(beneficiary)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the observable state, including the vault balance."""
        return {
            "phase": self.phase.value,
            "authority": self.state.authority,
            "current_root": self.state.current_root,
            "claimed_totals": dict(self.state.claimed_totals),
            "total_claimed": self.state.total_claimed,
            "vault_balance": self._vault.balance() if self._vault is not None else 0,
            "event_count": len(self.events),
        }

    # ------------------------------------------------------------------
    # Lifecycle and privileged operations
    # ------------------------------------------------------------------

    def initialize(self, caller: Address) -> None:
        """
        One-time initialization by the deployer.

        Creates the vault, sets the authority to the deployer and zeroes the
        counters.

        Raises:
            NotDeployerError: If caller is not the deployer
            AlreadyInitializedError: If the ledger is already initialized
        """
        caller = normalize_address(caller)
        if caller != self.deployer:
            logger.warning("initialize_denied", caller=caller, deployer=self.deployer)
            raise NotDeployerError(f"{caller} is not the deployer")
        if self.state.initialized:
            raise AlreadyInitializedError("distribution ledger is already initialized")

        self._vault, self._capability = VaultCustodian.create(self.book, self.vault_account)

        self.state.authority = self.deployer
        self.state.current_root = None
        self.state.claimed_totals = {}
        self.state.total_claimed = 0
        self.state.initialized = True

        logger.info(
            "distribution_initialized",
            deployer=self.deployer,
            vault_account=self.vault_account,
        )

    def publish_root(self, caller: Address, new_root: Union[bytes, str]) -> None:
        """
        Replace the current root.

        The root is not checked for tree well-formedness; only its shape.

        Raises:
            NotAuthorityError: If caller is not the current authority
            InvalidRootError: If new_root is not a 32-byte digest
        """
        caller = self._require_authority(caller, "publish_root")
        root = _coerce_root(new_root)

        old_root = self.state.current_root
        self.state.current_root = root

        log_root_publication(
            logger,
            published_by=caller,
            old_root=old_root.hex() if old_root is not None else None,
            new_root=root.hex(),
        )
        self.events.emit(RootUpdated(old_root=old_root, new_root=root))

    def rotate_authority(self, caller: Address, new_authority: Address) -> None:
        """
        Hand the authority role to new_authority.

        Raises:
            NotAuthorityError: If caller is not the current authority
            InvalidAddressError: If new_authority is not a valid address
        """
        caller = self._require_authority(caller, "rotate_authority")
        new_authority = normalize_address(new_authority)

        self.state.authority = new_authority

        log_authority_rotation(logger, old_authority=caller, new_authority=new_authority)
        self.events.emit(AuthorityUpdated(old_authority=caller, new_authority=new_authority))

    def deposit(self, caller: Address, amount: int) -> int:
        """
        Move amount from caller's account into the vault. Open to anyone.

        Returns:
            Vault balance after the deposit

        Raises:
            InsufficientCallerFundsError: If caller holds less than amount
            InvalidAmountError: If the vault balance would overflow u64
        """
        vault = self._require_vault()
        caller = normalize_address(caller)

        balance = vault.deposit(caller, amount)

        self.events.emit(Deposited(depositor=caller, amount=amount))
        return balance

    def withdraw(self, caller: Address, amount: int) -> int:
        """
        Move amount from the vault to the authority.

        Returns:
            Vault balance after the withdrawal

        Raises:
            NotAuthorityError: If caller is not the current authority
            InsufficientVaultFundsError: If the vault holds less than amount
        """
        caller = self._require_authority(caller, "withdraw")
        vault = self._require_vault()
        encode_u64(amount)

        if vault.balance() < amount:
            logger.warning("withdraw_denied", caller=caller, amount=amount, vault_balance=vault.balance())
            raise InsufficientVaultFundsError(
                f"vault holds {vault.balance()}, cannot withdraw {amount}"
            )

        balance = vault.withdraw(self._capability, caller, amount)

        self.events.emit(Withdrawn(recipient=caller, amount=amount))
        return balance

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def claim(
        self,
        beneficiary: Address,
        entitled_cumulative: int,
        proof: Sequence[bytes],
    ) -> ClaimReceipt:
        """
        Settle a claim for beneficiary. Open to any caller; funds always go
        to beneficiary.

        Args:
            beneficiary: Beneficiary address as committed in the leaf
            entitled_cumulative: Cumulative entitlement committed in the leaf
            proof: Bottom-up sibling digests for the leaf

        Returns:
            ClaimReceipt with the delta payout

        Raises:
            InvalidProofError: If the leaf is not included under the current root
            NothingToClaimError: If entitled_cumulative <= the claimed total
            ReceiverNotEligibleError: If beneficiary cannot accept the asset
            InsufficientVaultFundsError: If the vault cannot cover the payout
        """
        vault = self._require_vault()
        root = self.state.current_root

        try:
            leaf = hash_leaf(beneficiary, entitled_cumulative)
            key = normalize_address(beneficiary)
        except EncodingError as e:
            self._reject(str(beneficiary), entitled_cumulative, InvalidProofError(f"malformed claim: {e}"))

        if root is None or not verify(leaf, proof, root):
            log_merkle_verification(
                logger,
                success=False,
                proof_length=len(proof) if isinstance(proof, (list, tuple)) else 0,
                failure_reason="no_root" if root is None else "root_mismatch",
                beneficiary=key,
            )
            self._reject(key, entitled_cumulative, InvalidProofError(
                f"proof for {key} does not verify against the current root"
            ))

        claimed = self.state.get_claimed(key)
        if entitled_cumulative <= claimed:
            self._reject(key, entitled_cumulative, NothingToClaimError(
                f"{key} already claimed {claimed}, entitlement is {entitled_cumulative}"
            ))

        payout = entitled_cumulative - claimed

        if not vault.can_receive(key):
            self._reject(key, entitled_cumulative, ReceiverNotEligibleError(
                f"{key} cannot accept {self.book.asset}"
            ))
        if vault.balance() < payout:
            self._reject(key, entitled_cumulative, InsufficientVaultFundsError(
                f"vault holds {vault.balance()}, cannot pay {payout}"
            ))

        # Transfer first; the writes below cannot fail, so both land or neither does.
        vault.withdraw(self._capability, key, payout)

        self.state.claimed_totals[key] = entitled_cumulative
        self.state.total_claimed += payout

        log_claim_settlement(logger, beneficiary=key, payout=payout, cumulative_claimed=entitled_cumulative)
        self.events.emit(Claimed(beneficiary=key, amount=payout))

        return ClaimReceipt(beneficiary=key, payout=payout, cumulative_claimed=entitled_cumulative)

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _require_initialized(self) -> None:
        if not self.state.initialized:
            raise NotInitializedError("distribution ledger is not initialized")

    def _require_vault(self) -> VaultCustodian:
        self._require_initialized()
        if self._vault is None:
            raise NotInitializedError("distribution ledger has no vault")
        return self._vault

    def _require_authority(self, caller: Address, operation: str) -> str:
        self._require_initialized()
        caller = normalize_address(caller)
        if caller != self.state.authority:
            logger.warning(
                "privileged_operation_denied",
                operation=operation,
                caller=caller,
                authority=self.state.authority,
            )
            raise NotAuthorityError(f"{caller} is not the current authority")
        return caller

    def _reject(self, beneficiary: str, entitled_cumulative: Any, error: TributaryError) -> None:
        log_claim_rejection(
            logger,
            beneficiary=beneficiary,
            entitled_cumulative=entitled_cumulative,
            reason=type(error).__name__,
        )
        raise error


def _coerce_root(value: Union[bytes, str]) -> bytes:
    if isinstance(value, str):
        try:
            value = decode_digest(value)
        except ValueError as e:
            raise InvalidRootError(f"root is not valid hex: {value}") from e
    if not isinstance(value, (bytes, bytearray)) or len(value) != DIGEST_SIZE:
        raise InvalidRootError(f"root must be a {DIGEST_SIZE}-byte digest")
    return bytes(value)
