"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Exception hierarchy for Tributary.

All custom exceptions inherit from TributaryError base class.
"""


class TributaryError(Exception):
    """Base exception for all Tributary errors."""
    pass


# Encoding Errors
class EncodingError(TributaryError):
    """Base exception for leaf encoding errors."""
    pass


class InvalidAddressError(EncodingError):
    """Raised when an address cannot be encoded as a 32-byte identifier."""
    pass


class InvalidAmountError(EncodingError):
    """Raised when an amount is not an unsigned 64-bit integer."""
    pass


class DuplicateBeneficiaryError(EncodingError):
    """Raised when an entitlement list names the same beneficiary twice."""
    pass


# Merkle Errors
class MerkleError(TributaryError):
    """Base exception for Merkle tree errors."""
    pass


class EmptyInputError(MerkleError):
    """Raised when building a tree from zero leaves."""
    pass


class ProofIndexError(MerkleError):
    """Raised when a proof is requested for a leaf index outside the tree."""
    pass


class InvalidRootError(MerkleError):
    """Raised when a published root is not a 32-byte digest."""
    pass


class BeneficiaryNotFoundError(MerkleError):
    """Raised when a distribution tree has no leaf for a beneficiary."""
    pass


# Authorization Errors
class AuthorizationError(TributaryError):
    """Base exception for authorization errors."""
    pass


class NotDeployerError(AuthorizationError):
    """Raised when initialization is attempted by anyone but the deployer."""
    pass


class NotAuthorityError(AuthorizationError):
    """Raised when a privileged operation is attempted by a non-authority."""
    pass


class CapabilityError(AuthorizationError):
    """Raised when a vault withdrawal presents the wrong transfer capability."""
    pass


# Ledger State Errors
class LedgerStateError(TributaryError):
    """Base exception for ledger lifecycle errors."""
    pass


class NotInitializedError(LedgerStateError):
    """Raised when the ledger is used before initialization."""
    pass


class AlreadyInitializedError(LedgerStateError):
    """Raised when initialization is attempted a second time."""
    pass


# Proof Errors
class ProofError(TributaryError):
    """Base exception for claim proof errors."""
    pass


class InvalidProofError(ProofError):
    """Raised when a claim proof does not verify against the current root."""
    pass


# Accounting Errors
class AccountingError(TributaryError):
    """Base exception for claim accounting errors."""
    pass


class NothingToClaimError(AccountingError):
    """Raised when the entitled cumulative amount does not exceed the claimed total."""
    pass


# Funding Errors
class FundingError(TributaryError):
    """Base exception for funding errors."""
    pass


class InsufficientCallerFundsError(FundingError):
    """Raised when a depositor's balance is below the deposit amount."""
    pass


class InsufficientVaultFundsError(FundingError):
    """Raised when the vault balance is below a payout or withdrawal."""
    pass


# Eligibility Errors
class EligibilityError(TributaryError):
    """Base exception for receiver eligibility errors."""
    pass


class ReceiverNotEligibleError(EligibilityError):
    """Raised when the beneficiary account cannot currently accept the asset."""
    pass


# Account Book Errors
class AccountError(TributaryError):
    """Base exception for balance ledger errors."""
    pass


class AccountNotRegisteredError(AccountError):
    """Raised when an account is not registered for the asset."""
    pass


class InsufficientBalanceError(AccountError):
    """Raised when an account balance is below a transfer amount."""
    pass


# Configuration Errors
class ConfigurationError(TributaryError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass


# Storage and Persistence Errors
class StorageError(TributaryError):
    """Base exception for storage-related errors."""
    pass


class FileWriteError(StorageError):
    """Raised when writing to a file fails."""
    pass


class FileReadError(StorageError):
    """Raised when reading from a file fails."""
    pass
