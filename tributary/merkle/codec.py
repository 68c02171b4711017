"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Leaf codec for cumulative entitlement records.

A leaf pre-image is the 40-byte concatenation of:
- the beneficiary address as a 32-byte big-endian identifier, left zero-padded
- the cumulative amount as an 8-byte little-endian unsigned integer

The leaf digest is SHA-256 of that pre-image.
"""

import re
from typing import Union

from tributary.exceptions import InvalidAddressError, InvalidAmountError
from tributary.merkle.hashes import sha256

ADDRESS_SIZE = 32
AMOUNT_SIZE = 8
MAX_U64 = 2 ** 64 - 1

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")

Address = Union[str, bytes]


def encode_address(address: Address) -> bytes:
    """
    Encode an address as a fixed-width 32-byte identifier.

    Hex strings may carry a ``0x`` prefix; odd-length hex gets a leading zero
    nibble. Shorter identifiers are left-padded with zero bytes.

    Args:
        address: Hex string or raw bytes (at most 32 bytes)

    Returns:
        32-byte big-endian identifier

    Raises:
        InvalidAddressError: If the address is not valid hex or is too long
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) > ADDRESS_SIZE:
            raise InvalidAddressError(
                f"address too long (>{ADDRESS_SIZE} bytes): {bytes(address).hex()}"
            )
        return bytes(address).rjust(ADDRESS_SIZE, b"\x00")

    if not isinstance(address, str):
        raise InvalidAddressError(f"address must be a string or bytes, got {type(address).__name__}")

    hex_part = address[2:] if address[:2] in ("0x", "0X") else address
    if not _HEX_RE.match(hex_part):
        raise InvalidAddressError(f"invalid hex: {address}")
    if len(hex_part) > ADDRESS_SIZE * 2:
        raise InvalidAddressError(f"address too long (>{ADDRESS_SIZE} bytes): {address}")
    if len(hex_part) % 2 == 1:
        hex_part = "0" + hex_part

    return bytes.fromhex(hex_part.rjust(ADDRESS_SIZE * 2, "0"))


def normalize_address(address: Address) -> str:
    """Return the canonical ``0x`` + 64 lower-case hex form of an address."""
    return "0x" + encode_address(address).hex()


def encode_u64(amount: int) -> bytes:
    """
    Encode a cumulative amount as 8 little-endian bytes.

    Raises:
        InvalidAmountError: If amount is not an integer in [0, 2**64 - 1]
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"cumulative_amount must be an integer, got: {amount!r}")
    if amount < 0 or amount > MAX_U64:
        raise InvalidAmountError(f"cumulative_amount out of u64 range: {amount}")
    return amount.to_bytes(AMOUNT_SIZE, "little")


def encode(beneficiary: Address, cumulative_amount: int) -> bytes:
    """Encode a leaf pre-image (address || amount)."""
    return encode_address(beneficiary) + encode_u64(cumulative_amount)


def hash_leaf(beneficiary: Address, cumulative_amount: int) -> bytes:
    """Hash a leaf pre-image to its 32-byte digest."""
    return sha256(encode(beneficiary, cumulative_amount))
