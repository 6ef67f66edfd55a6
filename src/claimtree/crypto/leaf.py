"""
Claimtree - Leaf Encoder

Turns one (address, amount) entitlement into the 40-byte leaf payload
and its SHA3-256 digest.

Payload layout:
- 32 bytes: account address, left-padded with zero bytes
- 8 bytes: amount as an unsigned 64-bit little-endian integer

The amount endianness matches the BCS serialization used by the on-chain
verifier. Changing it produces trees that are internally consistent but
whose proofs will never verify on chain.
"""

import hashlib
import re
from decimal import Decimal, InvalidOperation

from claimtree.crypto.errors import EncodingError

ADDRESS_LENGTH = 32
AMOUNT_LENGTH = 8
DIGEST_LENGTH = 32
U64_MAX = 2**64 - 1

HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_DECIMAL_RE = re.compile(r"^[0-9]+$")


def parse_address(value: str | bytes) -> bytes:
    """
    Resolve an account address to exactly 32 bytes.

    Hex strings may carry a ``0x`` prefix; an odd number of hex digits is
    padded with a leading zero nibble. Values shorter than 32 bytes are
    left-padded with zero bytes.

    Args:
        value: Hex string or raw bytes

    Returns:
        32-byte address

    Raises:
        EncodingError: If the value is empty, not hex, or longer than 32 bytes
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        hex_str = value.strip()
        if hex_str[:2] in ("0x", "0X"):
            hex_str = hex_str[2:]
        if not hex_str:
            raise EncodingError(f"Empty address: {value!r}")
        if not HEX_RE.match(hex_str):
            raise EncodingError(f"Address is not hexadecimal: {value!r}")
        if len(hex_str) % 2:
            hex_str = "0" + hex_str
        raw = bytes.fromhex(hex_str)
    else:
        raise EncodingError(f"Unsupported address type: {type(value).__name__}")

    if not raw:
        raise EncodingError("Empty address")
    if len(raw) > ADDRESS_LENGTH:
        raise EncodingError(
            f"Address is {len(raw)} bytes, expected at most {ADDRESS_LENGTH}"
        )

    return raw.rjust(ADDRESS_LENGTH, b"\x00")


def normalize_address(value: str | bytes) -> str:
    """Canonical form of an address: ``0x`` followed by 64 lowercase hex digits."""
    return "0x" + parse_address(value).hex()


def parse_amount(value: int | str | float | Decimal) -> int:
    """
    Resolve an amount to an integer in the unsigned 64-bit range.

    Accepts ints, decimal digit strings and integral floats or Decimals.
    Nothing is truncated or wrapped: anything that does not map exactly to
    a u64 is rejected.

    Raises:
        EncodingError: If the amount is malformed, fractional, negative or
            larger than 2**64 - 1
    """
    if isinstance(value, bool):
        raise EncodingError(f"Amount must be numeric, got bool: {value!r}")

    if isinstance(value, int):
        amount = value
    elif isinstance(value, str):
        text = value.strip()
        if not _DECIMAL_RE.match(text):
            raise EncodingError(f"Amount is not a decimal integer: {value!r}")
        amount = int(text)
    elif isinstance(value, float):
        if not value.is_integer():
            raise EncodingError(f"Amount is not integral: {value!r}")
        amount = int(value)
    elif isinstance(value, Decimal):
        try:
            if not value.is_finite() or value != value.to_integral_value():
                raise EncodingError(f"Amount is not integral: {value!r}")
        except InvalidOperation as e:
            raise EncodingError(f"Invalid amount: {value!r}") from e
        amount = int(value)
    else:
        raise EncodingError(f"Unsupported amount type: {type(value).__name__}")

    if amount < 0:
        raise EncodingError(f"Amount must not be negative: {amount}")
    if amount > U64_MAX:
        raise EncodingError(f"Amount exceeds u64 range: {amount}")

    return amount


def encode_payload(address: str | bytes, amount: int | str | float | Decimal) -> bytes:
    """Build the 40-byte leaf payload ``address || amount_le``."""
    return parse_address(address) + parse_amount(amount).to_bytes(
        AMOUNT_LENGTH, "little"
    )


def encode_leaf(address: str | bytes, amount: int | str | float | Decimal) -> bytes:
    """
    Compute the leaf digest for one entitlement.

    Args:
        address: Account address (hex string or bytes)
        amount: Entitled amount (u64)

    Returns:
        32-byte SHA3-256 digest of the leaf payload

    Raises:
        EncodingError: If the address or amount is malformed
    """
    return hashlib.sha3_256(encode_payload(address, amount)).digest()
