"""Shared type definitions for runtime values.

Runtime code works with plain ints and lowercase hex address strings.
The Annotated types here validate those values where they enter the
runtime from the outside (HTTP requests).
"""

from typing import Annotated, Any, TypeAlias

from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

# Fungible asset identifier on the ledger
TokenId: TypeAlias = int

# Ledger account (user, pool account or fee collector)
AccountId: TypeAlias = str


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


# Account address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an account address to lowercase with a 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for malformed addresses

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not 0x + 40 hex chars
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def short(address: str) -> str:
    """Last 8 hex chars of an address, for log fields."""
    return address[-8:]
