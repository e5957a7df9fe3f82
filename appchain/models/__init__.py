"""Value types and HTTP API models."""

from appchain.models.types import Address, Uint256, normalize_address

__all__ = [
    "Address",
    "Uint256",
    "normalize_address",
]
