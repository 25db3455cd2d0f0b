"""
Hashing helpers for entry point selectors.
"""
from web3 import Web3

MASK_250 = 2**250 - 1

DEFAULT_ENTRY_POINT_NAME = "__default__"
DEFAULT_L1_ENTRY_POINT_NAME = "__l1_default__"
DEFAULT_ENTRY_POINT_SELECTOR = 0

# NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.


def starknet_keccak(data: bytes) -> int:
    """Keccak-256 of data truncated to its 250 least significant bits."""
    return int.from_bytes(Web3.keccak(primitive=data), "big") & MASK_250


def get_selector_from_name(name: str) -> int:
    """
    Compute the selector of a contract entry point

    Args:
        name: Entry point name, e.g. "transfer"

    Returns:
        Selector as an int
    """
    if name in (DEFAULT_ENTRY_POINT_NAME, DEFAULT_L1_ENTRY_POINT_NAME):
        return DEFAULT_ENTRY_POINT_SELECTOR
    return starknet_keccak(name.encode("utf-8"))
