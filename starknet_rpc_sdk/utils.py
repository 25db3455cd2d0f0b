"""
Utility functions for the Starknet RPC SDK.
"""
import secrets
from typing import Any, Dict, Union

# Prime of the Starknet field
FIELD_PRIME = 2**251 + 17 * 2**192 + 1

# Addresses and storage keys live below 2**251
MAX_STORAGE_ITEM_SIZE = 2**251

FeltLike = Union[int, str]
BlockIdentifier = Union[int, str]

BLOCK_TAGS = ("latest", "pending")


def to_int(value: FeltLike) -> int:
    """
    Parse a felt given as int, decimal string or 0x-prefixed hex string

    Args:
        value: Value to parse

    Returns:
        Integer value

    Raises:
        TypeError: If the value is not an int or a string
        ValueError: If the string is not a valid number
    """
    if isinstance(value, bool):
        raise TypeError("Felt must be an int or a string, got bool")
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Felt must be an int or a string, got {type(value).__name__}")

    text = value.strip()
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text, 10)


def to_felt(value: FeltLike) -> int:
    """
    Parse a value and check it is a valid field element

    Raises:
        ValueError: If the value is negative or not below the field prime
    """
    number = to_int(value)
    if not 0 <= number < FIELD_PRIME:
        raise ValueError(f"Value {value!r} is not a valid field element")
    return number


def to_hex(value: FeltLike) -> str:
    """Lowercase 0x-prefixed hex form of a felt, as sent to the node."""
    return hex(to_felt(value))


def is_felt(value: Any) -> bool:
    try:
        to_felt(value)
    except (TypeError, ValueError):
        return False
    return True


def random_felt() -> str:
    """Random felt below 2**251, suitable as a deploy salt."""
    return hex(secrets.randbelow(MAX_STORAGE_ITEM_SIZE))


def block_identifier_param(block_identifier: BlockIdentifier) -> Union[str, Dict[str, Any]]:
    """
    Convert a block identifier into the shape used by the node

    Args:
        block_identifier: "latest", "pending", a block number or a block hash

    Returns:
        Block tag string, {"block_number": n} or {"block_hash": h}

    Raises:
        ValueError: If the identifier cannot be interpreted
    """
    if isinstance(block_identifier, bool):
        raise ValueError("Block identifier cannot be a bool")
    if isinstance(block_identifier, int):
        if block_identifier < 0:
            raise ValueError(f"Block number must be non-negative, got {block_identifier}")
        return {"block_number": block_identifier}
    if isinstance(block_identifier, str):
        if block_identifier in BLOCK_TAGS:
            return block_identifier
        if block_identifier.lower().startswith("0x"):
            return {"block_hash": to_hex(block_identifier)}
        if block_identifier.isdigit():
            return {"block_number": int(block_identifier)}
    raise ValueError(f"Invalid block identifier: {block_identifier!r}")
