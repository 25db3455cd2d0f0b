"""
Short string codec.

Cairo stores short strings (at most 31 bytes) in a single felt, reading the
UTF-8 bytes of the string as a big-endian integer.
"""
from .exceptions import InputTooLongError
from .utils import FeltLike, to_felt

SHORT_STRING_MAX_BYTES = 31


def is_ascii(text: str) -> bool:
    return all(ord(char) < 128 for char in text)


def is_short_string(text: str) -> bool:
    return len(text.encode("utf-8")) <= SHORT_STRING_MAX_BYTES


def encode_short_string(text: str) -> str:
    """
    Encode a short string into a felt

    Args:
        text: String whose UTF-8 encoding is at most 31 bytes

    Returns:
        0x-prefixed hex felt

    Raises:
        TypeError: If text is not a string
        InputTooLongError: If the encoded string is longer than 31 bytes
        ValueError: If the string starts with a NUL character
    """
    if not isinstance(text, str):
        raise TypeError(f"Short string must be a str, got {type(text).__name__}")

    raw = text.encode("utf-8")
    if len(raw) > SHORT_STRING_MAX_BYTES:
        raise InputTooLongError(
            f"Short string is {len(raw)} bytes long, at most {SHORT_STRING_MAX_BYTES} are allowed"
        )
    # Leading zero bytes vanish in the integer form
    if raw.startswith(b"\x00"):
        raise ValueError("Short string cannot start with a NUL character")

    return hex(int.from_bytes(raw, "big"))


def decode_short_string(felt: FeltLike) -> str:
    """
    Decode a felt produced by encode_short_string back into a string

    Raises:
        InputTooLongError: If the felt holds more than 31 bytes
        ValueError: If the bytes are not valid UTF-8
    """
    value = to_felt(felt)
    length = (value.bit_length() + 7) // 8
    if length > SHORT_STRING_MAX_BYTES:
        raise InputTooLongError(f"Felt {hex(value)} does not hold a short string")
    return value.to_bytes(length, "big").decode("utf-8")
