"""Lowercase hexadecimal text encoding of raw bytes."""
from __future__ import annotations

import string

from did_jis.errors import InvalidHex

_HEX_DIGITS = frozenset(string.hexdigits)


def hex_encode(data: bytes) -> str:
    """Return *data* as lowercase hex, two characters per byte."""
    return bytes(data).hex()


def hex_decode(text: str) -> bytes:
    """Decode a hex string back to bytes.

    Upper-case digits are accepted. Whitespace, ``0x`` prefixes and
    odd-length input are rejected.

    Raises
    ------
    InvalidHex
        If *text* has odd length or contains a non-hex character.
    """
    if not isinstance(text, str):
        raise InvalidHex(f"Expected a hex string, got {type(text).__name__}.")
    if len(text) % 2:
        raise InvalidHex(f"Hex string has odd length {len(text)}.")
    for char in text:
        if char not in _HEX_DIGITS:
            raise InvalidHex(f"Invalid hex character {char!r}.")
    return bytes.fromhex(text)


__all__ = ["hex_decode", "hex_encode"]
