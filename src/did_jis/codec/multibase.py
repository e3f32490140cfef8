"""Multibase / multicodec encoding of raw key bytes.

Multibase encoding
------------------
1. Prepend the multicodec tag for the key type (Ed25519 public key:
   ``0xed 0x01``).
2. Encode the tagged bytes in the chosen base.
3. Prefix the result with the base's one-character marker.

Supported bases:

========= ====== ===================================
Marker    Name   Alphabet
========= ====== ===================================
``z``     base58btc  Bitcoin base58 (default)
``f``     base16     lowercase hex
``u``     base64url  RFC 4648 URL-safe, no padding
========= ====== ===================================

A 32-byte Ed25519 public key encoded with the defaults always starts with
``z6Mk``.
"""
from __future__ import annotations

import base64
import binascii
import re
from typing import Callable

from did_jis.codec.hex import hex_decode, hex_encode
from did_jis.errors import InvalidHex, InvalidMultibase

# ---------------------------------------------------------------------------
# Multicodec tags
# ---------------------------------------------------------------------------

ED25519_PUB_CODEC: bytes = b"\xed\x01"

# ---------------------------------------------------------------------------
# Base58btc codec
# ---------------------------------------------------------------------------

_BASE58_ALPHABET: bytes = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_BASE58_INDEX: dict[str, int] = {
    chr(char): index for index, char in enumerate(_BASE58_ALPHABET)
}


def base58btc_encode(data: bytes) -> str:
    """Encode *data* to a base58btc string.

    Leading zero bytes are preserved as ``1`` characters.
    """
    n = int.from_bytes(data, "big")
    result: list[bytes] = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_BASE58_ALPHABET[remainder : remainder + 1])
    for byte in data:
        if byte == 0:
            result.append(b"1")
        else:
            break
    return b"".join(reversed(result)).decode("ascii")


def base58btc_decode(encoded: str) -> bytes:
    """Decode a base58btc string back to bytes.

    Raises
    ------
    ValueError
        If the string contains a character not in the base58btc alphabet.
    """
    n = 0
    for char in encoded:
        digit = _BASE58_INDEX.get(char)
        if digit is None:
            raise ValueError(
                f"Invalid base58btc character {char!r} in encoded string {encoded!r}"
            )
        n = n * 58 + digit
    result = n.to_bytes((n.bit_length() + 7) // 8, "big") if n > 0 else b""
    pad_size = 0
    for char in encoded:
        if char == "1":
            pad_size += 1
        else:
            break
    return b"\x00" * pad_size + result


# ---------------------------------------------------------------------------
# Base64url codec (unpadded)
# ---------------------------------------------------------------------------

_BASE64URL_PATTERN = re.compile(r"[A-Za-z0-9_-]*")


def _base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _base64url_decode(encoded: str) -> bytes:
    if not _BASE64URL_PATTERN.fullmatch(encoded):
        raise ValueError(f"Invalid base64url string {encoded!r}")
    pad = "=" * ((4 - len(encoded) % 4) % 4)
    try:
        return base64.urlsafe_b64decode(encoded + pad)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64url string {encoded!r}: {exc}") from exc


def _base16_decode(encoded: str) -> bytes:
    if encoded != encoded.lower():
        raise ValueError("base16 multibase payload must be lowercase")
    try:
        return hex_decode(encoded)
    except InvalidHex as exc:
        raise ValueError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Registry of bases
# ---------------------------------------------------------------------------

_Encoder = Callable[[bytes], str]
_Decoder = Callable[[str], bytes]

_BASES: dict[str, tuple[str, _Encoder, _Decoder]] = {
    "base58btc": ("z", base58btc_encode, base58btc_decode),
    "base16": ("f", hex_encode, _base16_decode),
    "base64url": ("u", _base64url_encode, _base64url_decode),
}
_MARKERS: dict[str, str] = {marker: name for name, (marker, _, _) in _BASES.items()}

SUPPORTED_BASES: tuple[str, ...] = tuple(sorted(_BASES))


def multibase_encode(
    data: bytes,
    codec_tag: bytes = ED25519_PUB_CODEC,
    base: str = "base58btc",
) -> str:
    """Tag *data* with *codec_tag* and encode it as a multibase string.

    Parameters
    ----------
    data:
        Raw bytes, typically a 32-byte public key.
    codec_tag:
        Multicodec prefix; pass ``b""`` to encode *data* untagged.
    base:
        One of :data:`SUPPORTED_BASES`.

    Raises
    ------
    InvalidMultibase
        If *base* is not supported.
    """
    try:
        marker, encode, _ = _BASES[base]
    except KeyError:
        raise InvalidMultibase(
            f"Unsupported multibase encoding {base!r}. "
            f"Supported: {list(SUPPORTED_BASES)}"
        ) from None
    return marker + encode(codec_tag + bytes(data))


def multibase_decode(text: str, codec_tag: bytes = ED25519_PUB_CODEC) -> bytes:
    """Decode a multibase string and strip its multicodec tag.

    Parameters
    ----------
    text:
        A string as produced by :func:`multibase_encode`.
    codec_tag:
        The multicodec prefix the payload must start with; ``b""`` skips
        the check.

    Returns
    -------
    bytes
        The untagged payload.

    Raises
    ------
    InvalidMultibase
        If the marker is unknown, the payload is empty or fails to decode,
        or the multicodec tag does not match.
    """
    if not isinstance(text, str) or not text:
        raise InvalidMultibase("Multibase string must be a non-empty string.")
    marker, payload = text[0], text[1:]
    name = _MARKERS.get(marker)
    if name is None:
        raise InvalidMultibase(f"Unrecognized multibase marker {marker!r}.")
    if not payload:
        raise InvalidMultibase(f"Multibase {name} payload is empty.")
    _, _, decode = _BASES[name]
    try:
        decoded = decode(payload)
    except ValueError as exc:
        raise InvalidMultibase(f"Invalid {name} payload: {exc}") from exc
    if not decoded.startswith(codec_tag):
        raise InvalidMultibase(
            f"Unexpected multicodec prefix 0x{decoded[:len(codec_tag)].hex()}; "
            f"expected 0x{codec_tag.hex()}."
        )
    return decoded[len(codec_tag):]


__all__ = [
    "ED25519_PUB_CODEC",
    "SUPPORTED_BASES",
    "base58btc_decode",
    "base58btc_encode",
    "multibase_decode",
    "multibase_encode",
]
