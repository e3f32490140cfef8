"""Deterministic text encodings: hex and multibase."""
from __future__ import annotations

from did_jis.codec.hex import hex_decode, hex_encode
from did_jis.codec.multibase import (
    ED25519_PUB_CODEC,
    SUPPORTED_BASES,
    base58btc_decode,
    base58btc_encode,
    multibase_decode,
    multibase_encode,
)

__all__ = [
    "ED25519_PUB_CODEC",
    "SUPPORTED_BASES",
    "base58btc_decode",
    "base58btc_encode",
    "hex_decode",
    "hex_encode",
    "multibase_decode",
    "multibase_encode",
]
