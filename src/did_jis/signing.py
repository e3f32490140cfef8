"""Ed25519 message signing and verification.

Ed25519 (RFC 8032) is deterministic: signing the same message twice with
the same key yields byte-identical signatures, and no randomness is drawn
while signing.

Verification is a pure function of ``(public key, message, signature)``.
A wrong signature, a signature of the wrong length or a public key that is
not a valid curve point all yield ``False``; none of them raises. Only
undecodable *text* supplied by a caller is reported as an error, through
:class:`~did_jis.errors.InvalidEncoding`.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from did_jis.codec.hex import hex_decode
from did_jis.errors import InvalidEncoding, InvalidHex

if TYPE_CHECKING:
    from did_jis.keys.key_store import KeyStore

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH: int = 64
PUBLIC_KEY_LENGTH: int = 32


def sign(private_key: Ed25519PrivateKey, message: bytes) -> bytes:
    """Sign *message* with an Ed25519 private key.

    Returns
    -------
    bytes
        The 64-byte signature.
    """
    return private_key.sign(bytes(message))


def verify(public_key: bytes, message: bytes, signature: bytes) -> bool:
    """Verify an Ed25519 *signature* over *message*.

    Parameters
    ----------
    public_key:
        The 32-byte raw public key.
    message:
        The original signed bytes.
    signature:
        The 64-byte signature.

    Returns
    -------
    bool
        ``True`` only if the signature is valid for this key and message.
    """
    if len(public_key) != PUBLIC_KEY_LENGTH or len(signature) != SIGNATURE_LENGTH:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(bytes(public_key)).verify(
            bytes(signature), bytes(message)
        )
    except (InvalidSignature, ValueError):
        return False
    return True


def decode_signature(signature_hex: str) -> bytes:
    """Hex-decode a caller-supplied signature.

    Raises
    ------
    InvalidEncoding
        If *signature_hex* is not valid hex.
    """
    try:
        return hex_decode(signature_hex)
    except InvalidHex as exc:
        raise InvalidEncoding(f"Signature is not valid hex: {exc}") from exc


def verify_with_engine_key(
    key_store: "KeyStore", message: bytes, signature_hex: str
) -> bool:
    """Verify a hex signature against the key held by *key_store*.

    Raises
    ------
    InvalidEncoding
        If *signature_hex* is not valid hex. A well-formed but wrong
        signature returns ``False``.
    """
    signature = decode_signature(signature_hex)
    return verify(key_store.public_key_bytes(), message, signature)


def verify_with_external_key(
    message: bytes, signature_hex: str, public_key_hex: str
) -> bool:
    """Verify a hex signature against a hex public key supplied by the caller.

    Fails closed: any decode error returns ``False``.
    """
    try:
        signature = hex_decode(signature_hex)
        public_key = hex_decode(public_key_hex)
    except InvalidHex as exc:
        logger.debug("Rejecting verification input: %s", exc)
        return False
    return verify(public_key, message, signature)


__all__ = [
    "PUBLIC_KEY_LENGTH",
    "SIGNATURE_LENGTH",
    "decode_signature",
    "sign",
    "verify",
    "verify_with_engine_key",
    "verify_with_external_key",
]
