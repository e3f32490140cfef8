"""KeyStore — the single Ed25519 keypair held by a did:jis engine.

The secret half never leaves this object in raw form. The public half is
exported as lowercase hex, as a multibase string, or as raw bytes for
hashing and verification.

Ed25519 secrets are 32-byte seeds; every 32-byte value is a valid seed, so
restoring a key fails almost exclusively on bad *encoding*. The
``InvalidKeyMaterial`` path is kept for any rejection raised by the
underlying ``cryptography`` backend.
"""
from __future__ import annotations

import logging

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from did_jis import signing
from did_jis.codec.hex import hex_decode, hex_encode
from did_jis.codec.multibase import ED25519_PUB_CODEC, multibase_encode
from did_jis.errors import InvalidHex, InvalidKeyEncoding, InvalidKeyMaterial, KeyGenerationError

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH: int = 32
SECRET_KEY_HEX_LENGTH: int = SECRET_KEY_LENGTH * 2


class KeyStore:
    """Owns one Ed25519 keypair and exposes signing and public-key export.

    Use :meth:`generate` or :meth:`from_secret` rather than calling the
    constructor directly.

    Example
    -------
    ::

        keys = KeyStore.generate()
        restored = KeyStore.from_secret(keys.secret_key_hex())
        assert restored.public_key_hex() == keys.public_key_hex()
    """

    __slots__ = ("_private_key", "_public_bytes")

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key
        self._public_bytes: bytes = private_key.public_key().public_bytes(
            Encoding.Raw, PublicFormat.Raw
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def generate(cls) -> "KeyStore":
        """Generate a fresh keypair from the operating system CSPRNG.

        Raises
        ------
        KeyGenerationError
            If the random source fails. Callers should treat this as fatal.
        """
        try:
            private_key = Ed25519PrivateKey.generate()
        except Exception as exc:
            raise KeyGenerationError(f"Ed25519 key generation failed: {exc}") from exc
        store = cls(private_key)
        logger.info("Generated Ed25519 keypair %s…", store.public_key_hex()[:16])
        return store

    @classmethod
    def from_secret(cls, secret_hex: str) -> "KeyStore":
        """Restore a keypair from a 64-character hex secret.

        Raises
        ------
        InvalidKeyEncoding
            If *secret_hex* is not exactly 64 hex characters.
        InvalidKeyMaterial
            If the decoded bytes are rejected by the signature scheme.
        """
        if not isinstance(secret_hex, str) or len(secret_hex) != SECRET_KEY_HEX_LENGTH:
            raise InvalidKeyEncoding(
                f"Secret key must be exactly {SECRET_KEY_HEX_LENGTH} hex characters."
            )
        try:
            secret = hex_decode(secret_hex)
        except InvalidHex as exc:
            raise InvalidKeyEncoding(f"Secret key is not valid hex: {exc}") from exc
        try:
            private_key = Ed25519PrivateKey.from_private_bytes(secret)
        except ValueError as exc:
            raise InvalidKeyMaterial(f"Secret key rejected by Ed25519: {exc}") from exc
        store = cls(private_key)
        logger.debug("Restored Ed25519 keypair %s…", store.public_key_hex()[:16])
        return store

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def public_key_bytes(self) -> bytes:
        """Return the 32 raw public-key bytes."""
        return self._public_bytes

    def public_key_hex(self) -> str:
        """Return the public key as 64 lowercase hex characters."""
        return hex_encode(self._public_bytes)

    def public_key_multibase(self, base: str = "base58btc") -> str:
        """Return the multicodec-tagged public key as a multibase string.

        With the default base the result has the form ``z6Mk…``.
        """
        return multibase_encode(self._public_bytes, ED25519_PUB_CODEC, base)

    def secret_key_hex(self) -> str:
        """Return the 32-byte seed as hex, for restoring with :meth:`from_secret`."""
        return hex_encode(
            self._private_key.private_bytes(
                Encoding.Raw, PrivateFormat.Raw, NoEncryption()
            )
        )

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self, message: bytes) -> bytes:
        """Sign *message* and return the 64-byte Ed25519 signature."""
        return signing.sign(self._private_key, message)

    def __repr__(self) -> str:
        return f"KeyStore(public_key={self.public_key_hex()!r})"


__all__ = ["SECRET_KEY_HEX_LENGTH", "SECRET_KEY_LENGTH", "KeyStore"]
