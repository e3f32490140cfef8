"""DIDEngine — the owned handle through which callers use did:jis.

An engine holds exactly one Ed25519 keypair for its lifetime and composes
the codec, identifier grammar, document builder and signature service into
the string-in / string-out contract that bindings expose.

Lifetime
--------
The engine is a resource: release it with :meth:`DIDEngine.close` or use it
as a context manager. Any call after release raises
:class:`~did_jis.errors.EngineClosedError`. Values it returned (DID strings,
documents, signatures) stay valid after release.

The key never changes after construction, so concurrent reads need no lock.
Releasing swaps the held reference in one assignment; a call already past
its handle check finishes with the key it fetched.

Example
-------
::

    with DIDEngine() as engine:
        did = engine.create("device:001")
        document_json = engine.create_document(did)
        signature = engine.sign("Hello from 6G device!")
        assert engine.verify("Hello from 6G device!", signature)
"""
from __future__ import annotations

import logging
from types import TracebackType

from did_jis import signing
from did_jis.codec.hex import hex_encode
from did_jis.config import EngineSettings
from did_jis.did import identifier
from did_jis.did.document import DocumentBuilder, IdentityDocument
from did_jis.errors import EngineClosedError
from did_jis.keys.key_store import KeyStore

logger = logging.getLogger(__name__)


def _to_bytes(message: str | bytes) -> bytes:
    # surrogateescape restores the raw bytes of undecodable argv text
    if isinstance(message, str):
        return message.encode("utf-8", "surrogateescape")
    return bytes(message)


class DIDEngine:
    """A did:jis engine owning a single signing keypair.

    Parameters
    ----------
    key_store:
        Keypair to own. A fresh one is generated when omitted.
    settings:
        Document labels and encodings. Defaults to :class:`EngineSettings`.
    """

    def __init__(
        self,
        key_store: KeyStore | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._keys: KeyStore | None = key_store or KeyStore.generate()
        self._builder = DocumentBuilder(self._settings)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def new(cls, settings: EngineSettings | None = None) -> "DIDEngine":
        """Create an engine with a freshly generated keypair."""
        return cls(KeyStore.generate(), settings)

    @classmethod
    def from_secret(
        cls, secret_hex: str, settings: EngineSettings | None = None
    ) -> "DIDEngine":
        """Create an engine from a 64-character hex secret.

        Raises
        ------
        InvalidKeyEncoding
            If *secret_hex* is not 64 hex characters.
        InvalidKeyMaterial
            If the key is rejected by Ed25519.
        """
        return cls(KeyStore.from_secret(secret_hex), settings)

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._keys is None

    def close(self) -> None:
        """Release the keypair. Calling this more than once is harmless."""
        if self._keys is not None:
            self._keys = None
            logger.debug("DID engine released")

    def __enter__(self) -> "DIDEngine":
        self._key_store()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _key_store(self) -> KeyStore:
        keys = self._keys
        if keys is None:
            raise EngineClosedError("DID engine has been closed.")
        return keys

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Key export
    # ------------------------------------------------------------------

    def public_key_hex(self) -> str:
        """Return the public key as 64 lowercase hex characters."""
        return self._key_store().public_key_hex()

    def public_key_multibase(self) -> str:
        """Return the public key as a multibase string (``z6Mk…`` by default)."""
        return self._key_store().public_key_multibase(self._settings.multibase_base)

    def secret_key_hex(self) -> str:
        """Return the secret seed as hex so the engine can be restored later."""
        return self._key_store().secret_key_hex()

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def create(self, id: str) -> str:
        """Return ``did:jis:<id>``.

        Raises
        ------
        InvalidIdentifier
            If *id* violates the did:jis grammar.
        """
        self._key_store()
        return str(identifier.create(id))

    def create_from_key(self) -> str:
        """Return the DID derived from this engine's public key."""
        return str(identifier.create_from_key(self._key_store().public_key_bytes()))

    @staticmethod
    def parse(
        did: str,
        method_capacity: int = identifier.METHOD_CAPACITY,
        id_capacity: int = identifier.ID_CAPACITY,
    ) -> tuple[str, str]:
        """Split *did* into ``(method, id)`` within bounded capacities.

        Raises
        ------
        BufferTooSmall
            If a segment does not fit its capacity (terminator included).
        InvalidDidSyntax
            If *did* is malformed.
        """
        return identifier.parse_into(did, method_capacity, id_capacity)

    @staticmethod
    def is_valid(did: str) -> bool:
        """Return ``True`` for a well-formed ``did:jis`` DID."""
        return identifier.is_valid(did)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def build_document(self, did: identifier.DID | str) -> IdentityDocument:
        """Build a signed :class:`IdentityDocument` for *did*.

        Raises
        ------
        DocumentError
            If *did* is not a valid did:jis DID.
        """
        return self._builder.build(self._key_store(), did)

    def create_document(self, did: identifier.DID | str) -> str:
        """Build a signed document for *did* and return it as JSON text."""
        return self.build_document(did).to_json()

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self, message: str | bytes) -> str:
        """Sign *message* (text is UTF-8 encoded) and return the hex signature."""
        return hex_encode(self._key_store().sign(_to_bytes(message)))

    def verify(self, message: str | bytes, signature_hex: str) -> bool:
        """Verify a hex signature against this engine's public key.

        Raises
        ------
        InvalidEncoding
            If *signature_hex* is not valid hex.
        """
        return signing.verify_with_engine_key(
            self._key_store(), _to_bytes(message), signature_hex
        )

    @staticmethod
    def verify_with_key(
        message: str | bytes, signature_hex: str, public_key_hex: str
    ) -> bool:
        """Verify a hex signature against a hex public key; ``False`` on bad input."""
        return signing.verify_with_external_key(
            _to_bytes(message), signature_hex, public_key_hex
        )

    # ------------------------------------------------------------------
    # Version
    # ------------------------------------------------------------------

    @staticmethod
    def version() -> str:
        """Return the library version string."""
        from did_jis import __version__

        return __version__

    def __repr__(self) -> str:
        if self._keys is None:
            return "DIDEngine(closed)"
        return f"DIDEngine(public_key={self._keys.public_key_hex()!r})"


__all__ = ["DIDEngine"]
