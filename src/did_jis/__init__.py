"""did-jis — Decentralized identifiers for the ``did:jis`` method.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import did_jis
>>> did_jis.__version__
'0.1.0'

Quick start
-----------
::

    from did_jis import DIDEngine

    with DIDEngine() as engine:
        did = engine.create("device:001")       # "did:jis:device:001"
        assert engine.is_valid(did)
        document_json = engine.create_document(did)
        signature = engine.sign("hello")
        assert DIDEngine.verify_with_key("hello", signature, engine.public_key_hex())
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from did_jis.errors import (
    BufferTooSmall,
    DIDJISError,
    DocumentError,
    EngineClosedError,
    ErrorCode,
    InvalidDidSyntax,
    InvalidEncoding,
    InvalidHex,
    InvalidIdentifier,
    InvalidKeyEncoding,
    InvalidKeyMaterial,
    InvalidMultibase,
    KeyGenerationError,
    status_for,
)

# ------------------------------------------------------------------
# Codec, keys, signing
# ------------------------------------------------------------------
from did_jis.codec import hex_decode, hex_encode, multibase_decode, multibase_encode
from did_jis.config import EngineSettings
from did_jis.keys import KeyStore
from did_jis.signing import verify, verify_with_engine_key, verify_with_external_key

# ------------------------------------------------------------------
# Identifiers and documents
# ------------------------------------------------------------------
from did_jis.did import (
    DID,
    DocumentBuilder,
    IdentityDocument,
    Proof,
    VerificationMethod,
    create,
    create_from_key,
    is_valid,
    parse,
    parse_into,
    verify_document,
)

# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------
from did_jis.engine import DIDEngine

__all__ = [
    # version
    "__version__",
    # engine
    "DIDEngine",
    "EngineSettings",
    # errors
    "BufferTooSmall",
    "DIDJISError",
    "DocumentError",
    "EngineClosedError",
    "ErrorCode",
    "InvalidDidSyntax",
    "InvalidEncoding",
    "InvalidHex",
    "InvalidIdentifier",
    "InvalidKeyEncoding",
    "InvalidKeyMaterial",
    "InvalidMultibase",
    "KeyGenerationError",
    "status_for",
    # codec
    "hex_decode",
    "hex_encode",
    "multibase_decode",
    "multibase_encode",
    # keys and signing
    "KeyStore",
    "verify",
    "verify_with_engine_key",
    "verify_with_external_key",
    # identifiers and documents
    "DID",
    "DocumentBuilder",
    "IdentityDocument",
    "Proof",
    "VerificationMethod",
    "create",
    "create_from_key",
    "is_valid",
    "parse",
    "parse_into",
    "verify_document",
]
