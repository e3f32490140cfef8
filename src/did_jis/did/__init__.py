"""did_jis.did — identifier grammar and signed documents for ``did:jis``.

Submodules
----------
identifier
    DID value type, create / create_from_key / parse / is_valid.
document
    IdentityDocument, DocumentBuilder, canonical form and proof checks.

Quick start
-----------
::

    from did_jis.did import DocumentBuilder, create, verify_document
    from did_jis.keys import KeyStore

    keys = KeyStore.generate()
    did = create("device:001")
    document = DocumentBuilder().build(keys, did)
    assert verify_document(document)
"""
from __future__ import annotations

from did_jis.did.document import (
    DocumentBuilder,
    IdentityDocument,
    Proof,
    VerificationMethod,
    canonical_bytes,
    canonicalize,
    verify_document,
)
from did_jis.did.identifier import (
    DID,
    DID_METHOD,
    ID_CAPACITY,
    MAX_ID_LENGTH,
    MAX_METHOD_LENGTH,
    METHOD_CAPACITY,
    create,
    create_from_key,
    is_valid,
    parse,
    parse_into,
)

__all__ = [
    # identifier
    "DID",
    "DID_METHOD",
    "ID_CAPACITY",
    "MAX_ID_LENGTH",
    "MAX_METHOD_LENGTH",
    "METHOD_CAPACITY",
    "create",
    "create_from_key",
    "is_valid",
    "parse",
    "parse_into",
    # document
    "DocumentBuilder",
    "IdentityDocument",
    "Proof",
    "VerificationMethod",
    "canonical_bytes",
    "canonicalize",
    "verify_document",
]
