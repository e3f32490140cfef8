"""Signed DID documents for the ``did:jis`` method.

Document shape
--------------
::

    {
      "@context": ["https://www.w3.org/ns/did/v1",
                   "https://w3id.org/security/suites/ed25519-2020/v1"],
      "id": "did:jis:device:001",
      "verificationMethod": [{
        "id": "did:jis:device:001#key-1",
        "type": "Ed25519VerificationKey2020",
        "controller": "did:jis:device:001",
        "publicKeyMultibase": "z6Mk…"
      }],
      "proof": {
        "type": "Ed25519Signature2020",
        "verificationMethod": "did:jis:device:001#key-1",
        "proofPurpose": "assertionMethod",
        "proofValue": "<128 lowercase hex characters>"
      }
    }

Canonical form
--------------
The proof signs the document *without* its ``proof`` member, serialized as
JSON with keys sorted, separators ``,`` and ``:`` (no whitespace), non-ASCII
characters kept literal, and encoded as UTF-8 without BOM. Anyone holding
the document can recompute these bytes with :func:`canonical_bytes` and
check the proof with :func:`verify_document`. No timestamp is included so
the same key and DID always produce the same document.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from did_jis import signing
from did_jis.codec.hex import hex_decode, hex_encode
from did_jis.codec.multibase import multibase_decode
from did_jis.config import EngineSettings, W3C_DID_CONTEXT
from did_jis.did.identifier import DID, is_valid
from did_jis.errors import DocumentError, InvalidHex, InvalidMultibase
from did_jis.keys.key_store import KeyStore

logger = logging.getLogger(__name__)


def canonicalize(value: Any) -> bytes:
    """Serialize *value* to its canonical JSON bytes."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


# ------------------------------------------------------------------
# Verification method
# ------------------------------------------------------------------


@dataclass(frozen=True)
class VerificationMethod:
    """The single public key published in a did:jis document.

    Parameters
    ----------
    id:
        DID URL of the key (``<did>#key-1``).
    type:
        Key type label (``Ed25519VerificationKey2020``).
    controller:
        The DID that controls this key.
    public_key_multibase:
        The multicodec-tagged public key, multibase encoded.
    """

    id: str
    type: str
    controller: str
    public_key_multibase: str

    def __post_init__(self) -> None:
        for name in ("id", "type", "controller", "public_key_multibase"):
            if not getattr(self, name):
                raise ValueError(f"VerificationMethod.{name} must not be empty.")

    def to_dict(self) -> dict[str, str]:
        """Serialize with the wire (camelCase) field names."""
        return {
            "id": self.id,
            "type": self.type,
            "controller": self.controller,
            "publicKeyMultibase": self.public_key_multibase,
        }


# ------------------------------------------------------------------
# Proof
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Proof:
    """A signature over a document's canonical bytes.

    Parameters
    ----------
    type:
        Proof type label (``Ed25519Signature2020``).
    verification_method:
        DID URL of the key that produced the signature.
    proof_purpose:
        Proof purpose label (``assertionMethod``).
    proof_value:
        The 64-byte signature as lowercase hex.
    """

    type: str
    verification_method: str
    proof_purpose: str
    proof_value: str

    def __post_init__(self) -> None:
        for name in ("type", "verification_method", "proof_purpose", "proof_value"):
            if not getattr(self, name):
                raise ValueError(f"Proof.{name} must not be empty.")

    def to_dict(self) -> dict[str, str]:
        """Serialize with the wire (camelCase) field names."""
        return {
            "type": self.type,
            "verificationMethod": self.verification_method,
            "proofPurpose": self.proof_purpose,
            "proofValue": self.proof_value,
        }


# ------------------------------------------------------------------
# Identity document (Pydantic v2)
# ------------------------------------------------------------------


class IdentityDocument(BaseModel):
    """A signed did:jis document.

    Built by :class:`DocumentBuilder`; the engine keeps no reference to it.
    The proof is computed once at construction and never changes.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    context: list[str] = Field(default_factory=lambda: [W3C_DID_CONTEXT])
    id: str
    verification_method: list[VerificationMethod]
    proof: Proof

    @field_validator("id")
    @classmethod
    def validate_did(cls, value: str) -> str:
        """Require a well-formed did:jis DID."""
        if not is_valid(value):
            raise ValueError(f"Document id {value!r} is not a valid did:jis DID.")
        return value

    @field_validator("context")
    @classmethod
    def validate_context_not_empty(cls, value: list[str]) -> list[str]:
        """Ensure context has at least one entry."""
        if not value:
            raise ValueError("context must contain at least one URI.")
        return value

    @model_validator(mode="after")
    def validate_single_key(self) -> "IdentityDocument":
        """A did:jis document carries exactly one key, controlled by its DID."""
        if len(self.verification_method) != 1:
            raise ValueError(
                "A did:jis document must declare exactly one verification method, "
                f"got {len(self.verification_method)}."
            )
        method = self.verification_method[0]
        if method.controller != self.id:
            raise ValueError(
                f"Verification method controller {method.controller!r} "
                f"does not match document id {self.id!r}."
            )
        if self.proof.verification_method != method.id:
            raise ValueError(
                f"proof references {self.proof.verification_method!r}, "
                f"which is not a declared verification method."
            )
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def did(self) -> DID:
        """The document subject as a :class:`DID` value."""
        return DID.parse(self.id)

    @property
    def public_key_multibase(self) -> str:
        """The multibase-encoded public key of the single verification method."""
        return self.verification_method[0].public_key_multibase

    @property
    def verification_method_id(self) -> str:
        """The DID URL of the single verification method."""
        return self.verification_method[0].id

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def unsigned_dict(self) -> dict[str, object]:
        """Return the document without its proof, the content that is signed."""
        return _unsigned_content(self.context, self.id, self.verification_method[0])

    def canonical_bytes(self) -> bytes:
        """Return the exact bytes covered by the proof."""
        return canonicalize(self.unsigned_dict())

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary, proof included."""
        data = self.unsigned_dict()
        data["proof"] = self.proof.to_dict()
        return data

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to JSON text.

        Key order and names are stable; ``indent=None`` yields a compact
        single-line form.
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IdentityDocument":
        """Rebuild a document from a dictionary produced by :meth:`to_dict`.

        Raises
        ------
        DocumentError
            If a required member is missing or the document is inconsistent.
        """
        try:
            verification_methods = [
                VerificationMethod(
                    id=vm["id"],
                    type=vm["type"],
                    controller=vm["controller"],
                    public_key_multibase=vm["publicKeyMultibase"],
                )
                for vm in data["verificationMethod"]
            ]
            raw_proof = data["proof"]
            proof = Proof(
                type=raw_proof["type"],
                verification_method=raw_proof["verificationMethod"],
                proof_purpose=raw_proof["proofPurpose"],
                proof_value=raw_proof["proofValue"],
            )
            return cls(
                context=data.get("@context", [W3C_DID_CONTEXT]),
                id=data["id"],
                verification_method=verification_methods,
                proof=proof,
            )
        except KeyError as exc:
            raise DocumentError(f"DID document is missing member {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise DocumentError(f"Invalid DID document: {exc}") from exc

    @classmethod
    def from_json(cls, json_str: str) -> "IdentityDocument":
        """Deserialize a document from JSON text.

        Raises
        ------
        DocumentError
            If the JSON is malformed or the document fails validation.
        """
        try:
            data = json.loads(json_str)
        except (json.JSONDecodeError, TypeError) as exc:
            raise DocumentError(f"Invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise DocumentError("DID document must be a JSON object.")
        return cls.from_dict(data)


def _unsigned_content(
    context: list[str], did: str, method: VerificationMethod
) -> dict[str, object]:
    return {
        "@context": list(context),
        "id": did,
        "verificationMethod": [method.to_dict()],
    }


def canonical_bytes(document: IdentityDocument) -> bytes:
    """Return the bytes a verifier must check *document*'s proof against."""
    return document.canonical_bytes()


# ------------------------------------------------------------------
# Builder
# ------------------------------------------------------------------


class DocumentBuilder:
    """Assemble and sign identity documents.

    The DID is treated as a caller-supplied label: the builder does not
    require it to equal the DID derived from the signing key.

    Parameters
    ----------
    settings:
        Labels and encodings written into the document. Defaults to
        :class:`~did_jis.config.EngineSettings`.

    Example
    -------
    ::

        keys = KeyStore.generate()
        document = DocumentBuilder().build(keys, "did:jis:device:001")
        assert verify_document(document)
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self._settings = settings or EngineSettings()

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    def build(self, key_store: KeyStore, did: DID | str) -> IdentityDocument:
        """Build and sign a document for *did* with *key_store*'s key.

        Raises
        ------
        DocumentError
            If *did* is not a valid did:jis DID.
        """
        did_text = str(did)
        if not is_valid(did_text):
            raise DocumentError(f"Cannot build a document for invalid DID {did_text!r}.")

        settings = self._settings
        method = VerificationMethod(
            id=f"{did_text}#{settings.key_fragment}",
            type=settings.key_type,
            controller=did_text,
            public_key_multibase=key_store.public_key_multibase(settings.multibase_base),
        )
        payload = canonicalize(_unsigned_content(settings.context, did_text, method))
        signature = key_store.sign(payload)
        proof = Proof(
            type=settings.proof_type,
            verification_method=method.id,
            proof_purpose=settings.proof_purpose,
            proof_value=hex_encode(signature),
        )
        logger.debug("Built signed DID document for %s", did_text)
        return IdentityDocument(
            context=list(settings.context),
            id=did_text,
            verification_method=[method],
            proof=proof,
        )


def verify_document(document: IdentityDocument) -> bool:
    """Check *document*'s proof against its own embedded public key.

    Returns ``False`` when the key or signature cannot be decoded, or when
    the signature does not match the canonical bytes.
    """
    try:
        public_key = multibase_decode(document.public_key_multibase)
        signature = hex_decode(document.proof.proof_value)
    except (InvalidMultibase, InvalidHex) as exc:
        logger.debug("Document %s has undecodable proof material: %s", document.id, exc)
        return False
    return signing.verify(public_key, document.canonical_bytes(), signature)


__all__ = [
    "DocumentBuilder",
    "IdentityDocument",
    "Proof",
    "VerificationMethod",
    "canonical_bytes",
    "canonicalize",
    "verify_document",
]
