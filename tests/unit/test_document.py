"""Tests for did_jis.did.document — canonical form, building and proofs."""
from __future__ import annotations

import json

import pytest

from did_jis.codec import multibase_decode
from did_jis.config import ED25519_2020_CONTEXT, W3C_DID_CONTEXT, EngineSettings
from did_jis.did.document import (
    DocumentBuilder,
    IdentityDocument,
    Proof,
    VerificationMethod,
    canonical_bytes,
    canonicalize,
    verify_document,
)
from did_jis.did.identifier import create
from did_jis.errors import DocumentError
from did_jis.keys import KeyStore
from did_jis.signing import verify_with_external_key

RFC8032_SECRET = "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"


@pytest.fixture()
def keys() -> KeyStore:
    return KeyStore.from_secret(RFC8032_SECRET)


@pytest.fixture()
def document(keys: KeyStore) -> IdentityDocument:
    return DocumentBuilder().build(keys, "did:jis:device:001")


# ---------------------------------------------------------------------------
# Canonical form
# ---------------------------------------------------------------------------


class TestCanonicalize:
    def test_keys_sorted_and_compact(self) -> None:
        assert canonicalize({"b": 1, "a": [1, 2]}) == b'{"a":[1,2],"b":1}'

    def test_independent_of_insertion_order(self) -> None:
        assert canonicalize({"x": 1, "y": 2}) == canonicalize({"y": 2, "x": 1})

    def test_non_ascii_kept_as_utf8(self) -> None:
        assert canonicalize({"k": "é"}) == '{"k":"é"}'.encode("utf-8")

    def test_no_bom(self) -> None:
        assert not canonicalize({"k": "v"}).startswith(b"\xef\xbb\xbf")


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


class TestDocumentBuilder:
    def test_shape(self, document: IdentityDocument, keys: KeyStore) -> None:
        data = document.to_dict()
        assert list(data) == ["@context", "id", "verificationMethod", "proof"]
        assert data["@context"] == [W3C_DID_CONTEXT, ED25519_2020_CONTEXT]
        assert data["id"] == "did:jis:device:001"
        assert data["verificationMethod"] == [
            {
                "id": "did:jis:device:001#key-1",
                "type": "Ed25519VerificationKey2020",
                "controller": "did:jis:device:001",
                "publicKeyMultibase": keys.public_key_multibase(),
            }
        ]
        proof = data["proof"]
        assert proof["type"] == "Ed25519Signature2020"
        assert proof["verificationMethod"] == "did:jis:device:001#key-1"
        assert proof["proofPurpose"] == "assertionMethod"
        assert len(proof["proofValue"]) == 128

    def test_accepts_did_value(self, keys: KeyStore) -> None:
        document = DocumentBuilder().build(keys, create("alice"))
        assert document.id == "did:jis:alice"
        assert document.did == create("alice")

    def test_proof_verifies(self, document: IdentityDocument) -> None:
        assert verify_document(document) is True

    def test_proof_signs_canonical_bytes(self, document: IdentityDocument, keys: KeyStore) -> None:
        """The proof value is the signature over the proof-less canonical JSON."""
        expected = keys.sign(canonical_bytes(document)).hex()
        assert document.proof.proof_value == expected

    def test_build_is_deterministic(self, keys: KeyStore) -> None:
        builder = DocumentBuilder()
        first = builder.build(keys, "did:jis:alice").to_json()
        second = builder.build(keys, "did:jis:alice").to_json()
        assert first == second

    def test_did_not_bound_to_key(self, keys: KeyStore) -> None:
        """Any valid did:jis label is accepted, not only the key-derived one."""
        document = DocumentBuilder().build(keys, "did:jis:someone-else")
        assert verify_document(document)

    @pytest.mark.parametrize("did", ["did:web:example", "did:jis:", "alice"])
    def test_invalid_did_raises(self, keys: KeyStore, did: str) -> None:
        with pytest.raises(DocumentError, match="invalid DID"):
            DocumentBuilder().build(keys, did)

    def test_custom_settings(self, keys: KeyStore) -> None:
        settings = EngineSettings(
            context=[W3C_DID_CONTEXT], key_fragment="primary", multibase_base="base16"
        )
        document = DocumentBuilder(settings).build(keys, "did:jis:alice")
        assert document.context == [W3C_DID_CONTEXT]
        assert document.verification_method_id == "did:jis:alice#primary"
        assert document.public_key_multibase.startswith("fed01")
        assert verify_document(document)


# ---------------------------------------------------------------------------
# Proof verification
# ---------------------------------------------------------------------------


class TestVerifyDocument:
    def test_external_verification_with_embedded_key(self, document: IdentityDocument) -> None:
        """A third party can check the proof using only the document."""
        public_key_hex = multibase_decode(document.public_key_multibase).hex()
        assert verify_with_external_key(
            document.canonical_bytes(), document.proof.proof_value, public_key_hex
        )

    def test_tampered_id_fails(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["id"] = "did:jis:device:002"
        data["verificationMethod"][0]["controller"] = "did:jis:device:002"
        data["verificationMethod"][0]["id"] = "did:jis:device:002#key-1"
        data["proof"]["verificationMethod"] = "did:jis:device:002#key-1"
        assert verify_document(IdentityDocument.from_dict(data)) is False

    def test_swapped_key_fails(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["verificationMethod"][0]["publicKeyMultibase"] = KeyStore.generate().public_key_multibase()
        assert verify_document(IdentityDocument.from_dict(data)) is False

    def test_undecodable_key_fails(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["verificationMethod"][0]["publicKeyMultibase"] = "zInvalid0"
        assert verify_document(IdentityDocument.from_dict(data)) is False

    def test_undecodable_proof_value_fails(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["proof"]["proofValue"] = "not-hex"
        assert verify_document(IdentityDocument.from_dict(data)) is False


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_to_json_parses(self, document: IdentityDocument) -> None:
        data = json.loads(document.to_json())
        assert data["id"] == "did:jis:device:001"

    def test_compact_json_single_line(self, document: IdentityDocument) -> None:
        assert "\n" not in document.to_json(indent=None)

    def test_json_roundtrip_preserves_proof(self, document: IdentityDocument) -> None:
        restored = IdentityDocument.from_json(document.to_json())
        assert restored == document
        assert verify_document(restored)

    def test_from_json_invalid_json(self) -> None:
        with pytest.raises(DocumentError, match="Invalid JSON"):
            IdentityDocument.from_json("{not json")

    @pytest.mark.parametrize("value", [None, 42, ["{}"]])
    def test_from_json_non_text_argument(self, value: object) -> None:
        with pytest.raises(DocumentError, match="Invalid JSON"):
            IdentityDocument.from_json(value)  # type: ignore[arg-type]

    def test_from_json_not_object(self) -> None:
        with pytest.raises(DocumentError, match="JSON object"):
            IdentityDocument.from_json("[]")

    def test_from_json_missing_proof(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        del data["proof"]
        with pytest.raises(DocumentError, match="missing member"):
            IdentityDocument.from_json(json.dumps(data))

    def test_from_json_invalid_did(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["id"] = "did:web:example"
        with pytest.raises(DocumentError):
            IdentityDocument.from_dict(data)

    def test_from_json_two_keys_rejected(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["verificationMethod"] = data["verificationMethod"] * 2
        with pytest.raises(DocumentError, match="exactly one"):
            IdentityDocument.from_dict(data)

    def test_from_json_dangling_proof_reference(self, document: IdentityDocument) -> None:
        data = document.to_dict()
        data["proof"]["verificationMethod"] = "did:jis:device:001#key-9"
        with pytest.raises(DocumentError, match="not a declared verification method"):
            IdentityDocument.from_dict(data)


class TestComponents:
    def test_verification_method_rejects_empty_field(self) -> None:
        with pytest.raises(ValueError, match="public_key_multibase"):
            VerificationMethod(
                id="did:jis:a#key-1",
                type="Ed25519VerificationKey2020",
                controller="did:jis:a",
                public_key_multibase="",
            )

    def test_proof_rejects_empty_field(self) -> None:
        with pytest.raises(ValueError, match="proof_value"):
            Proof(
                type="Ed25519Signature2020",
                verification_method="did:jis:a#key-1",
                proof_purpose="assertionMethod",
                proof_value="",
            )
