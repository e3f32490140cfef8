"""Tests for did_jis.engine — the DIDEngine boundary contract."""
from __future__ import annotations

import json
import threading
from collections.abc import Iterator

import pytest

import did_jis
from did_jis.codec import multibase_decode
from did_jis.engine import DIDEngine
from did_jis.errors import (
    BufferTooSmall,
    DocumentError,
    EngineClosedError,
    InvalidDidSyntax,
    InvalidEncoding,
    InvalidIdentifier,
    InvalidKeyEncoding,
)

RFC8032_SECRET = "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
RFC8032_PUBLIC = "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"


@pytest.fixture()
def engine() -> Iterator[DIDEngine]:
    with DIDEngine() as fresh:
        yield fresh


# ---------------------------------------------------------------------------
# Construction and lifetime
# ---------------------------------------------------------------------------


class TestLifetime:
    def test_new_generates_key(self) -> None:
        assert len(DIDEngine.new().public_key_hex()) == 64

    def test_from_secret(self) -> None:
        assert DIDEngine.from_secret(RFC8032_SECRET).public_key_hex() == RFC8032_PUBLIC

    def test_from_secret_invalid(self) -> None:
        with pytest.raises(InvalidKeyEncoding):
            DIDEngine.from_secret("abc")

    def test_secret_roundtrip(self, engine: DIDEngine) -> None:
        restored = DIDEngine.from_secret(engine.secret_key_hex())
        assert restored.public_key_hex() == engine.public_key_hex()

    def test_context_manager_closes(self) -> None:
        with DIDEngine() as engine:
            assert not engine.closed
        assert engine.closed

    def test_closes_on_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with DIDEngine() as engine:
                raise RuntimeError("boom")
        assert engine.closed

    def test_use_after_close_raises(self) -> None:
        engine = DIDEngine()
        engine.close()
        for call in (
            engine.public_key_hex,
            engine.public_key_multibase,
            engine.create_from_key,
            lambda: engine.create("alice"),
            lambda: engine.create_document("did:jis:alice"),
            lambda: engine.sign("m"),
            lambda: engine.verify("m", "00" * 64),
        ):
            with pytest.raises(EngineClosedError):
                call()

    def test_close_twice_is_harmless(self) -> None:
        engine = DIDEngine()
        engine.close()
        engine.close()
        assert repr(engine) == "DIDEngine(closed)"

    def test_enter_after_close_raises(self) -> None:
        engine = DIDEngine()
        engine.close()
        with pytest.raises(EngineClosedError):
            with engine:
                pass

    def test_values_outlive_engine(self) -> None:
        """DIDs and signatures stay usable after the engine is released."""
        with DIDEngine() as engine:
            did = engine.create_from_key()
            public_key_hex = engine.public_key_hex()
            signature = engine.sign("persisted")
        assert DIDEngine.is_valid(did)
        assert DIDEngine.verify_with_key("persisted", signature, public_key_hex)


# ---------------------------------------------------------------------------
# Keys and identifiers
# ---------------------------------------------------------------------------


class TestKeysAndIdentifiers:
    def test_public_key_multibase_matches_hex(self, engine: DIDEngine) -> None:
        assert multibase_decode(engine.public_key_multibase()).hex() == engine.public_key_hex()

    def test_create(self, engine: DIDEngine) -> None:
        assert engine.create("device:001") == "did:jis:device:001"

    def test_create_invalid(self, engine: DIDEngine) -> None:
        with pytest.raises(InvalidIdentifier):
            engine.create("bad id")

    def test_create_from_key_deterministic(self, engine: DIDEngine) -> None:
        assert engine.create_from_key() == engine.create_from_key()
        assert engine.create_from_key().startswith("did:jis:")

    def test_create_from_key_stable_across_restore(self, engine: DIDEngine) -> None:
        restored = DIDEngine.from_secret(engine.secret_key_hex())
        assert restored.create_from_key() == engine.create_from_key()

    def test_parse(self) -> None:
        assert DIDEngine.parse("did:jis:device:6G:001") == ("jis", "device:6G:001")

    def test_parse_rejects_rather_than_truncates(self) -> None:
        with pytest.raises(BufferTooSmall):
            DIDEngine.parse("did:jis:" + "x" * 300)

    def test_parse_undecodable_text_is_invalid_syntax(self) -> None:
        with pytest.raises(InvalidDidSyntax, match="not valid UTF-8"):
            DIDEngine.parse("did:jis:\udcff")

    def test_parse_malformed(self) -> None:
        with pytest.raises(InvalidDidSyntax):
            DIDEngine.parse("did:jis")

    def test_is_valid(self) -> None:
        assert DIDEngine.is_valid("did:jis:alice") is True
        assert DIDEngine.is_valid("did:web:example") is False
        assert DIDEngine.is_valid("did:jis:") is False


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class TestDocuments:
    def test_create_document_json_shape(self, engine: DIDEngine) -> None:
        data = json.loads(engine.create_document("did:jis:device:001"))
        assert data["id"] == "did:jis:device:001"
        assert "@context" in data
        (method,) = data["verificationMethod"]
        assert set(method) == {"id", "type", "controller", "publicKeyMultibase"}
        assert method["publicKeyMultibase"] == engine.public_key_multibase()
        assert data["proof"]["verificationMethod"] == method["id"]

    def test_build_document_invalid_did(self, engine: DIDEngine) -> None:
        with pytest.raises(DocumentError):
            engine.build_document("did:web:example")


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


class TestSigning:
    def test_sign_returns_128_hex_chars(self, engine: DIDEngine) -> None:
        signature = engine.sign("hello")
        assert len(signature) == 128
        assert signature == signature.lower()

    def test_sign_deterministic(self, engine: DIDEngine) -> None:
        assert engine.sign("same") == engine.sign("same")

    def test_text_and_utf8_bytes_sign_identically(self, engine: DIDEngine) -> None:
        assert engine.sign("héllo") == engine.sign("héllo".encode("utf-8"))

    def test_undecodable_text_signs_its_raw_bytes(self, engine: DIDEngine) -> None:
        """Text carrying surrogate escapes (non-UTF-8 argv) signs the original bytes."""
        signature = engine.sign("caf\udce9")
        assert signature == engine.sign(b"caf\xe9")
        assert engine.verify("caf\udce9", signature) is True
        assert DIDEngine.verify_with_key(b"caf\xe9", signature, engine.public_key_hex()) is True

    def test_verify(self, engine: DIDEngine) -> None:
        signature = engine.sign("Hello from 6G device!")
        assert engine.verify("Hello from 6G device!", signature) is True
        assert engine.verify("Hello from 5G device!", signature) is False

    def test_verify_malformed_hex_raises(self, engine: DIDEngine) -> None:
        with pytest.raises(InvalidEncoding):
            engine.verify("m", "xyz")

    def test_verify_with_key(self, engine: DIDEngine) -> None:
        signature = engine.sign("m")
        assert DIDEngine.verify_with_key("m", signature, engine.public_key_hex()) is True
        assert DIDEngine.verify_with_key("m", signature, "nothex") is False
        assert DIDEngine.verify_with_key("m", "nothex", engine.public_key_hex()) is False

    def test_concurrent_signing(self, engine: DIDEngine) -> None:
        """Concurrent readers observe the same immutable key."""
        expected = engine.sign("shared")
        results: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            signature = engine.sign("shared")
            with lock:
                results.append(signature)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert results == [expected] * 8


class TestVersion:
    def test_version_matches_package(self) -> None:
        assert DIDEngine.version() == did_jis.__version__ == "0.1.0"
