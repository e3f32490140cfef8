#!/usr/bin/env python3
"""Example: Quickstart

Walks through the full did:jis flow for a device: create an engine, export
its public key, build identifiers, emit a signed DID document, and sign and
verify a message.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install did-jis
"""
from __future__ import annotations

from did_jis import DIDEngine, IdentityDocument, verify_document


def main() -> None:
    print(f"did-jis version: {DIDEngine.version()}")

    with DIDEngine() as engine:
        # Step 1: Export the public key
        print(f"Public key:             {engine.public_key_hex()[:32]}...")
        print(f"Public key (multibase): {engine.public_key_multibase()[:32]}...")

        # Step 2: Build identifiers
        did = engine.create("device:6G:001")
        print(f"DID:          {did}")
        print(f"DID from key: {engine.create_from_key()}")

        # Step 3: Validate and parse
        for candidate in (did, "did:web:example"):
            print(f"  {candidate}: {'VALID' if DIDEngine.is_valid(candidate) else 'INVALID'}")
        method, method_specific_id = DIDEngine.parse(did)
        print(f"Parsed: method={method} id={method_specific_id}")

        # Step 4: Signed DID document
        document_json = engine.create_document(did)
        print(f"Document (first 300 chars):\n{document_json[:300]}...")
        document = IdentityDocument.from_json(document_json)
        print(f"Proof valid: {verify_document(document)}")

        # Step 5: Sign and verify
        message = "Hello from 6G device!"
        signature = engine.sign(message)
        print(f"Signature: {signature[:32]}...")
        print(f"Verification: {'PASSED' if engine.verify(message, signature) else 'FAILED'}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
