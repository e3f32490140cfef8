"""EngineSettings — document-shape configuration for the did:jis engine.

Settings only affect the labels written into DID documents and the base used
for the public-key multibase string. The key-derived DID (SHA-256, first
16 bytes) is deliberately not configurable.

Environment overrides
---------------------
:meth:`EngineSettings.from_env` reads:

=============================== ======================================
Variable                        Field
=============================== ======================================
``DID_JIS_CONTEXT``             ``context`` (comma-separated URIs)
``DID_JIS_KEY_FRAGMENT``        ``key_fragment``
``DID_JIS_KEY_TYPE``            ``key_type``
``DID_JIS_PROOF_TYPE``          ``proof_type``
``DID_JIS_PROOF_PURPOSE``       ``proof_purpose``
``DID_JIS_MULTIBASE``           ``multibase_base``
=============================== ======================================
"""
from __future__ import annotations

import os
import re
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

from did_jis.codec.multibase import SUPPORTED_BASES

W3C_DID_CONTEXT: str = "https://www.w3.org/ns/did/v1"
ED25519_2020_CONTEXT: str = "https://w3id.org/security/suites/ed25519-2020/v1"

_FRAGMENT_PATTERN = re.compile(r"[A-Za-z0-9:._\-]+")

_ENV_PREFIX = "DID_JIS_"
_ENV_FIELDS: dict[str, str] = {
    "KEY_FRAGMENT": "key_fragment",
    "KEY_TYPE": "key_type",
    "PROOF_TYPE": "proof_type",
    "PROOF_PURPOSE": "proof_purpose",
    "MULTIBASE": "multibase_base",
}


class EngineSettings(BaseModel):
    """Immutable settings shared by the engine and its document builder.

    Parameters
    ----------
    context:
        JSON-LD context URIs written to ``@context``.
    key_fragment:
        Fragment of the single verification method (``<did>#key-1``).
    key_type:
        Verification method ``type`` label.
    proof_type:
        Proof ``type`` label.
    proof_purpose:
        Proof ``proofPurpose`` label.
    multibase_base:
        Base used for ``publicKeyMultibase``.
    """

    model_config = {"frozen": True}

    context: list[str] = Field(
        default_factory=lambda: [W3C_DID_CONTEXT, ED25519_2020_CONTEXT]
    )
    key_fragment: str = "key-1"
    key_type: str = "Ed25519VerificationKey2020"
    proof_type: str = "Ed25519Signature2020"
    proof_purpose: str = "assertionMethod"
    multibase_base: str = "base58btc"

    @field_validator("context")
    @classmethod
    def validate_context_not_empty(cls, value: list[str]) -> list[str]:
        """Ensure context has at least one entry."""
        if not value:
            raise ValueError("context must contain at least one URI.")
        return value

    @field_validator("key_fragment", "key_type", "proof_type", "proof_purpose")
    @classmethod
    def validate_label_not_empty(cls, value: str) -> str:
        """Reject empty or whitespace-bearing labels."""
        if not value or any(char.isspace() for char in value):
            raise ValueError("labels must be non-empty and contain no whitespace.")
        return value

    @field_validator("key_fragment")
    @classmethod
    def validate_key_fragment(cls, value: str) -> str:
        """Keep the fragment inside the did:jis id character set."""
        if not _FRAGMENT_PATTERN.fullmatch(value):
            raise ValueError(
                f"key_fragment {value!r} must only contain [A-Za-z0-9:._-]."
            )
        return value

    @field_validator("multibase_base")
    @classmethod
    def validate_multibase_base(cls, value: str) -> str:
        """Restrict the base to those the codec implements."""
        if value not in SUPPORTED_BASES:
            raise ValueError(
                f"Unsupported multibase encoding {value!r}. "
                f"Supported: {list(SUPPORTED_BASES)}"
            )
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineSettings":
        """Build settings from ``DID_JIS_*`` environment variables.

        Parameters
        ----------
        environ:
            Mapping to read instead of :data:`os.environ` (used by tests).
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        raw_context = env.get(f"{_ENV_PREFIX}CONTEXT")
        if raw_context:
            values["context"] = [uri.strip() for uri in raw_context.split(",") if uri.strip()]
        for suffix, field_name in _ENV_FIELDS.items():
            raw = env.get(f"{_ENV_PREFIX}{suffix}")
            if raw:
                values[field_name] = raw.strip()
        return cls(**values)


__all__ = ["ED25519_2020_CONTEXT", "W3C_DID_CONTEXT", "EngineSettings"]
