"""Key management for the did:jis engine."""
from __future__ import annotations

from did_jis.keys.key_store import SECRET_KEY_HEX_LENGTH, SECRET_KEY_LENGTH, KeyStore

__all__ = ["SECRET_KEY_HEX_LENGTH", "SECRET_KEY_LENGTH", "KeyStore"]
