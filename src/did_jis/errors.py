"""Error kinds raised by the did:jis engine.

Every error carries a stable :class:`ErrorCode` so that callers wrapping the
engine (FFI shims, CLIs, HTTP adapters) can map each failure to a distinct
status without string matching.

Signature mismatch is never an error: verification returns ``False``.
Malformed *input* to verification (undecodable hex) is reported separately
through :class:`InvalidEncoding`.
"""
from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Stable status codes, one per error kind."""

    OK = 0
    KEY_GENERATION = 1
    INVALID_KEY_ENCODING = 2
    INVALID_KEY_MATERIAL = 3
    INVALID_HEX = 4
    INVALID_MULTIBASE = 5
    INVALID_IDENTIFIER = 6
    INVALID_DID_SYNTAX = 7
    BUFFER_TOO_SMALL = 8
    INVALID_ENCODING = 9
    DOCUMENT_ERROR = 10
    ENGINE_CLOSED = 11
    INTERNAL = 255


class DIDJISError(Exception):
    """Base class for every error raised by this package."""

    code: ErrorCode = ErrorCode.INTERNAL


class KeyGenerationError(DIDJISError):
    """Raised when the random source fails during key generation.

    This is the only condition treated as unrecoverable.
    """

    code = ErrorCode.KEY_GENERATION


class InvalidKeyEncoding(DIDJISError, ValueError):
    """Raised when a secret key is not exactly 64 hex characters."""

    code = ErrorCode.INVALID_KEY_ENCODING


class InvalidKeyMaterial(DIDJISError, ValueError):
    """Raised when decoded key bytes are rejected by the signature scheme."""

    code = ErrorCode.INVALID_KEY_MATERIAL


class InvalidHex(DIDJISError, ValueError):
    """Raised on odd-length input or non-hex characters."""

    code = ErrorCode.INVALID_HEX


class InvalidMultibase(DIDJISError, ValueError):
    """Raised on an unknown multibase marker or an undecodable payload."""

    code = ErrorCode.INVALID_MULTIBASE


class InvalidIdentifier(DIDJISError, ValueError):
    """Raised when a method-specific id violates the did:jis grammar."""

    code = ErrorCode.INVALID_IDENTIFIER


class InvalidDidSyntax(DIDJISError, ValueError):
    """Raised when a string is not of the form ``did:<method>:<id>``."""

    code = ErrorCode.INVALID_DID_SYNTAX


class BufferTooSmall(DIDJISError, ValueError):
    """Raised when a parsed segment does not fit the caller's capacity.

    Parameters
    ----------
    field:
        Name of the segment that overflowed (``"method"`` or ``"id"``).
    required:
        Capacity needed, terminator included.
    capacity:
        Capacity the caller offered.
    """

    code = ErrorCode.BUFFER_TOO_SMALL

    def __init__(self, field: str, required: int, capacity: int) -> None:
        self.field = field
        self.required = required
        self.capacity = capacity
        super().__init__(
            f"{field} needs {required} bytes including terminator, "
            f"but only {capacity} are available"
        )


class InvalidEncoding(DIDJISError, ValueError):
    """Raised when an externally supplied signature or key is not valid hex."""

    code = ErrorCode.INVALID_ENCODING


class DocumentError(DIDJISError):
    """Raised when a DID document cannot be built or deserialized."""

    code = ErrorCode.DOCUMENT_ERROR


class EngineClosedError(DIDJISError):
    """Raised when an engine is used after :meth:`DIDEngine.close`."""

    code = ErrorCode.ENGINE_CLOSED


def status_for(exc: BaseException | None) -> ErrorCode:
    """Return the status code for *exc*.

    ``None`` maps to :attr:`ErrorCode.OK`; exceptions that do not belong to
    this package map to :attr:`ErrorCode.INTERNAL`.
    """
    if exc is None:
        return ErrorCode.OK
    if isinstance(exc, DIDJISError):
        return exc.code
    return ErrorCode.INTERNAL


__all__ = [
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
]
