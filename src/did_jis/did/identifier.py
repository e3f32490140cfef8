"""did:jis identifier grammar.

DID format
----------
::

    did:jis:<id>

``<id>`` is a non-empty run of ASCII letters, digits and the characters
``:`` ``.`` ``_`` ``-``, at most 255 characters long. It may itself contain
colons, so only the first two colons of a DID delimit segments.

Examples::

    did:jis:alice
    did:jis:device:6G:001
    did:jis:4f1c9a0d2be37d5a8e6c01f2a9b34c77

Key-derived ids
---------------
:func:`create_from_key` hashes the 32 raw public-key bytes with SHA-256 and
keeps the first 16 digest bytes, hex-encoded (32 characters). The choice is
fixed: changing it changes every derived DID.
"""
from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from did_jis.errors import BufferTooSmall, InvalidDidSyntax, InvalidIdentifier, InvalidKeyMaterial

# ------------------------------------------------------------------
# Grammar constants
# ------------------------------------------------------------------

DID_SCHEME: str = "did"
DID_METHOD: str = "jis"

MAX_METHOD_LENGTH: int = 31
MAX_ID_LENGTH: int = 255

# Boundary capacities include the terminator byte.
METHOD_CAPACITY: int = MAX_METHOD_LENGTH + 1
ID_CAPACITY: int = MAX_ID_LENGTH + 1

KEY_ID_DIGEST_BYTES: int = 16

_ID_PATTERN = re.compile(r"[A-Za-z0-9:._\-]+")
_METHOD_PATTERN = re.compile(r"[a-z0-9]+")


def _id_problem(value: str) -> str | None:
    """Return why *value* is not a valid method-specific id, or ``None``."""
    if not value:
        return "identifier must not be empty"
    if len(value) > MAX_ID_LENGTH:
        return f"identifier exceeds {MAX_ID_LENGTH} characters ({len(value)})"
    if not _ID_PATTERN.fullmatch(value):
        return (
            f"identifier {value!r} contains characters outside "
            "[A-Za-z0-9:._-]"
        )
    return None


def _method_problem(value: str) -> str | None:
    if not value:
        return "method must not be empty"
    if len(value) > MAX_METHOD_LENGTH:
        return f"method exceeds {MAX_METHOD_LENGTH} characters ({len(value)})"
    if not _METHOD_PATTERN.fullmatch(value):
        return f"method {value!r} must be lowercase alphanumeric"
    return None


# ------------------------------------------------------------------
# DID value type
# ------------------------------------------------------------------


@dataclass(frozen=True)
class DID:
    """A validated ``did:jis`` identifier.

    Instances are plain immutable values: they hold no reference to the key
    or engine they were derived from.

    Parameters
    ----------
    id:
        The method-specific id (the part after ``did:jis:``).
    method:
        Always ``"jis"``; present so parsed values compare structurally.
    """

    id: str
    method: str = DID_METHOD

    def __post_init__(self) -> None:
        if self.method != DID_METHOD:
            raise InvalidIdentifier(
                f"Unsupported DID method {self.method!r}; only {DID_METHOD!r} is supported."
            )
        problem = _id_problem(self.id) if isinstance(self.id, str) else "identifier must be a string"
        if problem:
            raise InvalidIdentifier(problem)

    def __str__(self) -> str:
        return f"{DID_SCHEME}:{self.method}:{self.id}"

    def verification_method_id(self, fragment: str = "key-1") -> str:
        """Return the DID URL ``<did>#<fragment>``."""
        return f"{self}#{fragment}"

    @classmethod
    def parse(cls, did: str) -> "DID":
        """Parse a ``did:jis`` string into a :class:`DID`.

        Raises
        ------
        InvalidDidSyntax
            If *did* is malformed or uses a method other than ``jis``.
        """
        method, method_specific_id = parse(did)
        if method != DID_METHOD:
            raise InvalidDidSyntax(
                f"Unsupported DID method {method!r}; expected {DID_METHOD!r}."
            )
        return cls(id=method_specific_id)


# ------------------------------------------------------------------
# Operations
# ------------------------------------------------------------------


def create(id: str) -> DID:
    """Build ``did:jis:<id>`` from caller-supplied id text.

    Raises
    ------
    InvalidIdentifier
        If *id* is empty, longer than 255 characters, or contains a
        character outside ``[A-Za-z0-9:._-]``.
    """
    return DID(id=id)


def create_from_key(public_key: bytes) -> DID:
    """Derive a DID from the SHA-256 hash of a 32-byte public key.

    Raises
    ------
    InvalidKeyMaterial
        If *public_key* is not 32 bytes.
    """
    if len(public_key) != 32:
        raise InvalidKeyMaterial(
            f"Public key must be 32 bytes, got {len(public_key)}."
        )
    digest = hashlib.sha256(bytes(public_key)).digest()
    return DID(id=digest[:KEY_ID_DIGEST_BYTES].hex())


def parse(did: str) -> tuple[str, str]:
    """Split a DID string into ``(method, id)``.

    Any method is accepted here as long as it is well formed; use
    :func:`is_valid` to additionally require ``jis``.

    Raises
    ------
    InvalidDidSyntax
        If *did* has fewer than three colon-separated segments, does not
        start with ``did``, or its method or id violate the grammar.
    """
    if not isinstance(did, str):
        raise InvalidDidSyntax(f"DID must be a string, got {type(did).__name__}.")
    parts = did.split(":", 2)
    if len(parts) < 3:
        raise InvalidDidSyntax(
            f"Malformed DID {did!r}. Expected format: did:<method>:<id>"
        )
    scheme, method, method_specific_id = parts
    if scheme != DID_SCHEME:
        raise InvalidDidSyntax(f"DID must start with 'did:', got {did!r}.")
    problem = _method_problem(method) or _id_problem(method_specific_id)
    if problem:
        raise InvalidDidSyntax(f"Malformed DID {did!r}: {problem}.")
    return method, method_specific_id


def parse_into(
    did: str,
    method_capacity: int = METHOD_CAPACITY,
    id_capacity: int = ID_CAPACITY,
) -> tuple[str, str]:
    """Parse *did* for a caller with fixed-size output buffers.

    Capacities are in bytes and include a terminator, so a method of ``n``
    UTF-8 bytes needs ``n + 1``. A segment that does not fit is rejected,
    never truncated.

    Raises
    ------
    BufferTooSmall
        If the method or id segment does not fit its capacity.
    InvalidDidSyntax
        If *did* is otherwise malformed.
    """
    if isinstance(did, str):
        parts = did.split(":", 2)
        if len(parts) == 3:
            for field, value, capacity in (
                ("method", parts[1], method_capacity),
                ("id", parts[2], id_capacity),
            ):
                try:
                    required = len(value.encode("utf-8")) + 1
                except UnicodeEncodeError as exc:
                    raise InvalidDidSyntax(
                        f"Malformed DID {did!r}: {field} is not valid UTF-8."
                    ) from exc
                if required > capacity:
                    raise BufferTooSmall(field, required, capacity)
    return parse(did)


def is_valid(did: str) -> bool:
    """Return ``True`` if *did* parses and its method is exactly ``jis``."""
    try:
        method, _ = parse(did)
    except InvalidDidSyntax:
        return False
    return method == DID_METHOD


__all__ = [
    "DID",
    "DID_METHOD",
    "DID_SCHEME",
    "ID_CAPACITY",
    "KEY_ID_DIGEST_BYTES",
    "MAX_ID_LENGTH",
    "MAX_METHOD_LENGTH",
    "METHOD_CAPACITY",
    "create",
    "create_from_key",
    "is_valid",
    "parse",
    "parse_into",
]
