"""
Locator validation and canonicalization.

A locator (UHRP URL) is the Base58Check encoding of the prefix 0xce00
followed by a 32-byte SHA-256 digest. Callers may pass it with a
``uhrp:`` scheme and/or a leading ``//``; every network call uses the
canonical bare form produced by ``locator_from_hash``.
"""

from dataclasses import dataclass
from typing import Optional, Union

import base58

from .exceptions import InvalidLocatorError


LOCATOR_PREFIX = bytes.fromhex("ce00")
HASH_LENGTH = 32
SCHEME = "uhrp:"


@dataclass
class LocatorValidationResult:
    """Result of locator validation."""

    valid: bool
    canonical_locator: Optional[str]
    content_hash: Optional[bytes]
    error: Optional[str] = None


def normalize_locator(locator: str) -> str:
    """Strip whitespace, the ``uhrp:`` scheme and a leading ``//``."""
    value = locator.strip()
    if value.lower().startswith(SCHEME):
        value = value[len(SCHEME):]
    if value.startswith("//"):
        value = value[2:]
    return value


def hash_from_locator(locator: str) -> bytes:
    """
    Extract the 32-byte content hash embedded in a locator.

    Args:
        locator: Locator in canonical or prefixed form

    Returns:
        The SHA-256 digest as bytes

    Raises:
        InvalidLocatorError: If the locator cannot be decoded
    """
    if not isinstance(locator, str) or not locator.strip():
        raise InvalidLocatorError(details={"locator": locator})

    value = normalize_locator(locator)
    try:
        payload = base58.b58decode_check(value)
    except ValueError as e:
        raise InvalidLocatorError(
            details={"locator": locator, "reason": str(e)},
        ) from e

    if len(payload) != len(LOCATOR_PREFIX) + HASH_LENGTH:
        raise InvalidLocatorError(
            details={"locator": locator, "reason": f"payload length {len(payload)}"},
        )
    if payload[: len(LOCATOR_PREFIX)] != LOCATOR_PREFIX:
        raise InvalidLocatorError(
            details={"locator": locator, "reason": "invalid prefix"},
        )
    return payload[len(LOCATOR_PREFIX):]


def locator_from_hash(content_hash: Union[bytes, str]) -> str:
    """
    Encode a content hash as a canonical locator.

    Args:
        content_hash: 32 raw bytes or 64 hex characters

    Returns:
        The canonical locator string (no scheme)

    Raises:
        InvalidLocatorError: If the hash is not a 32-byte digest
    """
    if isinstance(content_hash, str):
        try:
            content_hash = bytes.fromhex(content_hash)
        except ValueError as e:
            raise InvalidLocatorError(
                "Hash must be hex encoded",
                details={"hash": content_hash},
            ) from e

    if len(content_hash) != HASH_LENGTH:
        raise InvalidLocatorError(
            "Hash length must be 32 bytes (sha256)",
            details={"length": len(content_hash)},
        )
    return base58.b58encode_check(LOCATOR_PREFIX + bytes(content_hash)).decode("ascii")


def is_valid_locator(locator: str) -> bool:
    """Return True if the locator decodes to a content hash."""
    try:
        hash_from_locator(locator)
    except InvalidLocatorError:
        return False
    return True


def canonicalize(locator: str) -> str:
    """Re-derive the canonical locator from its embedded hash."""
    return locator_from_hash(hash_from_locator(locator))


def validate_locator(raw_locator: str) -> LocatorValidationResult:
    """
    Validate a locator without raising.

    Args:
        raw_locator: The raw locator string to validate

    Returns:
        LocatorValidationResult with canonical form and hash, or an error
    """
    try:
        content_hash = hash_from_locator(raw_locator)
    except InvalidLocatorError as e:
        return LocatorValidationResult(
            valid=False,
            canonical_locator=None,
            content_hash=None,
            error=e.details.get("reason", e.message),
        )
    return LocatorValidationResult(
        valid=True,
        canonical_locator=locator_from_hash(content_hash),
        content_hash=content_hash,
    )
