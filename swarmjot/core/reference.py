"""Reference normalization — cleaning and classifying storage references.

A storage reference is a hex digest optionally followed by ``/path``.
Every function here is pure and best-effort: unparseable input comes back
unchanged unless the caller asks for strict validation.
"""

from __future__ import annotations

import re

# Literal, case-sensitive prefixes stripped by normalize().
PROTOCOL_PREFIXES: tuple[str, ...] = ("bzz://", "bytes://")

# Plain references are 32-byte digests; encrypted ones carry a 32-byte key.
DIGEST_HEX_LENGTH = 64
ENCRYPTED_HEX_LENGTH = 128

_HEX_REF = re.compile(rf"^[a-fA-F0-9]{{{DIGEST_HEX_LENGTH}}}$")
_HASH_SEGMENT = re.compile(
    rf"^(?:[a-fA-F0-9]{{{DIGEST_HEX_LENGTH}}}|[a-fA-F0-9]{{{ENCRYPTED_HEX_LENGTH}}})$"
)
_BZZ_IN_TEXT = re.compile(r"bzz://([a-zA-Z0-9\-_]{64})")
_HEX_IN_TEXT = re.compile(r"([a-fA-F0-9]{64})")


class InvalidReferenceError(ValueError):
    """Raised by strict normalization when a reference is structurally impossible."""


def normalize(reference: str, *, strict: bool = False) -> str:
    """Strip protocol prefixes and surrounding whitespace.

    Idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    cleaned = reference.strip()
    changed = True
    while changed:
        changed = False
        for prefix in PROTOCOL_PREFIXES:
            if cleaned.startswith(prefix):
                cleaned = cleaned[len(prefix) :].strip()
                changed = True
    if strict and not _HASH_SEGMENT.match(cleaned.split("/", 1)[0]):
        raise InvalidReferenceError(f"Not a storage reference: {reference!r}")
    return cleaned


def extract_hash(reference: str) -> str:
    """Return the leading hash segment (everything before the first ``/``)."""
    return normalize(reference).split("/", 1)[0]


def extract_path(reference: str) -> str:
    """Return the path after the hash segment, without a leading slash."""
    parts = normalize(reference).split("/", 1)
    return parts[1] if len(parts) == 2 else ""


def is_raw_reference(reference: str) -> bool:
    """True for a bare digest: no path component, within the digest length."""
    cleaned = normalize(reference)
    return "/" not in cleaned and len(cleaned) <= DIGEST_HEX_LENGTH


def is_valid_reference(reference: str) -> bool:
    """True for exactly 64 hex chars, with or without a ``bzz://`` prefix."""
    if reference.startswith("bzz://"):
        reference = reference[len("bzz://") :]
    return bool(_HEX_REF.match(reference))


def find_reference(text: str) -> str:
    """Recover a reference embedded in free text, or ``""``.

    Prefers an explicit ``bzz://`` link, then the first bare 64-hex run.
    """
    if not text:
        return ""
    match = _BZZ_IN_TEXT.search(text)
    if match:
        return match.group(1)
    match = _HEX_IN_TEXT.search(text)
    if match and is_valid_reference(match.group(1)):
        return match.group(1)
    return ""
