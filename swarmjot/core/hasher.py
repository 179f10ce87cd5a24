"""Canonical hashing helpers for content addressing and feed identifiers.

Feed identifiers follow the single-owner-chunk convention: the identifier
for update ``index`` of ``topic`` is ``sha256(topic || index_be64)``, and the
stable feed address is ``sha256(topic || owner)``.  Neither depends on the
content being published.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: sorted keys, compact separators."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def content_address(obj: Any) -> str:
    """Content-address a JSON-serializable object (bare hex digest)."""
    return sha256_hex(canonical_json_bytes(obj))


def feed_topic(name: str) -> str:
    """Hash a human-readable topic name into a 32-byte hex topic."""
    return sha256_hex(name.encode("utf-8"))


def feed_identifier(topic: str, index: int) -> str:
    """Identifier of update ``index`` for a hex ``topic``."""
    return sha256_hex(bytes.fromhex(topic) + index.to_bytes(8, "big"))


def feed_address(owner: str, topic: str) -> str:
    """Stable address of the feed owned by ``owner`` (hex public key)."""
    return sha256_hex(bytes.fromhex(topic) + bytes.fromhex(owner))


def soc_signing_payload(identifier: str, payload: bytes) -> bytes:
    """Bytes an owner signs to authorise ``payload`` under ``identifier``."""
    return bytes.fromhex(identifier) + hashlib.sha256(payload).digest()
