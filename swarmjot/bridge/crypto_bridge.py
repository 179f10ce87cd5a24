"""Crypto bridge — Ed25519 signing for website (feed) updates via PyNaCl.

Bridge boundary
---------------
The website builder signs every feed update with the owner's private key;
the owner's public key doubles as the feed owner identity, so the feed
address stays stable for as long as the key does.  All key material crosses
this boundary hex-encoded.

Verification is fail-closed: malformed keys or signatures verify as
``False`` rather than raising.
"""

from __future__ import annotations

import hashlib
import logging

import nacl.signing
from nacl.exceptions import BadSignatureError

logger = logging.getLogger(__name__)


def generate_keypair() -> tuple[str, str]:
    """Generate an Ed25519 key-pair.

    Returns
    -------
    tuple[str, str]
        ``(private_key_hex, public_key_hex)``, 64 hex chars each.
    """
    sk = nacl.signing.SigningKey.generate()
    return (sk.encode().hex(), sk.verify_key.encode().hex())


def public_key_for(private_key: str) -> str:
    """Derive the hex public key (feed owner) for a hex private key."""
    sk = nacl.signing.SigningKey(bytes.fromhex(private_key))
    return sk.verify_key.encode().hex()


def sign_data(data: bytes, private_key: str) -> str:
    """Detached Ed25519 signature over *data*, hex-encoded (128 chars).

    Parameters
    ----------
    data:
        A feed update signing payload (see ``hasher.soc_signing_payload``).
    private_key:
        Hex seed from ``generate_keypair()``.
    """
    sk = nacl.signing.SigningKey(bytes.fromhex(private_key))
    return sk.sign(data).signature.hex()


def verify_data(data: bytes, signature: str, public_key: str) -> bool:
    """Verify that *signature* is valid for *data* under *public_key*."""
    if not signature or not public_key:
        return False
    try:
        vk = nacl.signing.VerifyKey(bytes.fromhex(public_key))
        vk.verify(data, bytes.fromhex(signature))
        return True
    except (BadSignatureError, ValueError, TypeError):
        logger.debug("verify_data: signature rejected for key %s", key_fingerprint(public_key))
        return False


def key_fingerprint(public_key: str) -> str:
    """First 16 hex chars of SHA-256(public_key), safe to log."""
    if not public_key:
        return ""
    return hashlib.sha256(public_key.encode("utf-8")).hexdigest()[:16]
