"""
ECDSA (secp256k1) helpers for signing and verifying transaction inputs.

Owners are identified by the raw 64-byte encoding of their verification key.
Signatures are the raw 64-byte (r || s) encoding over a SHA-256 digest.
"""

import hashlib
import logging

from ecdsa import BadSignatureError, MalformedPointError, SECP256k1, SigningKey, VerifyingKey

logger = logging.getLogger(__name__)


def generate_signing_key() -> SigningKey:
    """Create a fresh random secp256k1 signing key."""
    return SigningKey.generate(curve=SECP256k1, hashfunc=hashlib.sha256)


def signing_key_from_secret(secret: int) -> SigningKey:
    """
    Derive a signing key from a secret exponent.

    Raises:
        ValueError: If secret is outside [1, curve order)
    """
    if not 1 <= secret < SECP256k1.order:
        raise ValueError("Secret exponent out of range for secp256k1")
    return SigningKey.from_secret_exponent(secret, curve=SECP256k1, hashfunc=hashlib.sha256)


def public_key_bytes(signing_key: SigningKey) -> bytes:
    """Raw verification key bytes used as an output owner."""
    return signing_key.get_verifying_key().to_string()


def sign_message(signing_key: SigningKey, message: bytes) -> bytes:
    """Deterministic (RFC 6979) signature over message."""
    return signing_key.sign_deterministic(message, hashfunc=hashlib.sha256)


def verify_signature(message: bytes, signature: bytes, key: bytes) -> bool:
    """
    Check that signature over message was produced by the owner of key.

    Args:
        message: Signed content
        signature: Raw (r || s) signature bytes
        key: Raw verification key bytes

    Returns:
        bool: True if the signature verifies, False for bad signatures and malformed keys
    """
    try:
        verifying_key = VerifyingKey.from_string(key, curve=SECP256k1, hashfunc=hashlib.sha256)
        return verifying_key.verify(signature, message, hashfunc=hashlib.sha256)
    except BadSignatureError:
        return False
    except (MalformedPointError, ValueError) as e:
        logger.debug("Malformed verification key or signature: %s", e)
        return False
