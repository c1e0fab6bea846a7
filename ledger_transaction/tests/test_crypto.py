"""
Tests for the ECDSA helpers.
"""

import pytest
from ledger_transaction.crypto import (
    generate_signing_key,
    public_key_bytes,
    sign_message,
    signing_key_from_secret,
    verify_signature
)


def test_sign_and_verify(alice):
    signature = sign_message(alice.signing_key, b"pay bob 5")
    assert verify_signature(b"pay bob 5", signature, alice.owner)


def test_signatures_are_deterministic(alice):
    assert sign_message(alice.signing_key, b"m") == sign_message(alice.signing_key, b"m")


def test_verify_rejects_wrong_key_or_message(alice, bob):
    signature = sign_message(alice.signing_key, b"pay bob 5")
    assert not verify_signature(b"pay bob 5", signature, bob.owner)
    assert not verify_signature(b"pay bob 6", signature, alice.owner)


def test_verify_rejects_malformed_input(alice):
    signature = sign_message(alice.signing_key, b"m")
    assert not verify_signature(b"m", signature, b"\x01\x02")
    assert not verify_signature(b"m", b"short", alice.owner)
    assert not verify_signature(b"m", b"", alice.owner)


def test_key_helpers():
    key = generate_signing_key()
    assert len(public_key_bytes(key)) == 64
    assert public_key_bytes(signing_key_from_secret(7)) == public_key_bytes(signing_key_from_secret(7))

    with pytest.raises(ValueError, match="out of range"):
        signing_key_from_secret(0)
