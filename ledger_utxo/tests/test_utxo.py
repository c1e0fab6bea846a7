"""
Tests for the OutputReference and UnspentOutput classes.
"""

from decimal import Decimal
import hashlib

import pytest
from ledger_utxo.utxo import OutputReference, UnspentOutput, MAX_INDEX


@pytest.fixture
def digest():
    """A valid transaction digest."""
    return hashlib.sha256(b"origin").hexdigest()


def test_reference_creation(digest):
    """Test reference attributes."""
    ref = OutputReference(digest, 3)
    assert ref.tx_id == digest
    assert ref.index == 3
    assert ref.digest_bytes() == bytes.fromhex(digest)


def test_reference_value_semantics(digest):
    """Equal references hash equally and work as dict keys."""
    a = OutputReference(digest, 0)
    b = OutputReference(digest.upper(), 0)
    c = OutputReference(digest, 1)

    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert {a: "x"}[b] == "x"
    assert len({a, b, c}) == 2


def test_reference_is_immutable(digest):
    ref = OutputReference(digest, 0)
    with pytest.raises(AttributeError):
        ref.index = 5
    with pytest.raises(AttributeError):
        ref._tx_id = "00" * 32


def test_reference_validation(digest):
    """Test invalid reference construction."""
    with pytest.raises(ValueError, match="Invalid transaction digest"):
        OutputReference("not-hex", 0)
    with pytest.raises(ValueError, match="32 bytes"):
        OutputReference("abcd", 0)
    with pytest.raises(ValueError, match="Output index"):
        OutputReference(digest, -1)
    with pytest.raises(ValueError, match="Output index"):
        OutputReference(digest, MAX_INDEX + 1)
    with pytest.raises(ValueError, match="Output index"):
        OutputReference(digest, True)


def test_reference_rejects_whitespace_in_digest(digest):
    """A digest is exactly 64 hex characters, nothing skipped or kept."""
    for padded in (digest[:2] + " " + digest[2:], f" {digest}", f"{digest}\n"):
        with pytest.raises(ValueError, match="Invalid transaction digest"):
            OutputReference(padded, 0)


def test_reference_normalizes_digest(digest):
    ref = OutputReference(digest.upper(), 1)
    assert ref.tx_id == digest
    assert len(ref.tx_id) == 64
    assert ref in {OutputReference(digest, 1)}


def test_reference_ordering():
    low = OutputReference("00" * 32, 5)
    high = OutputReference("ff" * 32, 0)
    assert sorted([high, OutputReference("00" * 32, 1), low]) == [
        OutputReference("00" * 32, 1), low, high
    ]


def test_reference_serialization(digest):
    ref = OutputReference(digest, 2)
    assert OutputReference.from_dict(ref.to_dict()) == ref
    with pytest.raises(ValueError, match="Missing field"):
        OutputReference.from_dict({"tx_id": digest})


def test_unspent_output_creation():
    output = UnspentOutput(10, b"\x01" * 64)
    assert output.value == 10
    assert output.owner == b"\x01" * 64
    assert output == UnspentOutput(10, bytearray(b"\x01" * 64))
    assert output != UnspentOutput(11, b"\x01" * 64)


def test_unspent_output_requires_integer_amounts():
    """Amounts are exact integers in the smallest unit."""
    for bad in (1.5, Decimal("1"), True, "10"):
        with pytest.raises(TypeError, match="Amount must be an integer"):
            UnspentOutput(bad, b"\x01")


def test_unspent_output_rejects_negative_value():
    with pytest.raises(ValueError, match="non-negative"):
        UnspentOutput(-5, b"\x01" * 64)
    with pytest.raises(ValueError, match="non-negative"):
        UnspentOutput.from_dict({"value": -1, "owner": "abcd"})
    assert UnspentOutput(0, b"\x01").value == 0


def test_unspent_output_owner_type():
    with pytest.raises(TypeError, match="Owner key must be bytes"):
        UnspentOutput(1, "0x1234")


def test_unspent_output_serialization():
    output = UnspentOutput(42, b"\xab\xcd")
    data = output.to_dict()
    assert data == {"value": 42, "owner": "abcd"}
    assert UnspentOutput.from_dict(data) == output
