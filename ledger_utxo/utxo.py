"""
Implementation of the OutputReference and UnspentOutput classes for the epoch ledger.

An OutputReference names one ledger entry by the digest of the transaction that
created it and the position of the output within that transaction. An
UnspentOutput is the value and owning verification key stored under it.
"""

from typing import Any, Dict

DIGEST_SIZE = 32
MAX_INDEX = 2 ** 32 - 1


class OutputReference:
    """
    Immutable identifier of a single transaction output.

    Attributes:
        tx_id (str): Hex-encoded SHA-256 digest of the origin transaction
        index (int): Position of the output among the origin's outputs
    """

    __slots__ = ("_tx_id", "_index")

    def __init__(self, tx_id: str, index: int):
        """
        Initialize a reference.

        Args:
            tx_id: 64-character hex digest of the origin transaction
            index: Output position, must be non-negative

        Raises:
            ValueError: If tx_id is not a hex digest or index is negative
        """
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index <= MAX_INDEX:
            raise ValueError(f"Output index must be an integer in [0, {MAX_INDEX}], got {index!r}")
        try:
            raw = bytes.fromhex(tx_id)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid transaction digest: {tx_id!r}")
        if len(raw) != DIGEST_SIZE:
            raise ValueError(f"Transaction digest must be {DIGEST_SIZE} bytes, got {len(raw)}")
        # fromhex skips whitespace
        if raw.hex() != tx_id.lower():
            raise ValueError(f"Invalid transaction digest: {tx_id!r}")

        object.__setattr__(self, "_tx_id", raw.hex())
        object.__setattr__(self, "_index", index)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("OutputReference is immutable")

    @property
    def tx_id(self) -> str:
        return self._tx_id

    @property
    def index(self) -> int:
        return self._index

    def digest_bytes(self) -> bytes:
        """Raw bytes of the origin transaction digest."""
        return bytes.fromhex(self._tx_id)

    def __repr__(self) -> str:
        return f"OutputReference(tx_id={self._tx_id[:12]}..., index={self._index})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OutputReference):
            return NotImplemented
        return self._tx_id == other._tx_id and self._index == other._index

    def __hash__(self) -> int:
        return hash((self._tx_id, self._index))

    def __lt__(self, other: "OutputReference") -> bool:
        if not isinstance(other, OutputReference):
            return NotImplemented
        return (self._tx_id, self._index) < (other._tx_id, other._index)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"tx_id": self._tx_id, "index": self._index}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputReference":
        try:
            return cls(tx_id=data["tx_id"], index=data["index"])
        except KeyError as e:
            raise ValueError(f"Missing field in output reference: {e}")


class UnspentOutput:
    """
    Value and owner of an output that has not been consumed yet.

    Attributes:
        value (int): Amount in the smallest currency unit
        owner (bytes): Raw verification key of the owner
    """

    __slots__ = ("_value", "_owner")

    def __init__(self, value: int, owner: bytes):
        """
        Args:
            value: Non-negative integer amount
            owner: Raw public key bytes

        Raises:
            TypeError: If value is not an int or owner is not bytes
            ValueError: If value is negative
        """
        check_amount(value)
        if value < 0:
            raise ValueError(f"Unspent output value must be non-negative, got {value}")
        if not isinstance(owner, (bytes, bytearray)):
            raise TypeError(f"Owner key must be bytes, got {type(owner).__name__}")

        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_owner", bytes(owner))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("UnspentOutput is immutable")

    @property
    def value(self) -> int:
        return self._value

    @property
    def owner(self) -> bytes:
        return self._owner

    def __repr__(self) -> str:
        return f"UnspentOutput(value={self._value}, owner={self._owner.hex()[:12]}...)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnspentOutput):
            return NotImplemented
        return self._value == other._value and self._owner == other._owner

    def __hash__(self) -> int:
        return hash((self._value, self._owner))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"value": self._value, "owner": self._owner.hex()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnspentOutput":
        try:
            return cls(value=data["value"], owner=bytes.fromhex(data["owner"]))
        except KeyError as e:
            raise ValueError(f"Missing field in unspent output: {e}")


def check_amount(value: Any) -> None:
    """
    Amounts are exact integers in the smallest currency unit.

    Raises:
        TypeError: For floats, Decimals, bools and anything else that is not an int
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Amount must be an integer, got {type(value).__name__}")
