"""
Implementation of the Transaction class for the epoch ledger.

A transaction consumes unspent outputs as inputs and creates new outputs.
Its identity is the SHA-256 digest of its canonical encoding, and the digest
names the outputs it mints once committed.
"""

from typing import Any, Dict, List, Optional, Tuple
import hashlib
import struct

from ecdsa import SigningKey
from ledger_utxo.utxo import OutputReference, UnspentOutput, check_amount
from .crypto import sign_message

MAX_AMOUNT = 2 ** 63 - 1
MIN_AMOUNT = -(2 ** 63)


class TransactionInput:
    """
    Represents an input to a transaction (an unspent output being claimed).

    Attributes:
        prev_tx_id (str): Digest of the transaction that created the output
        output_index (int): Position of the output in that transaction
        signature (Optional[bytes]): Signature proving ownership, None until signed
    """

    def __init__(self, prev_tx_id: str, output_index: int, signature: Optional[bytes] = None):
        self.reference = OutputReference(prev_tx_id, output_index)
        self.signature = bytes(signature) if signature is not None else None

    @property
    def prev_tx_id(self) -> str:
        return self.reference.tx_id

    @property
    def output_index(self) -> int:
        return self.reference.index

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "prev_tx_id": self.prev_tx_id,
            "output_index": self.output_index,
            "signature": self.signature.hex() if self.signature is not None else None
        }


class TransactionOutput:
    """
    Represents an output created by a transaction.

    Attributes:
        value (int): Amount in the smallest currency unit; negative values are
                     representable so that validation can reject them
        owner (bytes): Verification key of the recipient
    """

    def __init__(self, value: int, owner: bytes):
        check_amount(value)
        if not MIN_AMOUNT <= value <= MAX_AMOUNT:
            raise ValueError(f"Output value {value} out of range")
        if not isinstance(owner, (bytes, bytearray)):
            raise TypeError(f"Owner key must be bytes, got {type(owner).__name__}")

        self.value = value
        self.owner = bytes(owner)

    def encode(self) -> bytes:
        return struct.pack(">qI", self.value, len(self.owner)) + self.owner

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"value": self.value, "owner": self.owner.hex()}


class Transaction:
    """
    A transfer of value between owners.

    Transactions are assembled incrementally and re-finalized after every
    change, so tx_id always matches the current content.

    Attributes:
        inputs (List[TransactionInput]): Outputs being claimed
        outputs (List[TransactionOutput]): New outputs being created
        tx_id (str): Hex SHA-256 digest of the canonical encoding
    """

    def __init__(
        self,
        inputs: Optional[List[TransactionInput]] = None,
        outputs: Optional[List[TransactionOutput]] = None
    ):
        """
        Initialize a transaction.

        Args:
            inputs: Inputs claiming existing outputs
            outputs: Outputs to create

        Empty inputs or outputs are allowed here; such transactions are
        rejected or contribute nothing during validation.
        """
        self.inputs: List[TransactionInput] = list(inputs or [])
        self.outputs: List[TransactionOutput] = list(outputs or [])
        self.tx_id = self.compute_id()

    def __repr__(self) -> str:
        return (
            f"Transaction(tx_id={self.tx_id[:12]}..., "
            f"inputs={len(self.inputs)}, outputs={len(self.outputs)})"
        )

    def add_input(self, prev_tx_id: str, output_index: int) -> None:
        self.inputs.append(TransactionInput(prev_tx_id, output_index))
        self.finalize()

    def remove_input(self, index: int) -> None:
        del self.inputs[index]
        self.finalize()

    def add_output(self, value: int, owner: bytes) -> None:
        self.outputs.append(TransactionOutput(value, owner))
        self.finalize()

    def add_signature(self, signature: bytes, index: int) -> None:
        """
        Attach a signature to the input at index.

        Raises:
            IndexError: If there is no input at index
        """
        self.inputs[index].signature = bytes(signature)
        self.finalize()

    def sign_input(self, index: int, signing_key: SigningKey) -> None:
        """Sign the input at index with signing_key over its signable content."""
        self.add_signature(sign_message(signing_key, self.get_raw_data_to_sign(index)), index)

    def finalize(self) -> str:
        """Recompute tx_id from the current content and return it."""
        self.tx_id = self.compute_id()
        return self.tx_id

    def get_raw_data_to_sign(self, index: int) -> bytes:
        """
        Canonical content that the signature of input index attests to:
        that input's reference followed by every output. Signatures and
        the other inputs are excluded.

        Raises:
            IndexError: If there is no input at index
        """
        if not 0 <= index < len(self.inputs):
            raise IndexError(f"Transaction has no input {index}")
        ref = self.inputs[index].reference
        parts = [ref.digest_bytes(), struct.pack(">I", ref.index)]
        parts.extend(out.encode() for out in self.outputs)
        return b"".join(parts)

    def get_raw_tx(self) -> bytes:
        """
        Full canonical encoding, signatures included:
          count | (digest | index | sig_len | sig)* | count | (value | owner_len | owner)*
        """
        parts = [struct.pack(">I", len(self.inputs))]
        for tx_input in self.inputs:
            signature = tx_input.signature or b""
            parts.append(tx_input.reference.digest_bytes())
            parts.append(struct.pack(">II", tx_input.output_index, len(signature)))
            parts.append(signature)
        parts.append(struct.pack(">I", len(self.outputs)))
        parts.extend(out.encode() for out in self.outputs)
        return b"".join(parts)

    def compute_id(self) -> str:
        """
        Compute unique transaction ID as SHA-256 hash of the raw encoding.

        Returns:
            str: Hex-encoded transaction ID
        """
        return hashlib.sha256(self.get_raw_tx()).hexdigest()

    def claimed_references(self) -> List[OutputReference]:
        """References claimed by the inputs, in input order."""
        return [tx_input.reference for tx_input in self.inputs]

    def output_sum(self) -> int:
        return sum(out.value for out in self.outputs)

    def minted_outputs(self) -> List[Tuple[OutputReference, UnspentOutput]]:
        """
        Entries this transaction adds to the pool when committed.

        Returns:
            List of (OutputReference(tx_id, j), UnspentOutput) in output order
        """
        return [
            (OutputReference(self.tx_id, j), UnspentOutput(out.value, out.owner))
            for j, out in enumerate(self.outputs)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to dictionary for serialization."""
        return {
            "tx_id": self.tx_id,
            "inputs": [inp.to_dict() for inp in self.inputs],
            "outputs": [out.to_dict() for out in self.outputs]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """
        Create transaction from dictionary representation.

        Args:
            data: Dictionary with transaction data

        Returns:
            New Transaction instance

        Raises:
            ValueError: If data is invalid or the stored tx_id does not match
        """
        try:
            inputs = [
                TransactionInput(
                    prev_tx_id=inp["prev_tx_id"],
                    output_index=inp["output_index"],
                    signature=bytes.fromhex(inp["signature"]) if inp.get("signature") is not None else None
                )
                for inp in data["inputs"]
            ]
            outputs = [
                TransactionOutput(value=out["value"], owner=bytes.fromhex(out["owner"]))
                for out in data["outputs"]
            ]
            tx = cls(inputs=inputs, outputs=outputs)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Error deserializing transaction: {str(e)}")

        if "tx_id" in data and tx.tx_id != data["tx_id"]:
            raise ValueError("Transaction ID mismatch")
        return tx
