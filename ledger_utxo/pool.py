"""
Implementation of the UTXOPool class for the epoch ledger.

This class provides in-memory storage for unspent outputs keyed by the
reference that names them. Pools are independent values: copying a pool
never shares mutable state with the original.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union
from .utxo import OutputReference, UnspentOutput


class UTXOPool:
    """
    In-memory set of unspent outputs.

    Attributes:
        _utxos (Dict[OutputReference, UnspentOutput]): Maps references to outputs
    """

    def __init__(
        self,
        source: Optional[Union["UTXOPool", Mapping[OutputReference, UnspentOutput]]] = None
    ):
        """
        Initialize a pool, optionally as a copy of another.

        Args:
            source: Another UTXOPool or a mapping to copy entries from

        Raises:
            TypeError: If the mapping holds keys or values of the wrong type
        """
        self._utxos: Dict[OutputReference, UnspentOutput] = {}
        if source is None:
            return

        for ref, output in source.items():
            if not isinstance(ref, OutputReference):
                raise TypeError(f"Pool keys must be OutputReference, got {type(ref).__name__}")
            if not isinstance(output, UnspentOutput):
                raise TypeError(f"Pool values must be UnspentOutput, got {type(output).__name__}")
            self._utxos[ref] = output

    def copy(self) -> "UTXOPool":
        """Return an independent copy of this pool."""
        return UTXOPool(self)

    def add_utxo(self, ref: OutputReference, output: UnspentOutput) -> None:
        """
        Insert an unspent output.

        Args:
            ref: Reference naming the output
            output: Value and owner of the output

        Raises:
            ValueError: If an output with the same reference already exists
        """
        if ref in self._utxos:
            raise ValueError(f"UTXO {ref} already exists")
        self._utxos[ref] = output

    def remove_utxo(self, ref: OutputReference) -> None:
        """
        Remove an unspent output.

        Args:
            ref: Reference of the output to remove

        Raises:
            ValueError: If the output doesn't exist
        """
        if ref not in self._utxos:
            raise ValueError(f"UTXO {ref} not found")
        del self._utxos[ref]

    def get_output(self, ref: OutputReference) -> Optional[UnspentOutput]:
        """
        Retrieve an unspent output by reference.

        Returns:
            UnspentOutput if found, None otherwise
        """
        return self._utxos.get(ref)

    def contains(self, ref: OutputReference) -> bool:
        return ref in self._utxos

    def __contains__(self, ref: object) -> bool:
        return ref in self._utxos

    def __len__(self) -> int:
        return len(self._utxos)

    def __iter__(self) -> Iterator[OutputReference]:
        return iter(self.all_utxos())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UTXOPool):
            return NotImplemented
        return self._utxos == other._utxos

    def __repr__(self) -> str:
        return f"UTXOPool(size={len(self._utxos)}, total={self.get_total_value()})"

    def items(self) -> List[Tuple[OutputReference, UnspentOutput]]:
        """All entries, ordered by reference."""
        return sorted(self._utxos.items(), key=lambda item: item[0])

    def all_utxos(self) -> List[OutputReference]:
        """
        Get all stored references.

        Returns:
            List of references in ascending order
        """
        return sorted(self._utxos)

    def get_total_value(self) -> int:
        """Sum of all unspent output values."""
        return sum(output.value for output in self._utxos.values())

    def get_balance_by_owner(self) -> Dict[bytes, int]:
        """
        Calculate total unspent value per owner key.

        Returns:
            Dict mapping owner key to the sum of its outputs
        """
        balances: Dict[bytes, int] = {}
        for output in self._utxos.values():
            balances[output.owner] = balances.get(output.owner, 0) + output.value
        return balances

    def clear(self) -> None:
        """Remove all outputs."""
        self._utxos.clear()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "utxos": [
                {"ref": ref.to_dict(), "output": output.to_dict()}
                for ref, output in self.items()
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UTXOPool":
        """
        Rebuild a pool from its dictionary form.

        Raises:
            ValueError: If an entry is malformed or a reference repeats
        """
        pool = cls()
        try:
            for entry in data["utxos"]:
                pool.add_utxo(
                    OutputReference.from_dict(entry["ref"]),
                    UnspentOutput.from_dict(entry["output"])
                )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Error deserializing UTXO pool: {str(e)}")
        return pool
