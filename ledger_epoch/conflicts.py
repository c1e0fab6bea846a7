"""
Implementation of the ConflictGraph class for the epoch ledger.

Nodes are candidate transactions that passed validation on their own. Two
nodes conflict when they claim the same output. A node depends on an earlier
node when it spends an output that the earlier node mints. A subset of
candidates can be committed together iff it contains no conflicting pair and
contains every dependency of each member.
"""

from typing import Dict, List, Optional, Set
from ledger_transaction.transaction import Transaction
from ledger_utxo.utxo import OutputReference


class CandidateNode:
    """
    A screened candidate in the conflict graph.

    Attributes:
        index (int): Position of the transaction in the epoch's candidate list
        transaction (Transaction): The candidate itself
        fee (int): Input value minus output value
        claims (List[OutputReference]): Outputs claimed by its inputs
        parents (Set[int]): Candidates minting outputs this one spends
        children (Set[int]): Candidates spending outputs this one mints
    """

    def __init__(self, index: int, transaction: Transaction, fee: int):
        self.index = index
        self.transaction = transaction
        self.fee = fee
        self.claims: List[OutputReference] = transaction.claimed_references()
        self.parents: Set[int] = set()
        self.children: Set[int] = set()

    def __repr__(self) -> str:
        return f"CandidateNode(index={self.index}, fee={self.fee})"


class ConflictGraph:
    """
    Conflict and dependency relations among screened candidates.

    Candidates must be added in ascending index order so that a dependency
    always points at an earlier node.

    Attributes:
        nodes (Dict[int, CandidateNode]): Nodes by candidate index
        _neighbors (Dict[int, Set[int]]): Conflict adjacency
        _claimants (Dict[OutputReference, List[int]]): Nodes claiming each output
        _minted_by (Dict[OutputReference, int]): Node minting each in-epoch output
    """

    def __init__(self):
        self.nodes: Dict[int, CandidateNode] = {}
        self._neighbors: Dict[int, Set[int]] = {}
        self._claimants: Dict[OutputReference, List[int]] = {}
        self._minted_by: Dict[OutputReference, int] = {}
        self._last_index: Optional[int] = None

    def __len__(self) -> int:
        return len(self.nodes)

    def add_candidate(self, index: int, transaction: Transaction, fee: int) -> CandidateNode:
        """
        Add a screened candidate and link it to earlier nodes.

        Args:
            index: Candidate position, greater than every index already added
            transaction: The candidate
            fee: Its fee against the screening view

        Returns:
            The new node

        Raises:
            ValueError: If index is not greater than the last added index
        """
        if self._last_index is not None and index <= self._last_index:
            raise ValueError(f"Candidate {index} added out of order")

        self._last_index = index
        node = CandidateNode(index, transaction, fee)
        self.nodes[index] = node
        self._neighbors[index] = set()

        for ref in node.claims:
            parent = self._minted_by.get(ref)
            if parent is not None:
                node.parents.add(parent)
                self.nodes[parent].children.add(index)

            claimants = self._claimants.setdefault(ref, [])
            for other in claimants:
                if other == index:
                    continue
                self._neighbors[index].add(other)
                self._neighbors[other].add(index)
            claimants.append(index)

        for ref, _ in transaction.minted_outputs():
            self._minted_by.setdefault(ref, index)

        return node

    def neighbors(self, index: int) -> Set[int]:
        """Candidates that conflict with index."""
        return self._neighbors[index]

    def conflicts(self, a: int, b: int) -> bool:
        return b in self._neighbors[a]

    def claimants(self, ref: OutputReference) -> List[int]:
        """Candidates claiming ref, in index order."""
        return list(self._claimants.get(ref, []))

    def is_feasible(self, selection: Set[int]) -> bool:
        """True if selection has no conflicting pair and is closed under dependencies."""
        for index in selection:
            if self._neighbors[index] & selection:
                return False
            if not self.nodes[index].parents <= selection:
                return False
        return True

    def total_fee(self, selection: Set[int]) -> int:
        return sum(self.nodes[index].fee for index in selection)

    def components(self) -> List[List[int]]:
        """
        Connected components under conflict and dependency edges.

        Returns:
            Components as ascending index lists, ordered by their smallest index
        """
        seen: Set[int] = set()
        result: List[List[int]] = []
        for start in sorted(self.nodes):
            if start in seen:
                continue
            seen.add(start)
            stack = [start]
            component = []
            while stack:
                current = stack.pop()
                component.append(current)
                node = self.nodes[current]
                for other in self._neighbors[current] | node.parents | node.children:
                    if other not in seen:
                        seen.add(other)
                        stack.append(other)
            result.append(sorted(component))
        return result
