"""
Implementation of the EpochProcessor class for the epoch ledger.

An epoch takes an ordered batch of candidate transactions, commits a subset
of them to the processor's private UTXO pool and returns the committed
transactions. Two policies are provided:

- sequential: candidates are validated in order against the live pool and
  committed one by one, so the earliest valid claimant of an output wins;
- max fee: candidates are screened against a snapshot, the fee-maximizing
  conflict-free subset is chosen (see ``selection``) and committed as one
  batch at the end.

The two policies never share a mutation discipline within one epoch.
"""

from typing import Dict, Iterable, List, Optional, Tuple
import logging

from ledger_transaction.transaction import Transaction
from ledger_transaction.validator import TransactionValidator, TxValidity
from ledger_utxo.pool import UTXOPool
from .conflicts import ConflictGraph
from .selection import DEFAULT_EXACT_LIMIT, check_exact_limit, select_max_fee

logger = logging.getLogger(__name__)


class EpochProcessor:
    """
    Validates and commits epochs of transactions against a private pool.

    Attributes:
        validator (TransactionValidator): Per-transaction validity check
        exact_limit (int): Largest conflict component solved exactly by the max fee policy
        rejections (Dict[int, TxValidity]): Why each excluded candidate of the last
                                            epoch was left out, by candidate position
        total_fees (int): Fees collected by the last epoch
    """

    def __init__(
        self,
        utxo_pool: UTXOPool,
        validator: Optional[TransactionValidator] = None,
        exact_limit: int = DEFAULT_EXACT_LIMIT
    ):
        """
        Initialize the processor with a copy of utxo_pool.

        Args:
            utxo_pool: Current ledger state; never modified by the processor
            validator: Validator to use, defaults to ECDSA signature checks
            exact_limit: Component size above which max fee selection approximates

        Raises:
            ValueError: If exact_limit is outside [0, MAX_EXACT_LIMIT]
        """
        check_exact_limit(exact_limit)
        self._pool = UTXOPool(utxo_pool)
        self.validator = validator or TransactionValidator()
        self.exact_limit = exact_limit
        self.rejections: Dict[int, TxValidity] = {}
        self.total_fees = 0

    @property
    def pool(self) -> UTXOPool:
        """Copy of the processor's current pool."""
        return self._pool.copy()

    def is_valid(self, tx: Transaction) -> bool:
        """Check tx against the current pool."""
        return self.validator.is_valid(tx, self._pool)

    def handle_sequential(self, candidates: Iterable[Transaction]) -> List[Transaction]:
        """
        Commit every candidate that is valid when its turn comes.

        Each candidate is checked against the pool as already changed by the
        candidates accepted before it, so a later claimant of an output that
        an earlier accepted candidate consumed is rejected. The epoch runs on
        a copy of the pool; the processor's pool, rejections and fees change
        only once every candidate has been handled.

        Args:
            candidates: Proposed transactions in priority order

        Returns:
            Accepted transactions, in candidate order

        Raises:
            ValueError: If an accepted candidate cannot be applied; the
                        processor is left as it was before the call
        """
        batch = self._pool.copy()
        rejections: Dict[int, TxValidity] = {}
        total_fees = 0
        accepted: List[Transaction] = []

        for position, tx in enumerate(candidates):
            verdict = self.validator.check(tx, batch)
            if verdict is not TxValidity.VALID:
                rejections[position] = verdict
                logger.debug("Rejected candidate %d (%s): %s", position, tx.tx_id, verdict.value)
                continue

            fee = self.validator.fee(tx, batch)
            _apply(batch, tx)
            total_fees += fee
            accepted.append(tx)

        self._pool = batch
        self.rejections = rejections
        self.total_fees = total_fees
        logger.info(
            "Sequential epoch committed %d transactions, %d rejected, fees %d",
            len(accepted), len(rejections), total_fees
        )
        return accepted

    def handle_max_fee(self, candidates: Iterable[Transaction]) -> List[Transaction]:
        """
        Commit the conflict-free subset of candidates with the largest total fee.

        Candidates are screened in order against a view holding the pool plus
        the outputs minted by earlier screened candidates, so a candidate may
        spend the output of an earlier one if both end up selected. The
        selection is then applied in candidate order to a copy of the pool,
        which replaces the processor's pool only once the whole batch applied.

        Args:
            candidates: Proposed transactions

        Returns:
            Accepted transactions, in candidate order

        Raises:
            ValueError: If the selection cannot be applied; the processor is
                        left as it was before the call
        """
        rejections: Dict[int, TxValidity] = {}
        view = self._pool.copy()
        graph = ConflictGraph()

        for position, tx in enumerate(candidates):
            verdict = self.validator.check(tx, view)
            if verdict is not TxValidity.VALID:
                rejections[position] = verdict
                logger.debug("Rejected candidate %d (%s): %s", position, tx.tx_id, verdict.value)
                continue

            graph.add_candidate(position, tx, self.validator.fee(tx, view))
            for ref, output in tx.minted_outputs():
                if ref not in view:
                    view.add_utxo(ref, output)

        chosen = select_max_fee(graph, self.exact_limit)
        chosen_set = set(chosen)
        for position in graph.nodes:
            if position not in chosen_set:
                rejections[position] = TxValidity.CONFLICT

        batch = self._pool.copy()
        accepted: List[Transaction] = []
        for position in chosen:
            tx = graph.nodes[position].transaction
            _apply(batch, tx)
            accepted.append(tx)

        self._pool = batch
        self.rejections = rejections
        self.total_fees = graph.total_fee(chosen_set)
        logger.info(
            "Max fee epoch committed %d of %d screened transactions, fees %d",
            len(accepted), len(graph), self.total_fees
        )
        return accepted


def _apply(pool: UTXOPool, tx: Transaction) -> None:
    """
    Consume tx's inputs and mint its outputs in pool.

    Raises:
        ValueError: If an input is missing or a minted reference already
                    exists; pool is left untouched in that case
    """
    claims = tx.claimed_references()
    minted = tx.minted_outputs()
    for ref in claims:
        if ref not in pool:
            raise ValueError(f"Cannot apply {tx.tx_id}: input {ref} not in pool")
    for ref, _ in minted:
        if ref in pool:
            raise ValueError(f"Cannot apply {tx.tx_id}: output {ref} already exists")

    for ref in claims:
        pool.remove_utxo(ref)
    for ref, output in minted:
        pool.add_utxo(ref, output)


def commit_sequential(
    pool: UTXOPool,
    candidates: Iterable[Transaction],
    validator: Optional[TransactionValidator] = None
) -> Tuple[List[Transaction], UTXOPool]:
    """
    Run one sequential epoch.

    Returns:
        Tuple of (accepted transactions in order, resulting pool)
    """
    processor = EpochProcessor(pool, validator)
    accepted = processor.handle_sequential(candidates)
    return accepted, processor.pool


def commit_max_fee(
    pool: UTXOPool,
    candidates: Iterable[Transaction],
    validator: Optional[TransactionValidator] = None,
    exact_limit: int = DEFAULT_EXACT_LIMIT
) -> Tuple[List[Transaction], UTXOPool]:
    """
    Run one fee-maximizing epoch.

    Returns:
        Tuple of (accepted transactions in candidate order, resulting pool)
    """
    processor = EpochProcessor(pool, validator, exact_limit)
    accepted = processor.handle_max_fee(candidates)
    return accepted, processor.pool
