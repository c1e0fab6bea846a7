"""
Implementation of the TransactionValidator class for the epoch ledger.

Validation is a pure predicate over a transaction and a pool snapshot. The
result is a tagged outcome so callers can tell why a transaction was
excluded; acceptance only depends on whether the tag is VALID.
"""

from enum import Enum
from typing import Callable, Set
import logging

from ledger_utxo.pool import UTXOPool
from ledger_utxo.utxo import OutputReference, UnspentOutput
from .crypto import verify_signature
from .transaction import Transaction, TransactionInput

logger = logging.getLogger(__name__)

SignatureVerifier = Callable[[bytes, bytes, bytes], bool]


class TxValidity(Enum):
    """Outcome of validating one transaction."""

    VALID = "valid"
    MISSING_OUTPUT = "missing-output"
    DOUBLE_CLAIM = "double-claim"
    BAD_SIGNATURE = "bad-signature"
    NEGATIVE_OUTPUT = "negative-output"
    INSUFFICIENT_INPUT = "insufficient-input"
    # Valid on its own but left out by the fee-maximizing selection
    CONFLICT = "conflict"


class TransactionValidator:
    """
    Checks transactions against a UTXO pool.

    Criteria, evaluated in order and short-circuiting on the first failure:
      (1) every claimed output exists in the pool
      (2) no output is claimed twice by the same transaction
      (3) every input's signature verifies against the claimed output's owner
      (4) every output value is non-negative
      (5) the sum of input values covers the sum of output values

    Attributes:
        verify_signature (SignatureVerifier): (message, signature, key) -> bool
    """

    def __init__(self, verify_signature: SignatureVerifier = verify_signature):
        self.verify_signature = verify_signature

    def check(self, tx: Transaction, pool: UTXOPool) -> TxValidity:
        """
        Validate tx against pool without modifying either.

        Args:
            tx: Transaction to validate
            pool: Snapshot of unspent outputs

        Returns:
            TxValidity tag, TxValidity.VALID if all criteria hold
        """
        if not tx.inputs:
            return TxValidity.MISSING_OUTPUT

        claimed: Set[OutputReference] = set()
        input_sum = 0

        for i, tx_input in enumerate(tx.inputs):
            ref = tx_input.reference
            utxo = pool.get_output(ref)
            if utxo is None:
                return TxValidity.MISSING_OUTPUT
            if ref in claimed:
                return TxValidity.DOUBLE_CLAIM
            if not self._signature_ok(tx, i, tx_input, utxo):
                return TxValidity.BAD_SIGNATURE

            claimed.add(ref)
            input_sum += utxo.value

        for output in tx.outputs:
            if output.value < 0:
                return TxValidity.NEGATIVE_OUTPUT

        if input_sum < tx.output_sum():
            return TxValidity.INSUFFICIENT_INPUT

        return TxValidity.VALID

    def is_valid(self, tx: Transaction, pool: UTXOPool) -> bool:
        """Return True if tx passes every criterion against pool."""
        return self.check(tx, pool) is TxValidity.VALID

    def fee(self, tx: Transaction, pool: UTXOPool) -> int:
        """
        Surplus of claimed input value over output value.

        Inputs whose outputs are not in the pool contribute nothing.
        """
        input_sum = 0
        for ref in tx.claimed_references():
            utxo = pool.get_output(ref)
            if utxo is not None:
                input_sum += utxo.value
        return input_sum - tx.output_sum()

    def _signature_ok(
        self,
        tx: Transaction,
        index: int,
        tx_input: TransactionInput,
        utxo: UnspentOutput
    ) -> bool:
        if tx_input.signature is None:
            return False
        try:
            return bool(self.verify_signature(tx.get_raw_data_to_sign(index), tx_input.signature, utxo.owner))
        except Exception as e:
            logger.warning("Signature verifier failed on input %d of %s: %s", index, tx.tx_id, e)
            return False


def is_valid_transaction(tx: Transaction, pool: UTXOPool) -> bool:
    """Validate tx against pool with the default ECDSA verifier."""
    return TransactionValidator().is_valid(tx, pool)
