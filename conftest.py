"""
Shared fixtures for the epoch ledger test suite.
"""

from typing import List, Sequence, Tuple
import hashlib

import pytest
from ledger_transaction.crypto import public_key_bytes, signing_key_from_secret
from ledger_transaction.transaction import Transaction
from ledger_transaction.validator import TransactionValidator
from ledger_utxo.pool import UTXOPool
from ledger_utxo.utxo import OutputReference, UnspentOutput


class Wallet:
    """ECDSA signing key paired with the owner bytes it controls."""

    def __init__(self, secret: int):
        self.signing_key = signing_key_from_secret(secret)
        self.owner = public_key_bytes(self.signing_key)

    def sign(self, tx: Transaction, index: int) -> None:
        tx.sign_input(index, self.signing_key)


class HashWallet:
    """Cheap stand-in for ECDSA, accepted by hash_verifier only."""

    def __init__(self, name: str):
        self.owner = hashlib.sha256(name.encode("utf-8")).digest()

    def sign(self, tx: Transaction, index: int) -> None:
        tx.add_signature(hash_signature(self.owner, tx.get_raw_data_to_sign(index)), index)


def hash_signature(key: bytes, message: bytes) -> bytes:
    return hashlib.sha256(key + message).digest()


def hash_verifier(message: bytes, signature: bytes, key: bytes) -> bool:
    return signature == hash_signature(key, message)


def genesis_ref(n: int, index: int = 0) -> OutputReference:
    return OutputReference(hashlib.sha256(f"genesis-{n}".encode("utf-8")).hexdigest(), index)


def build_transaction(spends: Sequence[Tuple[OutputReference, object]],
                      outputs: Sequence[Tuple[int, object]]) -> Transaction:
    """
    Assemble and sign a transaction.

    Args:
        spends: (reference, wallet) per input; the wallet signs that input
        outputs: (value, wallet) per output; the wallet receives it
    """
    tx = Transaction()
    for ref, _ in spends:
        tx.add_input(ref.tx_id, ref.index)
    for value, wallet in outputs:
        tx.add_output(value, wallet.owner)
    for i, (_, wallet) in enumerate(spends):
        wallet.sign(tx, i)
    return tx


def build_pool(entries: Sequence[Tuple[int, object]]) -> Tuple[UTXOPool, List[OutputReference]]:
    """Pool holding one genesis output per (value, wallet) entry."""
    pool = UTXOPool()
    refs = []
    for n, (value, wallet) in enumerate(entries):
        ref = genesis_ref(n)
        pool.add_utxo(ref, UnspentOutput(value, wallet.owner))
        refs.append(ref)
    return pool, refs


@pytest.fixture(scope="session")
def alice():
    return Wallet(0xA11CE)


@pytest.fixture(scope="session")
def bob():
    return Wallet(0xB0B)


@pytest.fixture(scope="session")
def carol():
    return Wallet(0xCA201)


@pytest.fixture
def hash_wallets():
    """Five cheap wallets for tests that build many transactions."""
    return [HashWallet(f"wallet-{i}") for i in range(5)]


@pytest.fixture
def fast_validator():
    """Validator that checks hash signatures instead of ECDSA."""
    return TransactionValidator(verify_signature=hash_verifier)


@pytest.fixture
def make_tx():
    return build_transaction


@pytest.fixture
def make_pool():
    return build_pool


@pytest.fixture
def make_ref():
    return genesis_ref
