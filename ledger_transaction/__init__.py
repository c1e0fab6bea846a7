"""
Epoch Ledger - Transaction Module

This module implements transactions that claim unspent outputs and create new
ones, the signatures that authorize them, and their validation against a pool.
"""

from .transaction import Transaction, TransactionInput, TransactionOutput
from .validator import TransactionValidator, TxValidity, is_valid_transaction

__all__ = [
    'Transaction',
    'TransactionInput',
    'TransactionOutput',
    'TransactionValidator',
    'TxValidity',
    'is_valid_transaction',
]
