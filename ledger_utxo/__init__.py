"""
Epoch Ledger - UTXO Module

This module implements the unspent transaction output set: references naming
ledger entries, the entries themselves, and the pool that holds them.
"""

from .utxo import OutputReference, UnspentOutput
from .pool import UTXOPool

__all__ = ['OutputReference', 'UnspentOutput', 'UTXOPool']
