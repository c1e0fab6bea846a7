"""
Epoch Ledger - Epoch Module

This module implements epoch processing: validating a batch of candidate
transactions against the UTXO pool, choosing which of them to commit, and
advancing the pool.
"""

from .conflicts import ConflictGraph, CandidateNode
from .selection import DEFAULT_EXACT_LIMIT, MAX_EXACT_LIMIT, select_max_fee
from .processor import EpochProcessor, commit_sequential, commit_max_fee

__all__ = [
    'ConflictGraph',
    'CandidateNode',
    'DEFAULT_EXACT_LIMIT',
    'MAX_EXACT_LIMIT',
    'select_max_fee',
    'EpochProcessor',
    'commit_sequential',
    'commit_max_fee',
]
