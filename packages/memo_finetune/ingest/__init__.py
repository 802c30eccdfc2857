"""Loaders for raw transaction exports."""

from .adapters.txs_tsv import TransactionParseError, read_transactions

__all__ = ["TransactionParseError", "read_transactions"]
