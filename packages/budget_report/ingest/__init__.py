"""Readers for the transaction sources feeding the ledger."""
