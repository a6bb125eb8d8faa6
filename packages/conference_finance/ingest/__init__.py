"""Ledger import adapters."""
