"""Postgres persistence for the ledger store."""
