"""Shared primitives for Decibel ledger components."""
