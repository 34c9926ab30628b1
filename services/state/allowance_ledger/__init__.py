"""Allowance Ledger Service: per-zone decibel budgets and their transfer."""
