"""Stable error code constants.

The first block holds infrastructure codes used at component boundaries. The
second block is the flat ledger taxonomy: every rejected state transition
reports exactly one of these, verbatim, with no wrapped cause.
"""

# Infrastructure
INVALID_ARGUMENT = "INVALID_ARGUMENT"
DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"
DEPENDENCY_UNAVAILABLE = "DEPENDENCY_UNAVAILABLE"
INTERNAL_ERROR = "INTERNAL_ERROR"
UNEXPECTED_EXCEPTION = "UNEXPECTED_EXCEPTION"

# Ledger transitions
UNAUTHORIZED = "UNAUTHORIZED"
NOT_FOUND = "NOT_FOUND"
ALREADY_EXISTS = "ALREADY_EXISTS"
INVALID_AMOUNT = "INVALID_AMOUNT"
INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"
INVALID_DECIBEL = "INVALID_DECIBEL"
ZONE_NOT_FOUND = "ZONE_NOT_FOUND"
PERMIT_EXISTS = "PERMIT_EXISTS"
VOTING_PERIOD_ACTIVE = "VOTING_PERIOD_ACTIVE"
ALREADY_VOTED = "ALREADY_VOTED"
INVALID_VOTE = "INVALID_VOTE"
