"""Public shared error API for ledger components."""

from . import codes
from .factories import (
    dependency_error,
    internal_error,
    ledger_error,
    validation_error,
)
from .rejection import TransitionRejected, reject
from .types import ErrorCategory, ErrorDetail

__all__ = [
    "ErrorCategory",
    "ErrorDetail",
    "TransitionRejected",
    "codes",
    "dependency_error",
    "internal_error",
    "ledger_error",
    "reject",
    "validation_error",
]
