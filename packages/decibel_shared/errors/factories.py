"""Factory helpers for building consistent ``ErrorDetail`` values."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail

_LEDGER_CATEGORIES: dict[str, ErrorCategory] = {
    codes.UNAUTHORIZED: ErrorCategory.POLICY,
    codes.NOT_FOUND: ErrorCategory.NOT_FOUND,
    codes.ALREADY_EXISTS: ErrorCategory.CONFLICT,
    codes.INVALID_AMOUNT: ErrorCategory.VALIDATION,
    codes.INSUFFICIENT_ALLOWANCE: ErrorCategory.CONFLICT,
    codes.INVALID_DECIBEL: ErrorCategory.VALIDATION,
    codes.ZONE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    codes.PERMIT_EXISTS: ErrorCategory.CONFLICT,
    codes.VOTING_PERIOD_ACTIVE: ErrorCategory.CONFLICT,
    codes.ALREADY_VOTED: ErrorCategory.CONFLICT,
    codes.INVALID_VOTE: ErrorCategory.POLICY,
}


def ledger_error(
    code: str,
    message: str,
    *,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create one ledger-transition error with its canonical category."""
    category = _LEDGER_CATEGORIES.get(code)
    if category is None:
        raise ValueError(f"unknown ledger error code: {code}")
    return ErrorDetail(
        code=code,
        message=message,
        category=category,
        retryable=False,
        metadata=_meta(metadata),
    )


def validation_error(
    message: str,
    *,
    code: str = codes.INVALID_ARGUMENT,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a validation-category error."""
    return ErrorDetail(
        code=code,
        message=message,
        category=ErrorCategory.VALIDATION,
        retryable=False,
        metadata=_meta(metadata),
    )


def dependency_error(
    message: str,
    *,
    code: str = codes.DEPENDENCY_FAILURE,
    retryable: bool = True,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create a dependency-category error."""
    return ErrorDetail(
        code=code,
        message=message,
        category=ErrorCategory.DEPENDENCY,
        retryable=retryable,
        metadata=_meta(metadata),
    )


def internal_error(
    message: str,
    *,
    code: str = codes.INTERNAL_ERROR,
    metadata: Mapping[str, object] | None = None,
) -> ErrorDetail:
    """Create an internal-category error."""
    return ErrorDetail(
        code=code,
        message=message,
        category=ErrorCategory.INTERNAL,
        retryable=False,
        metadata=_meta(metadata),
    )


def _meta(metadata: Mapping[str, object] | None) -> dict[str, str]:
    """Stringify optional metadata values into a plain dict."""
    if metadata is None:
        return {}
    return {str(key): str(value) for key, value in metadata.items()}
