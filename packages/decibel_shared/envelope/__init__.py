"""Public envelope API for ledger components."""

from .envelope import Envelope, Payload, failure, success
from .meta import (
    PRINCIPAL_MAX_LENGTH,
    EnvelopeKind,
    EnvelopeMeta,
    new_meta,
    to_utc,
    utc_now,
)
from .validate import meta_errors, validate_meta, validate_request

__all__ = [
    "PRINCIPAL_MAX_LENGTH",
    "Envelope",
    "EnvelopeKind",
    "EnvelopeMeta",
    "Payload",
    "failure",
    "meta_errors",
    "new_meta",
    "success",
    "to_utc",
    "utc_now",
    "validate_meta",
    "validate_request",
]
