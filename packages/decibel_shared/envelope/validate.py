"""Validation helpers for envelope metadata and request payloads."""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from packages.decibel_shared.errors import ErrorDetail, validation_error

from .meta import PRINCIPAL_MAX_LENGTH, EnvelopeKind, EnvelopeMeta

_REQUIRED_FIELDS = ("envelope_id", "trace_id", "source", "principal")


def validate_meta(meta: EnvelopeMeta) -> None:
    """Raise ``ValueError`` when required metadata is missing or malformed."""
    for name in _REQUIRED_FIELDS:
        if str(getattr(meta, name, "")).strip() == "":
            raise ValueError(f"metadata.{name} is required")
    if len(meta.principal) > PRINCIPAL_MAX_LENGTH:
        raise ValueError(
            f"metadata.principal must be at most {PRINCIPAL_MAX_LENGTH} characters"
        )
    if meta.kind == EnvelopeKind.UNSPECIFIED:
        raise ValueError("metadata.kind must be specified")


def meta_errors(meta: EnvelopeMeta) -> list[ErrorDetail]:
    """Return validation errors for metadata, or an empty list when valid."""
    try:
        validate_meta(meta)
    except ValueError as exc:
        return [validation_error(str(exc))]
    return []


TRequest = TypeVar("TRequest", bound=BaseModel)


def validate_request(
    *,
    meta: EnvelopeMeta,
    model: type[TRequest],
    payload: Mapping[str, Any],
) -> tuple[TRequest | None, list[ErrorDetail]]:
    """Validate envelope metadata, then the request payload model.

    Each pydantic error becomes one ``INVALID_ARGUMENT`` detail naming the
    offending field.
    """
    errors = meta_errors(meta)
    if errors:
        return None, errors

    try:
        request = model.model_validate(dict(payload))
    except ValidationError as exc:
        return None, [
            validation_error(
                f"request validation failed: {err['msg']}",
                metadata={"field": ".".join(str(p) for p in err["loc"])},
            )
            for err in exc.errors()
        ]
    return request, []
