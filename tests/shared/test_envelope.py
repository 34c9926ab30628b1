"""Tests for envelope model, builders, and request validation."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import BaseModel, ConfigDict, PositiveInt, ValidationError

from packages.decibel_shared.envelope import (
    PRINCIPAL_MAX_LENGTH,
    Envelope,
    EnvelopeKind,
    EnvelopeMeta,
    failure,
    meta_errors,
    new_meta,
    success,
    validate_request,
)
from packages.decibel_shared.errors import ErrorCategory, ErrorDetail


def _meta(**overrides: object) -> EnvelopeMeta:
    """Return deterministic metadata for envelope tests."""
    values = {
        "kind": EnvelopeKind.COMMAND,
        "source": "test",
        "principal": "city",
        "timestamp": datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC),
        "envelope_id": "env-1",
        "trace_id": "trace-1",
    }
    values.update(overrides)
    return new_meta(**values)


class _ZoneRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    zone_id: PositiveInt


def test_success_builder_returns_ok_envelope_with_payload() -> None:
    envelope = success(meta=_meta(), payload={"zone_id": 1})

    assert envelope.ok is True
    assert envelope.has_payload is True
    assert envelope.payload.value == {"zone_id": 1}
    assert envelope.errors == []
    assert envelope.metadata.trace_id == "trace-1"


def test_failure_builder_returns_non_ok_envelope_without_payload() -> None:
    error = ErrorDetail(
        code="ZONE_NOT_FOUND", message="zone not found", category=ErrorCategory.NOT_FOUND
    )
    envelope = failure(meta=_meta(), errors=[error])

    assert envelope.ok is False
    assert envelope.has_payload is False
    assert envelope.error_codes == ("ZONE_NOT_FOUND",)


def test_new_meta_generates_ids_and_normalizes_timestamp() -> None:
    meta = new_meta(
        kind=EnvelopeKind.QUERY,
        source="test",
        principal="city",
        timestamp=datetime(2026, 1, 1, 12, 0, 0),
    )
    assert meta.envelope_id != "" and meta.trace_id != ""
    assert meta.timestamp.tzinfo is UTC


def test_envelope_model_validation_rejects_invalid_metadata_shape() -> None:
    with pytest.raises(ValidationError):
        Envelope[int].model_validate(
            {"metadata": {"kind": "result"}, "payload": {"value": 1}, "errors": []}
        )


@pytest.mark.parametrize("field", ["principal", "source", "trace_id", "envelope_id"])
def test_meta_errors_require_non_empty_fields(field: str) -> None:
    errors = meta_errors(_meta(**{field: " "}))
    assert [error.code for error in errors] == ["INVALID_ARGUMENT"]
    assert errors[0].category == ErrorCategory.VALIDATION


def test_meta_errors_reject_unspecified_kind() -> None:
    errors = meta_errors(_meta(kind=EnvelopeKind.UNSPECIFIED))
    assert "kind" in errors[0].message


def test_meta_errors_bound_principal_length() -> None:
    assert meta_errors(_meta(principal="p" * PRINCIPAL_MAX_LENGTH)) == []

    errors = meta_errors(_meta(principal="p" * (PRINCIPAL_MAX_LENGTH + 1)))
    assert [error.code for error in errors] == ["INVALID_ARGUMENT"]
    assert "principal" in errors[0].message


def test_meta_strips_surrounding_whitespace() -> None:
    meta = _meta(principal="  city\t", source=" cli ")
    assert (meta.principal, meta.source) == ("city", "cli")


def test_validate_request_returns_model_when_valid() -> None:
    request, errors = validate_request(
        meta=_meta(), model=_ZoneRequest, payload={"zone_id": 3}
    )
    assert errors == []
    assert request == _ZoneRequest(zone_id=3)


def test_validate_request_names_offending_field() -> None:
    request, errors = validate_request(
        meta=_meta(), model=_ZoneRequest, payload={"zone_id": 0}
    )
    assert request is None
    assert errors[0].code == "INVALID_ARGUMENT"
    assert errors[0].metadata["field"] == "zone_id"


def test_validate_request_checks_metadata_first() -> None:
    request, errors = validate_request(
        meta=_meta(principal=""), model=_ZoneRequest, payload={"zone_id": 0}
    )
    assert request is None
    assert len(errors) == 1
    assert "principal" in errors[0].message
