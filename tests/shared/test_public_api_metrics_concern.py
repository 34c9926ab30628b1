"""Unit tests for public API metrics concern behavior."""

from __future__ import annotations

from packages.decibel_shared.logging.public_api import (
    CompletionContext,
    InvocationContext,
    PublicApiMetricsConcern,
)


class _FakeCounter:
    """In-memory fake counter recording each add call."""

    def __init__(self) -> None:
        self.calls: list[tuple[int | float, dict[str, str]]] = []

    def add(self, amount: int | float, attributes: dict[str, str]) -> None:
        self.calls.append((amount, dict(attributes)))


class _FakeHistogram:
    """In-memory fake histogram recording each sample."""

    def __init__(self) -> None:
        self.samples: list[tuple[float, dict[str, str]]] = []

    def record(self, amount: float, attributes: dict[str, str]) -> None:
        self.samples.append((amount, dict(attributes)))


def _invocation() -> InvocationContext:
    return InvocationContext(
        component_id="service_trading_engine",
        api_name="accept_trade_offer",
        trace_id="t",
        envelope_id="e",
        principal="buyer",
        references={"token_id": "3"},
    )


def test_metrics_concern_emits_calls_and_duration_for_success() -> None:
    calls, durations, errors = _FakeCounter(), _FakeHistogram(), _FakeCounter()
    concern = PublicApiMetricsConcern(
        public_api_calls_total=calls,
        public_api_duration_ms=durations,
        public_api_errors_total=errors,
    )

    concern.on_completion(
        CompletionContext(
            invocation=_invocation(),
            success=True,
            duration_ms=12.5,
            errors=[],
            error_categories=[],
        )
    )

    expected = {
        "component_id": "service_trading_engine",
        "api_name": "accept_trade_offer",
        "outcome": "success",
    }
    assert calls.calls == [(1, expected)]
    assert durations.samples == [(12.5, expected)]
    assert errors.calls == []


def test_metrics_concern_counts_each_failure_category() -> None:
    calls, durations, errors = _FakeCounter(), _FakeHistogram(), _FakeCounter()
    concern = PublicApiMetricsConcern(
        public_api_calls_total=calls,
        public_api_duration_ms=durations,
        public_api_errors_total=errors,
    )

    concern.on_completion(
        CompletionContext(
            invocation=_invocation(),
            success=False,
            duration_ms=7.0,
            errors=["INSUFFICIENT_ALLOWANCE: insufficient allowance"],
            error_categories=["conflict"],
        )
    )

    assert calls.calls[0][1]["outcome"] == "failure"
    assert errors.calls == [
        (
            1,
            {
                "component_id": "service_trading_engine",
                "api_name": "accept_trade_offer",
                "error_category": "conflict",
            },
        )
    ]
