"""Instrumentation for the public methods of ledger services.

Every method decorated with ``public_api_instrumented`` reports a start event
and a completion event. Both events are handed to a list of concerns:
structured logging, OpenTelemetry spans and OpenTelemetry metrics. A concern
that raises is logged and counted, and the wrapped method's return value is
left untouched.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from dataclasses import dataclass
from functools import lru_cache, wraps
from time import perf_counter
from typing import Any, Callable, Mapping, Protocol, Sequence

from opentelemetry import metrics as otel_metrics
from opentelemetry import trace as otel_trace
from opentelemetry.trace import Status, StatusCode

from packages.decibel_shared.config import load_settings

from . import fields
from .context import log_context

_INVOCATION_STAGE = "invocation"
_COMPLETION_STAGE = "completion"


@dataclass(frozen=True)
class InvocationContext:
    """What is known about a call before the wrapped method runs."""

    component_id: str
    api_name: str
    trace_id: str | None
    envelope_id: str | None
    principal: str | None
    references: Mapping[str, str]

    def log_fields(self) -> dict[str, object]:
        return {
            fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT,
            fields.COMPONENT_ID: self.component_id,
            fields.API_NAME: self.api_name,
            fields.TRACE_ID: self.trace_id,
            fields.ENVELOPE_ID: self.envelope_id,
            fields.PRINCIPAL: self.principal,
            **self.references,
        }


@dataclass(frozen=True)
class CompletionContext:
    """Outcome of one call, paired with its invocation."""

    invocation: InvocationContext
    success: bool
    duration_ms: float
    errors: list[str]
    error_categories: list[str]

    @property
    def outcome(self) -> str:
        return "success" if self.success else "failure"


class PublicApiInstrumentationConcern(Protocol):
    """Receives the start and completion events of instrumented calls."""

    def on_invocation(self, context: InvocationContext) -> None: ...

    def on_completion(self, context: CompletionContext) -> None: ...


class _CounterLike(Protocol):
    def add(self, amount: int | float, attributes: Mapping[str, str]) -> None: ...


class _HistogramLike(Protocol):
    def record(self, amount: float, attributes: Mapping[str, str]) -> None: ...


class _SpanLike(Protocol):
    def set_attribute(self, key: str, value: object) -> None: ...

    def record_exception(self, exception: Exception) -> None: ...

    def set_status(self, status: object) -> None: ...


class _SpanContextManagerLike(Protocol):
    def __enter__(self) -> _SpanLike: ...

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None: ...


class _TracerLike(Protocol):
    def start_as_current_span(self, name: str) -> _SpanContextManagerLike: ...


class PublicApiLoggingConcern:
    """Write one log line when a call starts and one when it finishes.

    Failed completions are written at WARNING so rejected ledger operations
    stand out from routine traffic.
    """

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        with log_context(context.log_fields()):
            self._logger.info("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        payload = {
            **context.invocation.log_fields(),
            fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
            fields.SUCCESS: context.success,
            fields.DURATION_MS: context.duration_ms,
            fields.ERRORS: context.errors,
        }
        level = logging.INFO if context.success else logging.WARNING
        with log_context(payload):
            self._logger.log(level, "Public API completion")


class PublicApiTracingConcern:
    """Wrap each call in a span named ``public_api.<component>.<method>``."""

    def __init__(self, *, tracer: _TracerLike) -> None:
        self._tracer = tracer
        self._open: ContextVar[
            tuple[tuple[_SpanContextManagerLike, _SpanLike], ...]
        ] = ContextVar("public_api_open_spans", default=())

    def on_invocation(self, context: InvocationContext) -> None:
        manager = self._tracer.start_as_current_span(
            f"public_api.{context.component_id}.{context.api_name}"
        )
        span = manager.__enter__()
        attributes: dict[str, str | None] = {
            fields.COMPONENT_ID: context.component_id,
            fields.API_NAME: context.api_name,
            fields.TRACE_ID: context.trace_id,
            fields.PRINCIPAL: context.principal,
        }
        attributes.update(
            (f"reference.{key}", value) for key, value in context.references.items()
        )
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        self._open.set((*self._open.get(), (manager, span)))

    def on_completion(self, context: CompletionContext) -> None:
        stack = self._open.get()
        if not stack:
            return
        manager, span = stack[-1]
        self._open.set(stack[:-1])

        span.set_attribute(fields.SUCCESS, context.success)
        span.set_attribute(fields.DURATION_MS, context.duration_ms)
        span.set_attribute(fields.OUTCOME, context.outcome)
        if not context.success:
            span.set_status(
                Status(StatusCode.ERROR, context.errors[0] if context.errors else None)
            )
            if context.errors:
                span.record_exception(RuntimeError("; ".join(context.errors[:3])))
        manager.__exit__(None, None, None)


class PublicApiMetricsConcern:
    """Count calls, time them, and count failures by error category."""

    def __init__(
        self,
        *,
        public_api_calls_total: _CounterLike,
        public_api_duration_ms: _HistogramLike,
        public_api_errors_total: _CounterLike,
    ) -> None:
        self._calls = public_api_calls_total
        self._duration = public_api_duration_ms
        self._errors = public_api_errors_total

    def on_invocation(self, context: InvocationContext) -> None:
        del context

    def on_completion(self, context: CompletionContext) -> None:
        labels = {
            fields.COMPONENT_ID: context.invocation.component_id,
            fields.API_NAME: context.invocation.api_name,
        }
        outcome_labels = {**labels, fields.OUTCOME: context.outcome}
        self._calls.add(1, attributes=outcome_labels)
        self._duration.record(context.duration_ms, attributes=outcome_labels)
        if context.success:
            return
        for category in context.error_categories or ["unknown"]:
            self._errors.add(1, attributes={**labels, fields.ERROR_CATEGORY: category})


@dataclass(frozen=True)
class _OtelInstruments:
    concerns: tuple[PublicApiInstrumentationConcern, ...]
    concern_failures: _CounterLike


@dataclass(frozen=True)
class _Dispatcher:
    """Fan events out to concerns, isolating each concern's failures."""

    concerns: tuple[PublicApiInstrumentationConcern, ...]
    logger: Any | None
    concern_failures: _CounterLike | None

    def invocation(self, context: InvocationContext) -> None:
        for concern in self.concerns:
            try:
                concern.on_invocation(context)
            except Exception as exc:  # noqa: BLE001
                self._report(concern, _INVOCATION_STAGE, context, exc)

    def completion(self, context: CompletionContext) -> None:
        for concern in self.concerns:
            try:
                concern.on_completion(context)
            except Exception as exc:  # noqa: BLE001
                self._report(concern, _COMPLETION_STAGE, context.invocation, exc)

    def _report(
        self,
        concern: PublicApiInstrumentationConcern,
        stage: str,
        invocation: InvocationContext,
        exc: Exception,
    ) -> None:
        labels = {
            fields.COMPONENT_ID: invocation.component_id,
            fields.API_NAME: invocation.api_name,
            fields.STAGE: stage,
            fields.CONCERN: type(concern).__name__,
        }
        if self.concern_failures is not None:
            self.concern_failures.add(1, attributes=labels)
        if self.logger is None:
            return
        with log_context(
            {
                **labels,
                fields.EVENT: fields.PUBLIC_API_INSTRUMENTATION_FAILURE_EVENT,
                fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
            }
        ):
            self.logger.warning("Public API instrumentation concern failed")


def public_api_instrumented(
    *,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
    concerns: Sequence[PublicApiInstrumentationConcern] | None = None,
    logger: Any | None = None,
    otel: bool = True,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one public service method.

    ``id_fields`` names keyword arguments such as ``zone_id`` or ``token_id``
    whose values are attached to log lines and spans. Passing ``logger`` adds
    a ``PublicApiLoggingConcern``. With ``otel`` set, tracing and metrics
    concerns are built from configuration on the first call, never at import.
    """
    explicit: tuple[PublicApiInstrumentationConcern, ...] = tuple(concerns or ())
    if logger is not None:
        explicit = (PublicApiLoggingConcern(logger=logger), *explicit)
    if not explicit and not otel:
        raise ValueError("public_api_instrumented requires at least one concern")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            instruments = _otel_instruments() if otel else None
            dispatcher = _Dispatcher(
                concerns=explicit + (instruments.concerns if instruments else ()),
                logger=logger,
                concern_failures=instruments.concern_failures if instruments else None,
            )
            invocation = _invocation_from_call(
                component_id=component_id,
                api_name=method_name,
                id_fields=id_fields,
                kwargs=kwargs,
            )
            dispatcher.invocation(invocation)

            started = perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                dispatcher.completion(
                    CompletionContext(
                        invocation=invocation,
                        success=False,
                        duration_ms=_elapsed_ms(started),
                        errors=[f"{type(exc).__name__}: {exc}"],
                        error_categories=["internal"],
                    )
                )
                raise

            dispatcher.completion(
                _completion_from_result(invocation, result, _elapsed_ms(started))
            )
            return result

        return wrapper

    return decorator


def _elapsed_ms(started: float) -> float:
    return round((perf_counter() - started) * 1000.0, 3)


def _invocation_from_call(
    *,
    component_id: str,
    api_name: str,
    id_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> InvocationContext:
    meta = kwargs.get("meta")
    return InvocationContext(
        component_id=component_id,
        api_name=api_name,
        trace_id=_meta_field(meta, "trace_id"),
        envelope_id=_meta_field(meta, "envelope_id"),
        principal=_meta_field(meta, "principal"),
        references={
            name: str(kwargs[name])
            for name in id_fields
            if kwargs.get(name) not in (None, "")
        },
    )


def _meta_field(meta: object | None, name: str) -> str | None:
    value = getattr(meta, name, None)
    return None if value in (None, "") else str(value)


def _completion_from_result(
    invocation: InvocationContext, result: object, duration_ms: float
) -> CompletionContext:
    """Read success and error summaries off an envelope-shaped result."""
    details = getattr(result, "errors", None)
    if not isinstance(details, (list, tuple)):
        details = []

    summaries: list[str] = []
    categories: list[str] = []
    for detail in details:
        code = getattr(detail, "code", None)
        message = getattr(detail, "message", None)
        if message not in (None, ""):
            summaries.append(
                str(message) if code in (None, "") else f"{code}: {message}"
            )
        category = getattr(detail, "category", None)
        category = getattr(category, "value", category)
        if category not in (None, ""):
            categories.append(str(category))

    ok = getattr(result, "ok", None)
    return CompletionContext(
        invocation=invocation,
        success=ok if isinstance(ok, bool) else not summaries,
        duration_ms=duration_ms,
        errors=summaries,
        error_categories=categories,
    )


@lru_cache(maxsize=1)
def _otel_instruments() -> _OtelInstruments:
    """Build the OTel concerns and failure counter from configured names."""
    names = load_settings().observability.public_api.otel
    meter = otel_metrics.get_meter(names.meter_name)
    return _OtelInstruments(
        concerns=(
            PublicApiTracingConcern(tracer=otel_trace.get_tracer(names.tracer_name)),
            PublicApiMetricsConcern(
                public_api_calls_total=meter.create_counter(
                    name=names.metric_public_api_calls_total,
                    description="Ledger API calls by component, method and outcome.",
                    unit="1",
                ),
                public_api_duration_ms=meter.create_histogram(
                    name=names.metric_public_api_duration_ms,
                    description="Ledger API call latency in milliseconds.",
                    unit="ms",
                ),
                public_api_errors_total=meter.create_counter(
                    name=names.metric_public_api_errors_total,
                    description="Failed ledger API calls by error category.",
                    unit="1",
                ),
            ),
        ),
        concern_failures=meter.create_counter(
            name=names.metric_instrumentation_failures_total,
            description="Instrumentation concerns that raised during a call.",
            unit="1",
        ),
    )
