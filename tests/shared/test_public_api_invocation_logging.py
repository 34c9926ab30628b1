"""Tests for public API instrumentation wiring and decorator coverage."""

from __future__ import annotations

import ast
import logging
from pathlib import Path

import pytest

from packages.decibel_shared.component_loader import import_registered_component_modules
from packages.decibel_shared.envelope import EnvelopeKind, failure, new_meta, success
from packages.decibel_shared.errors import codes, ledger_error
from packages.decibel_shared.logging import public_api as public_api_module
from packages.decibel_shared.logging import public_api_instrumented
from packages.decibel_shared.manifest import ServiceManifest, get_registry

_REPO_ROOT = Path(__file__).resolve().parents[2]


class _RecordingConcern:
    def __init__(self) -> None:
        self.invocations: list[object] = []
        self.completions: list[object] = []

    def on_invocation(self, context: object) -> None:
        self.invocations.append(context)

    def on_completion(self, context: object) -> None:
        self.completions.append(context)


class _ExplodingConcern:
    def on_invocation(self, context: object) -> None:
        raise RuntimeError("boom")

    def on_completion(self, context: object) -> None:
        raise RuntimeError("boom")


def _meta():
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="city")


def test_decorator_reports_references_and_outcome() -> None:
    concern = _RecordingConcern()

    @public_api_instrumented(
        component_id="service_zone_registry",
        id_fields=("zone_id",),
        concerns=(concern,),
        otel=False,
    )
    def get_zone(*, meta, zone_id: int):
        return failure(meta=meta, errors=[ledger_error(codes.ZONE_NOT_FOUND, "zone not found")])

    get_zone(meta=_meta(), zone_id=7)

    invocation = concern.invocations[0]
    assert invocation.api_name == "get_zone"
    assert invocation.principal == "city"
    assert invocation.references == {"zone_id": "7"}
    completion = concern.completions[0]
    assert completion.success is False
    assert completion.errors == ["ZONE_NOT_FOUND: zone not found"]
    assert completion.error_categories == ["not_found"]


def test_failing_concern_never_changes_result(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("test.instrumentation")

    @public_api_instrumented(
        component_id="service_zone_registry",
        concerns=(_ExplodingConcern(),),
        logger=logger,
        otel=False,
    )
    def health(*, meta):
        return success(meta=meta, payload=True)

    with caplog.at_level(logging.INFO, logger="test.instrumentation"):
        result = health(meta=_meta())

    assert result.ok
    messages = [record.getMessage() for record in caplog.records]
    assert "Public API invocation" in messages
    assert "Public API completion" in messages
    assert messages.count("Public API instrumentation concern failed") == 2


def test_raised_exception_is_reported_and_propagated() -> None:
    concern = _RecordingConcern()

    @public_api_instrumented(
        component_id="service_zone_registry", concerns=(concern,), otel=False
    )
    def broken(*, meta):
        raise KeyError("missing")

    with pytest.raises(KeyError):
        broken(meta=_meta())
    assert concern.completions[0].error_categories == ["internal"]


def test_otel_concern_failures_are_counted(monkeypatch: pytest.MonkeyPatch) -> None:
    counted: list[dict[str, str]] = []

    class _Counter:
        def add(self, amount, attributes) -> None:
            counted.append(dict(attributes))

    monkeypatch.setattr(
        public_api_module,
        "_otel_instruments",
        lambda: public_api_module._OtelInstruments(
            concerns=(_ExplodingConcern(),), concern_failures=_Counter()
        ),
    )

    @public_api_instrumented(component_id="service_noise_monitor")
    def report_noise(*, meta):
        return success(meta=meta, payload=None)

    assert report_noise(meta=_meta()).ok
    assert [item["stage"] for item in counted] == ["invocation", "completion"]
    assert counted[0]["concern"] == "_ExplodingConcern"
    assert counted[0]["api_name"] == "report_noise"


def test_decorator_requires_a_concern() -> None:
    with pytest.raises(ValueError):
        public_api_instrumented(component_id="service_x", otel=False)


def test_registered_services_decorate_public_api_methods() -> None:
    """Require instrumentation on all public methods declared in Service APIs."""
    failures: list[str] = []
    for service in _load_services():
        contract_methods = _service_contract_public_methods(service)
        decorated_methods = _service_decorated_methods(service)
        missing = sorted(contract_methods - decorated_methods)
        if missing:
            failures.append(f"{service.id}: {missing}")

    assert not failures, (
        "Missing @public_api_instrumented on Service public API methods:\n"
        + "\n".join(failures)
    )


def _load_services() -> tuple[ServiceManifest, ...]:
    import_registered_component_modules()
    registry = get_registry()
    registry.assert_valid()
    return registry.list_services()


def _module_file(module: str) -> Path | None:
    path = _REPO_ROOT / (module.replace(".", "/") + ".py")
    return path if path.exists() else None


def _service_contract_public_methods(service: ServiceManifest) -> set[str]:
    """Return public abstract method names declared by service contracts."""
    names: set[str] = set()
    for root in sorted(str(item) for item in service.public_api_roots):
        file_path = _module_file(root if root.endswith(".service") else f"{root}.service")
        if file_path is None:
            continue
        module = ast.parse(file_path.read_text(encoding="utf-8"))
        for node in module.body:
            if not isinstance(node, ast.ClassDef) or not node.name.endswith("Service"):
                continue
            for child in node.body:
                if isinstance(child, ast.FunctionDef) and not child.name.startswith("_"):
                    names.add(child.name)
    return names


def _service_decorated_methods(service: ServiceManifest) -> set[str]:
    """Return public method names decorated in service implementation modules."""
    names: set[str] = set()
    for root in sorted(str(item) for item in service.module_roots):
        file_path = _module_file(f"{root}.implementation")
        if file_path is None:
            continue
        module = ast.parse(file_path.read_text(encoding="utf-8"))
        for node in module.body:
            if not isinstance(node, ast.ClassDef):
                continue
            for child in node.body:
                if (
                    isinstance(child, ast.FunctionDef)
                    and not child.name.startswith("_")
                    and _has_public_api_instrumented(child)
                ):
                    names.add(child.name)
    return names


def _has_public_api_instrumented(node: ast.FunctionDef) -> bool:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if isinstance(target, ast.Name) and target.id == "public_api_instrumented":
            return True
    return False
