"""CLI tests for Decibel ledger Typer commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from actors.cli import main as cli_main
from packages.decibel_core import Ledger, build_ledger
from packages.decibel_shared.config import load_settings
from resources.adapters.block_clock import ManualBlockClock
from resources.substrates.ledger_store import InMemoryLedgerStore

runner = CliRunner()


@pytest.fixture()
def ledger(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Ledger:
    """Inject one shared in-memory ledger into every CLI invocation."""
    settings = load_settings(config_path=tmp_path / "absent.yaml")
    built = build_ledger(
        settings,
        overrides={
            "substrate_ledger_store": InMemoryLedgerStore(),
            "adapter_block_clock": ManualBlockClock(start_block=100),
        },
    )
    monkeypatch.setattr(cli_main, "_build_ledger", lambda cfg: built)
    monkeypatch.setattr(cli_main, "_load_settings", lambda cfg: settings)
    return built


def _invoke(*args: str, principal: str = "city"):
    return runner.invoke(
        cli_main.app, ["--principal", principal, "--json", *args]
    )


def _json(result) -> object:
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_zone_create_then_show(ledger: Ledger) -> None:
    created = _invoke("zone", "create", "riverside", "--max-decibel", "70")
    assert _json(created) == 1

    shown = _json(_invoke("zone", "show", "1"))
    assert shown["name"] == "riverside"
    assert shown["max_decibel"] == 70
    assert _json(_invoke("zone", "owner", "1")) == "city"


def test_quiet_zone_over_cap_is_domain_error(ledger: Ledger) -> None:
    result = _invoke("zone", "create", "clinic", "--max-decibel", "60", "--quiet")
    assert result.exit_code == cli_main.DOMAIN_ERROR_EXIT_CODE
    assert "INVALID_DECIBEL" in result.output


def test_absent_record_prints_null(ledger: Ledger) -> None:
    assert _json(_invoke("permit", "show", "9")) is None


def test_human_output_for_absent_record(ledger: Ledger) -> None:
    result = runner.invoke(cli_main.app, ["permit", "show", "9"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "not found"


def test_allocate_offer_and_accept_flow(ledger: Ledger) -> None:
    _json(_invoke("zone", "create", "market", "--max-decibel", "90"))
    allocated = _json(
        _invoke("allowance", "allocate", "1", "seller", "--amount", "50", "--duration", "20")
    )
    assert allocated["total_allowance"] == 50
    assert allocated["expiry_block"] == 120

    token_id = _json(
        _invoke("trade", "offer", "1", "--amount", "20", "--price", "5", principal="seller")
    )
    settlement = _json(_invoke("trade", "accept", str(token_id), principal="buyer"))
    assert settlement["buyer_allowance"]["total_allowance"] == 20

    bought = _json(_invoke("allowance", "show", "1", "buyer"))
    assert bought["holder"] == "buyer"


def test_permit_fee_apply_and_approve(ledger: Ledger) -> None:
    _json(_invoke("zone", "create", "library", "--max-decibel", "40", "--quiet"))
    fee = _json(_invoke("permit", "fee", "1", "--decibels", "40", "--duration", "10"))
    assert fee == 800

    permit_id = _json(
        _invoke("permit", "apply", "1", "--decibels", "40", "--duration", "10", principal="builder")
    )
    denied = _invoke("permit", "approve", str(permit_id), principal="builder")
    assert denied.exit_code == cli_main.DOMAIN_ERROR_EXIT_CODE
    assert "UNAUTHORIZED" in denied.output

    approved = _json(_invoke("permit", "approve", str(permit_id)))
    assert (approved["start_block"], approved["end_block"]) == (100, 110)


def test_proposal_lifecycle(ledger: Ledger) -> None:
    _json(_invoke("zone", "create", "plaza", "--max-decibel", "80"))
    proposal_id = _json(
        _invoke("proposal", "create", "1", "--max-decibel", "65", "--title", "Quieter plaza")
    )
    for index in range(10):
        _json(_invoke("proposal", "vote", str(proposal_id), "--yes", principal=f"v{index}"))
    assert _json(_invoke("proposal", "status", str(proposal_id))) == "open"

    early = _invoke("proposal", "execute", str(proposal_id))
    assert early.exit_code == cli_main.DOMAIN_ERROR_EXIT_CODE
    assert "VOTING_PERIOD_ACTIVE" in early.output

    ledger.clock.advance(144)
    executed = _json(_invoke("proposal", "execute", str(proposal_id)))
    assert executed["executed"] is True
    assert _json(_invoke("zone", "show", "1"))["max_decibel"] == 65


def test_noise_report_and_show(ledger: Ledger) -> None:
    _json(_invoke("zone", "create", "stadium", "--max-decibel", "110"))
    reading = _json(_invoke("noise", "report", "1", "95", principal="sensor"))
    assert reading["reporter"] == "sensor"

    shown = _json(_invoke("noise", "show", "1", "100"))
    assert shown["decibel_level"] == 95
    assert _json(_invoke("zone", "show", "1"))["current_usage"] == 95


def test_dependency_failure_maps_to_exit_code(
    ledger: Ledger, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _broken():
        raise ConnectionError("store offline")

    monkeypatch.setattr(ledger.store, "transaction", _broken)
    result = _invoke("zone", "show", "1")
    assert result.exit_code == cli_main.DEPENDENCY_ERROR_EXIT_CODE
    assert "DEPENDENCY_FAILURE" in result.output


def test_health_reports_ready(ledger: Ledger) -> None:
    data = _json(_invoke("health"))
    assert data["ready"] is True
    assert "service_governance_engine" in data["services"]


def test_health_human_rendering(ledger: Ledger) -> None:
    result = runner.invoke(cli_main.app, ["health"])
    assert result.exit_code == 0
    assert result.stdout.startswith("Ledger: healthy")
    assert "Governance Engine: healthy" in result.stdout


def test_migrate_failure_is_dependency_error(
    ledger: Ledger, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _fail(*, settings):
        raise cli_main.MigrationExecutionError("migration failed")

    monkeypatch.setattr(cli_main, "run_migrations", _fail)
    result = _invoke("migrate")
    assert result.exit_code == cli_main.DEPENDENCY_ERROR_EXIT_CODE
