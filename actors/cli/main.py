"""Decibel ledger CLI actor implemented with Typer."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import typer

from packages.decibel_core import (
    Ledger,
    MigrationExecutionError,
    build_ledger,
    evaluate_ledger_health,
    run_migrations,
)
from packages.decibel_shared.config import CONFIG_PATH_ENV, DecibelSettings, load_settings
from packages.decibel_shared.envelope import Envelope, EnvelopeKind, EnvelopeMeta, new_meta
from packages.decibel_shared.errors import ErrorCategory
from packages.decibel_shared.logging import configure_logging

SUCCESS_EXIT_CODE = 0
DOMAIN_ERROR_EXIT_CODE = 3
DEPENDENCY_ERROR_EXIT_CODE = 4


@dataclass(frozen=True)
class CliConfig:
    """Global CLI runtime options propagated to every command."""

    config_path: Path | None
    principal: str
    source: str
    as_json: bool
    trace_id: str | None


def _load_settings(cfg: CliConfig) -> DecibelSettings:
    return load_settings(config_path=cfg.config_path)


def _build_ledger(cfg: CliConfig) -> Ledger:
    """Assemble the ledger from configured settings."""
    return build_ledger(_load_settings(cfg))


def _serialize(value: Any) -> Any:
    """Convert result objects to JSON-serializable structures."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, Path)):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_serialize(item) for item in value]
    if hasattr(value, "model_dump"):
        return _serialize(value.model_dump(mode="json"))
    return str(value)


def _emit_output(result: Any, as_json: bool) -> None:
    """Render command output in requested format."""
    data = _serialize(result)
    if as_json:
        typer.echo(json.dumps(data, sort_keys=True, separators=(",", ":")))
        return
    if isinstance(data, dict) and _looks_like_ledger_health(data):
        typer.echo(_render_ledger_health(data))
        return
    if isinstance(data, (dict, list)):
        typer.echo(json.dumps(data, indent=2, sort_keys=True))
        return
    typer.echo("not found" if data is None else str(data))


def _emit_errors(envelope: Envelope[Any], as_json: bool) -> None:
    """Render envelope errors to stderr."""
    if as_json:
        payload = [
            {"code": error.code, "message": error.message, "category": error.category.value}
            for error in envelope.errors
        ]
        typer.echo(json.dumps({"errors": payload}, sort_keys=True), err=True)
        return
    for error in envelope.errors:
        typer.echo(f"error: {error.code}: {error.message}", err=True)


def _exit_code_for(envelope: Envelope[Any]) -> int:
    if any(
        error.category in (ErrorCategory.DEPENDENCY, ErrorCategory.INTERNAL)
        for error in envelope.errors
    ):
        return DEPENDENCY_ERROR_EXIT_CODE
    return DOMAIN_ERROR_EXIT_CODE


def _looks_like_ledger_health(value: dict[str, Any]) -> bool:
    return (
        isinstance(value.get("ready"), bool)
        and isinstance(value.get("services"), dict)
        and isinstance(value.get("resources"), dict)
    )


def _render_ledger_health(data: dict[str, Any]) -> str:
    """Render aggregate health for human scanning."""
    lines = [f"Ledger: {_status_label(bool(data.get('ready', False)))}"]
    for title, group in (("Services", data["services"]), ("Resources", data["resources"])):
        lines.append(f"{title}:")
        for key in sorted(group):
            value = group[key]
            line = f"  {_humanize_component_name(key)}: {_status_label(bool(value.get('ready')))}"
            detail = str(value.get("detail", "")).strip()
            if detail != "":
                line = f"{line} ({detail})"
            lines.append(line)
    return "\n".join(lines)


def _status_label(ready: bool) -> str:
    return "healthy" if ready else "degraded"


def _humanize_component_name(name: str) -> str:
    """Convert canonical ids into user-facing component names."""
    normalized = name.strip()
    for prefix in ("service_", "substrate_", "adapter_"):
        if normalized.startswith(prefix):
            normalized = normalized[len(prefix) :]
            break
    return normalized.replace("_", " ").title()


def _run_command(
    cfg: CliConfig,
    invoke: Callable[[Ledger, EnvelopeMeta], Envelope[Any]],
    *,
    kind: EnvelopeKind = EnvelopeKind.COMMAND,
) -> None:
    """Execute one service call and map its envelope to process semantics."""
    ledger = _build_ledger(cfg)
    meta = new_meta(
        kind=kind,
        source=cfg.source,
        principal=cfg.principal,
        trace_id=cfg.trace_id,
    )
    envelope = invoke(ledger, meta)
    if not envelope.ok:
        _emit_errors(envelope, cfg.as_json)
        raise typer.Exit(code=_exit_code_for(envelope))

    _emit_output(envelope.payload.value if envelope.payload else None, cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


def _query(cfg: CliConfig, invoke: Callable[[Ledger, EnvelopeMeta], Envelope[Any]]) -> None:
    _run_command(cfg, invoke, kind=EnvelopeKind.QUERY)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(no_args_is_help=True, help="Decibel noise ledger command-line interface")
zone_app = typer.Typer(help="Zone registry commands")
allowance_app = typer.Typer(help="Allowance ledger commands")
permit_app = typer.Typer(help="Permit manager commands")
trade_app = typer.Typer(help="Trading engine commands")
proposal_app = typer.Typer(help="Governance engine commands")
noise_app = typer.Typer(help="Noise monitor commands")


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        envvar=CONFIG_PATH_ENV,
        help="Path to the decibel YAML config file",
    ),
    principal: str = typer.Option("operator", help="Caller identity for this call"),
    source: str = typer.Option("cli", help="Envelope source"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
    trace_id: str | None = typer.Option(None, help="Optional trace id"),
    verbose: bool = typer.Option(False, "--verbose", help="Log to stderr"),
) -> None:
    """Store global options for all ledger commands."""
    ctx.obj = CliConfig(
        config_path=config,
        principal=principal,
        source=source,
        as_json=as_json,
        trace_id=trace_id,
    )
    if verbose:
        settings = _load_settings(ctx.obj).logging
        configure_logging(
            level=settings.level,
            json_output=settings.json_output,
            service=settings.service,
            environment=settings.environment,
            stream=sys.stderr,
        )


@zone_app.command("create")
def zone_create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Zone name"),
    max_decibel: int = typer.Option(..., help="Decibel ceiling"),
    quiet: bool = typer.Option(False, "--quiet/--standard", help="Quiet zone"),
) -> None:
    """Create a zone owned by the principal."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.zones.create_zone(
            meta=meta, name=name, max_decibel=max_decibel, is_quiet_zone=quiet
        ),
    )


@zone_app.command("show")
def zone_show(ctx: typer.Context, zone_id: int = typer.Argument(...)) -> None:
    """Show one zone."""
    cfg = _require_config(ctx)
    _query(cfg, lambda ledger, meta: ledger.zones.get_zone(meta=meta, zone_id=zone_id))


@zone_app.command("owner")
def zone_owner(ctx: typer.Context, zone_id: int = typer.Argument(...)) -> None:
    """Show the owner of one zone."""
    cfg = _require_config(ctx)
    _query(
        cfg, lambda ledger, meta: ledger.zones.get_zone_owner(meta=meta, zone_id=zone_id)
    )


@allowance_app.command("allocate")
def allowance_allocate(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    recipient: str = typer.Argument(...),
    amount: int = typer.Option(..., help="Total allowance in decibels"),
    duration: int = typer.Option(..., help="Validity in blocks"),
) -> None:
    """Reset one holder's allowance in a zone the principal owns."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.allowances.allocate(
            meta=meta,
            zone_id=zone_id,
            recipient=recipient,
            amount=amount,
            duration_blocks=duration,
        ),
    )


@allowance_app.command("show")
def allowance_show(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    holder: str = typer.Argument(...),
) -> None:
    """Show one holder's allowance."""
    cfg = _require_config(ctx)
    _query(
        cfg,
        lambda ledger, meta: ledger.allowances.get_allowance(
            meta=meta, zone_id=zone_id, holder=holder
        ),
    )


@permit_app.command("apply")
def permit_apply(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    decibels: int = typer.Option(..., help="Requested decibels"),
    duration: int = typer.Option(..., help="Duration in blocks"),
) -> None:
    """Apply for a construction permit."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.permits.apply_for_permit(
            meta=meta,
            zone_id=zone_id,
            requested_decibels=decibels,
            duration_blocks=duration,
        ),
    )


@permit_app.command("approve")
def permit_approve(ctx: typer.Context, permit_id: int = typer.Argument(...)) -> None:
    """Approve a permit as the zone owner."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.permits.approve_permit(meta=meta, permit_id=permit_id),
    )


@permit_app.command("fee")
def permit_fee(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    decibels: int = typer.Option(..., help="Requested decibels"),
    duration: int = typer.Option(..., help="Duration in blocks"),
) -> None:
    """Quote a permit fee."""
    cfg = _require_config(ctx)
    _query(
        cfg,
        lambda ledger, meta: ledger.permits.calculate_fee(
            meta=meta,
            zone_id=zone_id,
            requested_decibels=decibels,
            duration_blocks=duration,
        ),
    )


@permit_app.command("show")
def permit_show(ctx: typer.Context, permit_id: int = typer.Argument(...)) -> None:
    """Show one permit."""
    cfg = _require_config(ctx)
    _query(
        cfg, lambda ledger, meta: ledger.permits.get_permit(meta=meta, permit_id=permit_id)
    )


@trade_app.command("offer")
def trade_offer(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    amount: int = typer.Option(..., help="Decibel capacity offered"),
    price: int = typer.Option(..., help="Asking price"),
) -> None:
    """Offer allowance capacity for sale."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.trading.create_trade_offer(
            meta=meta, zone_id=zone_id, decibel_amount=amount, price=price
        ),
    )


@trade_app.command("accept")
def trade_accept(ctx: typer.Context, token_id: int = typer.Argument(...)) -> None:
    """Accept an active offer."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.trading.accept_trade_offer(meta=meta, token_id=token_id),
    )


@trade_app.command("transfer")
def trade_transfer(
    ctx: typer.Context,
    token_id: int = typer.Argument(...),
    recipient: str = typer.Argument(...),
) -> None:
    """Give an ownership token to another principal."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.trading.transfer_token(
            meta=meta, token_id=token_id, recipient=recipient
        ),
    )


@trade_app.command("show")
def trade_show(ctx: typer.Context, token_id: int = typer.Argument(...)) -> None:
    """Show one offer."""
    cfg = _require_config(ctx)
    _query(
        cfg,
        lambda ledger, meta: ledger.trading.get_trade_offer(meta=meta, token_id=token_id),
    )


@proposal_app.command("create")
def proposal_create(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    max_decibel: int = typer.Option(..., help="Proposed ceiling"),
    title: str = typer.Option(..., help="Proposal title"),
    description: str = typer.Option("", help="Proposal description"),
) -> None:
    """Open a vote on a new zone ceiling."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.governance.create_proposal(
            meta=meta,
            title=title,
            description=description,
            zone_id=zone_id,
            proposed_max_decibel=max_decibel,
        ),
    )


@proposal_app.command("vote")
def proposal_vote(
    ctx: typer.Context,
    proposal_id: int = typer.Argument(...),
    support: bool = typer.Option(..., "--yes/--no", help="Vote in favor or against"),
) -> None:
    """Cast the principal's vote."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.governance.vote(
            meta=meta, proposal_id=proposal_id, support=support
        ),
    )


@proposal_app.command("execute")
def proposal_execute(ctx: typer.Context, proposal_id: int = typer.Argument(...)) -> None:
    """Apply a passed proposal after its window closes."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.governance.execute_proposal(
            meta=meta, proposal_id=proposal_id
        ),
    )


@proposal_app.command("show")
def proposal_show(ctx: typer.Context, proposal_id: int = typer.Argument(...)) -> None:
    """Show one proposal."""
    cfg = _require_config(ctx)
    _query(
        cfg,
        lambda ledger, meta: ledger.governance.get_proposal(
            meta=meta, proposal_id=proposal_id
        ),
    )


@proposal_app.command("status")
def proposal_status(ctx: typer.Context, proposal_id: int = typer.Argument(...)) -> None:
    """Show whether a proposal is open, closed, or executed."""
    cfg = _require_config(ctx)
    _query(
        cfg,
        lambda ledger, meta: ledger.governance.get_proposal_status(
            meta=meta, proposal_id=proposal_id
        ),
    )


@noise_app.command("report")
def noise_report(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    decibels: int = typer.Argument(..., help="Measured level"),
) -> None:
    """Report a reading for the current block."""
    cfg = _require_config(ctx)
    _run_command(
        cfg,
        lambda ledger, meta: ledger.noise.report_noise_level(
            meta=meta, zone_id=zone_id, decibel_level=decibels
        ),
    )


@noise_app.command("show")
def noise_show(
    ctx: typer.Context,
    zone_id: int = typer.Argument(...),
    block: int = typer.Argument(...),
) -> None:
    """Show the reading for one zone and block."""
    cfg = _require_config(ctx)
    _query(
        cfg,
        lambda ledger, meta: ledger.noise.get_noise_reading(
            meta=meta, zone_id=zone_id, block=block
        ),
    )


@app.command("health")
def health(ctx: typer.Context) -> None:
    """Report aggregate ledger readiness."""
    cfg = _require_config(ctx)
    ledger = _build_ledger(cfg)
    result = evaluate_ledger_health(
        settings=_load_settings(cfg), components=ledger.components
    )
    _emit_output(result, cfg.as_json)
    raise typer.Exit(
        code=SUCCESS_EXIT_CODE if result.ready else DEPENDENCY_ERROR_EXIT_CODE
    )


@app.command("migrate")
def migrate(ctx: typer.Context) -> None:
    """Upgrade the Postgres ledger schema to the latest revision."""
    cfg = _require_config(ctx)
    try:
        result = run_migrations(settings=_load_settings(cfg))
    except MigrationExecutionError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=DEPENDENCY_ERROR_EXIT_CODE) from exc
    _emit_output(list(result.executed_alembic_configs), cfg.as_json)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


app.add_typer(zone_app, name="zone")
app.add_typer(allowance_app, name="allowance")
app.add_typer(permit_app, name="permit")
app.add_typer(trade_app, name="trade")
app.add_typer(proposal_app, name="proposal")
app.add_typer(noise_app, name="noise")


if __name__ == "__main__":
    app()
