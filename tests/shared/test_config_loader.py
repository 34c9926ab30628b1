"""Tests for pydantic-settings-backed shared configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.decibel_shared.config import load_settings, resolve_component_settings
from resources.substrates.postgres.config import PostgresSettings
from services.action.governance_engine.component import SERVICE_COMPONENT_ID
from services.action.governance_engine.config import (
    GovernanceEngineSettings,
    resolve_governance_engine_settings,
)


def test_load_settings_uses_decibel_precedence_cascade(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Init params should override env, env should override YAML, then defaults."""
    config_file = tmp_path / "decibel.yaml"
    config_file.write_text(
        "\n".join(
            [
                "logging:",
                "  level: WARNING",
                "components:",
                "  substrate:",
                "    postgres:",
                "      pool_size: 7",
                "  service:",
                "    governance_engine:",
                "      quorum: 3",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("DECIBEL_LOGGING__LEVEL", "ERROR")
    monkeypatch.setenv("DECIBEL_COMPONENTS__SUBSTRATE__POSTGRES__POOL_SIZE", "9")

    settings = load_settings(config_path=config_file, logging={"level": "DEBUG"})

    postgres = resolve_component_settings(
        settings=settings,
        component_id="substrate_postgres",
        model=PostgresSettings,
    )
    governance = resolve_component_settings(
        settings=settings,
        component_id=str(SERVICE_COMPONENT_ID),
        model=GovernanceEngineSettings,
    )

    assert settings.logging.level == "DEBUG"
    assert postgres.pool_size == 9
    assert governance.quorum == 3
    assert governance.voting_period_blocks == 144


def test_load_settings_uses_model_defaults_when_sources_missing(tmp_path: Path) -> None:
    """Settings should fall back to model defaults when env and YAML are absent."""
    settings = load_settings(config_path=tmp_path / "decibel.yaml")
    governance = resolve_governance_engine_settings(settings)

    assert settings.logging.service == "decibel"
    assert settings.logging.level == "INFO"
    assert settings.core.health.max_timeout_seconds == 1.0
    assert (governance.voting_period_blocks, governance.quorum) == (144, 10)


def test_config_path_env_var_selects_yaml_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_file = tmp_path / "elsewhere.yaml"
    config_file.write_text("logging:\n  service: harbor-ledger\n", encoding="utf-8")
    monkeypatch.setenv("DECIBEL_CONFIG_FILE", str(config_file))

    assert load_settings().logging.service == "harbor-ledger"


def test_flat_component_keys_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="components.service.governance_engine"):
        load_settings(
            config_path=tmp_path / "decibel.yaml",
            components={"service_governance_engine": {"quorum": 2}},
        )


def test_invalid_component_settings_fail_at_resolution(tmp_path: Path) -> None:
    settings = load_settings(
        config_path=tmp_path / "decibel.yaml",
        components={"service": {"governance_engine": {"quorum": 0}}},
    )
    with pytest.raises(ValidationError):
        resolve_governance_engine_settings(settings)


def test_unknown_component_kind_has_no_namespace(tmp_path: Path) -> None:
    settings = load_settings(config_path=tmp_path / "decibel.yaml")
    with pytest.raises(ValueError, match="no settings namespace"):
        resolve_component_settings(
            settings=settings, component_id="actor_cli", model=PostgresSettings
        )
