"""Tests for CLI helper functions."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from metra_departures.adapters.config import AppConfig
from metra_departures.cli import build_configuration_store, manage_token


def make_config(tmp_path: Path, **overrides: object) -> AppConfig:
    with patch.dict(os.environ, {}, clear=True):
        return AppConfig(
            token_file=str(tmp_path / "token"),
            saved_config_file=str(tmp_path / "route.json"),
            _env_file=None,
            **overrides,
        )


def test_manage_token_set_status_delete(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Given a token, when setting, checking and deleting it, then each step reports its outcome."""
    config = make_config(tmp_path)

    manage_token(config, "set", "abc123")
    manage_token(config, "status")
    manage_token(config, "delete")
    manage_token(config, "status")

    assert capsys.readouterr().out.splitlines() == [
        "Token saved.",
        "Token configured.",
        "Token deleted.",
        "No token configured.",
    ]


def test_manage_token_prompts_when_omitted(tmp_path: Path) -> None:
    """Given no token argument, when setting, then the token is read from a hidden prompt."""
    config = make_config(tmp_path)

    with patch("metra_departures.cli.getpass.getpass", return_value="prompted"):
        manage_token(config, "set")

    assert (tmp_path / "token").read_text(encoding="utf-8") == "prompted"


def test_manage_token_rejects_blank(tmp_path: Path) -> None:
    """Given a blank token, when setting, then the command exits with an error."""
    config = make_config(tmp_path)

    with pytest.raises(SystemExit):
        manage_token(config, "set", "   ")


def test_configuration_store_seeded_from_toml(tmp_path: Path) -> None:
    """Given a TOML file, when building the store, then its route is used until one is saved."""
    toml_path = tmp_path / "config.toml"
    toml_path.write_text(
        '[route]\nline_id = "UP-N"\nmax_trains = 2\n\n'
        '[[route.slots]]\ndeparture_stop_id = "OTC"\ndirection_id = 0\n',
        encoding="utf-8",
    )
    config = make_config(tmp_path, config_file=str(toml_path))

    configuration = build_configuration_store(config).load()

    assert configuration.line_id == "UP-N"
    assert configuration.slots[0].departure_stop_id == "OTC"


def test_configuration_store_without_toml_uses_default(tmp_path: Path) -> None:
    config = make_config(tmp_path)

    configuration = build_configuration_store(config).load()

    assert configuration.line_id == "BNSF"
    assert len(configuration.slots) == 1
