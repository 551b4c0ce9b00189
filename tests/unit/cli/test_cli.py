"""Unit tests for the secure-qr-validator CLI entrypoints."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from secure_qr_validator.cli import ExitCode, app
from tests.unit.helpers import TEST_KEY, epoch_ms, issue_payload

_RUNNER = CliRunner()


def _fresh_payload(**kwargs: object) -> str:
    """Payload stamped with the real current time."""
    return issue_payload(
        {"seat": "A12"}, timestamp_ms=epoch_ms(datetime.now(UTC)), **kwargs
    )


def _write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "validator.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.unit
def test_validate_valid_payload_renders_panel() -> None:
    """Valid payload exits 0 and shows status and data."""
    result = _RUNNER.invoke(app, ["validate", _fresh_payload()])

    assert result.exit_code == ExitCode.VALID
    assert "Valid QR code" in result.stdout
    assert "A12" in result.stdout


@pytest.mark.unit
def test_validate_json_output_for_invalid_payload() -> None:
    """--json prints the machine-readable result; invalid exits 2."""
    result = _RUNNER.invoke(app, ["validate", "invalid_base64", "--json"])

    assert result.exit_code == ExitCode.INVALID
    payload = json.loads(result.stdout)
    assert payload["status"] == "invalid"
    assert payload["error"]["kind"] == "decoding"


@pytest.mark.unit
def test_validate_expired_payload_exits_1() -> None:
    """Expired payload exits 1 and still shows its data."""
    old = issue_payload(
        {"seat": "B7"},
        timestamp_ms=epoch_ms(datetime.now(UTC) - timedelta(hours=1)),
    )

    result = _RUNNER.invoke(app, ["validate", old])

    assert result.exit_code == ExitCode.EXPIRED
    assert "expired" in result.stdout.lower()
    assert "B7" in result.stdout


@pytest.mark.unit
def test_validate_with_config_and_stdin(tmp_path: Path) -> None:
    """Config file drives encryption/signature; payload read from stdin."""
    config = _write_config(
        tmp_path,
        f"secret_key: '{TEST_KEY}'\nenable_encryption: true\nenable_signature: true\n",
    )
    payload = _fresh_payload(encrypted=True, signed=True)

    result = _RUNNER.invoke(
        app, ["validate", "--config", str(config), "--stdin", "--json"], input=payload
    )

    assert result.exit_code == ExitCode.VALID
    assert json.loads(result.stdout)["data"] == {"seat": "A12"}


@pytest.mark.unit
def test_validate_secret_key_override(tmp_path: Path) -> None:
    """--secret-key replaces the secret from the config file."""
    config = _write_config(
        tmp_path, "secret_key: wrong-secret\nenable_signature: true\n"
    )
    payload = _fresh_payload(signed=True, key="cli-secret")

    result = _RUNNER.invoke(
        app,
        ["validate", payload, "--config", str(config), "--secret-key", "cli-secret"],
    )

    assert result.exit_code == ExitCode.VALID


@pytest.mark.unit
def test_validate_config_error_exits_3(tmp_path: Path) -> None:
    """Invariant violation in config file exits 3."""
    config = _write_config(tmp_path, "enable_encryption: true\n")

    result = _RUNNER.invoke(app, ["validate", "abc", "--config", str(config)])

    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert "Configuration error" in result.stdout


@pytest.mark.unit
def test_validate_without_payload_is_usage_error() -> None:
    """No argument and no --stdin exits with the usage code, not INVALID."""
    result = _RUNNER.invoke(app, ["validate"])

    assert result.exit_code == ExitCode.USAGE_ERROR
    assert result.exit_code != ExitCode.INVALID
    assert "No payload given" in result.stdout


@pytest.mark.unit
def test_validate_missing_config_file_exits_3(tmp_path: Path) -> None:
    """A --config path that does not exist is a config error."""
    missing = tmp_path / "missing.yml"

    result = _RUNNER.invoke(app, ["validate", "abc", "--config", str(missing)])

    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert "Configuration error" in result.stdout


@pytest.mark.unit
def test_validate_config_directory_exits_3(tmp_path: Path) -> None:
    """A directory is not a usable config file."""
    result = _RUNNER.invoke(app, ["validate", "abc", "--config", str(tmp_path)])

    assert result.exit_code == ExitCode.CONFIG_ERROR


@pytest.mark.unit
def test_check_config_masks_secret(tmp_path: Path) -> None:
    """check-config prints effective settings without the secret."""
    config = _write_config(
        tmp_path, f"secret_key: '{TEST_KEY}'\nenable_signature: true\n"
    )

    result = _RUNNER.invoke(app, ["check-config", str(config)])

    assert result.exit_code == 0
    assert TEST_KEY not in result.stdout
    assert "***" in result.stdout
    assert "enable_signature" in result.stdout


@pytest.mark.unit
def test_check_config_missing_file_exits_3(tmp_path: Path) -> None:
    """check-config on a missing path exits with CONFIG_ERROR."""
    result = _RUNNER.invoke(app, ["check-config", str(tmp_path / "missing.yml")])

    assert result.exit_code == ExitCode.CONFIG_ERROR
    assert "Configuration error" in result.stdout
