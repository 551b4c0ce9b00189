"""Typer CLI: validate scanned payloads from the terminal."""

from __future__ import annotations

import json
import logging
import sys
from enum import IntEnum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.json import JSON
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from secure_qr_validator.config import (
    ValidatorConfig,
    ValidatorConfigError,
    load_validator_config,
)
from secure_qr_validator.errors import ValidationErrorKind
from secure_qr_validator.result import ValidationResult
from secure_qr_validator.validator import SecureQRValidator

app = typer.Typer(help="Validate secure QR code payloads.")
console = Console()

_LOGGING_CONFIGURED = False

_KIND_LABELS: dict[ValidationErrorKind, str] = {
    ValidationErrorKind.DECRYPTION: "Decryption error",
    ValidationErrorKind.DECODING: "Invalid encoding",
    ValidationErrorKind.FORMAT: "Malformed content",
    ValidationErrorKind.VERSION: "Unsupported version",
    ValidationErrorKind.SIGNATURE: "Invalid signature",
    ValidationErrorKind.EXPIRED: "Expired QR code",
    ValidationErrorKind.BUSINESS_RULE: "Business rule violation",
    ValidationErrorKind.UNKNOWN: "Validation error",
}


class ExitCode(IntEnum):
    """Process exit codes for ``validate`` and ``check-config``."""

    VALID = 0
    EXPIRED = 1
    INVALID = 2
    CONFIG_ERROR = 3
    USAGE_ERROR = 4


def _configure_logging(verbose: bool) -> None:
    """Configure Rich-backed logging once for CLI commands."""
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    _LOGGING_CONFIGURED = True


def _load_config(config_path: Path | None, secret_key: str | None) -> ValidatorConfig:
    """Load config file and apply the secret override.

    Raises:
        typer.Exit: With ``CONFIG_ERROR`` when config is missing or unusable.
    """
    if config_path is not None and not config_path.is_file():
        _print_config_error(f"Config file not found: {config_path}")
        raise typer.Exit(code=ExitCode.CONFIG_ERROR)
    try:
        config = (
            load_validator_config(config_path)
            if config_path is not None
            else ValidatorConfig()
        )
        if secret_key is not None:
            config = ValidatorConfig.model_validate(
                {**config.model_dump(), "secret_key": secret_key}
            )
    except (ValidatorConfigError, ValidationError) as exc:
        _print_config_error(str(exc))
        raise typer.Exit(code=ExitCode.CONFIG_ERROR) from exc
    return config


def _print_config_error(message: str) -> None:
    console.print(
        Panel(Text(message), title="Configuration error", border_style="bold red")
    )


def _exit_code(result: ValidationResult) -> ExitCode:
    if result.is_valid:
        return ExitCode.VALID
    if result.is_expired:
        return ExitCode.EXPIRED
    return ExitCode.INVALID


def render_result(result: ValidationResult, *, out: Console) -> None:
    """Render status panel plus extracted data, when any.

    Args:
        result: Validation outcome.
        out: Console to print to.
    """
    error = result.failure
    if result.is_valid:
        out.print(
            Panel(
                f"Valid QR code [bold]{escape(result.id)}[/bold]",
                border_style="green",
            )
        )
    elif error is not None:
        label = _KIND_LABELS[error.kind]
        style = "yellow" if result.is_expired else "red"
        out.print(
            Panel(
                Text(error.message),
                title=f"{label} ({error.kind})",
                border_style=f"bold {style}",
            )
        )
    data = result.payload_data
    if data is not None:
        out.print(
            Panel(
                JSON.from_data(data),
                title="Data",
                border_style="cyan",
                expand=True,
            )
        )


@app.command("validate")
def validate_cmd(
    payload: Annotated[
        str | None,
        typer.Argument(help="Encoded payload text. Omit with --stdin."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            resolve_path=True,
            help="Validator config file (YAML or JSON).",
        ),
    ] = None,
    secret_key: Annotated[
        str | None,
        typer.Option(
            "--secret-key",
            envvar="SECURE_QR_SECRET_KEY",
            help="Override the configured secret key.",
        ),
    ] = None,
    from_stdin: Annotated[
        bool, typer.Option("--stdin", help="Read the payload from standard input.")
    ] = False,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the result as JSON.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
) -> None:
    """Validate one scanned payload and exit with its status code."""
    _configure_logging(verbose)
    if from_stdin:
        payload = sys.stdin.read()
    if not payload:
        console.print("[red]No payload given (pass it as argument or use --stdin).[/red]")
        raise typer.Exit(code=ExitCode.USAGE_ERROR)
    config = _load_config(config_path, secret_key)
    result = SecureQRValidator(config).validate(payload)
    if as_json:
        typer.echo(json.dumps(result.model_dump(mode="json"), sort_keys=True))
    else:
        render_result(result, out=console)
    raise typer.Exit(code=_exit_code(result))


@app.command("check-config")
def check_config_cmd(
    config_path: Annotated[
        Path,
        typer.Argument(resolve_path=True, help="Validator config file (YAML or JSON)."),
    ],
) -> None:
    """Load a config file and print the effective settings."""
    config = _load_config(config_path, None)
    effective = config.model_dump(mode="json")
    if effective["secret_key"] is not None:
        effective["secret_key"] = "***"
    console.print(Panel(JSON.from_data(effective), title="Validator config"))


def main() -> None:
    """Console script entrypoint."""
    app()
