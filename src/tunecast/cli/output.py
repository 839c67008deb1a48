"""Shared CLI helpers: output format option, JSON output and input documents."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel

from tunecast.domain.schemas import ValidationError, format_validation_error

F = TypeVar("F", bound=Callable[..., Any])
M = TypeVar("M", bound=BaseModel)


def format_option(func: F) -> F:
    """Add the standard --format/-f text|json option."""
    return click.option(
        "--format",
        "-f",
        "output_format",
        type=click.Choice(["text", "json"], case_sensitive=False),
        default="text",
        help="Output format (default: text).",
    )(func)


def echo_json(data: Any) -> None:
    """Write data to stdout as indented JSON."""
    click.echo(json.dumps(data, indent=2, sort_keys=True))


def load_document(path: Path, model: type[M]) -> M:
    """Read a JSON file and validate it against a pydantic model.

    Raises:
        click.ClickException: If the file cannot be read, is not JSON, or
            fails validation.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise click.ClickException(f"{path} must contain a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise click.ClickException(
            f"Invalid document {path}:\n{format_validation_error(e)}"
        ) from e


def format_bitrate(bps: int | None) -> str:
    """Render a bitrate for display ("-" when unset)."""
    if bps is None:
        return "-"
    return f"{bps / 1_000_000:.1f} Mbps"


def format_percent(value: float) -> str:
    """Render a 0-1 fraction as a percentage."""
    return f"{value * 100:.1f}%"
