"""CLI module for TuneCast."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import click

from tunecast.config.loader import get_config
from tunecast.config.models import TuneCastConfig
from tunecast.db.store import SqliteDataStore
from tunecast.exceptions import ConfigError
from tunecast.logging.config import configure_logging

_logging_configured: bool = False

logger = logging.getLogger(__name__)


def _configure_logging(
    config: TuneCastConfig,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging once per process, CLI options over config.

    Args:
        config: Loaded configuration.
        log_level: Override log level (debug, info, warning, error).
        log_file: Override log file path.
        log_json: Use JSON log format.
    """
    global _logging_configured
    if _logging_configured:
        return

    overrides: dict = {}
    if log_level:
        overrides["level"] = log_level.lower()
    if log_file:
        overrides["file"] = log_file
    if log_json:
        overrides["format"] = "json"
    configure_logging(dataclasses.replace(config.logging, **overrides))
    _logging_configured = True


@click.group()
@click.version_option(package_name="tunecast")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.tunecast/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """TuneCast - advisory playback policies that learn from outcomes."""
    ctx.ensure_object(dict)

    # Preserve config/store if passed in by tests
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = get_config(config_path=config_path, strict=True)
        except ConfigError as e:
            raise click.ClickException(f"Invalid configuration: {e}") from e

    config: TuneCastConfig = ctx.obj["config"]
    _configure_logging(config, log_level, log_file, log_json)

    if "store" not in ctx.obj:
        ctx.obj["store"] = SqliteDataStore(config.storage.database_path)


# Defer import to avoid circular dependency
def _register_commands():
    from tunecast.cli.clients import clients_group
    from tunecast.cli.decide import decide_command, estimate_command
    from tunecast.cli.maintain import prune_command, recalibrate_command
    from tunecast.cli.stats import stats_command

    main.add_command(decide_command)
    main.add_command(estimate_command)
    main.add_command(clients_group)
    main.add_command(recalibrate_command)
    main.add_command(prune_command)
    main.add_command(stats_command)


_register_commands()
