"""CLI commands for maintenance: recalibration and telemetry retention."""

from __future__ import annotations

import click

from tunecast.cli.output import echo_json, format_option
from tunecast.config.models import TuneCastConfig
from tunecast.db.store import DataStore
from tunecast.exceptions import StoreError
from tunecast.learning.service import LearningService
from tunecast.telemetry.service import TelemetryService


@click.command("recalibrate")
@click.argument("device_id", required=False)
@click.option(
    "--all",
    "recalibrate_all",
    is_flag=True,
    default=False,
    help="Recalibrate every known client.",
)
@format_option
@click.pass_context
def recalibrate_command(
    ctx: click.Context,
    device_id: str | None,
    recalibrate_all: bool,
    output_format: str,
) -> None:
    """Rebuild client confidence from recorded playback outcomes.

    Examples:

        tunecast recalibrate abc123

        tunecast recalibrate --all
    """
    if bool(device_id) == recalibrate_all:
        raise click.UsageError("Specify exactly one of DEVICE_ID or --all.")

    config: TuneCastConfig = ctx.obj["config"]
    store: DataStore = ctx.obj["store"]
    service = LearningService(store, config.policy)

    if recalibrate_all:
        results = service.recalibrate_all()
    else:
        try:
            client = store.get_client(device_id)
        except StoreError as e:
            raise click.ClickException(str(e)) from e
        if client is None:
            raise click.ClickException(f"Unknown client: {device_id}")
        results = {client.device_id: service.recalibrate_client(client)}

    if output_format == "json":
        echo_json({"recalibrated": results})
        return

    if not results:
        click.echo("No clients to recalibrate.")
        return
    for key, updated in results.items():
        click.echo(f"{key}: {updated} confidence entries updated")


@click.command("prune")
@click.pass_context
def prune_command(ctx: click.Context) -> None:
    """Delete playback outcomes older than the retention period."""
    config: TuneCastConfig = ctx.obj["config"]
    store: DataStore = ctx.obj["store"]
    try:
        deleted = TelemetryService(store, config.policy).prune_old_data()
    except StoreError as e:
        raise click.ClickException(str(e)) from e
    click.echo(
        f"Deleted {deleted} outcomes older than {config.policy.retention_days} days."
    )
