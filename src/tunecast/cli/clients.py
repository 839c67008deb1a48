"""CLI commands for inspecting known clients."""

from __future__ import annotations

import click

from tunecast.cli.output import echo_json, format_bitrate, format_option
from tunecast.core.datetime_utils import to_iso
from tunecast.db.store import DataStore
from tunecast.domain.models import ClientProfile
from tunecast.exceptions import StoreError


def _client_to_dict(client: ClientProfile) -> dict:
    return {
        "device_id": client.device_id,
        "client_type": client.client_type.value,
        "client_name": client.client_name,
        "client_version": client.client_version,
        "device_name": client.device_name,
        "user_agent": client.user_agent,
        "codec_confidence": dict(sorted(client.codec_confidence.items())),
        "container_confidence": dict(sorted(client.container_confidence.items())),
        "max_bitrate": client.max_bitrate,
        "reliability_score": client.reliability_score,
        "first_seen": to_iso(client.first_seen),
        "last_updated": to_iso(client.last_updated),
    }


@click.group("clients")
def clients_group() -> None:
    """Inspect client devices and their learned confidence."""


@clients_group.command("list")
@format_option
@click.pass_context
def clients_list(ctx: click.Context, output_format: str) -> None:
    """List known clients, most recently updated first."""
    store: DataStore = ctx.obj["store"]
    try:
        clients = store.get_all_clients()
    except StoreError as e:
        raise click.ClickException(str(e)) from e

    if output_format == "json":
        echo_json([_client_to_dict(client) for client in clients])
        return

    if not clients:
        click.echo("No clients recorded yet.")
        return

    click.echo(f"{'DEVICE ID':<24} {'TYPE':<16} {'CLIENT':<24} LAST UPDATED")
    for client in clients:
        click.echo(
            f"{client.device_id[:24]:<24} {client.client_type.value:<16} "
            f"{client.client_name[:24]:<24} {to_iso(client.last_updated)[:19]}"
        )


@clients_group.command("show")
@click.argument("device_id")
@format_option
@click.pass_context
def clients_show(ctx: click.Context, device_id: str, output_format: str) -> None:
    """Show one client's profile and confidence maps."""
    store: DataStore = ctx.obj["store"]
    try:
        client = store.get_client(device_id)
    except StoreError as e:
        raise click.ClickException(str(e)) from e
    if client is None:
        raise click.ClickException(f"Unknown client: {device_id}")

    if output_format == "json":
        echo_json(_client_to_dict(client))
        return

    click.echo("")
    click.echo(f"Client {client.device_id}")
    click.echo("=" * 50)
    click.echo(f"  Type:         {client.client_type.value}")
    click.echo(f"  Client:       {client.client_name} {client.client_version}".rstrip())
    click.echo(f"  Device:       {client.device_name}")
    click.echo(f"  Max Bitrate:  {format_bitrate(client.max_bitrate)}")
    click.echo(f"  First Seen:   {to_iso(client.first_seen)[:19]}")
    click.echo(f"  Last Updated: {to_iso(client.last_updated)[:19]}")

    for title, confidence in (
        ("Codec Confidence", client.codec_confidence),
        ("Container Confidence", client.container_confidence),
    ):
        click.echo("")
        click.echo(title)
        click.echo("-" * 30)
        if not confidence:
            click.echo("  (no data)")
        for key, value in sorted(confidence.items()):
            click.echo(f"  {key:<14} {value:.3f}")
    click.echo("")
