"""CLI commands for computing policies and cost estimates."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

import click

from tunecast.cli.output import (
    echo_json,
    format_bitrate,
    format_option,
    load_document,
)
from tunecast.config.models import TuneCastConfig
from tunecast.db.store import DataStore
from tunecast.decision.cost import annotate_media, cost_score
from tunecast.decision.engine import DecisionEngine
from tunecast.domain.enums import ClientType
from tunecast.domain.models import ClientProfile, MediaCharacteristics
from tunecast.domain.schemas import ClientProfileModel, MediaCharacteristicsModel
from tunecast.exceptions import StoreError
from tunecast.intelligence.clients import apply_baseline_confidence, resolve_client_type

logger = logging.getLogger(__name__)

_CLIENT_TYPE_CHOICES = [member.value for member in ClientType]


def _load_media(path: Path) -> MediaCharacteristics:
    return load_document(path, MediaCharacteristicsModel).to_domain()


def _resolve_client(
    store: DataStore,
    client_file: Path | None,
    device_id: str | None,
    client_name: str,
    device_name: str,
    client_type: str | None,
) -> ClientProfile:
    """Build the client profile for a decide invocation.

    A client file is used as given. Otherwise a stored profile for the
    device is preferred, and a new profile is seeded with the baseline
    confidence of its category.
    """
    if client_file is not None:
        return load_document(client_file, ClientProfileModel).to_domain()

    if device_id is None:
        raise click.UsageError("Provide --client FILE or --device-id.")

    try:
        stored = store.get_client(device_id)
    except StoreError as e:
        logger.warning("Could not load client %s: %s", device_id, e)
        stored = None
    if stored is not None:
        return stored

    if client_type:
        category = ClientType.from_string(client_type)
    else:
        category = resolve_client_type(client_name, device_name)
    client = ClientProfile(
        device_id=device_id,
        client_type=category,
        client_name=client_name,
        device_name=device_name,
    )
    apply_baseline_confidence(client)
    return client


@click.command("decide")
@click.argument("media_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--client",
    "client_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Client descriptor JSON file.",
)
@click.option("--device-id", default=None, help="Device id of a stored or new client.")
@click.option("--client-name", default="", help="Client application name.")
@click.option("--device-name", default="", help="Device name.")
@click.option(
    "--client-type",
    type=click.Choice(_CLIENT_TYPE_CHOICES, case_sensitive=False),
    default=None,
    help="Client category (default: inferred from names).",
)
@click.option(
    "--dynamic",
    is_flag=True,
    default=False,
    help="Force dynamic profiles on (bypasses the conservative fast exit).",
)
@format_option
@click.pass_context
def decide_command(
    ctx: click.Context,
    media_file: Path,
    client_file: Path | None,
    device_id: str | None,
    client_name: str,
    device_name: str,
    client_type: str | None,
    dynamic: bool,
    output_format: str,
) -> None:
    """Compute the playback policy for a client and a media file.

    Examples:

        # Client from a descriptor file
        tunecast decide movie.json --client roku.json --dynamic

        # Known device, JSON output
        tunecast decide movie.json --device-id abc123 --format json
    """
    config: TuneCastConfig = ctx.obj["config"]
    store: DataStore = ctx.obj["store"]

    media = _load_media(media_file)
    client = _resolve_client(
        store, client_file, device_id, client_name, device_name, client_type
    )

    policy_config = config.policy
    if dynamic:
        policy_config = dataclasses.replace(policy_config, enable_dynamic_profiles=True)

    annotate_media(media)
    policy = DecisionEngine(policy_config).compute(client, media)

    if output_format == "json":
        data = policy.to_dict()
        data["device_id"] = client.device_id
        data["client_type"] = client.client_type.value
        data["transcode_cost"] = media.transcode_cost_estimate.name
        data["is_default"] = policy.is_default
        echo_json(data)
        return

    click.echo("")
    click.echo(f"Policy for {client.device_id} ({client.client_type.value})")
    click.echo("=" * 50)
    click.echo(f"  Direct Play:    {'yes' if policy.allow_direct_play else 'no'}")
    click.echo(f"  Direct Stream:  {'yes' if policy.allow_direct_stream else 'no'}")
    click.echo(f"  Transcoding:    {'yes' if policy.allow_transcoding else 'no'}")
    click.echo(f"  Bitrate Cap:    {format_bitrate(policy.bitrate_cap)}")
    click.echo(f"  Confidence:     {policy.confidence:.2f}")
    click.echo(f"  Transcode Cost: {media.transcode_cost_estimate.name}")
    if policy.is_default:
        click.echo("  (pass-through: the host decides)")
    click.echo("")
    click.echo("Rationale")
    click.echo("-" * 30)
    for line in policy.rationale.splitlines():
        click.echo(f"  {line}")
    click.echo("")


@click.command("estimate")
@click.argument("media_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@format_option
def estimate_command(media_file: Path, output_format: str) -> None:
    """Estimate the server cost of transcoding a media file."""
    media = _load_media(media_file)
    media.transcode_cost_estimate = None
    annotate_media(media)
    score = cost_score(media)

    if output_format == "json":
        echo_json(
            {
                "media_source_id": media.media_source_id,
                "transcode_cost": media.transcode_cost_estimate.name,
                "score": score,
            }
        )
        return

    click.echo(f"{media.transcode_cost_estimate.name} (score {score})")
