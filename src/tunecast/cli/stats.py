"""CLI command for playback statistics."""

from __future__ import annotations

from datetime import timedelta

import click

from tunecast.cli.output import echo_json, format_bitrate, format_option, format_percent
from tunecast.config.models import TuneCastConfig
from tunecast.core.datetime_utils import utc_now
from tunecast.db.store import DataStore
from tunecast.exceptions import StoreError
from tunecast.metrics import get_metrics_summary
from tunecast.telemetry.stats import summarize_playback


@click.command("stats")
@click.option(
    "--days",
    type=click.IntRange(min=1),
    default=30,
    show_default=True,
    help="Window of playback history to summarize.",
)
@format_option
@click.pass_context
def stats_command(ctx: click.Context, days: int, output_format: str) -> None:
    """Summarize recent playback and the effective policy settings."""
    config: TuneCastConfig = ctx.obj["config"]
    store: DataStore = ctx.obj["store"]
    since = utc_now() - timedelta(days=days)

    try:
        summary = summarize_playback(
            store.get_outcomes_since(since), store.get_interventions_since(since)
        )
    except StoreError as e:
        raise click.ClickException(str(e)) from e

    policy = config.policy
    if output_format == "json":
        echo_json(
            {
                "days": days,
                "playback": summary.to_dict(),
                "policy": {
                    "enable_dynamic_profiles": policy.enable_dynamic_profiles,
                    "enable_learning": policy.enable_learning,
                    "conservative_mode": policy.conservative_mode,
                    "global_max_bitrate_override": policy.global_max_bitrate_override,
                    "retention_days": policy.retention_days,
                },
                "metrics": get_metrics_summary(),
            }
        )
        return

    click.echo("")
    click.echo(f"Playback Summary (last {days} days)")
    click.echo("=" * 50)
    if summary.total_sessions == 0:
        click.echo("  No playback recorded in this window.")
    else:
        click.echo(f"  Sessions:          {summary.total_sessions:,}")
        click.echo(f"  Direct Play:       {summary.direct_play:,}")
        click.echo(f"  Direct Stream:     {summary.direct_stream:,}")
        click.echo(f"  Transcode:         {summary.transcode:,}")
        click.echo(f"  Failures:          {summary.failures:,}")
        click.echo(f"  Direct Play Rate:  {format_percent(summary.direct_play_rate)}")
    click.echo(
        f"  Interventions:     {summary.active_interventions:,} active, "
        f"{summary.dry_run_interventions:,} dry run"
    )

    click.echo("")
    click.echo("Policy Settings")
    click.echo("-" * 30)
    click.echo(f"  Dynamic Profiles:  {policy.enable_dynamic_profiles}")
    click.echo(f"  Learning:          {policy.enable_learning}")
    click.echo(f"  Conservative Mode: {policy.conservative_mode}")
    click.echo(f"  Global Max Rate:   {format_bitrate(policy.global_max_bitrate_override)}")
    click.echo(f"  Retention:         {policy.retention_days} days")
    click.echo("")
