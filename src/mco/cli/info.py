"""CLI commands that describe pipelines, presets and media files."""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import click

from mco.cli.context import get_orchestrator
from mco.cli.exit_codes import ExitCode
from mco.cli.output import echo_json, error_exit
from mco.core.formatting import format_duration
from mco.domain.enums import MediaFormat
from mco.exceptions import ProcessSpawnError


@click.command("pipelines")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def pipelines_command(ctx: click.Context, json_output: bool) -> None:
    """List supported conversions."""
    pipelines = get_orchestrator(ctx).get_available_pipelines()
    if json_output:
        echo_json([pipeline.to_dict() for pipeline in pipelines])
        return
    for pipeline in pipelines:
        kind = "re-encode" if pipeline.is_reencode else "convert"
        click.echo(
            f"{pipeline.name:<12} {pipeline.label:<14} {kind:<10} "
            f"video={pipeline.preferred_video_codec} "
            f"audio={pipeline.preferred_audio_codec}"
        )


@click.command("presets")
@click.argument(
    "media_format",
    metavar="FORMAT",
    type=click.Choice([f.value for f in MediaFormat], case_sensitive=False),
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def presets_command(ctx: click.Context, media_format: str, json_output: bool) -> None:
    """List quality presets for FORMAT."""
    presets = get_orchestrator(ctx).get_quality_presets(media_format)
    if json_output:
        echo_json(presets)
        return
    for name, values in presets.items():
        summary = ", ".join(f"{key}={value}" for key, value in values.items())
        click.echo(f"{name:<8} {summary}")


@click.command("probe")
@click.argument("file", type=click.Path(path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
@click.pass_context
def probe_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Show stream information for FILE."""
    if not file.exists():
        error_exit(f"File not found: {file}", ExitCode.TARGET_NOT_FOUND, json_output)

    try:
        info = get_orchestrator(ctx).probe(file)
    except ProcessSpawnError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    if json_output:
        data = dataclasses.asdict(info)
        data["resolution"] = info.resolution
        echo_json(data)
        return

    if info.container is None:
        click.echo(f"Could not read stream information from {file}", err=True)
        sys.exit(int(ExitCode.PROBE_ERROR))

    click.echo(f"File:       {file}")
    click.echo(f"Container:  {info.container}")
    if info.duration_seconds is not None:
        click.echo(f"Duration:   {format_duration(info.duration_seconds)}")
    if info.has_video:
        fps = f" @ {info.frame_rate:g} fps" if info.frame_rate else ""
        click.echo(f"Video:      {info.video_codec} {info.resolution or '?'}{fps}")
    if info.audio_codec:
        rate = f" {info.audio_sample_rate} Hz" if info.audio_sample_rate else ""
        channels = f" {info.audio_channels}" if info.audio_channels else ""
        click.echo(f"Audio:      {info.audio_codec}{rate}{channels}")
    if info.overall_bitrate_kbps:
        click.echo(f"Bitrate:    {info.overall_bitrate_kbps} kb/s")
