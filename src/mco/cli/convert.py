"""CLI convert command."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml

from mco.cli.context import get_orchestrator
from mco.cli.exit_codes import exit_code_for
from mco.cli.interrupts import cancel_on_interrupt
from mco.cli.output import echo_json, format_outcome, warning_output
from mco.executor.cancellation import CancellationToken
from mco.jobs.models import JobDescriptor
from mco.jobs.progress import StderrProgressReporter

logger = logging.getLogger(__name__)


def parse_setting_overrides(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Parse repeated KEY=VALUE options into a settings mapping.

    Values are read as YAML scalars, so ``crf=23`` gives an int,
    ``maintain_aspect_ratio=false`` a bool and ``preset=null`` clears a
    value set by a preset or pipeline default.

    Raises:
        click.BadParameter: If a pair has no "=" or an empty key.
    """
    overrides: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(
                f"expected KEY=VALUE, got {pair!r}", param_hint="--set"
            )
        try:
            value = yaml.safe_load(raw) if raw.strip() else None
        except yaml.YAMLError:
            value = raw
        overrides[key] = value
    return overrides


@click.command("convert")
@click.argument("input_path", metavar="INPUT", type=click.Path(path_type=Path))
@click.argument("output_path", metavar="OUTPUT", type=click.Path(path_type=Path))
@click.option("--preset", "-p", default=None, help="Quality preset name.")
@click.option(
    "--set",
    "-s",
    "settings",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override a conversion setting (repeatable).",
)
@click.option(
    "--force-reencode",
    is_flag=True,
    help="Re-encode even when input and output formats match.",
)
@click.option(
    "--max-retries",
    type=click.IntRange(min=1),
    default=None,
    help="Total attempts before giving up (default from config).",
)
@click.option("--json", "json_output", is_flag=True, help="Output result as JSON.")
@click.pass_context
def convert_command(
    ctx: click.Context,
    input_path: Path,
    output_path: Path,
    preset: str | None,
    settings: tuple[str, ...],
    force_reencode: bool,
    max_retries: int | None,
    json_output: bool,
) -> None:
    """Convert INPUT to OUTPUT; the output extension selects the format."""
    overrides = parse_setting_overrides(settings)
    orchestrator = get_orchestrator(ctx)

    retry = None
    if max_retries is not None:
        retry = dataclasses.replace(
            orchestrator.default_retry_policy(), max_retries=max_retries
        )

    reporter = StderrProgressReporter(enabled=not json_output)
    token = CancellationToken()
    job = JobDescriptor(
        input_path=input_path,
        output_path=output_path,
        requested_settings=overrides,
        quality_preset=preset,
        cancellation_token=token,
        force_reencode=force_reencode,
        on_progress=reporter.on_progress,
    )

    with cancel_on_interrupt(token):
        outcome = orchestrator.convert(job, retry)
    reporter.on_complete(outcome.success)

    for warning in outcome.warnings:
        warning_output(warning, json_output)

    if json_output:
        echo_json(outcome.to_dict())
    else:
        click.echo(format_outcome(outcome), err=not outcome.success)

    code = exit_code_for(outcome)
    if code:
        sys.exit(int(code))
