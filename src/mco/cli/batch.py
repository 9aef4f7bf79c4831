"""CLI batch command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from mco.cli.context import get_orchestrator
from mco.cli.exit_codes import ExitCode
from mco.cli.interrupts import cancel_on_interrupt
from mco.cli.manifest import ManifestError, load_manifest
from mco.cli.output import echo_json, error_exit, format_outcome
from mco.executor.cancellation import CancellationToken
from mco.jobs.models import BatchOutcome
from mco.jobs.progress import StderrProgressReporter

logger = logging.getLogger(__name__)


def batch_exit_code(outcome: BatchOutcome) -> ExitCode:
    """Exit code for a finished batch."""
    if outcome.cancelled:
        return ExitCode.INTERRUPTED
    if outcome.completed_count == outcome.total_count:
        return ExitCode.SUCCESS
    if outcome.completed_count == 0:
        return ExitCode.CONVERSION_FAILED
    return ExitCode.PARTIAL_FAILURE


@click.command("batch")
@click.argument("manifest_path", metavar="MANIFEST", type=click.Path(path_type=Path))
@click.option(
    "--max-concurrent",
    type=click.IntRange(min=1),
    default=None,
    help="Jobs to run at once (overrides manifest and config).",
)
@click.option(
    "--memory-threshold-mb",
    type=click.IntRange(min=1),
    default=None,
    help="Process memory above which the batch pauses between chunks.",
)
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON.")
@click.pass_context
def batch_command(
    ctx: click.Context,
    manifest_path: Path,
    max_concurrent: int | None,
    memory_threshold_mb: int | None,
    json_output: bool,
) -> None:
    """Run every job listed in a YAML MANIFEST."""
    try:
        manifest = load_manifest(manifest_path)
    except ManifestError as e:
        error_exit(str(e), ExitCode.MANIFEST_ERROR, json_output)

    orchestrator = get_orchestrator(ctx)
    jobs = manifest.to_jobs(manifest_path.parent)
    reporter = StderrProgressReporter(enabled=not json_output)
    token = CancellationToken()

    overrides: dict = {
        "cancellation_token": token,
        "on_batch_progress": reporter.on_batch_progress,
    }
    concurrency = max_concurrent or manifest.max_concurrent
    if concurrency:
        overrides["max_concurrent"] = concurrency
    if memory_threshold_mb:
        overrides["memory_threshold"] = memory_threshold_mb * 1024 * 1024
    options = orchestrator.default_batch_options(**overrides)

    logger.info("Running %d job(s) from %s", len(jobs), manifest_path)
    with cancel_on_interrupt(token):
        outcome = orchestrator.convert_batch(jobs, options)
    reporter.on_complete(outcome.completed_count == outcome.total_count)

    if json_output:
        echo_json(outcome.to_dict())
    else:
        for result in outcome.results:
            click.echo(format_outcome(result), err=not result.success)
        click.echo(
            f"{outcome.completed_count}/{outcome.total_count} job(s) succeeded"
            + (" (cancelled)" if outcome.cancelled else "")
        )

    code = batch_exit_code(outcome)
    if code:
        sys.exit(int(code))
