"""CLI module for the media conversion orchestrator."""

import logging
from pathlib import Path

import click

from mco.cli.exit_codes import ExitCode
from mco.cli.output import error_exit
from mco.config import ConfigError, get_config
from mco.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="media-conversion-orchestrator")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.mco/config.toml or MCO_CONFIG_PATH).",
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
    """Media Conversion Orchestrator - convert between MP4 and MOV with FFmpeg."""
    ctx.ensure_object(dict)

    # Preserve a config injected by tests
    if "config" not in ctx.obj:
        overrides = {
            "logging": {
                "level": log_level,
                "file": log_file,
                "format": "json" if log_json else None,
            }
        }
        try:
            ctx.obj["config"] = get_config(config_path, overrides=overrides)
        except ConfigError as e:
            error_exit(str(e), ExitCode.CONFIG_ERROR)

    configure_logging(ctx.obj["config"].logging)
    logger.debug("Running %s", ctx.invoked_subcommand)


# Defer import to avoid circular dependency
def _register_commands():
    from mco.cli.batch import batch_command
    from mco.cli.convert import convert_command
    from mco.cli.info import pipelines_command, presets_command, probe_command

    main.add_command(convert_command)
    main.add_command(batch_command)
    main.add_command(pipelines_command)
    main.add_command(presets_command)
    main.add_command(probe_command)


_register_commands()
