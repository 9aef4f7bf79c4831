"""Shared state passed to subcommands through the click context."""

from __future__ import annotations

import click

from mco.config.models import MCOConfig
from mco.orchestrator import ConversionOrchestrator


def get_config(ctx: click.Context) -> MCOConfig:
    """Configuration loaded by the main group, or defaults."""
    obj = ctx.ensure_object(dict)
    return obj.get("config") or MCOConfig()


def get_orchestrator(ctx: click.Context) -> ConversionOrchestrator:
    """Return the orchestrator for this invocation, creating it on first use.

    Tests inject a prepared orchestrator via ``obj={"orchestrator": ...}``.
    """
    obj = ctx.ensure_object(dict)
    if "orchestrator" not in obj:
        obj["orchestrator"] = ConversionOrchestrator(config=get_config(ctx))
    return obj["orchestrator"]
