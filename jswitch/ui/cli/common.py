"""
Shared CLI plumbing — build the orchestrator once per invocation and
print OperationResults the same way everywhere.
"""

from __future__ import annotations

import json
import logging
import sys

import click

from jswitch.core.engine.orchestrator import SwitchOrchestrator
from jswitch.core.models.installation import Installation
from jswitch.core.models.operation import OperationResult

logger = logging.getLogger(__name__)

_STATUS_STYLE = {
    "ok": ("✅", "green"),
    "skipped": ("ℹ️ ", "cyan"),
    "partial": ("⚠️ ", "yellow"),
    "failed": ("❌", "red"),
}


def open_orchestrator(ctx: click.Context) -> SwitchOrchestrator:
    """Load settings, pick the store and load the catalogue.

    The orchestrator is closed (flushed if dirty) when the command's
    context closes. Exits with status 1 on a broken config file.
    """
    from jswitch.adapters.registry import create_store
    from jswitch.core.config.loader import ConfigError, load_settings

    cached = ctx.obj.get("orchestrator")
    if cached is not None:
        return cached

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    dry_run = ctx.obj.get("dry_run", False)
    try:
        store = create_store(settings, dry_run=dry_run)
    except ValueError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    orchestrator = SwitchOrchestrator.from_settings(settings, store, persist=not dry_run)
    orchestrator.load()
    if dry_run:
        logger.info("Dry run: environment writes and catalogue changes stay in memory")

    ctx.obj["orchestrator"] = orchestrator
    ctx.call_on_close(orchestrator.close)
    return orchestrator


def select_or_exit(orchestrator: SwitchOrchestrator, key: str) -> Installation:
    """Select a record by path or name; exit 1 if that's not unambiguous."""
    record = orchestrator.select(key)
    if record is not None:
        return record

    if len(orchestrator.catalogue.find_by_name(key)) > 1:
        click.secho(f"❌ '{key}' matches several installations, use the path instead", fg="red")
    else:
        click.secho(f"❌ No installation matches '{key}'", fg="red")
        click.echo("   Run 'jswitch list' to see known installations.")
    sys.exit(1)


def echo_installation(record: Installation) -> None:
    """One catalogue line, with the active marker."""
    marker = click.style("●", fg="green") if record.active else " "
    click.echo(f"   {marker} ", nl=False)
    click.secho(record.display_text, bold=record.active, nl=False)
    click.echo(f"  → {record.path}")


def echo_result(result: OperationResult, as_json: bool = False) -> None:
    """Print an OperationResult; exit 1 when it failed."""
    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        icon, color = _STATUS_STYLE.get(result.status, ("❔", "white"))
        click.secho(f"{icon} {result.message}", fg=color, bold=result.status != "skipped")
        if result.installation is not None and result.status in ("ok", "partial"):
            echo_installation(result.installation)

    if result.failed:
        sys.exit(1)
