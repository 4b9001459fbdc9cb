"""
jswitch — CLI entrypoint.

Usage:
    jswitch --help
    jswitch list
    jswitch use temurin-17
    jswitch installs detect
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from jswitch import __version__
from jswitch.core.observability.logging_config import (
    FILE_ENV_VAR,
    FILE_LEVEL_ENV_VAR,
    resolve_level,
    setup_logging,
)
from jswitch.ui.cli.common import echo_installation, echo_result, open_orchestrator, select_or_exit


@click.group()
@click.version_option(version=__version__, prog_name="jswitch")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.yml (default: user config directory).",
)
@click.option("--dry-run", is_flag=True, help="Keep every change in memory; write nothing.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    dry_run: bool,
) -> None:
    """jswitch — switch the machine's active Java installation."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["dry_run"] = dry_run

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(FILE_ENV_VAR),
        log_file_level=os.environ.get(FILE_LEVEL_ENV_VAR),
    )


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_installations(ctx: click.Context, as_json: bool) -> None:
    """List known installations; ● marks the active one."""
    orchestrator = open_orchestrator(ctx)
    records = orchestrator.catalogue.installations

    if as_json:
        click.echo(json.dumps([r.model_dump() for r in records], indent=2))
        return

    if not records:
        click.secho("No Java installations known yet.", fg="yellow")
        click.echo("   Try 'jswitch installs detect' or 'jswitch installs add PATH'.")
        return

    if not ctx.obj.get("quiet"):
        click.secho(f"\n☕ Java installations: {len(records)}", fg="cyan", bold=True)
    for record in records:
        echo_installation(record)
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show the active installation and check for drift."""
    from jswitch.core.use_cases.status import get_status

    result = get_status(open_orchestrator(ctx))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"\n☕ {result.variable}", fg="cyan", bold=True, nl=False)
    click.echo(f"  ({result.store} store)")
    if result.target is None:
        click.secho("   not set", fg="yellow")
    else:
        click.echo(f"   {result.target}")

    if result.active is not None:
        click.secho(f"   Active: {result.active.display_text}", fg="green")
    click.echo(f"   Search path head: {result.search_path_head or 'none'}")
    click.echo(f"   Known installations: {result.installation_count}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Drift:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    click.echo()


@cli.command()
@click.argument("key")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def use(ctx: click.Context, key: str, as_json: bool) -> None:
    """Switch to the installation KEY (a path or a unique name)."""
    orchestrator = open_orchestrator(ctx)
    record = select_or_exit(orchestrator, key)
    result = orchestrator.switch_to(record)
    echo_result(result, as_json)

    if result.ok and not as_json and not ctx.obj.get("quiet"):
        click.echo("   Open a new terminal for the change to take effect.")


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate config.yml."""
    from jswitch.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        if result.config_path:
            click.echo(f"   File: {result.config_path}")
        assert result.settings is not None  # guaranteed when valid
        click.echo(f"   Variable: {result.settings.variable}")
        click.echo(f"   Store: {result.settings.store}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


# ── Register sub-command groups from jswitch/ui/cli/ ──────────────

from jswitch.ui.cli.installs import installs

cli.add_command(installs)


if __name__ == "__main__":
    cli()
