"""
CLI commands for editing the installation catalogue.

Thin wrappers over ``SwitchOrchestrator``: add, remove, scan, detect.
"""

from __future__ import annotations

import click

from jswitch.ui.cli.common import echo_result, open_orchestrator, select_or_exit


@click.group()
def installs() -> None:
    """Installations — add, remove and discover Java runtimes."""


@installs.command()
@click.argument("path")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def add(ctx: click.Context, path: str, as_json: bool) -> None:
    """Add the installation at PATH (its root, not its bin directory)."""
    orchestrator = open_orchestrator(ctx)
    echo_result(orchestrator.add(path), as_json)


@installs.command()
@click.argument("key")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def remove(ctx: click.Context, key: str, as_json: bool) -> None:
    """Remove an installation by path or name."""
    orchestrator = open_orchestrator(ctx)

    record = select_or_exit(orchestrator, key)
    echo_result(orchestrator.remove(record), as_json)


@installs.command()
@click.argument("directory", type=click.Path(file_okay=False))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def scan(ctx: click.Context, directory: str, as_json: bool) -> None:
    """Add every installation directly under DIRECTORY."""
    orchestrator = open_orchestrator(ctx)
    echo_result(orchestrator.scan(directory), as_json)


@installs.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Search the usual install locations for this OS."""
    orchestrator = open_orchestrator(ctx)

    if not as_json:
        roots = orchestrator.discovery.roots
        click.secho(f"🔍 Searching {len(roots)} location(s)...", fg="cyan")
        if ctx.obj.get("verbose"):
            for root in roots:
                click.echo(f"     • {root}")

    echo_result(orchestrator.auto_detect(), as_json)
