"""CLI entry point: plugindesk.

Subcommands:
    plugindesk scan ~/plugins/a ~/plugins/b     # Load a set of projects
    plugindesk deps ~/plugins/a                 # Resolve installed dependencies
    plugindesk new-command ~/plugins/a my-command.js
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
from pathlib import Path

import click

from plugindesk.core.config import LoaderConfig
from plugindesk.core.logging import setup_logging
from plugindesk.engines.project_loader import (
    create_command_file,
    load_all_project_dependencies,
    scan_projects,
)
from plugindesk.engines.project_loader.reader import read_descriptor
from plugindesk.exceptions import PluginDeskError
from plugindesk.schemas import DependencySchema, ProjectScanSchema


def _config(concurrency: int | None, timeout: float | None) -> LoaderConfig:
    try:
        config = LoaderConfig.from_env()
        overrides = {}
        if concurrency is not None:
            overrides["max_concurrency"] = concurrency
        if timeout is not None:
            overrides["item_timeout"] = timeout or None
        return dataclasses.replace(config, **overrides)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--log-format", type=click.Choice(["console", "json"]), default=None, help="Log renderer"
)
def main(verbose: bool, log_format: str | None) -> None:
    """plugindesk: inspect local plugin-development projects."""
    try:
        setup_logging("DEBUG" if verbose else None, log_format)
    except ValueError as e:
        raise click.UsageError(str(e)) from e


@main.command("scan")
@click.argument(
    "project_paths", nargs=-1, required=True, type=click.Path(file_okay=False, path_type=Path)
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Max parallel loads")
@click.option("--timeout", type=float, default=None, help="Per-project timeout in seconds (0 disables)")
def scan(
    project_paths: tuple[Path, ...],
    as_json: bool,
    concurrency: int | None,
    timeout: float | None,
) -> None:
    """Load every project directory and print the ones that loaded."""
    config = _config(concurrency, timeout)
    paths = [p.expanduser().resolve() for p in project_paths]
    result = asyncio.run(scan_projects(paths, config=config))

    if as_json:
        click.echo(ProjectScanSchema.from_scan(result).model_dump_json(indent=2))
        return

    if not result.projects:
        click.echo("No projects found.")
    else:
        click.echo(f"Loaded {len(result.projects)} project(s)\n")
        for name, record in sorted(result.projects.items()):
            version = record.version or "?"
            deps = len(record.dependencies) + len(record.dev_dependencies)
            manifest = "manifest" if record.manifest is not None else "no manifest"
            click.echo(f"  {name}@{version}  ({deps} deps, {manifest})  {record.path}")

    if result.skipped:
        click.echo(f"\nSkipped {len(result.skipped)} path(s):")
        for skipped in result.skipped:
            click.echo(f"  {skipped.path}: {skipped.reason}")


@main.command("deps")
@click.argument("project_path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Max parallel reads")
def deps(project_path: Path, as_json: bool, concurrency: int | None) -> None:
    """Resolve the installed metadata of a project's declared dependencies."""
    config = _config(concurrency, None)
    try:
        dependencies = asyncio.run(
            load_all_project_dependencies(project_path.resolve(), config=config)
        )
    except (OSError, PluginDeskError) as e:
        raise click.ClickException(f"Cannot load dependencies: {e}") from e

    if as_json:
        rows = {
            name: DependencySchema.model_validate(dep).model_dump(mode="json")
            for name, dep in dependencies.items()
        }
        click.echo(json.dumps(rows, indent=2))
        return

    if not dependencies:
        click.echo("No installed dependencies found.")
        return

    by_location: dict[str, list] = {}
    for dep in dependencies.values():
        by_location.setdefault(dep.location, []).append(dep)

    for location, group in sorted(by_location.items()):
        click.echo(f"{location}:")
        for dep in sorted(group, key=lambda d: d.name):
            license_ = f"  [{dep.license}]" if dep.license else ""
            click.echo(f"  {dep.name} {dep.version or '?'}{license_}")


@main.command("new-command")
@click.argument("project_path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("command_path")
def new_command(project_path: Path, command_path: str) -> None:
    """Create a command source file next to the plugin manifest."""

    async def _create() -> Path:
        descriptor = await read_descriptor(project_path)
        return await create_command_file(project_path, descriptor, command_path)

    try:
        target = asyncio.run(_create())
    except (OSError, PluginDeskError) as e:
        raise click.ClickException(f"Cannot create command: {e}") from e
    click.echo(f"Command written to {target}")


if __name__ == "__main__":
    main()
