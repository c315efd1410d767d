"""Stamp new plugin command sources from a fixed template."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout
from plugindesk.engines.project_loader.reader import manifest_file

COMMAND_TEMPLATE = """import sketch from 'sketch'
// documentation: https://developer.sketchapp.com/reference/api/

export default function() {
  sketch.UI.message("It's alive 🙌")
}
"""


def command_file(
    project_path: Path,
    descriptor: dict[str, Any],
    command_path: str,
    layout: ProjectLayout = DEFAULT_LAYOUT,
) -> Path:
    """Location of *command_path*, relative to the manifest's directory."""
    manifest = manifest_file(Path(project_path), descriptor, layout)
    return (manifest.parent / command_path).resolve()


def _stamp(target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(COMMAND_TEMPLATE, encoding="utf-8")


async def create_command_file(
    project_path: Path,
    descriptor: dict[str, Any],
    command_path: str,
    *,
    layout: ProjectLayout = DEFAULT_LAYOUT,
) -> Path:
    """Write the command template at *command_path* and return its location.

    An existing file at that location is overwritten.
    """
    target = command_file(project_path, descriptor, command_path, layout)
    await asyncio.to_thread(_stamp, target)
    return target
