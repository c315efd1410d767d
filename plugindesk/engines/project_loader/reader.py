"""Single-file readers for a plugin project directory.

Each reader performs one file operation in a worker thread and either
returns the parsed value or raises. No reader logs or swallows errors;
deciding which failures are fatal is the loader's job.
"""

from __future__ import annotations

import asyncio
import base64
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout
from plugindesk.exceptions import ManifestPointerError, ParseError, ScanCancelledError


def check_cancelled(cancel: asyncio.Event | None) -> None:
    """Raise :class:`ScanCancelledError` if *cancel* has been set."""
    if cancel is not None and cancel.is_set():
        raise ScanCancelledError("scan cancelled")


async def read_json_object(file_path: Path, cancel: asyncio.Event | None = None) -> dict[str, Any]:
    """Read *file_path* and parse it as a JSON object."""
    check_cancelled(cancel)
    raw = await asyncio.to_thread(file_path.read_bytes)
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(file_path, str(exc)) from exc
    if not isinstance(data, dict):
        raise ParseError(file_path, f"expected a JSON object, got {type(data).__name__}")
    return data


async def read_directory_stat(
    project_path: Path, cancel: asyncio.Event | None = None
) -> os.stat_result:
    check_cancelled(cancel)
    return await asyncio.to_thread(os.stat, project_path)


def created_at_from_stat(stat: os.stat_result) -> datetime:
    """Creation time of a stat result as an aware UTC datetime.

    Uses the birth time where the platform reports one (macOS, BSD,
    Windows on 3.12+) and falls back to ``st_ctime`` elsewhere.
    """
    timestamp = getattr(stat, "st_birthtime", None)
    if timestamp is None:
        timestamp = stat.st_ctime
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


async def read_descriptor(
    project_path: Path,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    cancel: asyncio.Event | None = None,
) -> dict[str, Any]:
    return await read_json_object(layout.descriptor_file(project_path), cancel)


async def read_manifest(
    project_path: Path,
    descriptor: dict[str, Any],
    layout: ProjectLayout = DEFAULT_LAYOUT,
    cancel: asyncio.Event | None = None,
) -> dict[str, Any]:
    """Read the plugin manifest whose location is stored in *descriptor*."""
    return await read_json_object(manifest_file(project_path, descriptor, layout), cancel)


def manifest_file(
    project_path: Path,
    descriptor: dict[str, Any],
    layout: ProjectLayout = DEFAULT_LAYOUT,
) -> Path:
    """Resolve the manifest path declared by *descriptor*.

    Raises :class:`ManifestPointerError` when the pointer is missing.
    """
    pointer = layout.manifest_pointer_value(descriptor)
    if pointer is None:
        raise ManifestPointerError(
            layout.descriptor_file(project_path),
            f"no manifest location at {'.'.join(layout.manifest_pointer)}",
        )
    return project_path / pointer


async def read_icon(
    project_path: Path,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    cancel: asyncio.Event | None = None,
) -> str:
    """Read the project icon and return it as base64 text."""
    check_cancelled(cancel)
    data = await asyncio.to_thread(layout.icon_file(project_path).read_bytes)
    return base64.b64encode(data).decode("ascii")
