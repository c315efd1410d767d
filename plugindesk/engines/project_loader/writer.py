"""Persist descriptor and manifest changes back to a project directory."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from plugindesk.core.config import LoaderConfig
from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout
from plugindesk.engines.project_loader.reader import manifest_file


def serialize(data: Any) -> str:
    """Stable, diff-friendly JSON: two-space indent, key order preserved."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def _current_umask() -> int:
    # os.umask can only be read by setting it.
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _write_text(target: Path, content: str, atomic: bool) -> None:
    if not atomic:
        target.write_text(content, encoding="utf-8")
        return

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
        if target.exists():
            os.chmod(tmp_name, target.stat().st_mode)
        else:
            os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _atomic(config: LoaderConfig | None, atomic: bool | None) -> bool:
    if atomic is not None:
        return atomic
    return (config or LoaderConfig()).atomic_writes


async def write_json_file(target: Path, data: Any, *, atomic: bool = False) -> Any:
    """Overwrite *target* with *data* serialised as JSON and return *data*."""
    await asyncio.to_thread(_write_text, target, serialize(data), atomic)
    return data


async def write_descriptor(
    project_path: Path,
    data: dict[str, Any],
    *,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    config: LoaderConfig | None = None,
    atomic: bool | None = None,
) -> dict[str, Any]:
    """Overwrite the project descriptor with *data*.

    *atomic* defaults to ``config.atomic_writes``.
    """
    target = layout.descriptor_file(Path(project_path))
    return await write_json_file(target, data, atomic=_atomic(config, atomic))


async def write_manifest(
    project_path: Path,
    descriptor: dict[str, Any],
    data: dict[str, Any],
    *,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    config: LoaderConfig | None = None,
    atomic: bool | None = None,
) -> dict[str, Any]:
    """Overwrite the manifest that *descriptor* points at."""
    target = manifest_file(Path(project_path), descriptor, layout)
    return await write_json_file(target, data, atomic=_atomic(config, atomic))
