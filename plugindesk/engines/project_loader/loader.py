"""Project loading — one project, and a whole set of projects."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog

from plugindesk.core.config import LoaderConfig
from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout
from plugindesk.engines.project_loader.models import (
    ProjectRecord,
    ProjectScan,
    ProjectSet,
    SkippedProject,
)
from plugindesk.engines.project_loader.reader import (
    check_cancelled,
    created_at_from_stat,
    read_descriptor,
    read_directory_stat,
    read_icon,
    read_manifest,
)
from plugindesk.exceptions import PluginDeskError, ScanCancelledError

log = structlog.get_logger("plugindesk.engine")


async def _soft(label: str, project_path: Path, coro: Any, logger: Any) -> Any:
    """Await *coro*, degrading any read failure to ``None``."""
    try:
        return await coro
    except ScanCancelledError:
        raise
    except (OSError, PluginDeskError) as exc:
        logger.warning(
            f"loader.{label}_unavailable",
            project_path=str(project_path),
            error=str(exc),
        )
        return None


async def load_project(
    project_path: Path,
    *,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    logger: Any = None,
    cancel: asyncio.Event | None = None,
) -> ProjectRecord:
    """Load one project directory into a :class:`ProjectRecord`.

    The descriptor is mandatory: any failure reading or parsing it
    propagates. Manifest, icon and directory stat are read concurrently
    afterwards and each one that fails is logged and left as ``None``.
    """
    logger = logger or log
    project_path = Path(project_path)

    descriptor = await read_descriptor(project_path, layout, cancel)
    if not isinstance(descriptor.get("name"), str) or not descriptor["name"]:
        raise PluginDeskError(f"descriptor of {project_path} has no name")

    manifest, icon, stat = await asyncio.gather(
        _soft("manifest", project_path, read_manifest(project_path, descriptor, layout, cancel), logger),
        _soft("icon", project_path, read_icon(project_path, layout, cancel), logger),
        _soft("stat", project_path, read_directory_stat(project_path, cancel), logger),
    )

    return ProjectRecord(
        path=project_path,
        descriptor=descriptor,
        manifest=manifest,
        icon=icon,
        created_at=created_at_from_stat(stat) if stat is not None else None,
    )


async def scan_projects(
    project_paths: Iterable[Path | str],
    *,
    config: LoaderConfig | None = None,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    logger: Any = None,
    cancel: asyncio.Event | None = None,
) -> ProjectScan:
    """Load every path concurrently and fold the successes by project name.

    A project that fails to load for any reason is treated as deleted: it
    is left out of ``projects`` and reported in ``skipped``. Two paths
    declaring the same name resolve to whichever finished last.
    """
    config = config or LoaderConfig()
    logger = logger or log
    paths = list(dict.fromkeys(Path(p) for p in project_paths))
    if not paths:
        return ProjectScan()

    sem = asyncio.Semaphore(config.max_concurrency)

    async def _load_one(project_path: Path) -> ProjectRecord | SkippedProject:
        async with sem:
            check_cancelled(cancel)
            try:
                return await asyncio.wait_for(
                    load_project(project_path, layout=layout, logger=logger, cancel=cancel),
                    timeout=config.item_timeout,
                )
            except ScanCancelledError:
                raise
            except asyncio.TimeoutError:
                reason = f"timed out after {config.item_timeout}s"
            except (OSError, PluginDeskError) as exc:
                reason = str(exc)
        logger.debug("loader.project_skipped", project_path=str(project_path), reason=reason)
        return SkippedProject(path=project_path, reason=reason)

    tasks = [asyncio.ensure_future(_load_one(p)) for p in paths]
    projects: ProjectSet = {}
    skipped: list[SkippedProject] = []
    try:
        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if isinstance(result, SkippedProject):
                skipped.append(result)
            else:
                projects[result.name] = result
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    logger.info("loader.scan_complete", loaded=len(projects), skipped=len(skipped))
    return ProjectScan(projects=projects, skipped=skipped)


async def load_projects(
    project_paths: Iterable[Path | str],
    *,
    config: LoaderConfig | None = None,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    logger: Any = None,
    cancel: asyncio.Event | None = None,
) -> ProjectSet:
    """Load a set of projects, keyed by name; unloadable projects are omitted."""
    scan = await scan_projects(
        project_paths, config=config, layout=layout, logger=logger, cancel=cancel
    )
    return scan.projects
