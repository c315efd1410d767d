"""Installed-dependency metadata for a single project."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import structlog

from plugindesk.core.config import LoaderConfig
from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout
from plugindesk.engines.project_loader.models import (
    DEPENDENCY_FIELDS,
    Dependency,
    DependencyLocation,
    DependencySet,
    QueuedDependency,
)
from plugindesk.engines.project_loader.reader import read_descriptor, read_json_object

log = structlog.get_logger("plugindesk.engine")


async def load_dependency_metadata(
    project_path: Path,
    dependency_name: str,
    location: DependencyLocation = "dependencies",
    *,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    cancel: asyncio.Event | None = None,
) -> Dependency | None:
    """Read the installed descriptor of *dependency_name* inside *project_path*.

    Returns ``None`` when the package is declared but not installed. Any
    other read or parse failure propagates.
    """
    descriptor_file = layout.installed_descriptor_file(Path(project_path), dependency_name)
    try:
        installed = await read_json_object(descriptor_file, cancel)
    except FileNotFoundError:
        return None

    subset = {key: installed[key] for key in DEPENDENCY_FIELDS if key in installed}
    if not isinstance(subset.get("name"), str) or not subset["name"]:
        subset["name"] = dependency_name
    return Dependency(**subset, status="idle", location=location)


def queue_dependencies(descriptor: dict[str, Any]) -> list[QueuedDependency]:
    """Declared dependencies of *descriptor*, production first.

    A name declared in both sections is queued once, as a dev dependency.
    """
    deps = list(descriptor.get("dependencies") or {})
    dev_deps = list(descriptor.get("devDependencies") or {})
    return [
        QueuedDependency(
            name=name,
            location="devDependencies" if name in dev_deps else "dependencies",
        )
        for name in dict.fromkeys(deps + dev_deps)
    ]


async def load_project_dependencies(
    project_path: Path,
    queue: list[QueuedDependency],
    *,
    config: LoaderConfig | None = None,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    cancel: asyncio.Event | None = None,
) -> list[Dependency]:
    """Resolve every queued dependency concurrently.

    Uninstalled dependencies are dropped. The first other failure,
    including a per-item timeout, cancels the rest of the batch and
    propagates.
    """
    config = config or LoaderConfig()
    sem = asyncio.Semaphore(config.max_concurrency)

    async def _load_one(queued: QueuedDependency) -> Dependency | None:
        async with sem:
            return await asyncio.wait_for(
                load_dependency_metadata(
                    project_path, queued.name, queued.location, layout=layout, cancel=cancel
                ),
                timeout=config.item_timeout,
            )

    tasks = [asyncio.ensure_future(_load_one(q)) for q in queue]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return [dep for dep in results if dep is not None]


async def load_all_project_dependencies(
    project_path: Path,
    *,
    config: LoaderConfig | None = None,
    layout: ProjectLayout = DEFAULT_LAYOUT,
    logger: Any = None,
    cancel: asyncio.Event | None = None,
) -> DependencySet:
    """Resolve all declared dependencies of a project, keyed by name.

    The descriptor is re-read on every call so the result reflects the
    project as it is on disk now.
    """
    logger = logger or log
    project_path = Path(project_path)

    descriptor = await read_descriptor(project_path, layout, cancel)
    queue = queue_dependencies(descriptor)
    resolved = await load_project_dependencies(
        project_path, queue, config=config, layout=layout, cancel=cancel
    )

    dependencies: DependencySet = {}
    for dependency in resolved:
        dependencies[dependency.name] = dependency

    logger.info(
        "dependencies.resolved",
        project_path=str(project_path),
        declared=len(queue),
        resolved=len(dependencies),
    )
    return dependencies
