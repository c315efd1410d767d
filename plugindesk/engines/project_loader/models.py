"""Data models for the project loader engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

DependencyLocation = Literal["dependencies", "devDependencies"]

# Keys under which auxiliary data is merged into the descriptor view.
MANIFEST_KEY = "__plugindesk_manifest"
ICON_KEY = "__plugindesk_icon"
CREATED_AT_KEY = "__plugindesk_createdAt"

# Fields copied from an installed package's descriptor.
DEPENDENCY_FIELDS = (
    "name",
    "description",
    "keywords",
    "version",
    "homepage",
    "license",
    "repository",
)


@dataclass(frozen=True)
class ProjectRecord:
    """A project's descriptor merged with its optional auxiliary files."""

    path: Path
    descriptor: dict[str, Any]
    manifest: dict[str, Any] | None = None
    icon: str | None = None
    created_at: datetime | None = None

    @property
    def name(self) -> str:
        return self.descriptor["name"]

    @property
    def version(self) -> str | None:
        return self.descriptor.get("version")

    @property
    def dependencies(self) -> dict[str, str]:
        return dict(self.descriptor.get("dependencies") or {})

    @property
    def dev_dependencies(self) -> dict[str, str]:
        return dict(self.descriptor.get("devDependencies") or {})

    def to_dict(self) -> dict[str, Any]:
        """Descriptor fields plus the reserved auxiliary keys."""
        merged = dict(self.descriptor)
        merged[MANIFEST_KEY] = self.manifest
        merged[ICON_KEY] = self.icon
        merged[CREATED_AT_KEY] = (
            self.created_at.timestamp() * 1000 if self.created_at is not None else None
        )
        return merged


ProjectSet = dict[str, ProjectRecord]


@dataclass(frozen=True)
class QueuedDependency:
    """A declared dependency waiting for its installed metadata."""

    name: str
    location: DependencyLocation


@dataclass
class Dependency:
    """Installed metadata of one declared dependency."""

    name: str
    location: DependencyLocation
    version: Any = None
    description: Any = None
    keywords: Any = None
    homepage: Any = None
    license: Any = None
    repository: Any = None
    status: str = "idle"


DependencySet = dict[str, Dependency]


@dataclass(frozen=True)
class SkippedProject:
    """A project path dropped from a scan, with the reason it failed."""

    path: Path
    reason: str


@dataclass
class ProjectScan:
    """Result of scanning a collection of project paths."""

    projects: ProjectSet = field(default_factory=dict)
    skipped: list[SkippedProject] = field(default_factory=list)
