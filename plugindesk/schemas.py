"""JSON response schemas for command-line output."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from plugindesk.engines.project_loader.models import ProjectRecord, ProjectScan


class ProjectSchema(BaseModel):
    name: str
    version: Any = None
    path: str
    dependencies: dict[str, Any] = {}
    dev_dependencies: dict[str, Any] = {}
    manifest: dict[str, Any] | None = None
    has_icon: bool = False
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record: ProjectRecord) -> ProjectSchema:
        return cls(
            name=record.name,
            version=record.version,
            path=str(record.path),
            dependencies=record.dependencies,
            dev_dependencies=record.dev_dependencies,
            manifest=record.manifest,
            has_icon=record.icon is not None,
            created_at=record.created_at,
        )


class SkippedProjectSchema(BaseModel):
    path: str
    reason: str


class ProjectScanSchema(BaseModel):
    projects: dict[str, ProjectSchema]
    skipped: list[SkippedProjectSchema]

    @classmethod
    def from_scan(cls, scan: ProjectScan) -> ProjectScanSchema:
        return cls(
            projects={
                name: ProjectSchema.from_record(record) for name, record in scan.projects.items()
            },
            skipped=[
                SkippedProjectSchema(path=str(s.path), reason=s.reason) for s in scan.skipped
            ],
        )


class DependencySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    version: Any = None
    description: Any = None
    keywords: Any = None
    homepage: Any = None
    license: Any = None
    repository: Any = None
    status: str
    location: str
