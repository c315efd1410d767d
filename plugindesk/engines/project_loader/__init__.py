"""Project loader engine — scan plugin projects and their installed dependencies."""

from plugindesk.engines.project_loader.dependencies import (
    load_all_project_dependencies,
    load_dependency_metadata,
    load_project_dependencies,
    queue_dependencies,
)
from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout
from plugindesk.engines.project_loader.loader import load_project, load_projects, scan_projects
from plugindesk.engines.project_loader.models import (
    Dependency,
    ProjectRecord,
    ProjectScan,
    QueuedDependency,
    SkippedProject,
)
from plugindesk.engines.project_loader.scaffold import create_command_file
from plugindesk.engines.project_loader.writer import write_descriptor, write_manifest

__all__ = [
    "DEFAULT_LAYOUT",
    "Dependency",
    "ProjectLayout",
    "ProjectRecord",
    "ProjectScan",
    "QueuedDependency",
    "SkippedProject",
    "create_command_file",
    "load_all_project_dependencies",
    "load_dependency_metadata",
    "load_project",
    "load_project_dependencies",
    "load_projects",
    "queue_dependencies",
    "scan_projects",
    "write_descriptor",
    "write_manifest",
]
