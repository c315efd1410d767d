"""Where project files live inside a plugin project directory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ProjectLayout:
    """File-name conventions of a plugin project.

    The defaults describe an npm/skpm plugin: ``package.json`` points at the
    plugin manifest through ``skpm.manifest`` and installed packages live in
    ``node_modules``.
    """

    descriptor_name: str = "package.json"
    manifest_pointer: tuple[str, ...] = ("skpm", "manifest")
    icon_path: tuple[str, ...] = ("assets", "icon.png")
    installed_packages_dir: str = "node_modules"

    def descriptor_file(self, project_path: Path) -> Path:
        return project_path / self.descriptor_name

    def icon_file(self, project_path: Path) -> Path:
        return project_path.joinpath(*self.icon_path)

    def installed_descriptor_file(self, project_path: Path, dependency_name: str) -> Path:
        # Scoped names ("@scope/pkg") map onto nested directories.
        return (
            project_path
            / self.installed_packages_dir
            / Path(*dependency_name.split("/"))
            / self.descriptor_name
        )

    def manifest_pointer_value(self, descriptor: dict[str, Any]) -> str | None:
        """Return the relative manifest location stored in *descriptor*, if any."""
        node: Any = descriptor
        for key in self.manifest_pointer:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        if isinstance(node, str) and node:
            return node
        return None


DEFAULT_LAYOUT = ProjectLayout()
