"""Shared fixtures for plugindesk tests — real project trees under tmp_path."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from plugindesk.engines.project_loader.layout import DEFAULT_LAYOUT, ProjectLayout

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d49484452000000010000000108060000001f15c489"
    "0000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)

_MISSING = object()


class RecordingLogger:
    """Minimal stand-in for an injected structlog logger."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kw: Any) -> None:
        self.events.append((level, event, kw))

    def debug(self, event: str, **kw: Any) -> None:
        self._record("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._record("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._record("warning", event, **kw)

    def named(self, event: str) -> list[dict[str, Any]]:
        return [kw for _, e, kw in self.events if e == event]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def make_project(tmp_path):
    """Factory building a plugin project directory.

    ``manifest=None`` or ``icon=None`` leaves that file out;
    ``installed`` maps package names to their installed descriptors.
    """

    def _make(
        name: str,
        *,
        dependencies: dict[str, str] | None = None,
        dev_dependencies: dict[str, str] | None = None,
        descriptor: Any = _MISSING,
        manifest: Any = _MISSING,
        icon: bytes | None = PNG_BYTES,
        installed: dict[str, dict] | None = None,
        layout: ProjectLayout = DEFAULT_LAYOUT,
        root: Path | None = None,
    ) -> Path:
        project = (root or tmp_path) / name
        project.mkdir(parents=True)

        if descriptor is _MISSING:
            descriptor = {"name": name, "version": "1.0.0"}
            pointer: dict = descriptor
            for key in layout.manifest_pointer[:-1]:
                pointer = pointer.setdefault(key, {})
            pointer[layout.manifest_pointer[-1]] = "src/manifest.json"
            descriptor["dependencies"] = dependencies or {}
            descriptor["devDependencies"] = dev_dependencies or {}
        if descriptor is not None:
            write_json(layout.descriptor_file(project), descriptor)

        if manifest is _MISSING:
            manifest = {"commands": [{"name": "Run", "identifier": "run", "script": "./run.js"}]}
        if manifest is not None:
            write_json(project / "src" / "manifest.json", manifest)

        if icon is not None:
            icon_file = layout.icon_file(project)
            icon_file.parent.mkdir(parents=True, exist_ok=True)
            icon_file.write_bytes(icon)

        for dep_name, dep_descriptor in (installed or {}).items():
            write_json(layout.installed_descriptor_file(project, dep_name), dep_descriptor)

        return project

    return _make
