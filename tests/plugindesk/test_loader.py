"""Tests for loading a single project and a set of projects."""

from __future__ import annotations

import asyncio
import shutil

import pytest

from plugindesk.core.config import LoaderConfig
from plugindesk.engines.project_loader import loader as loader_module
from plugindesk.engines.project_loader.layout import ProjectLayout
from plugindesk.engines.project_loader.loader import load_project, load_projects, scan_projects
from plugindesk.engines.project_loader.models import CREATED_AT_KEY, ICON_KEY, MANIFEST_KEY
from plugindesk.exceptions import ParseError, ScanCancelledError


# ── load_project ─────────────────────────────────────────────────────────


class TestLoadProject:
    @pytest.mark.asyncio
    async def test_full_record(self, make_project):
        project = make_project("alpha", dependencies={"a": "^1.0.0"})
        record = await load_project(project)
        assert record.name == "alpha"
        assert record.version == "1.0.0"
        assert record.dependencies == {"a": "^1.0.0"}
        assert record.manifest is not None
        assert record.icon is not None
        assert record.created_at is not None

    @pytest.mark.asyncio
    async def test_missing_descriptor_propagates(self, make_project):
        project = make_project("alpha", descriptor=None)
        with pytest.raises(FileNotFoundError):
            await load_project(project)

    @pytest.mark.asyncio
    async def test_corrupt_descriptor_propagates(self, make_project):
        project = make_project("alpha")
        (project / "package.json").write_text("{")
        with pytest.raises(ParseError):
            await load_project(project)

    @pytest.mark.asyncio
    async def test_missing_manifest_is_soft(self, make_project, recording_logger):
        project = make_project("alpha", manifest=None)
        record = await load_project(project, logger=recording_logger)
        assert record.manifest is None
        assert record.icon is not None
        warnings = recording_logger.named("loader.manifest_unavailable")
        assert len(warnings) == 1
        assert warnings[0]["project_path"] == str(project)

    @pytest.mark.asyncio
    async def test_corrupt_manifest_is_soft(self, make_project, recording_logger):
        project = make_project("alpha")
        (project / "src" / "manifest.json").write_text("][")
        record = await load_project(project, logger=recording_logger)
        assert record.manifest is None

    @pytest.mark.asyncio
    async def test_missing_manifest_pointer_is_soft(self, make_project, recording_logger):
        project = make_project("alpha", descriptor={"name": "alpha"})
        record = await load_project(project, logger=recording_logger)
        assert record.manifest is None
        assert recording_logger.named("loader.manifest_unavailable")

    @pytest.mark.asyncio
    async def test_unreadable_icon_is_soft(self, make_project, recording_logger):
        project = make_project("alpha", icon=None)
        # A directory where the icon should be cannot be read as a file.
        (project / "assets" / "icon.png").mkdir(parents=True)
        record = await load_project(project, logger=recording_logger)
        assert record.icon is None
        assert record.manifest is not None
        assert recording_logger.named("loader.icon_unavailable")

    @pytest.mark.asyncio
    async def test_failing_stat_is_soft(self, make_project, recording_logger, monkeypatch):
        project = make_project("alpha")

        async def denied_stat(project_path, cancel=None):
            raise PermissionError(13, "Permission denied", str(project_path))

        monkeypatch.setattr(loader_module, "read_directory_stat", denied_stat)
        record = await load_project(project, logger=recording_logger)
        assert record.name == "alpha"
        assert record.created_at is None
        assert record.manifest is not None
        assert record.icon is not None
        assert record.to_dict()[CREATED_AT_KEY] is None
        warnings = recording_logger.named("loader.stat_unavailable")
        assert len(warnings) == 1
        assert warnings[0]["project_path"] == str(project)
        assert "Permission denied" in warnings[0]["error"]

    @pytest.mark.asyncio
    async def test_to_dict_uses_reserved_keys(self, make_project):
        project = make_project("alpha", icon=None)
        merged = (await load_project(project)).to_dict()
        assert merged["name"] == "alpha"
        assert merged[MANIFEST_KEY]["commands"][0]["identifier"] == "run"
        assert merged[ICON_KEY] is None
        assert isinstance(merged[CREATED_AT_KEY], float)

    @pytest.mark.asyncio
    async def test_cancellation_is_not_softened(self, make_project):
        project = make_project("alpha")
        cancel = asyncio.Event()
        cancel.set()
        with pytest.raises(ScanCancelledError):
            await load_project(project, cancel=cancel)


# ── load_projects / scan_projects ────────────────────────────────────────


class TestLoadProjects:
    @pytest.mark.asyncio
    async def test_missing_project_is_dropped(self, make_project, tmp_path):
        a = make_project("A")
        b = make_project("B", descriptor=None)
        projects = await load_projects([a, b])
        assert set(projects) == {"A"}
        assert projects["A"].path == a

    @pytest.mark.asyncio
    async def test_keys_ignore_auxiliary_files(self, make_project):
        paths = [
            make_project("full"),
            make_project("no-manifest", manifest=None),
            make_project("no-icon", icon=None),
            make_project("bare", descriptor={"name": "bare"}, manifest=None, icon=None),
            make_project("broken", descriptor=None),
        ]
        projects = await load_projects(paths)
        assert set(projects) == {"full", "no-manifest", "no-icon", "bare"}

    @pytest.mark.asyncio
    async def test_deleted_between_enumeration_and_load(self, make_project):
        a = make_project("A")
        b = make_project("B")
        shutil.rmtree(b)
        projects = await load_projects([a, b])
        assert set(projects) == {"A"}

    @pytest.mark.asyncio
    async def test_nameless_descriptor_is_dropped(self, make_project):
        a = make_project("A", descriptor={"version": "1.0.0"})
        scan = await scan_projects([a])
        assert scan.projects == {}
        assert len(scan.skipped) == 1

    @pytest.mark.asyncio
    async def test_empty_input(self):
        assert await load_projects([]) == {}

    @pytest.mark.asyncio
    async def test_duplicate_names_collapse(self, make_project, tmp_path):
        first = make_project("dup", root=tmp_path / "one")
        second = make_project("dup", root=tmp_path / "two")
        projects = await load_projects([first, second])
        assert list(projects) == ["dup"]
        assert projects["dup"].path in {first, second}

    @pytest.mark.asyncio
    async def test_skipped_paths_are_reported(self, make_project, recording_logger):
        a = make_project("A")
        b = make_project("B", descriptor=None)
        c = make_project("C")
        (c / "package.json").write_text("nope")
        scan = await scan_projects([a, b, c], logger=recording_logger)
        assert set(scan.projects) == {"A"}
        assert {s.path for s in scan.skipped} == {b, c}
        assert all(s.reason for s in scan.skipped)
        assert recording_logger.named("loader.scan_complete") == [{"loaded": 1, "skipped": 2}]

    @pytest.mark.asyncio
    async def test_accepts_string_paths(self, make_project):
        a = make_project("A")
        projects = await load_projects([str(a)])
        assert set(projects) == {"A"}

    @pytest.mark.asyncio
    async def test_custom_layout(self, make_project):
        layout = ProjectLayout(
            descriptor_name="descriptor.json",
            manifest_pointer=("pluginConfig", "manifestPath"),
            installed_packages_dir="installed-packages",
        )
        a = make_project("A", layout=layout)
        projects = await load_projects([a], layout=layout)
        assert projects["A"].manifest is not None

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, make_project, monkeypatch):
        paths = [make_project(f"p{i}") for i in range(12)]
        real_read = loader_module.read_descriptor
        active = 0
        peak = 0

        async def tracking_read(*args, **kwargs):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            try:
                await asyncio.sleep(0.01)
                return await real_read(*args, **kwargs)
            finally:
                active -= 1

        monkeypatch.setattr(loader_module, "read_descriptor", tracking_read)
        projects = await load_projects(paths, config=LoaderConfig(max_concurrency=3))
        assert len(projects) == 12
        assert peak <= 3

    @pytest.mark.asyncio
    async def test_slow_project_times_out(self, make_project, monkeypatch):
        fast = make_project("fast")
        slow = make_project("slow")
        real_read = loader_module.read_descriptor

        async def maybe_slow(project_path, *args, **kwargs):
            if project_path == slow:
                await asyncio.sleep(5)
            return await real_read(project_path, *args, **kwargs)

        monkeypatch.setattr(loader_module, "read_descriptor", maybe_slow)
        scan = await scan_projects([fast, slow], config=LoaderConfig(item_timeout=0.5))
        assert set(scan.projects) == {"fast"}
        assert scan.skipped[0].path == slow
        assert "timed out" in scan.skipped[0].reason

    @pytest.mark.asyncio
    async def test_cancelled_scan_raises(self, make_project):
        paths = [make_project("A"), make_project("B")]
        cancel = asyncio.Event()
        cancel.set()
        with pytest.raises(ScanCancelledError):
            await load_projects(paths, cancel=cancel)
