"""Tests for export mapping planning and drift-aware resource sync."""

import os
from unittest.mock import patch

import pytest

from modsync.core import (
    ChecksumMarker,
    ContentHasher,
    ExportMapping,
    MappingAction,
    ModuleNotLoadedError,
    ResourceCopyError,
    ResourceSyncPlanner,
    SkipReason,
)
from modsync.stores import DatabaseStore


MARKER = ChecksumMarker()


def stamped(content: str) -> str:
    return MARKER.stamp(content)


@pytest.fixture
def planner(store, locator, project_dir):
    return ResourceSyncPlanner(store, locator, project_dir)


class TestPlan:
    """Test export mapping enumeration."""

    def test_static_mappings_in_order(self, planner, make_module):
        module_path = make_module("nlu")

        mappings = planner.plan("nlu")

        assert mappings == [
            ExportMapping(module_path / "dist" / "actions", "/actions/nlu", is_tracked=True),
            ExportMapping(module_path / "assets", "/assets/modules/nlu", skip_drift_check=True),
            ExportMapping(module_path / "dist" / "content-types", "/content-types/nlu", is_tracked=True),
        ]

    def test_one_mapping_per_hook_directory(self, planner, make_module):
        module_path = make_module("nlu", {
            "dist/hooks/before_incoming_middleware/00_nlu.js": "hook",
            "dist/hooks/after_bot_mount/01_mount.js": "hook",
            "dist/hooks/README.md": "not a hook type",
        })

        hook_mappings = planner.plan("nlu")[3:]

        assert [m.destination for m in hook_mappings] == [
            "/hooks/after_bot_mount/nlu",
            "/hooks/before_incoming_middleware/nlu",
        ]
        assert hook_mappings[0].source == module_path / "dist" / "hooks" / "after_bot_mount"
        assert all(m.is_tracked and not m.skip_drift_check for m in hook_mappings)

    def test_unknown_module(self, planner):
        with pytest.raises(ModuleNotLoadedError):
            planner.plan("missing")


class TestTrackedSync:
    """Test the checksum-aware upsert path."""

    @pytest.mark.asyncio
    async def test_new_file_is_written_with_marker(self, planner, store, make_module):
        make_module("mod", {"dist/actions/hello.js": "Hi"})

        result = await planner.execute(planner.plan("mod")[0])

        assert result.action == MappingAction.UPSERT
        assert result.written == ["/actions/mod/hello.js"]
        assert await store.read_text("/", "/actions/mod/hello.js") == stamped("Hi")

    @pytest.mark.asyncio
    async def test_second_sync_of_untouched_tree_does_not_write(self, planner, store, make_module):
        make_module("mod", {"dist/actions/a.js": "A", "dist/actions/b.js": "B"})
        mapping = planner.plan("mod")[0]
        await planner.execute(mapping)

        with patch.object(store, "upsert_file", wraps=store.upsert_file) as spy:
            result = await planner.execute(mapping)

        assert spy.await_count == 0
        assert result.written == []
        assert result.unchanged == ["/actions/mod/a.js", "/actions/mod/b.js"]

    @pytest.mark.asyncio
    async def test_manual_edit_is_preserved(self, planner, store, project_dir, make_module):
        module_path = make_module("mod", {"dist/actions/hello.js": "Hi"})
        mapping = planner.plan("mod")[0]
        await planner.execute(mapping)

        edited = stamped("Hi") + "!"
        target = project_dir / "actions" / "mod" / "hello.js"
        target.write_bytes(edited.encode("utf-8"))
        (module_path / "dist" / "actions" / "hello.js").write_text("Hello from v2")

        result = await planner.execute(mapping)

        assert result.preserved == ["/actions/mod/hello.js"]
        assert target.read_bytes() == edited.encode("utf-8")

    @pytest.mark.asyncio
    async def test_unmodified_file_receives_new_source(self, planner, store, make_module):
        module_path = make_module("mod", {"dist/actions/hello.js": "Hi"})
        mapping = planner.plan("mod")[0]
        await planner.execute(mapping)

        (module_path / "dist" / "actions" / "hello.js").write_text("Hello from v2")
        result = await planner.execute(mapping)

        assert result.written == ["/actions/mod/hello.js"]
        assert await store.read_text("/", "/actions/mod/hello.js") == stamped("Hello from v2")

    @pytest.mark.asyncio
    async def test_unmarked_destination_is_overwritten(self, planner, store, make_module):
        make_module("mod", {"dist/content-types/card.js": "card v1"})
        await store.upsert_file("/", "/content-types/mod/card.js", "written by someone else")

        result = await planner.execute(planner.plan("mod")[2])

        assert result.written == ["/content-types/mod/card.js"]
        assert await store.read_text("/", "/content-types/mod/card.js") == stamped("card v1")

    @pytest.mark.asyncio
    async def test_subdirectories_of_tracked_source_are_ignored(self, planner, store, make_module):
        make_module("mod", {
            "dist/actions/top.js": "top",
            "dist/actions/nested/inner.js": "inner",
        })

        result = await planner.execute(planner.plan("mod")[0])

        assert result.written == ["/actions/mod/top.js"]
        assert not await store.file_exists("/", "/actions/mod/nested/inner.js")

    @pytest.mark.asyncio
    async def test_hello_scenario(self, planner, store, project_dir, make_module):
        make_module("mod", {"dist/actions/hello.txt": "Hi"})
        mapping = planner.plan("mod")[0]
        digest = ContentHasher().hash_content(b"Hi")
        target = project_dir / "actions" / "mod" / "hello.txt"

        await planner.execute(mapping)
        assert target.read_text() == f"//CHECKSUM:{digest}{os.linesep}Hi"

        target.write_text(f"//CHECKSUM:{digest}{os.linesep}Hi!")
        result = await planner.execute(mapping)
        assert result.preserved == ["/actions/mod/hello.txt"]
        assert target.read_text() == f"//CHECKSUM:{digest}{os.linesep}Hi!"

        target.write_text(f"//CHECKSUM:{digest}{os.linesep}Hi")
        with patch.object(store, "upsert_file", wraps=store.upsert_file) as spy:
            result = await planner.execute(mapping)
        assert result.unchanged == ["/actions/mod/hello.txt"]
        assert spy.await_count == 0

    @pytest.mark.asyncio
    async def test_sync_into_database_store(self, locator, project_dir, make_module):
        make_module("mod", {"dist/actions/hello.js": "Hi"})
        store = DatabaseStore("sqlite:///:memory:")
        planner = ResourceSyncPlanner(store, locator, project_dir)
        mapping = planner.plan("mod")[0]

        first = await planner.execute(mapping)
        second = await planner.execute(mapping)

        assert first.written == ["/actions/mod/hello.js"]
        assert second.unchanged == ["/actions/mod/hello.js"]
        assert await store.read_text("/", "actions/mod/hello.js") == stamped("Hi")
        assert not (project_dir / "actions").exists()
        await store.close()

    @pytest.mark.asyncio
    async def test_undecodable_manual_edit_is_preserved(self, planner, store, project_dir, make_module):
        module_path = make_module("mod", {"dist/actions/a.js": "A", "dist/actions/b.js": "B"})
        mapping = planner.plan("mod")[0]
        await planner.execute(mapping)

        edited = stamped("A").encode("utf-8") + b"\n// caf\xe9"
        (project_dir / "actions" / "mod" / "a.js").write_bytes(edited)
        (module_path / "dist" / "actions" / "b.js").write_text("B v2")

        result = await planner.execute(mapping)

        assert result.preserved == ["/actions/mod/a.js"]
        assert result.written == ["/actions/mod/b.js"]
        assert (project_dir / "actions" / "mod" / "a.js").read_bytes() == edited
        assert await store.read_text("/", "/actions/mod/b.js") == stamped("B v2")

    @pytest.mark.asyncio
    async def test_binary_source_is_stamped_and_stays_stable(self, planner, store, project_dir, make_module):
        module_path = make_module("mod")
        source = module_path / "dist" / "content-types" / "icon.bin"
        source.parent.mkdir(parents=True)
        source.write_bytes(b"\x89PNG\xff\x00")
        mapping = planner.plan("mod")[2]
        digest = ContentHasher().hash_content(b"\x89PNG\xff\x00")

        first = await planner.execute(mapping)
        with patch.object(store, "upsert_file", wraps=store.upsert_file) as spy:
            second = await planner.execute(mapping)

        assert first.written == ["/content-types/mod/icon.bin"]
        assert (project_dir / "content-types" / "mod" / "icon.bin").read_bytes() == (
            f"//CHECKSUM:{digest}{os.linesep}".encode("ascii") + b"\x89PNG\xff\x00"
        )
        assert second.unchanged == ["/content-types/mod/icon.bin"]
        assert spy.await_count == 0


class TestUnconditionalCopy:
    """Test mappings that bypass the drift check."""

    @pytest.mark.asyncio
    async def test_assets_always_overwrite(self, planner, project_dir, make_module):
        make_module("mod", {
            "assets/logo.svg": "<svg/>",
            "assets/img/icon.txt": "icon",
        })
        target = project_dir / "assets" / "modules" / "mod" / "logo.svg"
        target.parent.mkdir(parents=True)
        target.write_text(stamped("<svg/>") + " edited by hand")

        result = await planner.execute(planner.plan("mod")[1])

        assert result.action == MappingAction.COPY
        assert result.written == [
            "/assets/modules/mod/img/icon.txt",
            "/assets/modules/mod/logo.svg",
        ]
        assert target.read_text() == "<svg/>"
        assert (project_dir / "assets" / "modules" / "mod" / "img" / "icon.txt").read_text() == "icon"

    @pytest.mark.asyncio
    async def test_untracked_mapping_is_copied(self, planner, project_dir, make_module):
        module_path = make_module("mod", {"extra/readme.txt": "docs"})
        mapping = ExportMapping(module_path / "extra", "/docs/mod")

        result = await planner.execute(mapping)

        assert result.action == MappingAction.COPY
        assert (project_dir / "docs" / "mod" / "readme.txt").read_text() == "docs"


class TestSkippedMappings:
    """Test mappings that are not synced at all."""

    @pytest.mark.asyncio
    async def test_missing_source_is_skipped(self, planner, make_module):
        make_module("mod")

        results = await planner.execute_all(planner.plan("mod"))

        assert [r.skip_reason for r in results] == [SkipReason.MISSING_SOURCE] * 3

    @pytest.mark.asyncio
    async def test_symlinked_destination_is_left_alone(self, planner, store, tmp_path, project_dir, make_module):
        make_module("mod", {"dist/actions/hello.js": "Hi"})
        linked = tmp_path / "dev-checkout"
        linked.mkdir()
        (project_dir / "actions").mkdir()
        os.symlink(linked, project_dir / "actions" / "mod")

        result = await planner.execute(planner.plan("mod")[0])

        assert result.action == MappingAction.SKIPPED
        assert result.skip_reason == SkipReason.SYMLINK
        assert list(linked.iterdir()) == []

    @pytest.mark.asyncio
    async def test_dangling_symlink_is_not_an_override(self, locator, tmp_path, project_dir, make_module):
        make_module("mod", {"dist/actions/hello.js": "Hi"})
        (project_dir / "actions").mkdir()
        os.symlink(tmp_path / "removed-checkout", project_dir / "actions" / "mod")
        store = DatabaseStore("sqlite:///:memory:")
        planner = ResourceSyncPlanner(store, locator, project_dir)

        result = await planner.execute(planner.plan("mod")[0])

        assert planner.is_symbolic_link("/actions/mod") is False
        assert result.action == MappingAction.UPSERT
        assert result.written == ["/actions/mod/hello.js"]
        await store.close()


class TestFailures:
    """Test error wrapping during a mapping's copy."""

    @pytest.mark.asyncio
    async def test_store_failure_is_wrapped(self, planner, store, make_module):
        make_module("mod", {"dist/actions/hello.js": "Hi"})

        with patch.object(store, "upsert_file", side_effect=OSError("disk full")):
            with pytest.raises(ResourceCopyError, match="Error copying module resources") as exc_info:
                await planner.execute(planner.plan("mod")[0])

        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.destination == "/actions/mod"

    @pytest.mark.asyncio
    async def test_failure_keeps_files_written_before_it(self, planner, store, make_module):
        make_module("mod", {"dist/actions/a.js": "A", "dist/actions/b.js": "B"})
        original_upsert = store.upsert_file
        calls = []

        async def failing_upsert(root, path, content):
            calls.append(path)
            if path.endswith("b.js"):
                raise OSError("disk full")
            await original_upsert(root, path, content)

        with patch.object(store, "upsert_file", side_effect=failing_upsert):
            with pytest.raises(ResourceCopyError):
                await planner.execute(planner.plan("mod")[0])

        assert await store.read_text("/", "/actions/mod/a.js") == stamped("A")
        assert not await store.file_exists("/", "/actions/mod/b.js")

    @pytest.mark.asyncio
    async def test_copy_failure_is_wrapped(self, planner, make_module):
        make_module("mod", {"assets/logo.svg": "<svg/>"})

        with patch("modsync.core.planner.shutil.copytree", side_effect=PermissionError("denied")):
            with pytest.raises(ResourceCopyError, match="Error copying module resources"):
                await planner.execute(planner.plan("mod")[1])


class TestExecuteAll:
    """Test running a module's mappings together."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("concurrent", [False, True])
    async def test_results_follow_mapping_order(self, planner, store, make_module, concurrent):
        make_module("mod", {
            "dist/actions/a.js": "A",
            "assets/logo.svg": "<svg/>",
            "dist/content-types/card.js": "card",
            "dist/hooks/after_bot_mount/mount.js": "mount",
        })
        mappings = planner.plan("mod")

        results = await planner.execute_all(mappings, concurrent=concurrent)

        assert [r.mapping for r in results] == mappings
        assert [r.action for r in results] == [
            MappingAction.UPSERT,
            MappingAction.COPY,
            MappingAction.UPSERT,
            MappingAction.UPSERT,
        ]
        assert await store.read_text("/", "/hooks/after_bot_mount/mod/mount.js") == stamped("mount")

    @pytest.mark.asyncio
    async def test_concurrent_failure_lets_other_mappings_finish(self, planner, store, project_dir, make_module):
        make_module("mod", {
            "dist/actions/a.js": "A",
            "assets/logo.svg": "<svg/>",
            "dist/content-types/card.js": "card",
            "dist/hooks/after_bot_mount/mount.js": "mount",
        })
        original_upsert = store.upsert_file

        async def failing_upsert(root, path, content):
            if path.startswith("/content-types/"):
                raise OSError("disk full")
            await original_upsert(root, path, content)

        with patch.object(store, "upsert_file", side_effect=failing_upsert):
            with pytest.raises(ResourceCopyError) as exc_info:
                await planner.execute_all(planner.plan("mod"), concurrent=True)

        assert exc_info.value.destination == "/content-types/mod"
        assert await store.read_text("/", "/actions/mod/a.js") == stamped("A")
        assert await store.read_text("/", "/hooks/after_bot_mount/mod/mount.js") == stamped("mount")
        assert (project_dir / "assets" / "modules" / "mod" / "logo.svg").read_text() == "<svg/>"
