"""
Tests for the switch orchestrator — switching, catalogue edits,
persistence failures, and the busy guard.
"""

import json
import os
import sys
from pathlib import Path

import pytest

from jswitch.adapters.mock import MemoryEnvironmentStore
from jswitch.adapters.system.env_file import PosixEnvironmentFileStore
from jswitch.core.engine.orchestrator import SwitchOrchestrator, SwitchPhase
from jswitch.core.models.catalogue import Catalogue
from jswitch.core.models.installation import Installation
from jswitch.core.models.settings import Settings
from jswitch.core.persistence.catalogue_file import load_catalogue, save_catalogue
from jswitch.core.services.discovery import InstallationDiscovery
from jswitch.core.services.environment import EnvironmentBinding, bin_dir_for

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake java is a shell script")


def _saved_paths(path: Path) -> list[str]:
    return [r["path"] for r in json.loads(path.read_text())["installations"]]


def _break_persistence(orchestrator: SwitchOrchestrator, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    orchestrator.catalogue_path = blocker / "catalogue.json"


# ── Switch ───────────────────────────────────────────────────────────


class TestSwitch:
    def test_no_selection(self, orchestrator, memory_store):
        result = orchestrator.switch_to(None)
        assert result.failed
        assert result.error_kind == "no_selection"
        assert orchestrator.phase == SwitchPhase.IDLE
        assert memory_store.writes() == []

    def test_switch_scenario(self, orchestrator, memory_store, make_jdk, catalogue_path):
        a = str(make_jdk("a"))
        b = str(make_jdk("b"))
        orchestrator.add(a)
        orchestrator.add(b)
        memory_store.values["JAVA_HOME"] = a
        orchestrator.refresh()
        record_a, record_b = orchestrator.catalogue.installations
        assert record_a.active and not record_b.active

        result = orchestrator.switch_to(record_b)

        assert result.ok
        assert result.installation is record_b
        assert orchestrator.phase == SwitchPhase.DONE
        assert memory_store.values["JAVA_HOME"] == b
        assert memory_store.values["PATH"].split(os.pathsep)[0] == bin_dir_for(b)
        assert os.environ["JAVA_HOME"] == b
        assert not record_a.active
        assert record_b.active

        saved = load_catalogue(catalogue_path)
        assert [r.active for r in saved.installations] == [False, True]
        assert not orchestrator.dirty

    def test_stale_entries_removed(self, orchestrator, memory_store, make_jdk):
        old = str(make_jdk("jdk-8"))
        new = str(make_jdk("jdk-17"))
        memory_store.values["PATH"] = os.pathsep.join(["/usr/bin", bin_dir_for(old), "/home/me/bin"])
        orchestrator.add(new)

        orchestrator.switch_to(orchestrator.catalogue.find(new))
        assert memory_store.values["PATH"].split(os.pathsep) == [
            bin_dir_for(new),
            "/usr/bin",
            "/home/me/bin",
        ]

    def test_switch_twice_same_path(self, orchestrator, memory_store, make_jdk):
        home = str(make_jdk("jdk-17"))
        orchestrator.add(home)
        record = orchestrator.catalogue.find(home)

        orchestrator.switch_to(record)
        first = memory_store.values["PATH"]
        orchestrator.switch_to(record)
        assert memory_store.values["PATH"] == first
        assert first.split(os.pathsep).count(bin_dir_for(home)) == 1

    def test_invalid_path(self, orchestrator, memory_store, tmp_path, catalogue_path):
        record = Installation(name="gone", path=str(tmp_path / "gone"))
        orchestrator.catalogue.installations.append(record)

        result = orchestrator.switch_to(record)

        assert result.failed
        assert result.error_kind == "invalid_path"
        assert "Invalid Java path" in result.message
        assert orchestrator.phase == SwitchPhase.FAILED
        assert memory_store.writes() == []
        assert not record.active
        assert not catalogue_path.exists()

    def test_target_write_fails(self, orchestrator, memory_store, make_jdk, catalogue_path):
        home = str(make_jdk("jdk-17"))
        orchestrator.catalogue.add(Installation(name="jdk-17", path=home))
        memory_store.fail_on_set.add("JAVA_HOME")

        result = orchestrator.switch_to(orchestrator.catalogue.find(home))

        assert result.failed
        assert result.error_kind == "environment_write"
        assert "partially" not in result.message
        assert orchestrator.phase == SwitchPhase.FAILED
        assert "PATH" not in [k for k, _ in memory_store.writes()]
        assert not catalogue_path.exists()

    def test_search_path_write_fails(self, orchestrator, memory_store, make_jdk, catalogue_path):
        home = str(make_jdk("jdk-17"))
        orchestrator.catalogue.add(Installation(name="jdk-17", path=home))
        memory_store.fail_on_set.add("PATH")

        result = orchestrator.switch_to(orchestrator.catalogue.find(home))

        assert result.failed
        assert result.error_kind == "environment_write"
        assert "partially switched" in result.message
        assert memory_store.values["JAVA_HOME"] == home
        assert not catalogue_path.exists()

    @posix_only
    def test_non_utf8_environment_file(self, make_jdk, validator, tmp_path):
        env_file = tmp_path / "environment"
        env_file.write_bytes(b"LANG=\xe9t\xe9\nPATH=\"/usr/bin\"\n")
        orchestrator = SwitchOrchestrator(
            binding=EnvironmentBinding(PosixEnvironmentFileStore(env_file)),
            validator=validator,
            discovery=InstallationDiscovery(validator, roots=[]),
        )
        home = str(make_jdk("jdk-17"))
        orchestrator.catalogue.add(Installation(name="jdk-17", path=home))

        result = orchestrator.switch_to(orchestrator.catalogue.find(home))

        assert result.ok
        lines = env_file.read_bytes().splitlines()
        assert lines[0] == b"LANG=\xe9t\xe9"
        assert f"JAVA_HOME={home}".encode() in lines
        assert orchestrator.binding.get_search_path() == [bin_dir_for(home), "/usr/bin"]

    def test_persist_fails(self, orchestrator, memory_store, make_jdk, tmp_path):
        home = str(make_jdk("jdk-17"))
        orchestrator.catalogue.add(Installation(name="jdk-17", path=home))
        _break_persistence(orchestrator, tmp_path)

        result = orchestrator.switch_to(orchestrator.catalogue.find(home))

        assert result.status == "partial"
        assert result.error_kind == "persistence"
        assert "not saved" in result.message
        assert orchestrator.phase == SwitchPhase.DONE
        assert memory_store.values["JAVA_HOME"] == home
        assert orchestrator.catalogue.find(home).active
        assert orchestrator.dirty

    def test_close_flushes_dirty(self, orchestrator, make_jdk, tmp_path):
        home = str(make_jdk("jdk-17"))
        orchestrator.catalogue.add(Installation(name="jdk-17", path=home))
        _break_persistence(orchestrator, tmp_path)
        orchestrator.switch_to(orchestrator.catalogue.find(home))

        assert orchestrator.close() is False

        orchestrator.catalogue_path = tmp_path / "fixed" / "catalogue.json"
        assert orchestrator.close() is True
        assert not orchestrator.dirty
        assert load_catalogue(orchestrator.catalogue_path).installations[0].active

    def test_close_when_clean(self, orchestrator, catalogue_path):
        assert orchestrator.close() is True
        assert not catalogue_path.exists()


# ── Add ──────────────────────────────────────────────────────────────


class TestAdd:
    def test_add(self, orchestrator, make_jdk, catalogue_path):
        home = make_jdk("temurin-17")
        result = orchestrator.add(str(home))

        assert result.ok
        assert result.added == 1
        assert result.installation.name == "temurin-17"
        assert result.installation.path == os.path.abspath(home)
        assert _saved_paths(catalogue_path) == [os.path.abspath(home)]

    @posix_only
    def test_add_probes_version(self, orchestrator, make_jdk):
        result = orchestrator.add(str(make_jdk("zulu-8", version="1.8.0_462")))
        assert result.installation.version == "1.8.0_462"
        assert result.installation.display_text == "zulu-8 (1.8.0_462)"

    def test_add_trailing_separator(self, orchestrator, make_jdk):
        home = make_jdk("jdk-21")
        result = orchestrator.add(str(home) + os.sep)
        assert result.installation.name == "jdk-21"

    def test_add_relative_path(self, orchestrator, make_jdk, tmp_path, monkeypatch):
        make_jdk("jdk-17", root=tmp_path / "jvm")
        monkeypatch.chdir(tmp_path)
        result = orchestrator.add("jvm/jdk-17")
        assert result.installation.path == os.path.abspath(tmp_path / "jvm" / "jdk-17")

    def test_add_duplicate(self, orchestrator, make_jdk):
        home = str(make_jdk("jdk-17"))
        orchestrator.add(home)
        result = orchestrator.add(home)

        assert result.status == "skipped"
        assert result.error_kind == "duplicate"
        assert "already exists" in result.message
        assert len(orchestrator.catalogue.installations) == 1

    def test_add_duplicate_other_case(self, orchestrator, make_jdk):
        home = str(make_jdk("jdk-17"))
        orchestrator.catalogue.add(Installation(name="jdk-17", path=home.upper()))
        result = orchestrator.add(home)
        assert result.error_kind == "duplicate"
        assert len(orchestrator.catalogue.installations) == 1

    def test_add_invalid(self, orchestrator, tmp_path, catalogue_path):
        (tmp_path / "empty").mkdir()
        result = orchestrator.add(str(tmp_path / "empty"))

        assert result.failed
        assert result.error_kind == "invalid_path"
        assert orchestrator.catalogue.installations == []
        assert not catalogue_path.exists()

    @pytest.mark.parametrize("path", [None, "", "   "])
    def test_add_blank(self, orchestrator, path):
        result = orchestrator.add(path)
        assert result.failed
        assert result.error_kind == "invalid_path"

    def test_add_marks_active(self, orchestrator, memory_store, make_jdk):
        home = str(make_jdk("jdk-17"))
        memory_store.values["JAVA_HOME"] = home
        result = orchestrator.add(home)
        assert result.installation.active

    def test_add_persist_fails(self, orchestrator, make_jdk, tmp_path):
        _break_persistence(orchestrator, tmp_path)
        result = orchestrator.add(str(make_jdk("jdk-17")))
        assert result.status == "partial"
        assert len(orchestrator.catalogue.installations) == 1
        assert orchestrator.dirty


# ── Remove ───────────────────────────────────────────────────────────


class TestRemove:
    def test_remove(self, orchestrator, make_jdk, catalogue_path):
        a = str(make_jdk("a"))
        b = str(make_jdk("b"))
        orchestrator.add(a)
        orchestrator.add(b)

        result = orchestrator.remove(orchestrator.catalogue.find(a))

        assert result.ok
        assert _saved_paths(catalogue_path) == [os.path.abspath(b)]

    def test_remove_clears_selection(self, orchestrator, make_jdk):
        orchestrator.add(str(make_jdk("jdk-17")))
        record = orchestrator.select("jdk-17")
        assert record is not None

        orchestrator.remove(record)
        assert orchestrator.selected is None

    def test_remove_keeps_other_selection(self, orchestrator, make_jdk):
        orchestrator.add(str(make_jdk("a")))
        orchestrator.add(str(make_jdk("b")))
        selected = orchestrator.select("b")

        orchestrator.remove(orchestrator.catalogue.find_by_name("a")[0])
        assert orchestrator.selected is selected

    def test_remove_none(self, orchestrator):
        result = orchestrator.remove(None)
        assert result.failed
        assert result.error_kind == "no_selection"

    def test_remove_unknown(self, orchestrator):
        result = orchestrator.remove(Installation(name="x", path="/x"))
        assert result.failed

    def test_remove_active_leaves_environment(self, orchestrator, memory_store, make_jdk):
        home = str(make_jdk("jdk-17"))
        orchestrator.add(home)
        orchestrator.switch_to(orchestrator.catalogue.find(home))
        memory_store.reset()

        orchestrator.remove(orchestrator.catalogue.find(home))
        assert memory_store.writes() == []
        assert memory_store.values["JAVA_HOME"] == home


# ── Scan / auto-detect ───────────────────────────────────────────────


class TestScan:
    def test_scan(self, orchestrator, make_jdk, tmp_path, catalogue_path):
        root = tmp_path / "jvm"
        make_jdk("jdk-17", root=root)
        make_jdk("jdk-21", root=root)
        (root / "docs").mkdir()

        result = orchestrator.scan(str(root))

        assert result.ok
        assert result.added == 2
        assert "added 2" in result.message
        assert [r.name for r in orchestrator.catalogue.installations] == ["jdk-17", "jdk-21"]
        assert len(_saved_paths(catalogue_path)) == 2

    def test_scan_skips_known(self, orchestrator, make_jdk, tmp_path):
        root = tmp_path / "jvm"
        known = make_jdk("jdk-17", root=root)
        make_jdk("jdk-21", root=root)
        orchestrator.add(str(known))

        result = orchestrator.scan(str(root))
        assert result.added == 1
        assert len(orchestrator.catalogue.installations) == 2

    def test_scan_nothing_new(self, orchestrator, tmp_path, catalogue_path):
        result = orchestrator.scan(str(tmp_path / "missing"))
        assert result.ok
        assert result.added == 0
        assert "No new" in result.message
        assert not catalogue_path.exists()

    def test_scan_blank(self, orchestrator):
        assert orchestrator.scan("").failed

    def test_auto_detect(self, orchestrator, make_jdk, tmp_path):
        first = tmp_path / "vendor-a"
        second = tmp_path / "vendor-b"
        make_jdk("jdk-11", root=first)
        make_jdk("jdk-17", root=second)
        orchestrator.discovery = InstallationDiscovery(
            orchestrator.validator, roots=[first, tmp_path / "missing", second]
        )

        result = orchestrator.auto_detect()
        assert result.added == 2
        assert "2 known" in result.message

        again = orchestrator.auto_detect()
        assert again.added == 0
        assert "No new" in again.message

    def test_auto_detect_refreshes_active(self, orchestrator, memory_store, make_jdk, tmp_path):
        root = tmp_path / "jvm"
        home = make_jdk("jdk-17", root=root)
        memory_store.values["JAVA_HOME"] = str(home)
        orchestrator.discovery = InstallationDiscovery(orchestrator.validator, roots=[root])

        orchestrator.auto_detect()
        assert orchestrator.catalogue.active_installation().name == "jdk-17"


# ── Session ──────────────────────────────────────────────────────────


class TestSession:
    def test_load(self, orchestrator, memory_store, catalogue_path):
        save_catalogue(
            Catalogue(
                installations=[
                    Installation(name="a", path="/opt/a", active=True),
                    Installation(name="b", path="/opt/b"),
                ]
            ),
            catalogue_path,
        )
        memory_store.values["JAVA_HOME"] = "/OPT/B"

        result = orchestrator.load()

        assert result.ok
        assert "2" in result.message
        assert [r.active for r in orchestrator.catalogue.installations] == [False, True]

    def test_load_missing_catalogue(self, orchestrator):
        assert orchestrator.load().ok
        assert orchestrator.catalogue.installations == []

    def test_refresh_message(self, orchestrator, memory_store):
        assert "not set" in orchestrator.refresh().message
        memory_store.values["JAVA_HOME"] = "/opt/jdk"
        assert "/opt/jdk" in orchestrator.refresh().message

    def test_select(self, orchestrator, make_jdk):
        home = str(make_jdk("jdk-17"))
        orchestrator.add(home)
        assert orchestrator.select("JDK-17").path == os.path.abspath(home)
        assert orchestrator.select(home).name == "jdk-17"
        assert orchestrator.select("nope") is None
        assert orchestrator.select(None) is None

    def test_busy_guard(self, orchestrator, make_jdk):
        orchestrator.busy = True
        result = orchestrator.add(str(make_jdk("jdk-17")))
        assert result.failed
        assert result.error_kind == "busy"
        assert orchestrator.catalogue.installations == []

    def test_busy_released(self, orchestrator, make_jdk):
        orchestrator.add(str(make_jdk("jdk-17")))
        assert orchestrator.busy is False
        orchestrator.switch_to(None)
        assert orchestrator.busy is False

    def test_from_settings(self, tmp_path):
        settings = Settings(store="memory", catalogue_path=str(tmp_path / "c.json"))
        store = MemoryEnvironmentStore()
        orchestrator = SwitchOrchestrator.from_settings(settings, store)
        assert orchestrator.catalogue_path == tmp_path / "c.json"
        assert orchestrator.binding.store is store
        assert orchestrator.binding.variable == "JAVA_HOME"

    def test_from_settings_without_persist(self, make_jdk, tmp_path):
        path = tmp_path / "c.json"
        save_catalogue(Catalogue(installations=[Installation(name="old", path="/opt/old")]), path)
        before = path.read_text()

        settings = Settings(store="memory", catalogue_path=str(path))
        orchestrator = SwitchOrchestrator.from_settings(settings, MemoryEnvironmentStore(), persist=False)
        orchestrator.load()
        assert orchestrator.catalogue.installations[0].name == "old"

        orchestrator.add(str(make_jdk("jdk-17")))
        assert orchestrator.close()
        assert path.read_text() == before
