"""Tests for the sync engine."""

import logging
import os
from pathlib import Path, PurePosixPath

import pytest

from ccsync.exceptions import SyncSourceError
from ccsync.filesystem import MemoryFileSystem, RealFileSystem
from ccsync.sync import SyncAction, SyncEngine

SOURCE = PurePosixPath("/home/me/.claude/projects")
DEST = PurePosixPath("/repo/.claude/ccss_sessions")

# Clock far in the future: a copy that did not get its timestamp adjusted
# would look newer than any source file.
FUTURE_NS = 4_000_000_000 * 10**9


def _actions(report):
    return [(d.relative_path, d.action) for d in report.decisions]


@pytest.fixture
def fs():
    """Create an in-memory filesystem with empty source and destination."""
    fs = MemoryFileSystem(clock=lambda: FUTURE_NS)
    fs.add_directory(SOURCE)
    fs.add_directory(DEST)
    return fs


@pytest.fixture
def engine(fs):
    return SyncEngine(fs)


class TestScenarios:
    """End-to-end scenarios on the in-memory filesystem."""

    def test_new_file_is_copied(self, fs, engine):
        """A missing destination file is copied with the source mtime."""
        fs.add_file(SOURCE / "-Users-yuta-project" / "session.json", b"{}", 200)

        report = engine.sync(SOURCE, DEST)

        assert _actions(report) == [
            ("-Users-yuta-project/session.json", SyncAction.COPY)
        ]
        copied = fs.get_file(DEST / "Users" / "yuta" / "project" / "session.json")
        assert copied.content == b"{}"
        assert copied.mtime_ns == 200
        assert report.finalized

    def test_equal_timestamps_are_skipped(self, fs, engine):
        """Equal modification times mean the destination is left alone."""
        fs.add_file(SOURCE / "-Users-yuta-project" / "session.json", b"new", 200)
        fs.add_file(DEST / "Users/yuta/project/session.json", b"old", 200)

        report = engine.sync(SOURCE, DEST)

        assert _actions(report) == [
            ("-Users-yuta-project/session.json", SyncAction.SKIP)
        ]
        unchanged = fs.get_file(DEST / "Users/yuta/project/session.json")
        assert unchanged.content == b"old"
        assert unchanged.mtime_ns == 200
        assert fs.mutations == []

    def test_older_source_is_skipped(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "f.json", b"new", 100)
        fs.add_file(DEST / "p" / "f.json", b"old", 200)

        report = engine.sync(SOURCE, DEST)

        assert report.counts == {"copy": 0, "skip": 1, "fail": 0}

    def test_newer_source_overwrites(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "f.json", b"new", 300)
        fs.add_file(DEST / "p" / "f.json", b"old", 200)

        report = engine.sync(SOURCE, DEST)

        assert report.copied[0].reason == "Source file is newer"
        assert fs.get_file(DEST / "p" / "f.json").content == b"new"
        assert fs.get_file(DEST / "p" / "f.json").mtime_ns == 300

    def test_deeper_segments_are_copied_verbatim(self, fs, engine):
        """Only the project directory name is decoded."""
        fs.add_file(SOURCE / "-Users-me-app" / "sub-dir" / "a-b.json", b"x", 1)

        engine.sync(SOURCE, DEST)

        assert fs.get_file(DEST / "Users/me/app/sub-dir/a-b.json") is not None

    def test_consecutive_separators(self, fs, engine):
        """Empty segments from consecutive separators do not appear in paths."""
        fs.add_file(SOURCE / "-home-me--config" / "f.json", b"x", 1)

        engine.sync(SOURCE, DEST)

        assert fs.get_file(DEST / "home/me/config/f.json") is not None

    def test_empty_source(self, engine):
        report = engine.sync(SOURCE, DEST)

        assert report.decisions == ()
        assert not report.has_failures


class TestProperties:
    """Properties that hold for every run."""

    @pytest.fixture
    def populated(self, fs):
        fs.add_file(SOURCE / "-Users-me-a" / "s1.jsonl", b"one", 100)
        fs.add_file(SOURCE / "-Users-me-a" / "nested" / "s2.jsonl", b"two", 150)
        fs.add_file(SOURCE / "-Users-me-b" / "s3.jsonl", b"three", 120)
        return fs

    def test_idempotent(self, populated, engine):
        """A second run without source changes copies nothing."""
        first = engine.sync(SOURCE, DEST)
        second = engine.sync(SOURCE, DEST)

        assert len(first.copied) == 3
        assert second.counts == {"copy": 0, "skip": 3, "fail": 0}

    def test_monotonic_freshness(self, populated, engine):
        """Only the file whose mtime increased is copied again."""
        engine.sync(SOURCE, DEST)
        populated.add_file(SOURCE / "-Users-me-b" / "s3.jsonl", b"three!", 121)

        report = engine.sync(SOURCE, DEST)

        assert [d.relative_path for d in report.copied] == ["-Users-me-b/s3.jsonl"]
        assert len(report.skipped) == 2
        assert populated.get_file(DEST / "Users/me/b/s3.jsonl").content == b"three!"

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_source_is_never_mutated(self, populated, engine, dry_run):
        before = populated.snapshot(SOURCE)

        engine.sync(SOURCE, DEST, dry_run=dry_run)

        assert populated.snapshot(SOURCE) == before
        for path in populated.mutated_paths():
            assert SOURCE not in path.parents

    def test_partial_failure_isolation(self, fs, engine):
        """One unreadable file yields one failure; the rest still sync."""
        for i in range(5):
            fs.add_file(SOURCE / "-p" / f"f{i}.json", f"{i}".encode(), 10)
        fs.fail_read(SOURCE / "-p" / "f2.json")

        report = engine.sync(SOURCE, DEST)

        assert [d.relative_path for d in report.failed] == ["-p/f2.json"]
        assert "simulated" in report.failed[0].reason
        assert len(report.copied) == 4
        assert fs.get_file(DEST / "p" / "f2.json") is None
        assert fs.get_file(DEST / "p" / "f4.json").content == b"4"

    def test_dry_run_equivalence(self, populated, engine):
        """A dry run decides exactly what the real run then does."""
        populated.add_file(DEST / "Users/me/a/s1.jsonl", b"one", 100)

        preview = engine.sync(SOURCE, DEST, dry_run=True)
        assert populated.mutations == []
        assert populated.snapshot(DEST) == {
            str(DEST / "Users/me/a/s1.jsonl"): (b"one", 100)
        }

        real = engine.sync(SOURCE, DEST)

        assert _actions(preview) == _actions(real)
        assert preview.dry_run and not real.dry_run
        assert len(real.copied) == 2
        assert populated.get_file(DEST / "Users/me/a/nested/s2.jsonl") is not None


class TestDirectories:
    """Tests for lazy destination directory creation."""

    def test_creates_missing_parents_and_counts_them(self, fs, engine):
        fs.add_file(SOURCE / "-Users-yuta-project" / "a.json", b"a", 1)
        fs.add_file(SOURCE / "-Users-yuta-project" / "b.json", b"b", 1)

        report = engine.sync(SOURCE, DEST)

        assert report.directories_created == 3
        assert fs.is_dir(DEST / "Users/yuta/project")

    def test_empty_source_directories_are_not_created(self, fs, engine):
        fs.add_directory(SOURCE / "-p" / "empty")
        fs.add_file(SOURCE / "-q" / "f.json", b"x", 1)

        report = engine.sync(SOURCE, DEST)

        assert not fs.exists(DEST / "p")
        assert report.directories_created == 1

    def test_dry_run_creates_nothing(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)

        report = engine.sync(SOURCE, DEST, dry_run=True)

        assert report.directories_created == 0
        assert not fs.exists(DEST / "p")

    def test_existing_directories_not_counted(self, fs, engine):
        fs.add_directory(DEST / "p")
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)

        report = engine.sync(SOURCE, DEST)

        assert report.directories_created == 0


class TestErrors:
    """Tests for error handling."""

    def test_missing_source_root_is_fatal(self, engine):
        with pytest.raises(SyncSourceError, match="Cannot list source root"):
            engine.sync(SOURCE / "missing", DEST)

    def test_source_root_file_is_fatal(self, fs, engine):
        fs.add_file("/not-a-dir", b"", 0)

        with pytest.raises(SyncSourceError):
            engine.sync("/not-a-dir", DEST)

    def test_non_directory_top_level_entry_is_a_warning(self, fs, engine):
        fs.add_file(SOURCE / "notes.txt", b"x", 1)
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)

        report = engine.sync(SOURCE, DEST)

        assert [(w.path, w.message) for w in report.warnings] == [
            (SOURCE / "notes.txt", "Not a project directory")
        ]
        assert _actions(report) == [("-p/f.json", SyncAction.COPY)]
        assert not report.has_failures

    def test_unlistable_subdirectory_fails_and_continues(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "locked" / "a.json", b"x", 1)
        fs.add_file(SOURCE / "-p" / "open" / "b.json", b"x", 1)
        fs.deny(SOURCE / "-p" / "locked")

        report = engine.sync(SOURCE, DEST)

        assert _actions(report) == [
            ("-p/locked", SyncAction.FAIL),
            ("-p/open/b.json", SyncAction.COPY),
        ]
        assert "Cannot list directory" in report.failed[0].reason

    def test_write_failure_is_recorded(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)
        fs.add_file(SOURCE / "-q" / "g.json", b"y", 1)
        fs.fail_write(DEST / "p")

        report = engine.sync(SOURCE, DEST)

        assert _actions(report) == [
            ("-p/f.json", SyncAction.FAIL),
            ("-q/g.json", SyncAction.COPY),
        ]
        assert report.failed[0].destination_path == DEST / "p" / "f.json"

    def test_destination_directory_in_the_way(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)
        fs.add_directory(DEST / "p" / "f.json")

        report = engine.sync(SOURCE, DEST)

        assert _actions(report) == [("-p/f.json", SyncAction.FAIL)]

    def test_destination_parent_is_a_file(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "sub" / "f.json", b"x", 1)
        fs.add_file(DEST / "p" / "sub", b"blocking file", 1)

        report = engine.sync(SOURCE, DEST)

        assert _actions(report) == [("-p/sub/f.json", SyncAction.FAIL)]
        assert fs.get_file(DEST / "p" / "sub").content == b"blocking file"

    def test_failures_are_not_logged_as_warnings(self, fs, engine, caplog):
        """Failures live in the report; the log only repeats them at INFO."""
        fs.add_file(SOURCE / "notes.txt", b"x", 1)
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)
        fs.fail_read(SOURCE / "-p" / "f.json")

        with caplog.at_level(logging.INFO, logger="ccsync"):
            report = engine.sync(SOURCE, DEST)

        assert report.has_failures
        assert "Failed -p/f.json" in caplog.text
        assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []

    def test_refuses_to_write_inside_source(self, fs):
        """A destination inside the source root is never written to."""
        root = PurePosixPath("/data")
        fs.add_file(root / "-p" / "f.json", b"x", 1)
        fs.add_directory(root / "out")
        before = fs.snapshot(root)

        report = SyncEngine(fs).sync(root, root / "out")

        assert _actions(report) == [("-p/f.json", SyncAction.FAIL)]
        assert "Refusing to write inside source root" in report.failed[0].reason
        assert fs.snapshot(root) == before
        assert fs.mutations == []


class TestOptions:
    """Tests for project filtering and decision callbacks."""

    def test_projects_filter(self, fs, engine):
        fs.add_file(SOURCE / "-a" / "f.json", b"x", 1)
        fs.add_file(SOURCE / "-b" / "g.json", b"y", 1)

        report = engine.sync(SOURCE, DEST, projects={"-b"})

        assert _actions(report) == [("-b/g.json", SyncAction.COPY)]
        assert not fs.exists(DEST / "a")

    def test_projects_filter_hides_warnings_for_other_entries(self, fs, engine):
        fs.add_file(SOURCE / "notes.txt", b"x", 1)

        report = engine.sync(SOURCE, DEST, projects={"-b"})

        assert report.warnings == ()

    def test_on_decision_called_in_order(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "a.json", b"x", 1)
        fs.add_file(SOURCE / "-p" / "b.json", b"y", 1)
        seen = []

        report = engine.sync(SOURCE, DEST, on_decision=seen.append)

        assert seen == list(report.decisions)

    def test_accepts_string_roots(self, fs, engine):
        fs.add_file(SOURCE / "-p" / "f.json", b"x", 1)

        report = engine.sync(str(SOURCE), str(DEST))

        assert len(report.copied) == 1


class TestRealFileSystemSync:
    """Integration test against the host filesystem."""

    def test_copy_then_skip(self, tmp_path):
        source = tmp_path / "projects"
        project = source / "-Users-me-app"
        (project / "sub").mkdir(parents=True)
        (project / "session.jsonl").write_bytes(b'{"type": "user"}\n')
        (project / "sub" / "tool.json").write_bytes(b"{}")
        os.utime(project / "session.jsonl", ns=(1_600_000_000_000_000_000,) * 2)
        destination = tmp_path / "repo" / ".claude" / "ccss_sessions"
        destination.mkdir(parents=True)
        engine = SyncEngine(RealFileSystem())

        first = engine.sync(source, destination)

        copied = destination / "Users" / "me" / "app" / "session.jsonl"
        assert len(first.copied) == 2
        assert copied.read_bytes() == b'{"type": "user"}\n'
        assert (
            copied.stat().st_mtime_ns
            == (project / "session.jsonl").stat().st_mtime_ns
        )
        assert (destination / "Users/me/app/sub/tool.json").read_bytes() == b"{}"

        second = engine.sync(source, destination)

        assert second.counts == {"copy": 0, "skip": 2, "fail": 0}
        assert isinstance(first.decisions[0].source_path, Path)

    def test_symlinked_directory_loop_is_not_followed(self, tmp_path):
        source = tmp_path / "projects"
        project = source / "-Users-me-app"
        project.mkdir(parents=True)
        (project / "f.json").write_bytes(b"{}")
        (project / "loop").symlink_to(".")
        destination = tmp_path / "repo"
        destination.mkdir()

        report = SyncEngine(RealFileSystem()).sync(source, destination)

        assert report.counts == {"copy": 1, "skip": 0, "fail": 0}
        assert not (destination / "Users" / "me" / "app" / "loop").exists()

    def test_dry_run_matches_memory_when_parent_is_a_file(self, tmp_path):
        """Both filesystems preview the same decisions for a blocked path."""
        source = tmp_path / "projects"
        (source / "-p" / "sub").mkdir(parents=True)
        (source / "-p" / "sub" / "f.json").write_bytes(b"x")
        destination = tmp_path / "repo"
        (destination / "p").mkdir(parents=True)
        (destination / "p" / "sub").write_bytes(b"blocking file")

        memory = MemoryFileSystem()
        memory.add_file(SOURCE / "-p" / "sub" / "f.json", b"x", 1)
        memory.add_file(DEST / "p" / "sub", b"blocking file", 1)

        real_report = SyncEngine(RealFileSystem()).sync(
            source, destination, dry_run=True
        )
        memory_report = SyncEngine(memory).sync(SOURCE, DEST, dry_run=True)

        assert _actions(real_report) == _actions(memory_report)
        assert _actions(real_report) == [("-p/sub/f.json", SyncAction.COPY)]
