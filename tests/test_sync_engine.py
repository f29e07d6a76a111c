"""Unit tests for the sync engine."""

from unittest.mock import MagicMock

import pytest

from pycities.exceptions import ErrorKind, NeocitiesAPIError
from pycities.output import OutputFormatter
from pycities.sync.comparator import SyncDecision
from pycities.sync.engine import SyncEngine
from pycities.sync.operations import SyncOperations
from pycities.sync.scanner import Entry, FileInfo

from conftest import FakeStore


@pytest.fixture
def output():
    return OutputFormatter(quiet=True)


def call_kinds(store):
    return [call[0] for call in store.calls]


class TestDeploy:
    """Tests for SyncEngine.deploy."""

    def test_deploy_to_empty_site(self, site_dir, output):
        store = FakeStore()
        stats = SyncEngine(store, output).deploy(site_dir)

        assert stats == {"uploads": 3, "deletes": 0, "errors": 0}
        assert store.files == {
            "hello": b"Hello, world!",
            "hello.txt": b"Hello, world!",
            "subdir/goodbye": b"Goodbye, world!",
        }
        # empty local directories are not created remotely
        assert store.dirs == {"subdir"}

    def test_second_deploy_is_a_no_op(self, site_dir, output):
        store = FakeStore()
        engine = SyncEngine(store, output)
        engine.deploy(site_dir)
        store.calls.clear()

        stats = engine.deploy(site_dir)

        assert stats == {"uploads": 0, "deletes": 0, "errors": 0}
        assert store.calls == [("list",)]

    def test_deletes_remote_only_entries(self, site_dir, output):
        store = FakeStore(
            files={
                "hello": b"Hello, world!",
                "hello.txt": b"Hello, world!",
                "subdir/goodbye": b"Goodbye, world!",
                "old/a.html": b"a",
                "old/b.html": b"b",
            }
        )

        stats = SyncEngine(store, output).deploy(site_dir)

        assert stats["deletes"] == 1
        assert ("delete", ["old"]) in store.calls
        assert "old" not in store.dirs
        assert "old/a.html" not in store.files

    def test_changed_file_is_uploaded(self, site_dir, output):
        store = FakeStore(
            files={
                "hello": b"Hello, world!",
                "hello.txt": b"Hello, world?",
                "subdir/goodbye": b"Goodbye, world!",
            }
        )
        store.dirs.add("empty")

        SyncEngine(store, output).deploy(site_dir)

        assert store.calls[1:] == [("upload", "hello.txt", b"Hello, world!")]

    def test_free_account_deletes_disallowed_files(self, site_dir, output):
        store = FakeStore(
            files={
                "hello": b"Hello, world!",
                "hello.txt": b"Hello, world!",
            }
        )

        SyncEngine(store, output).deploy(site_dir, free_account=True)

        assert "hello" not in store.files
        assert ("delete", ["hello"]) in store.calls

    def test_remote_directory_replaced_by_file(self, tmp_path, output):
        (tmp_path / "page").write_text("now a file")
        store = FakeStore(dirs={"page"})

        SyncEngine(store, output).deploy(tmp_path)

        assert store.calls[1:] == [
            ("delete", ["page"]),
            ("upload", "page", b"now a file"),
        ]
        assert store.files == {"page": b"now a file"}

    def test_remote_directory_with_contents_replaced_by_file(self, tmp_path, output):
        """Children follow the upload in the plan, so their deletion is kept and fails."""
        (tmp_path / "page").write_text("now a file")
        store = FakeStore(files={"page/index.html": b"x"})

        stats = SyncEngine(store, output).deploy(tmp_path, ignore_errors=True)

        assert store.calls[1:] == [
            ("delete", ["page"]),
            ("upload", "page", b"now a file"),
            ("delete", ["page/index.html"]),
        ]
        assert stats["errors"] == 1
        assert store.files == {"page": b"now a file"}

    def test_remote_file_replaced_by_directory(self, tmp_path, output):
        (tmp_path / "page").mkdir()
        (tmp_path / "page" / "index.html").write_text("inside")
        store = FakeStore(files={"page": b"was a file"})

        SyncEngine(store, output).deploy(tmp_path)

        assert store.calls[1:] == [
            ("delete", ["page"]),
            ("upload", "page/index.html", b"inside"),
        ]

    def test_dry_run_changes_nothing(self, site_dir, output):
        store = FakeStore(files={"old.html": b"x"})

        stats = SyncEngine(store, output).deploy(site_dir, dry_run=True)

        assert stats == {"uploads": 3, "deletes": 1, "errors": 0}
        assert store.calls == [("list",)]
        assert store.files == {"old.html": b"x"}

    def test_local_error_stops_before_listing(self, tmp_path, output):
        store = FakeStore()
        with pytest.raises(FileNotFoundError):
            SyncEngine(store, output).deploy(tmp_path / "missing")
        assert store.calls == []

    def test_list_error_propagates(self, site_dir, output):
        store = MagicMock()
        store.list.side_effect = NeocitiesAPIError("nope", ErrorKind.INVALID_AUTH)
        with pytest.raises(NeocitiesAPIError):
            SyncEngine(store, output).deploy(site_dir)
        store.upload.assert_not_called()


class TestIgnoreErrors:
    """Tests for continuing past failed actions."""

    def test_failure_aborts_by_default(self, site_dir, output):
        store = FakeStore()
        store.fail_on.add("hello.txt")

        with pytest.raises(NeocitiesAPIError) as exc_info:
            SyncEngine(store, output).deploy(site_dir)

        assert exc_info.value.kind == ErrorKind.INVALID_FILE_TYPE
        # "hello" was uploaded before, "subdir/goodbye" never attempted
        assert set(store.files) == {"hello"}

    def test_failure_is_skipped_with_ignore_errors(self, site_dir, output):
        store = FakeStore()
        store.fail_on.add("hello.txt")

        stats = SyncEngine(store, output).deploy(site_dir, ignore_errors=True)

        assert stats["errors"] == 1
        assert set(store.files) == {"hello", "subdir/goodbye"}

    def test_failed_delete_with_ignore_errors(self, tmp_path, output):
        store = FakeStore(files={"a.html": b"a", "b.html": b"b"})
        store.fail_on.add("a.html")

        stats = SyncEngine(store, output).deploy(tmp_path, ignore_errors=True)

        assert stats == {"uploads": 0, "deletes": 2, "errors": 1}
        assert store.files == {"a.html": b"a"}

    def test_failures_are_reported(self, site_dir, capsys):
        store = FakeStore()
        store.fail_on.add("hello.txt")

        SyncEngine(store, OutputFormatter()).deploy(site_dir, ignore_errors=True)

        err = capsys.readouterr().err
        assert "Error: Failed to upload hello.txt" in err
        assert "file type not allowed" in err


class TestExecute:
    """Tests for SyncEngine.execute and SyncOperations."""

    def test_upload_reads_current_contents(self, tmp_path, output):
        path = tmp_path / "page.html"
        path.write_text("old")
        entry = Entry("page.html", FileInfo(3, "0" * 40), path)
        path.write_text("changed after scanning")
        store = FakeStore()

        errors = SyncEngine(store, output).execute([SyncDecision.upload(entry)])

        assert errors == 0
        assert store.files == {"page.html": b"changed after scanning"}

    def test_vanished_local_file(self, tmp_path, output):
        entry = Entry("gone.html", FileInfo(3, "0" * 40), tmp_path / "gone.html")
        engine = SyncEngine(FakeStore(), output)

        with pytest.raises(FileNotFoundError):
            engine.execute([SyncDecision.upload(entry)])
        assert engine.execute([SyncDecision.upload(entry)], ignore_errors=True) == 1

    def test_upload_without_local_path(self):
        ops = SyncOperations(FakeStore())
        with pytest.raises(ValueError):
            ops.upload_file(Entry("x.html", FileInfo(1, "0" * 40)))

    def test_delete_passes_single_path(self):
        store = MagicMock()
        SyncOperations(store).apply(SyncDecision.delete_remote(Entry("dir")))
        store.delete.assert_called_once_with(["dir"])


class TestOutput:
    """Tests for what deploy prints."""

    def test_up_to_date(self, tmp_path, capsys):
        SyncEngine(FakeStore(), OutputFormatter()).deploy(tmp_path)
        assert "Site is up to date" in capsys.readouterr().out

    def test_dry_run_lists_actions(self, tmp_path, capsys):
        (tmp_path / "new.html").write_text("x")
        store = FakeStore(files={"old.html": b"x"})

        SyncEngine(store, OutputFormatter()).deploy(tmp_path, dry_run=True)

        out = capsys.readouterr().out
        assert "upload new.html (New local file)" in out
        assert "delete remote old.html (Deleted locally)" in out
        assert "Dry run summary" in out

    def test_quiet_prints_nothing(self, site_dir, capsys):
        SyncEngine(FakeStore(), OutputFormatter(quiet=True)).deploy(site_dir)
        assert capsys.readouterr().out == ""
