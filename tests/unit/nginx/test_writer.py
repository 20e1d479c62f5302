"""Tests for change-gated configuration writes."""

from pathlib import Path
from typing import Any

import pytest

from synthproxy.nginx import ChangeGatedWriter, strip_header

CHECK = "nginx -t"


def _document(timestamp: str, body: str = "events {\n\tworker_connections 1024;\n}\n") -> str:
    return f"# auto-generated by synthproxy at {timestamp}\n\n{body}"


@pytest.fixture
def writer(config_path: Path, logger: Any, runner: Any) -> ChangeGatedWriter:
    return ChangeGatedWriter(config_path, CHECK, logger=logger, runner=runner)


class TestStripHeader:
    def test_drops_first_line(self) -> None:
        assert strip_header("header\nline 1\nline 2") == "line 1\nline 2"

    def test_document_without_newline_is_all_header(self) -> None:
        assert strip_header("header only") == ""

    def test_empty_document(self) -> None:
        assert strip_header("") == ""


class TestChangeGatedWriter:
    def test_missing_file_counts_as_empty(
        self, writer: ChangeGatedWriter, config_path: Path, runner: Any, events: Any
    ) -> None:
        document = _document("t1")

        assert writer.write(document) is True
        assert config_path.read_text() == document
        assert runner.calls == [CHECK]
        assert "config_file_missing" in events("info")

    def test_only_header_changed_is_not_a_change(
        self, writer: ChangeGatedWriter, config_path: Path, runner: Any
    ) -> None:
        first = _document("t1")
        _ = writer.write(first)

        assert writer.write(_document("t2")) is False
        assert runner.count(CHECK) == 1
        # The file keeps the original timestamp
        assert config_path.read_text() == first

    def test_body_change_rewrites_and_checks(
        self, writer: ChangeGatedWriter, config_path: Path, runner: Any
    ) -> None:
        _ = writer.write(_document("t1"))
        changed = _document("t2", body="events {\n\tworker_connections 2048;\n}\n")

        assert writer.write(changed) is True
        assert config_path.read_text() == changed
        assert runner.count(CHECK) == 2

    def test_failed_check_reports_unchanged_but_keeps_file(
        self, writer: ChangeGatedWriter, config_path: Path, runner: Any, events: Any
    ) -> None:
        runner.failing.add(CHECK)
        document = _document("t1", body="this is not nginx\n")

        assert writer.write(document) is False
        # The invalid document stays on disk; no rollback happens
        assert config_path.read_text() == document
        assert "config_check_failed" in events("error")

    def test_rewrite_after_failed_check_is_not_repeated(
        self, writer: ChangeGatedWriter, runner: Any
    ) -> None:
        runner.failing.add(CHECK)
        _ = writer.write(_document("t1", body="broken\n"))

        # Same body: the on-disk file already matches, nothing to check
        assert writer.write(_document("t2", body="broken\n")) is False
        assert runner.count(CHECK) == 1

    def test_compares_against_existing_file(
        self, writer: ChangeGatedWriter, config_path: Path, runner: Any
    ) -> None:
        config_path.parent.mkdir(parents=True)
        _ = config_path.write_text(_document("written by a previous process"))

        assert writer.write(_document("now")) is False
        assert runner.calls == []

    def test_io_failure_is_logged_not_raised(
        self, tmp_path: Path, logger: Any, runner: Any, events: Any
    ) -> None:
        blocker = tmp_path / "not-a-directory"
        _ = blocker.write_text("")
        writer = ChangeGatedWriter(blocker / "nginx.conf", CHECK, logger=logger, runner=runner)

        assert writer.write(_document("t1")) is False
        assert runner.calls == []
        assert events("error")

    def test_no_temporary_files_left_behind(self, writer: ChangeGatedWriter, config_path: Path) -> None:
        _ = writer.write(_document("t1"))

        assert [p.name for p in config_path.parent.iterdir()] == [config_path.name]
