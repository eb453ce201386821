"""
Unit tests for storage layer.

Tests record formatting, appending and reading the log back.
"""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from rate_limit_guard.storage.log_file import default_log_path, format_record, resolve_log_path
from rate_limit_guard.storage.models import LimitWarningRecord
from rate_limit_guard.storage.repository import (
    LogRepository,
    append_record,
    append_records,
    read_records,
    summarize_records,
)


def _record(label="RATE LIMIT WARNING", payload="429", minute=0):
    return LimitWarningRecord(
        timestamp=datetime(2024, 1, 1, 12, minute, 0),
        label=label,
        payload=payload,
    )


class TestLogPaths:
    """Test log path resolution."""

    def test_default_log_path_follows_home(self):
        """Default path is resolved from HOME at call time."""
        with patch.dict(os.environ, {"HOME": "/home/someone"}):
            assert default_log_path() == Path("/home/someone/.claude/rate-limit.log")

    def test_resolve_expands_user(self):
        """User supplied paths are expanded."""
        with patch.dict(os.environ, {"HOME": "/home/someone"}):
            assert resolve_log_path("~/logs/x.log") == Path("/home/someone/logs/x.log")
            assert resolve_log_path(None) == default_log_path()


class TestFormatRecord:
    """Test the text layout of a record."""

    def test_layout(self):
        """Timestamp and label, input line and separator."""
        text = format_record(_record(payload="Error: 429 Too Many Requests"))
        assert text == (
            "[2024-01-01 12:00:00] RATE LIMIT WARNING\n"
            "Input: Error: 429 Too Many Requests\n"
            "---\n"
        )


class TestAppendAndRead:
    """Test appending records and parsing them back."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.log_path = Path(self.temp_dir) / "rate-limit.log"

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_missing_file_reads_empty(self):
        """No log yet means no records."""
        assert read_records(self.log_path) == []

    def test_append_creates_file(self):
        """First write creates the file."""
        append_record(_record(), self.log_path)
        assert self.log_path.exists()
        assert read_records(self.log_path) == [_record()]

    def test_append_keeps_order(self):
        """Records are read back oldest first."""
        records = [
            _record(minute=0),
            _record(label="USAGE WARNING", payload="maximum", minute=1),
        ]
        append_records(records, self.log_path)
        assert read_records(self.log_path) == records

    def test_append_empty_list_is_noop(self):
        """Nothing is written for no records."""
        append_records([], self.log_path)
        assert not self.log_path.exists()

    def test_missing_directory_raises(self):
        """The parent directory is never created."""
        log_path = Path(self.temp_dir) / "missing" / "rate-limit.log"
        with pytest.raises(OSError):
            append_record(_record(), log_path)
        assert not log_path.parent.exists()

    def test_payload_with_separator_line(self):
        """A '---' line inside a payload does not split the record."""
        records = [
            _record(payload="quota\n---\nstill the same payload"),
            _record(label="USAGE WARNING", payload="exceeded", minute=1),
        ]
        append_records(records, self.log_path)
        assert read_records(self.log_path) == records

    def test_skips_foreign_text(self):
        """Lines outside records are ignored."""
        self.log_path.write_text(
            "garbage line\n"
            "[2024-01-01 11:59:00] USAGE WARNING\n"
            "not an input line\n"
            "[2024-01-01 12:00:00] RATE LIMIT WARNING\n"
            "Input: 429\n"
            "---\n",
            encoding="utf-8",
        )
        assert read_records(self.log_path) == [_record()]

    def test_truncated_last_record(self):
        """A record missing its separator is still read."""
        self.log_path.write_text(
            "[2024-01-01 12:00:00] RATE LIMIT WARNING\n"
            "Input: 429\n",
            encoding="utf-8",
        )
        assert read_records(self.log_path) == [_record()]


class TestLogRepository:
    """Test repository filtering and summaries."""

    def setup_method(self):
        """Write a small log."""
        self.temp_dir = tempfile.mkdtemp()
        self.log_path = Path(self.temp_dir) / "rate-limit.log"
        append_records([
            _record(payload="429", minute=0),
            _record(label="USAGE WARNING", payload="maximum", minute=1),
            _record(payload="overloaded", minute=2),
        ], self.log_path)
        self.repository = LogRepository(str(self.log_path))

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_recent_records_newest_first(self):
        """Records come back newest first."""
        records = self.repository.get_recent_records()
        assert [r.payload for r in records] == ["overloaded", "maximum", "429"]

    def test_filter_by_label(self):
        """Label filter keeps one kind."""
        records = self.repository.get_recent_records(label="RATE LIMIT WARNING")
        assert [r.payload for r in records] == ["overloaded", "429"]

    def test_limit(self):
        """Limit caps the number of records."""
        records = self.repository.get_recent_records(limit=1)
        assert [r.payload for r in records] == ["overloaded"]

    def test_summary(self):
        """Summary counts per label and covers the time range."""
        stats = self.repository.get_summary()
        assert stats["total"] == 3
        assert stats["by_label"] == {"RATE LIMIT WARNING": 2, "USAGE WARNING": 1}
        assert stats["first"] == datetime(2024, 1, 1, 12, 0, 0)
        assert stats["last"] == datetime(2024, 1, 1, 12, 2, 0)

    def test_summary_of_missing_log(self):
        """Missing log summarizes to zero."""
        stats = LogRepository(str(Path(self.temp_dir) / "none.log")).get_summary()
        assert stats == {"total": 0, "by_label": {}, "first": None, "last": None}

    def test_summarize_records(self):
        """Counts keep first appearance order."""
        counts = summarize_records([_record(label="B"), _record(label="A"), _record(label="B")])
        assert list(counts.items()) == [("B", 2), ("A", 1)]
