"""Tests for pgok.runner — explain, fetch, map and render."""

from __future__ import annotations

import io
import json

import psycopg2
import pytest

from conftest import FakeConnection, make_args

from pgok import runner
from pgok.commands.index.invalid import IndexInvalidCommand
from pgok.commands.index.size import IndexSizeCommand
from pgok.runner import QueryError, RowDecodeError, fetch_records, render_records, run_command

SIZE_ROWS = [
    ("public", "orders", "orders_created_idx", "16 MB", 16777216),
    ("public", "users", "users_email_idx", "8192 bytes", 8192),
]


@pytest.fixture
def fake_connect(monkeypatch):
    """Patch runner.connect; returns the list of (target, timeout, conn) calls."""
    calls = []

    def install(rows=None, error=None):
        def _connect(target, aliases=None, timeout=None):
            conn = FakeConnection(rows, error)
            calls.append((target, timeout, conn))
            return conn

        monkeypatch.setattr(runner, "connect", _connect)
        return calls

    return install


class TestRunCommand:
    def test_explain_never_connects(self, fake_connect, empty_aliases):
        calls = fake_connect()
        out = io.StringIO()
        records = run_command(
            IndexSizeCommand(), make_args(explain=True, size_min=0), empty_aliases, out=out
        )
        assert records == []
        assert calls == []
        assert "SQL QUERY" in out.getvalue()

    def test_table_output(self, fake_connect, empty_aliases):
        fake_connect(SIZE_ROWS)
        out = io.StringIO()
        records = run_command(IndexSizeCommand(), make_args(db="prod", size_min=0), empty_aliases, out=out)
        assert len(records) == 2
        text = out.getvalue()
        assert text.startswith("Analyzing index sizes in database `prod`")
        assert "orders_created_idx" in text

    def test_json_output(self, fake_connect, empty_aliases):
        fake_connect(SIZE_ROWS)
        out = io.StringIO()
        run_command(IndexSizeCommand(), make_args(output="json", size_min=0), empty_aliases, out=out)
        data = json.loads(out.getvalue())
        assert [d["index"] for d in data] == ["orders_created_idx", "users_email_idx"]
        assert data[1]["size_bytes"] == 8192

    def test_json_empty_is_array(self, fake_connect, empty_aliases):
        fake_connect([])
        out = io.StringIO()
        run_command(IndexSizeCommand(), make_args(output="json", size_min=0), empty_aliases, out=out)
        assert json.loads(out.getvalue()) == []

    def test_params_and_timeout_are_passed(self, fake_connect, empty_aliases):
        calls = fake_connect([])
        args = make_args(db="prod", schema="app", size_min=1024, timeout=5.0)
        run_command(IndexSizeCommand(), args, empty_aliases, out=io.StringIO())
        target, timeout, conn = calls[0]
        assert (target, timeout) == ("prod", 5.0)
        _query, params = conn.cursor_obj.executed[0]
        assert params == {"schema": "app", "size_min": 1024}

    def test_connection_closed_after_success(self, fake_connect, empty_aliases):
        calls = fake_connect([])
        run_command(IndexSizeCommand(), make_args(size_min=0), empty_aliases, out=io.StringIO())
        assert calls[0][2].closed

    def test_connection_closed_after_query_error(self, fake_connect, empty_aliases):
        calls = fake_connect(error=psycopg2.ProgrammingError("relation does not exist"))
        with pytest.raises(QueryError, match="relation does not exist"):
            run_command(IndexSizeCommand(), make_args(size_min=0), empty_aliases, out=io.StringIO())
        assert calls[0][2].closed

    def test_nothing_printed_on_failure(self, fake_connect, empty_aliases):
        fake_connect([("public", "orders")])
        out = io.StringIO()
        with pytest.raises(RowDecodeError):
            run_command(IndexSizeCommand(), make_args(size_min=0), empty_aliases, out=out)
        assert out.getvalue() == ""


class TestFetchRecords:
    def test_filtered_rows_are_skipped(self):
        conn = FakeConnection(
            [
                ("public", "t", "ok_idx", True, True),
                ("public", "t", "broken_idx", False, True),
            ]
        )
        records = fetch_records(conn, IndexInvalidCommand(), {"schema": "*"})
        assert [r.index_name for r in records] == ["broken_idx"]

    def test_row_decode_error_names_the_row(self):
        conn = FakeConnection([("public", "orders")])
        with pytest.raises(RowDecodeError) as exc_info:
            fetch_records(conn, IndexSizeCommand(), {"schema": "*", "size_min": 0})
        assert "ValueError" in str(exc_info.value)
        assert "'orders'" in str(exc_info.value)

    def test_non_database_errors_propagate(self):
        conn = FakeConnection(error=RuntimeError("boom"))
        with pytest.raises(RuntimeError, match="boom"):
            fetch_records(conn, IndexSizeCommand(), {"schema": "*", "size_min": 0})


class TestRenderRecords:
    def test_unknown_format(self):
        with pytest.raises(ValueError, match="Unknown output format"):
            render_records(IndexSizeCommand(), [], make_args(output="xml"))
