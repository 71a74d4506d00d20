from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from invoice_ingest.database.models import JobRecord
from invoice_ingest.database.repositories.job_repository import JobRepository

_PATCH_TARGET = "invoice_ingest.database.repositories.job_repository.get_connection"


def _make_row(**overrides: object) -> dict:
    row = {
        "id": "6f1c1c1e-0000-4000-8000-000000000001",
        "owner_id": "owner-1",
        "status": "queued",
        "progress": 0,
        "message": None,
        "documents_submitted": 2,
        "documents_processed": 0,
        "total_records": 0,
        "locked_at": None,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    row.update(overrides)
    return row


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestCreate:
    @patch(_PATCH_TARGET)
    def test_inserts_queued_job(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        job = JobRepository().create("owner-1", documents_submitted=2)

        assert isinstance(job, JobRecord)
        assert job.status == "queued"
        assert job.progress == 0
        assert job.documents_submitted == 2
        sql, params = mock_cursor.execute.call_args.args
        assert "INSERT INTO jobs" in sql
        assert params == ("owner-1", "queued", 2)
        mock_conn.commit.assert_called_once()


class TestTransitions:
    @patch(_PATCH_TARGET)
    def test_mark_running_is_guarded_by_queued_status(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        assert JobRepository().mark_running("job-1", "owner-1", "Processing 2 documents")
        sql = mock_cursor.execute.call_args.args[0]
        assert "status = 'queued'" in sql

    @patch(_PATCH_TARGET)
    def test_mark_running_returns_false_when_not_queued(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        assert not JobRepository().mark_running("job-1", "owner-1", "Processing 2 documents")

    @patch(_PATCH_TARGET)
    def test_claim_requires_unclaimed_running_job(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        assert JobRepository().claim("job-1", "owner-1")
        sql, params = mock_cursor.execute.call_args.args
        assert "locked_at IS NULL" in sql
        assert "status = 'running'" in sql
        assert params == ("job-1", "owner-1")

    @patch(_PATCH_TARGET)
    def test_second_claim_fails(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        assert not JobRepository().claim("job-1", "owner-1")

    @patch(_PATCH_TARGET)
    def test_update_progress_never_lowers(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        JobRepository().update_progress("job-1", "owner-1", 40, "Extracting data from a.pdf (1/2)")

        sql, params = mock_conn.execute.call_args.args
        assert "GREATEST(progress, %s)" in sql
        assert "status = 'running'" in sql
        assert params == (40, "Extracting data from a.pdf (1/2)", "job-1", "owner-1")
        mock_conn.commit.assert_called_once()

    @patch(_PATCH_TARGET)
    def test_mark_done_sets_counts_and_full_progress(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        JobRepository().mark_done("job-1", "owner-1", 2, 5, "done message")

        sql, params = mock_conn.execute.call_args.args
        assert "status = 'done', progress = 100" in sql
        assert params == ("done message", 2, 5, "job-1", "owner-1")

    @patch(_PATCH_TARGET)
    def test_mark_error_leaves_terminal_jobs_alone(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        JobRepository().mark_error("job-1", "owner-1", "Processing failed: boom")

        sql, params = mock_conn.execute.call_args.args
        assert "status IN ('queued', 'running')" in sql
        assert params == ("Processing failed: boom", "job-1", "owner-1")


class TestFailStale:
    @patch(_PATCH_TARGET)
    def test_returns_failed_job_ids(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchall.return_value = [("job-1",), ("job-2",)]

        failed = JobRepository().fail_stale(1200, "Processing failed: timed out")

        assert failed == ["job-1", "job-2"]
        sql, params = mock_cursor.execute.call_args.args
        assert "locked_at IS NOT NULL" in sql
        assert params == ("Processing failed: timed out", 1200)


class TestFind:
    @patch(_PATCH_TARGET)
    def test_find_by_id_returns_job(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row(status="done", progress=100, total_records=7)

        job = JobRepository().find_by_id("job-1", "owner-1")

        assert job is not None
        assert job.status == "done"
        assert job.total_records == 7
        assert mock_cursor.execute.call_args.args[1] == ("job-1", "owner-1")

    @patch(_PATCH_TARGET)
    def test_find_by_id_returns_none_for_other_owner(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        assert JobRepository().find_by_id("job-1", "intruder") is None

    def test_find_next_runnable_uses_skip_locked(self) -> None:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
        mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
        mock_cursor.fetchone.return_value = _make_row(status="running")

        job = JobRepository().find_next_runnable(mock_conn)

        assert job is not None
        assert job.status == "running"
        sql = mock_cursor.execute.call_args.args[0]
        assert "FOR UPDATE SKIP LOCKED" in sql
        assert "locked_at IS NULL" in sql

    def test_find_next_runnable_returns_none_when_idle(self) -> None:
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
        mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
        mock_cursor.fetchone.return_value = None

        assert JobRepository().find_next_runnable(mock_conn) is None
