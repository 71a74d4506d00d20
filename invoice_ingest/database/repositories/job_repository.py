from typing import Any

import psycopg
from psycopg.rows import dict_row

from invoice_ingest.database.connection import get_connection
from invoice_ingest.database.exceptions import JobNotFoundError
from invoice_ingest.database.models import JOB_QUEUED, JobRecord

_JOB_COLUMNS = """
    id, owner_id, status, progress, message, documents_submitted,
    documents_processed, total_records, locked_at, created_at, updated_at
"""


def _to_job(row: dict[str, Any]) -> JobRecord:
    return JobRecord(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        status=row["status"],
        progress=row["progress"],
        message=row["message"],
        documents_submitted=row["documents_submitted"],
        documents_processed=row["documents_processed"],
        total_records=row["total_records"],
        locked_at=row["locked_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class JobRepository:
    """Database operations for the jobs table.

    Every status change is guarded by a WHERE clause on the current status,
    so done and error are terminal and progress only moves forward.
    """

    def create(self, owner_id: str, documents_submitted: int) -> JobRecord:
        """Insert a queued job with zero progress."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO jobs (owner_id, status, progress, documents_submitted)
                    VALUES (%s, %s, 0, %s)
                    RETURNING {_JOB_COLUMNS}
                    """,
                    (owner_id, JOB_QUEUED, documents_submitted),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise JobNotFoundError("Job insert returned no row")
        return _to_job(row)

    def mark_running(self, job_id: str, owner_id: str, message: str) -> bool:
        """Move a queued job to running. Returns False if it was not queued."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE jobs
                    SET status = 'running', message = %s, updated_at = NOW()
                    WHERE id = %s AND owner_id = %s AND status = 'queued'
                    """,
                    (message, job_id, owner_id),
                )
                changed = cur.rowcount == 1
            conn.commit()
        return changed

    def claim(self, job_id: str, owner_id: str) -> bool:
        """Atomically take ownership of a running job for one run.

        Succeeds only for a running job that no other run has claimed yet.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE jobs
                    SET locked_at = NOW(), updated_at = NOW()
                    WHERE id = %s AND owner_id = %s
                      AND status = 'running' AND locked_at IS NULL
                    """,
                    (job_id, owner_id),
                )
                claimed = cur.rowcount == 1
            conn.commit()
        return claimed

    def find_next_runnable(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Find the oldest running job that no run has claimed yet."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_JOB_COLUMNS}
                FROM jobs
                WHERE status = 'running' AND locked_at IS NULL
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """
            )
            row = cur.fetchone()
        conn.commit()

        if row is None:
            return None
        return _to_job(row)

    def update_progress(
        self, job_id: str, owner_id: str, progress: int, message: str
    ) -> None:
        """Write a checkpoint. Progress never decreases."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE jobs
                SET progress = GREATEST(progress, %s), message = %s, updated_at = NOW()
                WHERE id = %s AND owner_id = %s AND status = 'running'
                """,
                (progress, message, job_id, owner_id),
            )
            conn.commit()

    def mark_done(
        self,
        job_id: str,
        owner_id: str,
        documents_processed: int,
        total_records: int,
        message: str,
    ) -> None:
        """Mark a running job as done with its final counts."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE jobs
                SET status = 'done', progress = 100, message = %s,
                    documents_processed = %s, total_records = %s, updated_at = NOW()
                WHERE id = %s AND owner_id = %s AND status = 'running'
                """,
                (message, documents_processed, total_records, job_id, owner_id),
            )
            conn.commit()

    def mark_error(self, job_id: str, owner_id: str, message: str) -> None:
        """Mark a queued or running job as failed."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE jobs
                SET status = 'error', message = %s, updated_at = NOW()
                WHERE id = %s AND owner_id = %s AND status IN ('queued', 'running')
                """,
                (message, job_id, owner_id),
            )
            conn.commit()

    def fail_stale(self, older_than_seconds: int, message: str) -> list[str]:
        """Move claimed runs that exceeded their lease to error. Returns job ids."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE jobs
                    SET status = 'error', message = %s, updated_at = NOW()
                    WHERE status = 'running'
                      AND locked_at IS NOT NULL
                      AND locked_at < NOW() - make_interval(secs => %s)
                    RETURNING id
                    """,
                    (message, older_than_seconds),
                )
                rows = cur.fetchall()
            conn.commit()
        return [str(row[0]) for row in rows]

    def find_by_id(self, job_id: str, owner_id: str) -> JobRecord | None:
        """Find a job by ID, scoped to its owner."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_JOB_COLUMNS}
                    FROM jobs
                    WHERE id = %s AND owner_id = %s
                    """,
                    (job_id, owner_id),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_job(row)
