from typing import Any

from psycopg.rows import dict_row

from invoice_ingest.database.connection import get_connection
from invoice_ingest.database.models import NewResultRow, ResultRecord


def _to_result(row: dict[str, Any]) -> ResultRecord:
    return ResultRecord(
        id=str(row["id"]),
        job_id=str(row["job_id"]),
        doc_id=str(row["doc_id"]),
        doc_name=row["doc_name"],
        page=row["page"],
        original_term=row["original_term"],
        canonical=row["canonical"],
        value=row["value"],
        confidence=row["confidence"],
        evidence=row["evidence"],
        created_at=row["created_at"],
    )


class ResultRepository:
    """Database operations for the results table."""

    def bulk_insert(self, rows: list[NewResultRow]) -> int:
        """Insert all rows in one transaction. Either every row lands or none.

        Returns:
            Number of rows written.
        """
        if not rows:
            return 0
        params = [
            (
                row.job_id,
                row.owner_id,
                row.doc_id,
                row.doc_name,
                row.page,
                row.original_term,
                row.canonical,
                row.value,
                row.confidence,
                row.evidence,
                position,
            )
            for position, row in enumerate(rows)
        ]
        with get_connection() as conn:
            with conn.transaction():
                with conn.cursor() as cur:
                    cur.executemany(
                        """
                        INSERT INTO results
                        (job_id, owner_id, doc_id, doc_name, page, original_term,
                         canonical, value, confidence, evidence, position)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        params,
                    )
        return len(params)

    def list_for_job(self, job_id: str, owner_id: str) -> list[ResultRecord]:
        """List a job's results in creation order."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, job_id, doc_id, doc_name, page, original_term,
                           canonical, value, confidence, evidence, created_at
                    FROM results
                    WHERE job_id = %s AND owner_id = %s
                    ORDER BY created_at, position
                    """,
                    (job_id, owner_id),
                )
                rows = cur.fetchall()
        return [_to_result(row) for row in rows]

    def count_for_job(self, job_id: str, owner_id: str) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM results WHERE job_id = %s AND owner_id = %s",
                    (job_id, owner_id),
                )
                row = cur.fetchone()
        return int(row[0]) if row is not None else 0
