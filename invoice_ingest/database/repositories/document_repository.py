from typing import Any

from psycopg.rows import dict_row

from invoice_ingest.database.connection import get_connection
from invoice_ingest.database.models import DOCUMENT_UPLOADED, DocumentRecord

_DOCUMENT_COLUMNS = """
    id, owner_id, job_id, name, storage_path, file_size, mime_type, status,
    created_at, updated_at
"""


def _to_document(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        job_id=str(row["job_id"]),
        name=row["name"],
        storage_path=row["storage_path"],
        file_size=row["file_size"],
        mime_type=row["mime_type"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class DocumentRepository:
    """Database operations for the documents table."""

    def create(
        self,
        *,
        owner_id: str,
        job_id: str,
        name: str,
        storage_path: str,
        file_size: int,
        mime_type: str,
    ) -> DocumentRecord:
        """Insert an uploaded document row."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                    (owner_id, job_id, name, storage_path, file_size, mime_type, status)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_DOCUMENT_COLUMNS}
                    """,
                    (
                        owner_id,
                        job_id,
                        name,
                        storage_path,
                        file_size,
                        mime_type,
                        DOCUMENT_UPLOADED,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Document insert for '{name}' returned no row")
        return _to_document(row)

    def find_by_id(self, document_id: str, owner_id: str) -> DocumentRecord | None:
        """Find a document by ID, scoped to its owner."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS}
                    FROM documents
                    WHERE id = %s AND owner_id = %s
                    """,
                    (document_id, owner_id),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_document(row)

    def list_for_job(self, job_id: str, owner_id: str) -> list[DocumentRecord]:
        """List a job's documents in admission order."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_DOCUMENT_COLUMNS}
                    FROM documents
                    WHERE job_id = %s AND owner_id = %s
                    ORDER BY created_at, id
                    """,
                    (job_id, owner_id),
                )
                rows = cur.fetchall()
        return [_to_document(row) for row in rows]

    def update_status(self, document_id: str, owner_id: str, status: str) -> None:
        """Set a document's processing status."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE documents
                SET status = %s, updated_at = NOW()
                WHERE id = %s AND owner_id = %s
                """,
                (status, document_id, owner_id),
            )
            conn.commit()
