from typing import Any

from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row

from invoice_ingest.database.connection import get_connection
from invoice_ingest.database.exceptions import SynonymConflictError, SynonymNotFoundError
from invoice_ingest.database.models import SynonymRecord


def _to_synonym(row: dict[str, Any]) -> SynonymRecord:
    return SynonymRecord(
        id=str(row["id"]),
        owner_id=row["owner_id"],
        term=row["term"],
        canonical=row["canonical"],
        created_at=row["created_at"],
    )


class SynonymRepository:
    """Database operations for the synonyms table.

    Terms are stored trimmed and the table is unique on
    (owner_id, lower(btrim(term))), the same key lookups use. Duplicate writes
    surface as SynonymConflictError.
    """

    def list_for_owner(self, owner_id: str) -> list[SynonymRecord]:
        """Return every mapping the owner has, newest first."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, owner_id, term, canonical, created_at
                    FROM synonyms
                    WHERE owner_id = %s
                    ORDER BY created_at DESC
                    """,
                    (owner_id,),
                )
                rows = cur.fetchall()
        return [_to_synonym(row) for row in rows]

    def create(self, owner_id: str, term: str, canonical: str) -> SynonymRecord:
        """Insert a mapping.

        Raises:
            SynonymConflictError: if the owner already maps this term.
        """
        term = term.strip()
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        INSERT INTO synonyms (owner_id, term, canonical)
                        VALUES (%s, %s, %s)
                        RETURNING id, owner_id, term, canonical, created_at
                        """,
                        (owner_id, term, canonical),
                    )
                    row = cur.fetchone()
                conn.commit()
        except UniqueViolation as exc:
            raise SynonymConflictError(
                f"A synonym for term '{term}' already exists"
            ) from exc

        if row is None:
            raise SynonymNotFoundError(f"Synonym insert for '{term}' returned no row")
        return _to_synonym(row)

    def update(
        self, synonym_id: str, owner_id: str, term: str, canonical: str
    ) -> SynonymRecord:
        """Replace a mapping's term and canonical value.

        Raises:
            SynonymNotFoundError: if the mapping does not exist for the owner.
            SynonymConflictError: if the new term collides with another mapping.
        """
        term = term.strip()
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        UPDATE synonyms
                        SET term = %s, canonical = %s
                        WHERE id = %s AND owner_id = %s
                        RETURNING id, owner_id, term, canonical, created_at
                        """,
                        (term, canonical, synonym_id, owner_id),
                    )
                    row = cur.fetchone()
                conn.commit()
        except UniqueViolation as exc:
            raise SynonymConflictError(
                f"A synonym for term '{term}' already exists"
            ) from exc

        if row is None:
            raise SynonymNotFoundError(f"Synonym {synonym_id} not found")
        return _to_synonym(row)

    def delete(self, synonym_id: str, owner_id: str) -> None:
        """Delete a mapping.

        Raises:
            SynonymNotFoundError: if the mapping does not exist for the owner.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM synonyms WHERE id = %s AND owner_id = %s",
                    (synonym_id, owner_id),
                )
                if cur.rowcount == 0:
                    raise SynonymNotFoundError(f"Synonym {synonym_id} not found")
            conn.commit()
