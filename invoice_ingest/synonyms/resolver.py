"""Maps raw extracted terms to an owner's canonical field names."""

from collections.abc import Iterable

from invoice_ingest.database.models import SynonymRecord
from invoice_ingest.database.repositories.synonym_repository import SynonymRepository
from invoice_ingest.logging.logger import Log


def synonym_key(term: str) -> str:
    """Lookup key for a term: trimmed and lowercased."""
    return term.strip().lower()


class SynonymSnapshot:
    """Immutable view of one owner's mapping table, taken at a point in time.

    Resolution is total: an unmapped term resolves to itself.
    """

    def __init__(self, mappings: Iterable[SynonymRecord]) -> None:
        self._canonical_by_key: dict[str, str] = {}
        for mapping in mappings:
            self._canonical_by_key[synonym_key(mapping.term)] = mapping.canonical

    def __len__(self) -> int:
        return len(self._canonical_by_key)

    def resolve(self, raw_term: str) -> str:
        return self._canonical_by_key.get(synonym_key(raw_term), raw_term)


class SynonymResolver:
    """Loads per-owner synonym snapshots from the synonym repository."""

    def __init__(self, synonym_repo: SynonymRepository) -> None:
        self._synonym_repo = synonym_repo

    def snapshot(self, owner_id: str) -> SynonymSnapshot:
        """Load the owner's full mapping table once."""
        snapshot = SynonymSnapshot(self._synonym_repo.list_for_owner(owner_id))
        Log.info(f"Loaded {len(snapshot)} synonym mappings for owner {owner_id}")
        return snapshot

    def resolve(self, owner_id: str, raw_term: str) -> str:
        """Resolve a single term against a fresh snapshot.

        For one-off lookups outside a run. Runs take snapshot() once and
        resolve every item against it.
        """
        return self.snapshot(owner_id).resolve(raw_term)
