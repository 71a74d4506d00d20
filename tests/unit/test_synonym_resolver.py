from unittest.mock import MagicMock

import pytest

from invoice_ingest.database.models import SynonymRecord
from invoice_ingest.database.repositories.synonym_repository import SynonymRepository
from invoice_ingest.synonyms.resolver import SynonymResolver, SynonymSnapshot, synonym_key


def _mapping(term: str, canonical: str) -> SynonymRecord:
    return SynonymRecord(id=term, owner_id="owner-1", term=term, canonical=canonical)


class TestSynonymSnapshot:
    def test_resolves_mapped_term(self) -> None:
        snapshot = SynonymSnapshot([_mapping("vat", "Tax")])
        assert snapshot.resolve("vat") == "Tax"

    @pytest.mark.parametrize("raw", ["VAT", "Vat", "vAt", "  vat ", "VAT\n"])
    def test_lookup_ignores_case_and_surrounding_whitespace(self, raw: str) -> None:
        snapshot = SynonymSnapshot([_mapping("vat", "Tax")])
        assert snapshot.resolve(raw) == "Tax"
        assert snapshot.resolve(raw) == snapshot.resolve(raw.lower())

    def test_mapping_term_case_is_ignored(self) -> None:
        snapshot = SynonymSnapshot([_mapping("Amount Due", "Total")])
        assert snapshot.resolve("amount due") == "Total"

    def test_unmapped_term_resolves_to_itself(self) -> None:
        snapshot = SynonymSnapshot([_mapping("vat", "Tax")])
        assert snapshot.resolve("Shipping") == "Shipping"

    def test_empty_table_is_identity(self) -> None:
        snapshot = SynonymSnapshot([])
        assert snapshot.resolve("") == ""
        assert snapshot.resolve("Total") == "Total"
        assert len(snapshot) == 0

    def test_resolving_is_stable_across_calls(self) -> None:
        snapshot = SynonymSnapshot([_mapping("vat", "Tax")])
        assert snapshot.resolve("VAT") == snapshot.resolve("VAT") == "Tax"


class TestSynonymKey:
    def test_trims_and_lowercases(self) -> None:
        assert synonym_key("  Sub Total ") == "sub total"


class TestSynonymResolver:
    def test_snapshot_loads_owner_mappings_once(self) -> None:
        repo = MagicMock(spec=SynonymRepository)
        repo.list_for_owner.return_value = [_mapping("vat", "Tax")]
        resolver = SynonymResolver(repo)

        snapshot = resolver.snapshot("owner-1")

        assert snapshot.resolve("VAT") == "Tax"
        assert snapshot.resolve("net") == "net"
        repo.list_for_owner.assert_called_once_with("owner-1")

    def test_snapshot_does_not_see_later_edits(self) -> None:
        repo = MagicMock(spec=SynonymRepository)
        repo.list_for_owner.return_value = []
        resolver = SynonymResolver(repo)
        snapshot = resolver.snapshot("owner-1")

        repo.list_for_owner.return_value = [_mapping("vat", "Tax")]

        assert snapshot.resolve("VAT") == "VAT"
        assert resolver.snapshot("owner-1").resolve("VAT") == "Tax"

    def test_resolve_with_owner(self) -> None:
        repo = MagicMock(spec=SynonymRepository)
        repo.list_for_owner.return_value = [_mapping("vat", "Tax")]
        resolver = SynonymResolver(repo)

        assert resolver.resolve("owner-1", "Vat") == "Tax"
        assert resolver.resolve("owner-1", "Freight") == "Freight"
