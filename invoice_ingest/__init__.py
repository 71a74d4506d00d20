"""Invoice ingestion worker: batch extraction, term canonicalization and job tracking."""
