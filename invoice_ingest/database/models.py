from dataclasses import dataclass
from datetime import datetime

JOB_QUEUED = "queued"
JOB_RUNNING = "running"
JOB_DONE = "done"
JOB_ERROR = "error"

DOCUMENT_UPLOADED = "uploaded"
DOCUMENT_PROCESSED = "processed"
DOCUMENT_FAILED = "failed"


@dataclass
class JobRecord:
    """Represents a row from the jobs table."""

    id: str
    owner_id: str
    status: str
    progress: int = 0
    message: str | None = None
    documents_submitted: int = 0
    documents_processed: int = 0
    total_records: int = 0
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    id: str
    owner_id: str
    job_id: str
    name: str
    storage_path: str
    file_size: int
    mime_type: str = "application/octet-stream"
    status: str = DOCUMENT_UPLOADED
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NewResultRow:
    """A canonicalized extraction waiting to be written to the results table."""

    job_id: str
    owner_id: str
    doc_id: str
    doc_name: str
    page: int
    original_term: str
    canonical: str
    value: str
    confidence: int
    evidence: str | None = None


@dataclass
class ResultRecord:
    """Represents a row from the results table."""

    id: str
    job_id: str
    doc_id: str
    doc_name: str
    page: int
    original_term: str
    canonical: str
    value: str
    confidence: int
    evidence: str | None = None
    created_at: datetime | None = None


@dataclass
class SynonymRecord:
    """Represents a row from the synonyms table."""

    id: str
    owner_id: str
    term: str
    canonical: str
    created_at: datetime | None = None
